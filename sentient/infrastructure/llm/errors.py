"""LLM adapter error taxonomy."""


class AnalysisError(Exception):
    """Base exception for LLM adapter errors."""
    pass


class ConfigurationError(AnalysisError):
    """The API credential (or other required setting) is missing."""
    pass


class ProviderError(AnalysisError):
    """Network failure or an error reported by the remote model."""
    pass


class FormatError(AnalysisError):
    """The model's response did not match the declared output shape."""
    pass
