from .errors import AnalysisError, ConfigurationError, FormatError, ProviderError
from .gemini_client import GeminiClient
from .analysis_service import ANALYSIS_SCHEMA, ReviewAnalysisService, parse_analysis
from .chat_service import ChatSession, build_system_instruction, create_chat_session

__all__ = [
    "ANALYSIS_SCHEMA",
    "AnalysisError",
    "ChatSession",
    "ConfigurationError",
    "FormatError",
    "GeminiClient",
    "ProviderError",
    "ReviewAnalysisService",
    "build_system_instruction",
    "create_chat_session",
    "parse_analysis",
]
