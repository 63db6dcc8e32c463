from .settings import LLMSettings, ServerSettings, Settings, get_settings

__all__ = ["LLMSettings", "ServerSettings", "Settings", "get_settings"]
