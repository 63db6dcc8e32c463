# Application Layer
# =================
# Explicit state owners for the dashboard and its chat overlay.
# No business rules live here; analysis is delegated to infrastructure/llm.

from .dashboard import (
    ANALYSIS_FAILED_MESSAGE,
    CHAT_ERROR_MESSAGE,
    READY_MESSAGE,
    WELCOME_MESSAGE,
    ChatWidget,
    DashboardController,
    build_controller,
)
from .samples import SAMPLE_REVIEWS

__all__ = [
    "ANALYSIS_FAILED_MESSAGE",
    "CHAT_ERROR_MESSAGE",
    "READY_MESSAGE",
    "SAMPLE_REVIEWS",
    "WELCOME_MESSAGE",
    "ChatWidget",
    "DashboardController",
    "build_controller",
]
