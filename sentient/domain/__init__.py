from .models import (
    AnalysisResult,
    AnalysisSnapshot,
    ChatMessage,
    ChatRole,
    SentimentDataPoint,
    SentimentType,
    WordCloudItem,
)

__all__ = [
    "AnalysisResult",
    "AnalysisSnapshot",
    "ChatMessage",
    "ChatRole",
    "SentimentDataPoint",
    "SentimentType",
    "WordCloudItem",
]
