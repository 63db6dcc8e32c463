"""
Domain Models - Analysis and Chat Value Types
=============================================

Pure data, no I/O. Every type here is produced by the infrastructure layer
and consumed by the application and web layers.

DESIGN:
- AnalysisResult and its parts are frozen: a result is never edited, only
  replaced by the next one.
- to_dict() emits the camelCase wire shape the model returns; the JSON API
  serves exactly that shape.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SentimentType(Enum):
    """Sentiment category of a word cloud entry."""
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class SentimentDataPoint:
    """One point of the sentiment trend. Score ranges from -1 to 1."""
    index: int
    label: str
    sentiment_score: float

    def to_dict(self) -> dict:
        return {"index": self.index, "label": self.label, "sentimentScore": self.sentiment_score}


@dataclass(frozen=True)
class WordCloudItem:
    """A keyword with its frequency and sentiment category."""
    text: str
    value: int
    sentiment: SentimentType

    def to_dict(self) -> dict:
        return {"text": self.text, "value": self.value, "sentiment": self.sentiment.value}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Structured analysis of a batch of reviews.

    Fields:
        executive_summary: Prose summary of strengths and weaknesses.
        top_actionable_areas: Exactly three improvement suggestions, in order.
        sentiment_trend: Sequential sentiment points, in order.
        word_cloud: Most frequent praise/complaint keywords.
        overall_sentiment: Score from -100 to 100.
    """
    executive_summary: str
    top_actionable_areas: tuple[str, ...]
    sentiment_trend: tuple[SentimentDataPoint, ...]
    word_cloud: tuple[WordCloudItem, ...]
    overall_sentiment: float

    def to_dict(self) -> dict:
        return {
            "executiveSummary": self.executive_summary,
            "topActionableAreas": list(self.top_actionable_areas),
            "sentimentTrend": [p.to_dict() for p in self.sentiment_trend],
            "wordCloud": [w.to_dict() for w in self.word_cloud],
            "overallSentiment": self.overall_sentiment,
        }


@dataclass(frozen=True)
class AnalysisSnapshot:
    """An AnalysisResult stamped with the id it was installed under."""
    snapshot_id: int
    result: AnalysisResult


class ChatRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"


def _new_message_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    """A single bubble in the chat transcript."""
    role: ChatRole
    text: str
    id: str = field(default_factory=_new_message_id)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_user(self) -> bool:
        return self.role is ChatRole.USER

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "createdAt": self.created_at.isoformat(),
        }
