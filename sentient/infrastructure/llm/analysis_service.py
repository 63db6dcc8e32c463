"""
Review Analysis Service - Structured LLM Review Analysis
=========================================================

ARCHITECTURAL DECISION:
- One prompt, one declared JSON schema, one Gemini call per analysis
- The provider enforces the schema; the reply is validated again with pydantic
- Values are passed through verbatim. Anything outside the contract
  (wrong count, out-of-range score) is a FormatError, never clamped

FAILURE MODES:
- No API key          -> ConfigurationError (before any network I/O)
- Network / HTTP / block -> ProviderError
- Empty / invalid JSON / wrong shape -> FormatError
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...domain import AnalysisResult, SentimentDataPoint, SentimentType, WordCloudItem
from ..config import LLMSettings
from .errors import FormatError
from .gemini_client import GeminiClient, user_turn

logger = logging.getLogger(__name__)


# Declared output shape, sent as generationConfig.responseSchema
ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "executiveSummary": {
            "type": "STRING",
            "description": "A comprehensive executive summary of the reviews, detailing key strengths and weaknesses.",
        },
        "topActionableAreas": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "minItems": 3,
            "maxItems": 3,
            "description": "Exactly 3 distinct, actionable areas for improvement based on the reviews.",
        },
        "sentimentTrend": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "index": {"type": "INTEGER"},
                    "label": {"type": "STRING", "description": "Time label or sequence group (e.g. 'Batch 1')"},
                    "sentimentScore": {
                        "type": "NUMBER",
                        "minimum": -1,
                        "maximum": 1,
                        "description": "Average sentiment score between -1 (negative) and 1 (positive).",
                    },
                },
                "required": ["index", "label", "sentimentScore"],
                "propertyOrdering": ["index", "label", "sentimentScore"],
            },
            "description": "Trend of sentiment over the sequence of reviews.",
        },
        "wordCloud": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "text": {"type": "STRING"},
                    "value": {"type": "INTEGER", "description": "Frequency count"},
                    "sentiment": {"type": "STRING", "enum": [s.value for s in SentimentType]},
                },
                "required": ["text", "value", "sentiment"],
                "propertyOrdering": ["text", "value", "sentiment"],
            },
            "description": "List of top 20 most frequent significant keywords or phrases.",
        },
        "overallSentiment": {
            "type": "NUMBER",
            "minimum": -100,
            "maximum": 100,
            "description": "Overall sentiment score from -100 to 100.",
        },
    },
    "required": ["executiveSummary", "topActionableAreas", "sentimentTrend", "wordCloud", "overallSentiment"],
    "propertyOrdering": ["executiveSummary", "topActionableAreas", "sentimentTrend", "wordCloud", "overallSentiment"],
}

PROMPT_TEMPLATE = (
    "Analyze the following customer reviews.\n"
    "You need to identify the sentiment trend over the text (assuming chronological order if not specified),\n"
    "extract the most frequent praise and complaint keywords for a word cloud,\n"
    "and write a professional executive summary.\n\n"
    "Reviews:\n"
    "{reviews}\n"
)


# ── Wire payload (camelCase, validated) ────────────────────────────

class _TrendPointPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    label: str
    sentiment_score: float = Field(alias="sentimentScore", ge=-1, le=1)


class _WordCloudPayload(BaseModel):
    text: str
    value: int = Field(ge=0)
    sentiment: SentimentType


class AnalysisPayload(BaseModel):
    """Validated shape of the model's JSON reply."""
    model_config = ConfigDict(populate_by_name=True)

    executive_summary: str = Field(alias="executiveSummary")
    top_actionable_areas: list[str] = Field(alias="topActionableAreas", min_length=3, max_length=3)
    sentiment_trend: list[_TrendPointPayload] = Field(alias="sentimentTrend")
    word_cloud: list[_WordCloudPayload] = Field(alias="wordCloud")
    overall_sentiment: float = Field(alias="overallSentiment", ge=-100, le=100)

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            executive_summary=self.executive_summary,
            top_actionable_areas=tuple(self.top_actionable_areas),
            sentiment_trend=tuple(
                SentimentDataPoint(index=p.index, label=p.label, sentiment_score=p.sentiment_score)
                for p in self.sentiment_trend
            ),
            word_cloud=tuple(
                WordCloudItem(text=w.text, value=w.value, sentiment=w.sentiment)
                for w in self.word_cloud
            ),
            overall_sentiment=self.overall_sentiment,
        )


def parse_analysis(raw: str) -> AnalysisResult:
    """
    Parse the model's JSON text into an AnalysisResult.

    Validation is strict: a string or bool where a number is declared, or a
    fractional word count, is rejected rather than coerced.

    Raises:
        FormatError: Empty text, invalid JSON, or a shape/type/range violation.
    """
    if not raw or not raw.strip():
        raise FormatError("No response generated")

    try:
        return AnalysisPayload.model_validate_json(raw, strict=True).to_result()
    except ValidationError as e:
        raise FormatError(f"Response does not match the analysis schema: {e.error_count()} error(s)\n{e}") from e


class ReviewAnalysisService:
    """
    Analysis Request Adapter.

    USAGE:
        service = ReviewAnalysisService()
        result = service.analyze(reviews_text)
        print(result.executive_summary)
    """

    def __init__(self, client: Optional[GeminiClient] = None, settings: Optional[LLMSettings] = None):
        self._client = client or GeminiClient(settings=settings)
        self._settings = settings or self._client.settings

    def build_prompt(self, reviews_text: str) -> str:
        """Build the analysis prompt, truncating reviews to the configured limit."""
        limit = self._settings.max_input_chars
        if len(reviews_text) > limit:
            logger.warning(
                f"Review text truncated from {len(reviews_text)} to {limit} characters"
            )
            reviews_text = reviews_text[:limit]
        return PROMPT_TEMPLATE.format(reviews=reviews_text)

    def analyze(self, reviews_text: str) -> AnalysisResult:
        """
        Analyze raw review text.

        Args:
            reviews_text: Non-empty free text, one or many reviews.

        Returns:
            AnalysisResult mirroring the model's payload.

        Raises:
            ValueError: Empty input.
            ConfigurationError / ProviderError / FormatError: see module docs.
        """
        if not reviews_text or not reviews_text.strip():
            raise ValueError("Review text must not be empty")

        self._client.require_credentials()

        logger.info(f"Analyzing {len(reviews_text)} characters of reviews with {self._settings.model}")

        raw = self._client.generate_content(
            model=self._settings.model,
            contents=[user_turn(self.build_prompt(reviews_text))],
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": ANALYSIS_SCHEMA,
                "thinkingConfig": {"thinkingBudget": self._settings.analysis_thinking_budget},
            },
        )

        result = parse_analysis(raw)
        logger.info(
            f"Analysis complete: score={result.overall_sentiment}, "
            f"{len(result.sentiment_trend)} trend points, {len(result.word_cloud)} keywords"
        )
        return result
