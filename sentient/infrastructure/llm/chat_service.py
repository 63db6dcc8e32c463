"""
Chat Service - Follow-up Conversation About an Analysis
========================================================

A ChatSession is seeded once with a system instruction that embeds a
snapshot of the current analysis. The Gemini REST API is stateless, so
the session keeps the conversation history itself and replays it on
every turn.

A session is never re-seeded. When the analysis changes, the owner
throws the session away and creates a new one.
"""

import logging
from typing import Optional

from ...domain import AnalysisResult, AnalysisSnapshot
from ..config import LLMSettings
from .gemini_client import GeminiClient, model_turn, user_turn

logger = logging.getLogger(__name__)

EMPTY_REPLY_TEXT = "I couldn't generate a response."

SYSTEM_INSTRUCTION_TEMPLATE = (
    'You are a helpful data analyst assistant for the "Sentient" dashboard.\n'
    "You have access to the current analysis of customer reviews.\n\n"
    "Current Analysis Context:\n"
    "- Executive Summary: {summary}\n"
    "- Top Issues: {issues}\n"
    "- Overall Score: {score}\n\n"
    "Answer questions specifically about this data. Be concise and professional.\n"
    "If the user asks about something not in the data, explain that you only have "
    "access to the summary provided."
)


def _format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else str(score)


def build_system_instruction(result: Optional[AnalysisResult]) -> str:
    """Render the seed instruction for a result (or for no result yet)."""
    if result is None:
        return SYSTEM_INSTRUCTION_TEMPLATE.format(
            summary="No analysis loaded yet.", issues="N/A", score="N/A"
        )
    return SYSTEM_INSTRUCTION_TEMPLATE.format(
        summary=result.executive_summary or "No analysis loaded yet.",
        issues=", ".join(result.top_actionable_areas) or "N/A",
        score=_format_score(result.overall_sentiment),
    )


class ChatSession:
    """
    Stateful conversation handle bound to one analysis snapshot.

    USAGE:
        session = create_chat_session(snapshot)
        reply = session.send_message("What are customers unhappy about?")
    """

    def __init__(
        self,
        client: GeminiClient,
        model: str,
        system_instruction: str,
        snapshot_id: Optional[int],
        thinking_budget: int,
    ):
        self._client = client
        self._model = model
        self._system_instruction = system_instruction
        self._snapshot_id = snapshot_id
        self._thinking_budget = thinking_budget
        self._history: list[dict] = []

    @property
    def snapshot_id(self) -> Optional[int]:
        return self._snapshot_id

    @property
    def system_instruction(self) -> str:
        return self._system_instruction

    @property
    def history(self) -> list[dict]:
        return list(self._history)

    def send_message(self, text: str) -> str:
        """
        Send one user turn and return the model's reply.

        History is only extended when the call succeeds, so a failed turn
        can simply be retried by the user.
        """
        turn = user_turn(text)
        reply = self._client.generate_content(
            model=self._model,
            contents=[*self._history, turn],
            system_instruction=self._system_instruction,
            generation_config={"thinkingConfig": {"thinkingBudget": self._thinking_budget}},
        )
        reply = reply or EMPTY_REPLY_TEXT

        self._history.append(turn)
        self._history.append(model_turn(reply))
        return reply


def create_chat_session(
    snapshot: Optional[AnalysisSnapshot],
    client: Optional[GeminiClient] = None,
    settings: Optional[LLMSettings] = None,
) -> ChatSession:
    """
    Create a session seeded from `snapshot` (None when nothing is analyzed yet).

    Raises:
        ConfigurationError: No API key.
    """
    client = client or GeminiClient(settings=settings)
    settings = settings or client.settings
    client.require_credentials()

    result = snapshot.result if snapshot is not None else None
    snapshot_id = snapshot.snapshot_id if snapshot is not None else None
    logger.info(f"Creating chat session for snapshot {snapshot_id}")

    return ChatSession(
        client=client,
        model=settings.effective_chat_model,
        system_instruction=build_system_instruction(result),
        snapshot_id=snapshot_id,
        thinking_budget=settings.chat_thinking_budget,
    )
