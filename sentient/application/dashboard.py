"""
Dashboard Controller - Application State Owner
==============================================

Owns the only mutable state in the app:
- the current AnalysisSnapshot (replaced wholesale, never edited)
- the chat widget, whose session is either Absent or Active(session, snapshot_id)

All mutation happens on the event loop; the blocking Gemini calls are
pushed to the threadpool and their results applied afterwards.

STALE COMPLETIONS:
- Each analyze() call gets a request id. A completion is applied only if
  its id is still the latest one issued.
- A chat reply is applied only if its session is still the active one.
"""

import logging
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool

from ..domain import AnalysisResult, AnalysisSnapshot, ChatMessage, ChatRole
from ..infrastructure.config import LLMSettings, get_settings
from ..infrastructure.llm import (
    AnalysisError,
    ChatSession,
    GeminiClient,
    ReviewAnalysisService,
    create_chat_session,
)
from .samples import SAMPLE_REVIEWS

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to analyze reviews. Please check your API key and try again."
CHAT_ERROR_MESSAGE = "Sorry, I encountered an error connecting to Gemini."
WELCOME_MESSAGE = (
    "Hello! I've analyzed your data. Ask me anything about the customer "
    "feedback trends or specific issues."
)
READY_MESSAGE = "I'm ready to discuss the new analysis results. What would you like to know?"

SessionFactory = Callable[[Optional[AnalysisSnapshot]], ChatSession]


class ChatWidget:
    """
    Chat Session Adapter state.

    States:
        Absent  - no session; the next open (with a result) or send creates one
        Active  - a session bound to snapshot `session.snapshot_id`
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory
        self._session: Optional[ChatSession] = None
        self._snapshot: Optional[AnalysisSnapshot] = None
        self.messages: list[ChatMessage] = [ChatMessage(ChatRole.ASSISTANT, WELCOME_MESSAGE)]
        self.is_open = False
        self.is_waiting = False

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def _current_snapshot_id(self) -> Optional[int]:
        return self._snapshot.snapshot_id if self._snapshot is not None else None

    def _active_session(self) -> ChatSession:
        """Return a session matching the current snapshot, creating one if needed."""
        if self._session is not None and self._session.snapshot_id != self._current_snapshot_id():
            logger.info(
                f"Discarding chat session bound to snapshot {self._session.snapshot_id}"
            )
            self._session = None

        if self._session is None:
            self._session = self._session_factory(self._snapshot)
        return self._session

    def open(self) -> None:
        self.is_open = True
        if self._snapshot is None or self._session is not None:
            return
        try:
            self._active_session()
        except AnalysisError as e:
            # Retried on the next send, which reports the failure in the transcript
            logger.warning(f"Could not start chat session: {e}")

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def on_analysis_changed(self, snapshot: AnalysisSnapshot) -> None:
        """Invalidate the session and reset the transcript for a new result."""
        self._snapshot = snapshot
        if self._session is not None and self._session.snapshot_id != snapshot.snapshot_id:
            self._session = None
        self.messages = [ChatMessage(ChatRole.ASSISTANT, READY_MESSAGE)]

    async def send(self, text: str) -> Optional[ChatMessage]:
        """
        Send a user message and append the reply (or an error bubble).

        Returns the assistant message appended, or None if nothing was sent
        or the reply arrived for a session that has since been replaced.
        """
        if not text or not text.strip():
            return None

        self.messages.append(ChatMessage(ChatRole.USER, text))
        self.is_waiting = True
        session = None

        try:
            session = self._active_session()
            reply = await run_in_threadpool(session.send_message, text)
        except AnalysisError as e:
            logger.warning(f"Chat error: {e}")
            reply = CHAT_ERROR_MESSAGE
        except Exception as e:
            logger.exception(f"Unexpected chat error: {e}")
            reply = CHAT_ERROR_MESSAGE
        finally:
            self.is_waiting = False

        if session is not None and session is not self._session:
            logger.info("Dropping chat reply for a replaced session")
            return None

        message = ChatMessage(ChatRole.ASSISTANT, reply)
        self.messages.append(message)
        return message


class DashboardController:
    """
    Top-level state for one dashboard.

    USAGE:
        controller = build_controller()
        await controller.analyze(text)
        controller.result        # AnalysisResult or None
        await controller.chat.send("What should we fix first?")
    """

    def __init__(
        self,
        analysis_service: ReviewAnalysisService,
        session_factory: SessionFactory,
        sample_text: str = SAMPLE_REVIEWS,
    ):
        self._analysis_service = analysis_service
        self._sample_text = sample_text
        self._snapshot: Optional[AnalysisSnapshot] = None
        self._last_snapshot_id = 0
        self._latest_request_id = 0

        self.input_text = sample_text
        self.is_analyzing = False
        self.error: Optional[str] = None
        self.chat = ChatWidget(session_factory)

    @property
    def snapshot(self) -> Optional[AnalysisSnapshot]:
        return self._snapshot

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._snapshot.result if self._snapshot is not None else None

    def load_sample(self) -> None:
        self.input_text = self._sample_text

    def _install(self, result: AnalysisResult) -> AnalysisSnapshot:
        self._last_snapshot_id += 1
        self._snapshot = AnalysisSnapshot(snapshot_id=self._last_snapshot_id, result=result)
        self.chat.on_analysis_changed(self._snapshot)
        return self._snapshot

    async def analyze(self, text: str) -> Optional[AnalysisSnapshot]:
        """
        Run one analysis and install its result.

        On failure the previous result is kept and `error` holds the
        user-facing message. Never retries.
        """
        if not text or not text.strip():
            return None

        self.input_text = text
        self._latest_request_id += 1
        request_id = self._latest_request_id
        self.is_analyzing = True
        self.error = None

        try:
            result = await run_in_threadpool(self._analysis_service.analyze, text)
        except AnalysisError as e:
            logger.warning(f"Analysis failed: {e}")
            self._fail(request_id)
            return None
        except Exception as e:
            logger.exception(f"Unexpected analysis error: {e}")
            self._fail(request_id)
            return None
        finally:
            if request_id == self._latest_request_id:
                self.is_analyzing = False

        if request_id != self._latest_request_id:
            logger.info(f"Discarding stale analysis result for request {request_id}")
            return None

        return self._install(result)

    def _fail(self, request_id: int) -> None:
        if request_id == self._latest_request_id:
            self.error = ANALYSIS_FAILED_MESSAGE


def build_controller(settings: Optional[LLMSettings] = None) -> DashboardController:
    """Wire a controller to a shared Gemini client."""
    settings = settings or get_settings().llm
    client = GeminiClient(settings=settings)

    return DashboardController(
        analysis_service=ReviewAnalysisService(client=client, settings=settings),
        session_factory=lambda snapshot: create_chat_session(snapshot, client=client, settings=settings),
    )
