"""
Analysis Session

Drives the view state machine for one browser session: dispatches user
actions, runs the Gemini call as a background task, and turns its outcome
into AnalysisSucceeded / AnalysisFailed events.
"""

import asyncio
import logging
import time
import uuid
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Optional, Set

from . import config
from .state import (
    AnalysisFailed, AnalysisSucceeded, AppState, Event, FileSelected, Reset,
    SelectHistoryItem, ShowFaq, ShowHistory, ViewState, reduce
)
from .upload_capture import CapturedUpload

logger = logging.getLogger(__name__)

StateListener = Callable[[ViewState], Awaitable[None]]


class AnalysisSession:
    """Holds the ViewState of one session and everything that mutates it."""

    def __init__(self, analyzer, on_change: Optional[StateListener] = None):
        """
        Args:
            analyzer: Object with an async analyze(CapturedUpload) method
            on_change: Awaited with the new state after every transition
        """
        self.analyzer = analyzer
        self.on_change = on_change
        self._state = ViewState()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> ViewState:
        return self._state

    async def dispatch(self, event: Event) -> ViewState:
        previous = self._state
        self._state = reduce(previous, event)
        if self._state.app_state != previous.app_state:
            logger.debug(f"{previous.app_state.value} -> {self._state.app_state.value} ({type(event).__name__})")
        if self.on_change is not None and self._state is not previous:
            try:
                await self.on_change(self._state)
            except Exception as e:
                # The transition stands; only the notification is lost
                logger.error(f"State listener failed: {str(e)}", exc_info=True)
        return self._state

    async def start_analysis(self, upload: CapturedUpload) -> int:
        """
        Switch to Analyzing and start the remote call in the background.

        Returns:
            The request token assigned to this upload
        """
        state = await self.dispatch(FileSelected(image_src=upload.data_url))
        token = state.pending_token
        task = asyncio.create_task(self.run_analysis(upload, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return token

    async def run_analysis(self, upload: CapturedUpload, token: int) -> None:
        """Await the analyzer and feed its outcome back into the state machine."""
        try:
            result = await self.analyzer.analyze(upload)
        except Exception as e:
            logger.error(f"Analysis of '{upload.name}' failed (request {token}): {str(e)}", exc_info=True)
            await self._complete(AnalysisFailed(token=token, message=config.GENERIC_ERROR_MESSAGE))
            return

        await self._complete(AnalysisSucceeded(
            token=token,
            result=result,
            image_src=upload.data_url,
            received_at=time.time() * 1000,
        ))

    async def _complete(self, event: Event) -> None:
        if self._state.pending_token != event.token:
            logger.warning(f"Request {event.token} finished after it was superseded; "
                           f"screen left as {self._state.app_state.value}")
        await self.dispatch(event)

    async def wait_idle(self) -> None:
        """Wait for every in-flight analysis to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def reset(self) -> ViewState:
        return await self.dispatch(Reset())

    async def show_faq(self) -> ViewState:
        return await self.dispatch(ShowFaq())

    async def show_history(self) -> ViewState:
        return await self.dispatch(ShowHistory())

    async def select_history_item(self, key: str) -> ViewState:
        """Reopen a stored result. Only valid from the History screen."""
        state = await self.dispatch(SelectHistoryItem(key=key))
        if state.app_state == AppState.RESULT:
            logger.info(f"Reopened history item {key} without a new analysis")
        return state


class SessionRegistry:
    """
    In-memory sessions keyed by the session cookie value.

    Least recently used first: sessions untouched for ttl_seconds are dropped,
    and once max_sessions is exceeded the oldest ones go too.
    """

    def __init__(
        self,
        analyzer_factory: Callable[[], object],
        listener_factory: Optional[Callable[[str], StateListener]] = None,
        max_sessions: int = config.MAX_SESSIONS,
        ttl_seconds: float = config.SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            analyzer_factory: Builds the analyzer for a new session
            listener_factory: Builds the on_change listener for a session id
            max_sessions: Upper bound on sessions kept in memory
            ttl_seconds: Idle time after which a session is dropped
            clock: Monotonic time source
        """
        self.analyzer_factory = analyzer_factory
        self.listener_factory = listener_factory
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.sessions: "OrderedDict[str, AnalysisSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}

    def get(self, session_id: Optional[str]) -> Optional[AnalysisSession]:
        self.evict_expired()
        if not session_id or session_id not in self.sessions:
            return None
        self.sessions.move_to_end(session_id)
        self._last_seen[session_id] = self.clock()
        return self.sessions[session_id]

    def create(self) -> str:
        self.evict_expired()
        session_id = uuid.uuid4().hex
        on_change = self.listener_factory(session_id) if self.listener_factory else None
        self.sessions[session_id] = AnalysisSession(self.analyzer_factory(), on_change=on_change)
        self._last_seen[session_id] = self.clock()

        while len(self.sessions) > self.max_sessions:
            self._drop(next(iter(self.sessions)), "capacity")

        logger.info(f"New session {session_id[:8]} ({len(self.sessions)} active)")
        return session_id

    def evict_expired(self) -> None:
        now = self.clock()
        # Ordered by last use, so stop at the first live one
        while self.sessions:
            oldest = next(iter(self.sessions))
            if now - self._last_seen[oldest] < self.ttl_seconds:
                break
            self._drop(oldest, "idle")

    def _drop(self, session_id: str, reason: str) -> None:
        self.sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        logger.info(f"Dropped session {session_id[:8]} ({reason})")
