"""
View State Machine

The whole UI state of one session lives in an immutable ViewState. It only
changes through reduce(state, event), a pure function; the session driver
feeds it user actions and analysis completions.

Every upload is tagged with a request token. A completion whose token is no
longer the pending one (a newer upload was made, or the user reset) does not
touch the screen. A stale success is still recorded in history.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from .history import History, add_item, find_item
from .models import AnalysisResponse


class AppState(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    RESULT = "RESULT"
    ERROR = "ERROR"
    HISTORY = "HISTORY"


@dataclass(frozen=True)
class ViewState:
    app_state: AppState = AppState.IDLE
    result: Optional[AnalysisResponse] = None
    image_src: Optional[str] = None
    error_message: Optional[str] = None
    history: History = ()
    anchor: Optional[str] = None
    pending_token: Optional[int] = None
    next_token: int = 1


# Events

@dataclass(frozen=True)
class FileSelected:
    image_src: str


@dataclass(frozen=True)
class AnalysisSucceeded:
    token: int
    result: AnalysisResponse
    image_src: str
    received_at: float  # epoch milliseconds


@dataclass(frozen=True)
class AnalysisFailed:
    token: int
    message: str


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ShowFaq:
    pass


@dataclass(frozen=True)
class ShowHistory:
    pass


@dataclass(frozen=True)
class SelectHistoryItem:
    key: str


Event = Union[
    FileSelected, AnalysisSucceeded, AnalysisFailed,
    Reset, ShowFaq, ShowHistory, SelectHistoryItem
]


def _idle(state: ViewState, anchor: Optional[str] = None) -> ViewState:
    # Abandons any in-flight request
    return replace(
        state,
        app_state=AppState.IDLE,
        result=None,
        image_src=None,
        error_message=None,
        anchor=anchor,
        pending_token=None,
    )


def is_current(state: ViewState, token: int) -> bool:
    return state.pending_token is not None and state.pending_token == token


def reduce(state: ViewState, event: Event) -> ViewState:
    """
    Apply one event to the state.

    Events that make no sense in the current state return it unchanged.
    """
    if isinstance(event, FileSelected):
        return replace(
            state,
            app_state=AppState.ANALYZING,
            result=None,
            image_src=event.image_src,
            error_message=None,
            anchor=None,
            pending_token=state.next_token,
            next_token=state.next_token + 1,
        )

    if isinstance(event, AnalysisSucceeded):
        history = add_item(state.history, event.result, event.image_src, event.received_at)
        if not is_current(state, event.token):
            return replace(state, history=history)
        return replace(
            state,
            app_state=AppState.RESULT,
            result=event.result,
            image_src=event.image_src,
            error_message=None,
            history=history,
            anchor=None,
            pending_token=None,
        )

    if isinstance(event, AnalysisFailed):
        if not is_current(state, event.token):
            return state
        return replace(
            state,
            app_state=AppState.ERROR,
            result=None,
            error_message=event.message,
            anchor=None,
            pending_token=None,
        )

    if isinstance(event, Reset):
        return _idle(state)

    if isinstance(event, ShowFaq):
        return _idle(state, anchor="faq")

    if isinstance(event, ShowHistory):
        # pending_token survives: an in-flight call still lands on Result/Error
        return replace(state, app_state=AppState.HISTORY, anchor=None)

    if isinstance(event, SelectHistoryItem):
        if state.app_state != AppState.HISTORY:
            return state
        item = find_item(state.history, event.key)
        if item is None:
            return state
        return replace(
            state,
            app_state=AppState.RESULT,
            result=item.analysis,
            image_src=item.image_src,
            error_message=None,
        )

    raise TypeError(f"Unknown event: {event!r}")
