"""AnalysisStateMachine — the single analysis session and its immutable snapshots.

idle ──submit──▶ loading ──resolve──▶ success
  ▲                 │
  │                 └──reject───▶ error
  └────────reset (from any state)─────┘

Every submit and reset bumps the generation. A submission holds its
generation as a token; once a reset or a newer submit has happened, the
token is stale and late results for it are dropped.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from promptlens.constants import MSG_STALE_RESULT, MSG_TRANSITION
from promptlens.errors import InvalidTransitionError, SessionBusyError
from promptlens.image.canonical import CanonicalImage
from promptlens.vision.client import PromptResult

logger = logging.getLogger(__name__)


class AnalysisStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class AnalysisSession:
    status: AnalysisStatus = AnalysisStatus.IDLE
    image: Optional[CanonicalImage] = None
    result: Optional[PromptResult] = None
    error_message: Optional[str] = None
    generation: int = 0

    def __post_init__(self) -> None:
        match (self.status, self.result, self.error_message):
            case (AnalysisStatus.SUCCESS, PromptResult(), None):
                pass
            case (AnalysisStatus.ERROR, None, str()):
                pass
            case (AnalysisStatus.IDLE | AnalysisStatus.LOADING, None, None):
                pass
            case _:
                raise ValueError(
                    f"Inconsistent session: status={self.status.value}, "
                    f"result={self.result!r}, error_message={self.error_message!r}"
                )


Listener = Callable[[AnalysisSession], None]


class AnalysisStateMachine:

    def __init__(self) -> None:
        self._session = AnalysisSession()
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> AnalysisSession:
        return self._session

    @property
    def is_busy(self) -> bool:
        return self._session.status is AnalysisStatus.LOADING

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ── transitions ───────────────────────────────────────────────────────────

    def submit(self) -> int:
        """Start a new submission and return its token."""
        match self._session.status:
            case AnalysisStatus.LOADING:
                raise SessionBusyError("A submission is already in flight")
            case _:
                pass
        generation = self._session.generation + 1
        self._transition(AnalysisSession(status=AnalysisStatus.LOADING, generation=generation))
        return generation

    def attach_image(self, token: int, image: CanonicalImage) -> bool:
        match self._check(token, "image"):
            case False:
                return False
            case True:
                self._transition(replace(self._session, image=image))
                return True

    def resolve(self, token: int, result: PromptResult) -> bool:
        match self._check(token, "result"):
            case False:
                return False
            case True:
                self._transition(
                    replace(self._session, status=AnalysisStatus.SUCCESS, result=result)
                )
                return True

    def reject(self, token: int, message: str) -> bool:
        match self._check(token, "error"):
            case False:
                return False
            case True:
                self._transition(
                    replace(self._session, status=AnalysisStatus.ERROR, error_message=message)
                )
                return True

    def reset(self) -> AnalysisSession:
        self._transition(AnalysisSession(generation=self._session.generation + 1))
        return self._session

    # ── internals ─────────────────────────────────────────────────────────────

    def _check(self, token: int, what: str) -> bool:
        """False for a stale token; raises when the current submission is not loading."""
        current = self._session.generation
        match (token == current, self._session.status):
            case (False, _):
                logger.info(MSG_STALE_RESULT, what, token, current)
                return False
            case (True, AnalysisStatus.LOADING):
                return True
            case (True, status):
                raise InvalidTransitionError(
                    f"Cannot deliver {what} while session is {status.value}"
                )

    def _transition(self, session: AnalysisSession) -> None:
        previous = self._session
        self._session = session
        logger.debug(MSG_TRANSITION, previous.status.value, session.status.value, session.generation)
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener failed")
