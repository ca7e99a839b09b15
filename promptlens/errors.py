"""Error hierarchy — every user-visible failure carries its own short message."""
from typing import Optional

from promptlens.constants import (
    MSG_ANALYSIS_FAILED,
    MSG_ANALYSIS_NOT_CONFIGURED,
    MSG_FETCH_BLOCKED,
    MSG_FETCH_FAILED,
    MSG_READ_FAILED,
)


class PromptLensError(Exception):
    """Base for failures surfaced to the user. str(exc) is the log detail."""

    default_message = MSG_ANALYSIS_FAILED

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.default_message)

    @property
    def detail(self) -> str:
        return str(self)

    @property
    def user_message(self) -> str:
        return self.default_message


# ── image acquisition ─────────────────────────────────────────────────────────


class AcquisitionError(PromptLensError):
    pass


class ReadError(AcquisitionError):
    default_message = MSG_READ_FAILED


class FetchError(AcquisitionError):
    default_message = MSG_FETCH_FAILED

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        blocked: bool = False,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(detail)
        self.blocked = blocked
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        match self.blocked:
            case True:
                return MSG_FETCH_BLOCKED
            case False:
                return MSG_FETCH_FAILED


# ── analysis ──────────────────────────────────────────────────────────────────


class AnalysisError(PromptLensError):
    default_message = MSG_ANALYSIS_FAILED


class ConfigurationError(AnalysisError):
    default_message = MSG_ANALYSIS_NOT_CONFIGURED


class EmptyResponseError(AnalysisError):
    pass


class MalformedResponseError(AnalysisError):

    def __init__(self, detail: Optional[str] = None, *, payload: object = None) -> None:
        super().__init__(detail)
        self.payload = payload


class ServiceError(AnalysisError):
    pass


# ── programming errors (never shown to the user) ──────────────────────────────


class InvalidTransitionError(RuntimeError):
    pass


class SessionBusyError(InvalidTransitionError):
    pass
