"""Transport-agnostic rendering of session snapshots into chat messages."""
from promptlens.constants import (
    MSG_ANALYZING,
    MSG_BACKEND_NONE,
    MSG_RESULT_ARABIC,
    MSG_RESULT_ENGLISH,
    MSG_RESULT_ERROR,
    MSG_STATUS,
)
from promptlens.session import AnalysisSession, AnalysisStatus


def render_session(session: AnalysisSession) -> list[str]:
    match session:
        case AnalysisSession(status=AnalysisStatus.LOADING):
            return [MSG_ANALYZING]
        case AnalysisSession(status=AnalysisStatus.SUCCESS, result=result):
            # One message per language so each prompt can be copied on its own.
            return [MSG_RESULT_ENGLISH % result.english, MSG_RESULT_ARABIC % result.arabic]
        case AnalysisSession(status=AnalysisStatus.ERROR, error_message=message):
            return [MSG_RESULT_ERROR % message]
        case _:
            return []


def render_status(session: AnalysisSession, provider: str | None) -> str:
    return MSG_STATUS % (session.status.value, provider or MSG_BACKEND_NONE)
