"""PromptStudio — one submission flow: acquire → analyze → resolve/reject."""
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from promptlens.constants import MSG_ANALYSIS_FAILED
from promptlens.errors import ConfigurationError, MalformedResponseError, PromptLensError
from promptlens.image.acquirer import ImageAcquirer
from promptlens.image.canonical import CanonicalImage
from promptlens.session import AnalysisSession, AnalysisStateMachine, Listener
from promptlens.vision.client import AnalysisClient

logger = logging.getLogger(__name__)


class PromptStudio:
    """Owns the single AnalysisSession and drives it through one submission at a time.

    The presentation layer must check ``is_busy`` before submitting;
    submitting while loading raises SessionBusyError.
    """

    def __init__(
        self,
        acquirer: ImageAcquirer,
        client: Optional[AnalysisClient],
        machine: Optional[AnalysisStateMachine] = None,
    ) -> None:
        self._acquirer = acquirer
        self._client = client
        self._machine = machine or AnalysisStateMachine()

    @property
    def snapshot(self) -> AnalysisSession:
        return self._machine.snapshot

    @property
    def is_busy(self) -> bool:
        return self._machine.is_busy

    @property
    def provider(self) -> Optional[str]:
        match self._client:
            case None:
                return None
            case client:
                return client.name

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._machine.subscribe(listener)

    def reset(self) -> AnalysisSession:
        return self._machine.reset()

    async def analyze_file(
        self, path: Path | str, media_type: Optional[str] = None
    ) -> AnalysisSession:
        # str(Path("")) is ".", which is never a file to read.
        match str(path).strip() if path else "":
            case "" | ".":
                return self.snapshot
            case _:
                return await self._run(lambda: self._acquirer.from_local_file(path, media_type))

    async def analyze_url(self, url: str) -> AnalysisSession:
        match url.strip():
            case "":
                return self.snapshot
            case target:
                return await self._run(lambda: self._acquirer.from_remote_url(target))

    async def _run(self, acquire: Callable[[], Awaitable[CanonicalImage]]) -> AnalysisSession:
        token = self._machine.submit()
        try:
            image = await acquire()
            if not self._machine.attach_image(token, image):
                # Reset while acquiring; skip the paid inference call.
                return self.snapshot
            match self._client:
                case None:
                    raise ConfigurationError("No analysis backend configured")
                case client:
                    result = await client.analyze(image)
        except MalformedResponseError as exc:
            logger.warning("Malformed analysis response: %s | payload=%r", exc, exc.payload)
            self._machine.reject(token, exc.user_message)
        except PromptLensError as exc:
            logger.warning("%s: %s", type(exc).__name__, exc)
            self._machine.reject(token, exc.user_message)
        except Exception:
            logger.exception("Unexpected failure during analysis")
            self._machine.reject(token, MSG_ANALYSIS_FAILED)
        else:
            self._machine.resolve(token, result)
        return self.snapshot
