"""ImageAcquirer — turns a local file or a remote URL into a CanonicalImage."""
import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx

from promptlens.constants import DEFAULT_FETCH_TIMEOUT, FETCH_BLOCKED_STATUSES
from promptlens.errors import FetchError, ReadError
from promptlens.image.canonical import CanonicalImage, encode_payload

logger = logging.getLogger(__name__)


def _preview_ref(path: Path) -> Optional[str]:
    """Best-effort file:// URI for previews. Never blocks acquisition."""
    try:
        return path.resolve().as_uri()
    except (OSError, ValueError) as exc:
        logger.debug("No preview reference for %s: %s", path, exc)
        return None


def _media_type_from_header(content_type: str) -> Optional[str]:
    media = content_type.split(";", 1)[0].strip().lower()
    return media or None


class ImageAcquirer:
    """Stateless; every call is independent and freely retriable."""

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def from_local_file(
        self, path: Path | str, media_type: Optional[str] = None
    ) -> CanonicalImage:
        match str(path).strip():
            case "":
                raise ValueError("from_local_file requires a path")
            case _:
                path = Path(path)

        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ReadError(f"Could not read {path.name}: {exc}") from exc

        match data:
            case b"":
                raise ReadError(f"{path.name} is empty")
            case _:
                pass

        media = media_type or mimetypes.guess_type(path.name)[0]
        match media:
            case None | "":
                raise ReadError(f"Could not determine the media type of {path.name}")
            case _:
                pass

        return CanonicalImage(
            payload=encode_payload(data),
            media_type=media,
            display_ref=_preview_ref(path),
        )

    async def from_remote_url(self, url: str) -> CanonicalImage:
        url = url.strip()
        match url:
            case "":
                raise ValueError("from_remote_url requires a URL")
            case _:
                pass

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"Request to {url} failed: {exc!r}") from exc

        match response.status_code:
            case code if code in FETCH_BLOCKED_STATUSES:
                raise FetchError(
                    f"Host refused {url} with HTTP {code}",
                    blocked=True,
                    status_code=code,
                )
            case code if not response.is_success:
                raise FetchError(f"GET {url} returned HTTP {code}", status_code=code)
            case _:
                pass

        data = response.content
        match data:
            case b"":
                raise FetchError(f"GET {url} returned an empty body")
            case _:
                pass

        media = (
            _media_type_from_header(response.headers.get("content-type", ""))
            or mimetypes.guess_type(urlparse(url).path)[0]
        )
        match media:
            case None:
                raise FetchError(f"GET {url} did not report a media type")
            case _:
                pass

        logger.debug("Fetched %s (%s, %d bytes)", url, media, len(data))
        return CanonicalImage(payload=encode_payload(data), media_type=media, display_ref=url)
