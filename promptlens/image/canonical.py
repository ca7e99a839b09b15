"""CanonicalImage — the source-independent, in-memory form of an image."""
import base64
from dataclasses import dataclass
from typing import Optional


def encode_payload(data: bytes) -> str:
    return base64.standard_b64encode(data).decode()


def decode_payload(payload: str) -> bytes:
    return base64.standard_b64decode(payload)


@dataclass(frozen=True)
class CanonicalImage:
    payload: str
    media_type: str
    display_ref: Optional[str] = None

    def __post_init__(self) -> None:
        match (self.payload, self.media_type):
            case ("", _):
                raise ValueError("CanonicalImage payload must not be empty")
            case (_, ""):
                raise ValueError("CanonicalImage media_type must not be empty")
            case _:
                pass

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.payload}"

    def to_bytes(self) -> bytes:
        return decode_payload(self.payload)
