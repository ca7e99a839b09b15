"""AnalysisClient — abstract base for image-to-prompt backends, plus the shared response contract."""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from promptlens.constants import PROMPT_FIELDS
from promptlens.errors import ConfigurationError, EmptyResponseError, MalformedResponseError
from promptlens.image.canonical import CanonicalImage


@dataclass(frozen=True)
class PromptResult:
    english: str
    arabic: str


def require_api_key(api_key: Optional[str], provider: str) -> str:
    match (api_key or "").strip():
        case "":
            raise ConfigurationError(f"No API key configured for {provider}")
        case key:
            return key


def prompt_result_from_mapping(data: object) -> PromptResult:
    """Validate a decoded payload against the two-field prompt schema."""
    match data:
        case dict():
            pass
        case _:
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(data).__name__}", payload=data
            )

    missing = [
        field
        for field in PROMPT_FIELDS
        if not isinstance(data.get(field), str) or not data[field].strip()
    ]
    unexpected = sorted(set(data) - set(PROMPT_FIELDS))
    match (missing, unexpected):
        case ([], []):
            return PromptResult(english=data["english"].strip(), arabic=data["arabic"].strip())
        case _:
            raise MalformedResponseError(
                f"Response violates prompt schema (missing/blank: {missing}, unexpected: {unexpected})",
                payload=data,
            )


def parse_prompt_payload(payload: Optional[str]) -> PromptResult:
    match (payload or "").strip():
        case "":
            raise EmptyResponseError("Inference service returned no content")
        case text:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                raise MalformedResponseError(
                    f"Response is not valid JSON: {exc}", payload=text
                ) from exc
            return prompt_result_from_mapping(data)


class AnalysisClient(ABC):
    name: str

    @abstractmethod
    async def analyze(self, image: CanonicalImage) -> PromptResult:
        """Turn an image into English and Arabic prompts. Raises AnalysisError on failure."""
        ...
