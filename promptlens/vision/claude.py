"""ClaudeAnalysisClient — Anthropic Claude backend, schema enforced via a forced tool call."""
import logging

from anthropic import APIError, AsyncAnthropic

from promptlens.constants import (
    ANALYSIS_INSTRUCTION,
    ANALYSIS_REQUEST,
    DEFAULT_ANALYSIS_MAX_TOKENS,
    DEFAULT_CLAUDE_MODEL,
    PROMPT_RESULT_SCHEMA,
    PROMPT_SCHEMA_NAME,
    PROMPT_TOOL_DESCRIPTION,
    PROVIDER_ANTHROPIC,
)
from promptlens.errors import ServiceError
from promptlens.image.canonical import CanonicalImage
from promptlens.vision.client import (
    AnalysisClient,
    PromptResult,
    parse_prompt_payload,
    prompt_result_from_mapping,
    require_api_key,
)

logger = logging.getLogger(__name__)


class ClaudeAnalysisClient(AnalysisClient):
    name = PROVIDER_ANTHROPIC

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_CLAUDE_MODEL,
        max_tokens: int = DEFAULT_ANALYSIS_MAX_TOKENS,
    ) -> None:
        self._api_key = require_api_key(api_key, PROVIDER_ANTHROPIC)
        self._model = model
        self._max_tokens = max_tokens

    async def analyze(self, image: CanonicalImage) -> PromptResult:
        try:
            async with AsyncAnthropic(api_key=self._api_key) as client:
                message = await client.messages.create(
                    model=self._model,
                    max_tokens=self._max_tokens,
                    system=ANALYSIS_INSTRUCTION,
                    tools=[
                        {
                            "name": PROMPT_SCHEMA_NAME,
                            "description": PROMPT_TOOL_DESCRIPTION,
                            "input_schema": PROMPT_RESULT_SCHEMA,
                        }
                    ],
                    tool_choice={"type": "tool", "name": PROMPT_SCHEMA_NAME},
                    messages=[
                        {
                            "role": "user",
                            "content": [
                                {
                                    "type": "image",
                                    "source": {
                                        "type": "base64",
                                        "media_type": image.media_type,
                                        "data": image.payload,
                                    },
                                },
                                {"type": "text", "text": ANALYSIS_REQUEST},
                            ],
                        }
                    ],
                )
        except APIError as exc:
            raise ServiceError(f"Anthropic request failed: {exc}") from exc

        blocks = list(message.content or [])
        tool_input = next((b.input for b in blocks if b.type == "tool_use"), None)
        match tool_input:
            case None:
                # No tool call came back; fall back to whatever text the model sent.
                logger.debug("Claude returned no tool call (stop_reason=%s)", message.stop_reason)
                text = "".join(b.text for b in blocks if b.type == "text")
                return parse_prompt_payload(text)
            case data:
                return prompt_result_from_mapping(data)
