"""OpenAIAnalysisClient — OpenAI GPT-4o backend with strict JSON-schema output."""
from openai import APIError, AsyncOpenAI

from promptlens.constants import (
    ANALYSIS_INSTRUCTION,
    ANALYSIS_REQUEST,
    DEFAULT_ANALYSIS_MAX_TOKENS,
    DEFAULT_OPENAI_MODEL,
    PROMPT_RESULT_SCHEMA,
    PROMPT_SCHEMA_NAME,
    PROVIDER_OPENAI,
)
from promptlens.errors import ServiceError
from promptlens.image.canonical import CanonicalImage
from promptlens.vision.client import AnalysisClient, PromptResult, parse_prompt_payload, require_api_key


class OpenAIAnalysisClient(AnalysisClient):
    name = PROVIDER_OPENAI

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        max_tokens: int = DEFAULT_ANALYSIS_MAX_TOKENS,
    ) -> None:
        self._api_key = require_api_key(api_key, PROVIDER_OPENAI)
        self._model = model
        self._max_tokens = max_tokens

    async def analyze(self, image: CanonicalImage) -> PromptResult:
        try:
            async with AsyncOpenAI(api_key=self._api_key) as client:
                response = await client.chat.completions.create(
                    model=self._model,
                    max_tokens=self._max_tokens,
                    messages=[
                        {"role": "system", "content": ANALYSIS_INSTRUCTION},
                        {
                            "role": "user",
                            "content": [
                                {
                                    "type": "image_url",
                                    "image_url": {"url": image.data_url},
                                },
                                {"type": "text", "text": ANALYSIS_REQUEST},
                            ],
                        },
                    ],
                    response_format={
                        "type": "json_schema",
                        "json_schema": {
                            "name": PROMPT_SCHEMA_NAME,
                            "strict": True,
                            "schema": PROMPT_RESULT_SCHEMA,
                        },
                    },
                )
        except APIError as exc:
            raise ServiceError(f"OpenAI request failed: {exc}") from exc

        match response.choices:
            case [first, *_]:
                return parse_prompt_payload(first.message.content)
            case _:
                return parse_prompt_payload(None)
