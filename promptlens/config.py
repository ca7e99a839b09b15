from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from promptlens.constants import (
    ANALYSIS_PROVIDERS,
    DEFAULT_ANALYSIS_MAX_TOKENS,
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_OPENAI_MODEL,
)


@dataclass(frozen=True)
class Config:
    telegram_bot_token: str
    allowed_chat_id: str
    log_level: str
    anthropic_api_key: Optional[str]
    openai_api_key: Optional[str]
    analysis_provider: Optional[str] = None
    claude_model: str = DEFAULT_CLAUDE_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    analysis_max_tokens: int = DEFAULT_ANALYSIS_MAX_TOKENS
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN")
        chat_id = os.getenv("ALLOWED_CHAT_ID")
        log_level = os.getenv("LOG_LEVEL", "INFO")
        anthropic_api_key = (os.getenv("ANTHROPIC_API_KEY") or "").strip() or None
        openai_api_key = (os.getenv("OPENAI_API_KEY") or "").strip() or None
        provider = (os.getenv("ANALYSIS_PROVIDER") or "").strip().lower() or None
        claude_model = os.getenv("CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL
        openai_model = os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL
        max_tokens = os.getenv("ANALYSIS_MAX_TOKENS", str(DEFAULT_ANALYSIS_MAX_TOKENS))
        fetch_timeout = os.getenv("FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT))

        return cls._validate(
            telegram_bot_token=token,
            allowed_chat_id=chat_id,
            log_level=log_level,
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            analysis_provider=provider,
            claude_model=claude_model,
            openai_model=openai_model,
            analysis_max_tokens=int(max_tokens),
            fetch_timeout=float(fetch_timeout),
        )

    @staticmethod
    def _validate(
        telegram_bot_token: Optional[str],
        allowed_chat_id: Optional[str],
        log_level: str,
        anthropic_api_key: Optional[str],
        openai_api_key: Optional[str],
        analysis_provider: Optional[str],
        claude_model: str,
        openai_model: str,
        analysis_max_tokens: int,
        fetch_timeout: float,
    ) -> "Config":
        match telegram_bot_token:
            case None | "":
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match allowed_chat_id:
            case None | "":
                raise ValueError("ALLOWED_CHAT_ID must be set in .env")
            case _:
                pass

        match analysis_provider:
            case None:
                pass
            case p if p in ANALYSIS_PROVIDERS:
                pass
            case p:
                raise ValueError(
                    f"ANALYSIS_PROVIDER must be one of {', '.join(ANALYSIS_PROVIDERS)}, got {p!r}"
                )

        return Config(
            telegram_bot_token=telegram_bot_token,
            allowed_chat_id=allowed_chat_id,
            log_level=log_level,
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            analysis_provider=analysis_provider,
            claude_model=claude_model,
            openai_model=openai_model,
            analysis_max_tokens=analysis_max_tokens,
            fetch_timeout=fetch_timeout,
        )
