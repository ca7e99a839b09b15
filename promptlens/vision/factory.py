"""Pick the analysis backend once, at composition time."""
from promptlens.config import Config
from promptlens.constants import PROVIDER_ANTHROPIC, PROVIDER_OPENAI
from promptlens.errors import ConfigurationError
from promptlens.vision.claude import ClaudeAnalysisClient
from promptlens.vision.client import AnalysisClient
from promptlens.vision.openai import OpenAIAnalysisClient


def _claude(config: Config, key: str) -> AnalysisClient:
    return ClaudeAnalysisClient(key, model=config.claude_model, max_tokens=config.analysis_max_tokens)


def _openai(config: Config, key: str) -> AnalysisClient:
    return OpenAIAnalysisClient(key, model=config.openai_model, max_tokens=config.analysis_max_tokens)


def build_analysis_client(config: Config) -> AnalysisClient:
    """Explicit provider needs its own key; auto mode prefers Anthropic, then OpenAI."""
    match (config.analysis_provider, config.anthropic_api_key, config.openai_api_key):
        case (None | "anthropic", str() as k, _) if k.strip():
            return _claude(config, k)
        case (None | "openai", _, str() as k) if k.strip():
            return _openai(config, k)
        case (None, _, _):
            raise ConfigurationError(
                f"Set ANTHROPIC_API_KEY or OPENAI_API_KEY to enable {PROVIDER_ANTHROPIC}/{PROVIDER_OPENAI} analysis"
            )
        case (provider, _, _):
            raise ConfigurationError(f"ANALYSIS_PROVIDER={provider} but its API key is not set")
