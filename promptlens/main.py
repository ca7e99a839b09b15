"""Entry point — wires Config → AnalysisClient → PromptStudio → TelegramClient."""
import logging
from typing import Optional

from rich.logging import RichHandler

from promptlens.config import Config
from promptlens.constants import MSG_BOT_STARTING, MSG_NOT_CONFIGURED_LOG
from promptlens.errors import ConfigurationError
from promptlens.image.acquirer import ImageAcquirer
from promptlens.studio import PromptStudio
from promptlens.telegram.client import TelegramClient
from promptlens.vision.client import AnalysisClient
from promptlens.vision.factory import build_analysis_client


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_studio(config: Config) -> PromptStudio:
    """Missing credentials leave the studio unconfigured; the process keeps running."""
    logger = logging.getLogger(__name__)
    client: Optional[AnalysisClient]
    try:
        client = build_analysis_client(config)
    except ConfigurationError as exc:
        logger.warning(MSG_NOT_CONFIGURED_LOG, exc)
        client = None
    return PromptStudio(ImageAcquirer(timeout=config.fetch_timeout), client)


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_BOT_STARTING)

    studio = build_studio(config)
    TelegramClient(config, studio).run()


if __name__ == "__main__":
    main()
