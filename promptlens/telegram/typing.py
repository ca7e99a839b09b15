"""Telegram typing indicator — shown while a session is loading."""
import asyncio
import logging

from telegram import Bot
from telegram.constants import ChatAction

from promptlens.bot_client import TypingIndicator
from promptlens.constants import TELEGRAM_TYPING_INTERVAL

logger = logging.getLogger(__name__)


async def _keep_typing(bot: Bot, chat_id: str, stop: asyncio.Event) -> None:
    while not stop.is_set():
        try:
            await bot.send_chat_action(chat_id=int(chat_id), action=ChatAction.TYPING)
        except Exception as exc:
            logger.debug("Typing action failed: %s", exc)
        try:
            await asyncio.wait_for(stop.wait(), timeout=TELEGRAM_TYPING_INTERVAL)
        except asyncio.TimeoutError:
            pass


class TelegramTypingIndicator(TypingIndicator):

    def __init__(self, bot: Bot, chat_id: str) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        match self._task:
            case None:
                self._stop_event = asyncio.Event()
                self._task = asyncio.create_task(
                    _keep_typing(self._bot, self._chat_id, self._stop_event)
                )
            case _:
                pass

    async def stop(self) -> None:
        match (self._stop_event, self._task):
            case (None, None):
                return
            case (event, task):
                if event is not None:
                    event.set()
                if task is not None:
                    await task
        self._task = None
        self._stop_event = None
