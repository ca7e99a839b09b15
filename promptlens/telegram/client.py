"""TelegramClient — event-driven presentation layer via python-telegram-bot."""
import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters

from promptlens.bot_client import BotClient, TypingIndicator
from promptlens.config import Config
from promptlens.constants import (
    CMD_NEW,
    CMD_STATUS,
    IMAGE_MEDIA_PREFIX,
    MSG_BLOCKED_CHAT,
    MSG_BUSY,
    MSG_HELP,
    MSG_NEW_SESSION,
    MSG_NOT_AN_IMAGE,
    MSG_READ_FAILED,
    MSG_SEND_FAIL,
    MSG_SEND_IMAGE_HINT,
    TELEGRAM_DOCUMENT_FILENAME,
    TELEGRAM_PHOTO_FILENAME,
    TELEGRAM_PHOTO_MEDIA_TYPE,
    URL_SCHEMES,
)
from promptlens.errors import SessionBusyError
from promptlens.presenter import render_session, render_status
from promptlens.session import AnalysisSession, AnalysisStatus
from promptlens.studio import PromptStudio
from promptlens.telegram.typing import TelegramTypingIndicator

logger = logging.getLogger(__name__)

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]


def _digits(s: str) -> str:
    return "".join(c for c in s if c.isdigit())


def extract_url(text: Optional[str]) -> Optional[str]:
    """Return the message text if it is a single http(s) URL, else None."""
    match (text or "").strip():
        case candidate if candidate.lower().startswith(URL_SCHEMES) and " " not in candidate:
            return candidate
        case _:
            return None


def is_image_media_type(media_type: Optional[str]) -> bool:
    return (media_type or "").lower().startswith(IMAGE_MEDIA_PREFIX)


def safe_filename(name: Optional[str]) -> str:
    """Basename of an uploaded file, never a directory reference."""
    match Path(name or "").name:
        case "" | "." | "..":
            return TELEGRAM_DOCUMENT_FILENAME
        case base:
            return base


class TelegramClient(BotClient):
    """Serves the single allowed chat and renders every session snapshot into it."""

    def __init__(self, config: Config, studio: PromptStudio) -> None:
        self._token = config.telegram_bot_token
        self._allowed_chat_id = config.allowed_chat_id
        self._studio = studio
        self._app: Optional[Application] = None
        self._typing: Optional[TypingIndicator] = None
        self._render_lock = asyncio.Lock()
        self._render_tasks: set[asyncio.Task] = set()
        self._last_presented: Optional[tuple[int, AnalysisStatus]] = None
        self._studio.subscribe(self._on_snapshot)

    # ── BotClient interface ───────────────────────────────────────────────────

    def run(self) -> None:
        self._app = (
            Application.builder()
            .token(self._token)
            .concurrent_updates(True)
            .post_init(self._post_init)
            .build()
        )
        self._app.add_handler(CommandHandler(["start", "help"], self._guarded(self._on_help)))
        self._app.add_handler(CommandHandler(CMD_NEW, self._guarded(self._on_new)))
        self._app.add_handler(CommandHandler(CMD_STATUS, self._guarded(self._on_status)))
        self._app.add_handler(TGMessageHandler(filters.PHOTO, self._guarded(self._on_photo)))
        self._app.add_handler(
            TGMessageHandler(filters.Document.IMAGE, self._guarded(self._on_image_document))
        )
        self._app.add_handler(
            TGMessageHandler(filters.Document.ALL, self._guarded(self._on_other_document))
        )
        self._app.add_handler(
            TGMessageHandler(filters.TEXT & ~filters.COMMAND, self._guarded(self._on_text))
        )
        self._app.run_polling()

    async def send_message(self, to: str, text: str) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before run()")
                return False
            case app:
                try:
                    await app.bot.send_message(chat_id=int(to), text=text)
                    return True
                except Exception as exc:
                    logger.error(MSG_SEND_FAIL, exc)
                    return False

    # ── helpers (also used in tests) ─────────────────────────────────────────

    def _is_allowed(self, update: Update) -> bool:
        if update.effective_chat is None:
            return False
        return _digits(str(update.effective_chat.id)) == _digits(self._allowed_chat_id)

    def _guarded(self, handler: Handler) -> Handler:
        """Drop updates from any chat but the allowed one."""
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    chat_id = update.effective_chat.id if update.effective_chat else "?"
                    logger.warning(MSG_BLOCKED_CHAT, chat_id)
                    return
                case True:
                    await handler(update, context)

        return _handler

    async def _post_init(self, app: Application) -> None:
        self._typing = TelegramTypingIndicator(app.bot, self._allowed_chat_id)

    # ── snapshot presentation ─────────────────────────────────────────────────

    def _on_snapshot(self, session: AnalysisSession) -> None:
        task = asyncio.get_running_loop().create_task(self._present(session))
        self._render_tasks.add(task)
        task.add_done_callback(self._render_tasks.discard)

    async def _present(self, session: AnalysisSession) -> None:
        # The lock is FIFO, so snapshots are rendered in transition order.
        async with self._render_lock:
            key = (session.generation, session.status)
            match key == self._last_presented:
                case True:
                    return
                case False:
                    self._last_presented = key

            match (session.status, self._typing):
                case (AnalysisStatus.LOADING, TypingIndicator() as typing):
                    await typing.start()
                case (_, TypingIndicator() as typing):
                    await typing.stop()
                case _:
                    pass

            for text in render_session(session):
                await self.send_message(self._allowed_chat_id, text)

    # ── handlers ──────────────────────────────────────────────────────────────

    async def _on_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self.send_message(self._allowed_chat_id, MSG_HELP)

    async def _on_new(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        self._studio.reset()
        await self.send_message(self._allowed_chat_id, MSG_NEW_SESSION)

    async def _on_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self.send_message(
            self._allowed_chat_id, render_status(self._studio.snapshot, self._studio.provider)
        )

    async def _on_photo(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        photos = update.message.photo if update.message else None
        match photos:
            case None | []:
                return
            case _:
                await self._analyze_upload(
                    photos[-1], TELEGRAM_PHOTO_FILENAME, TELEGRAM_PHOTO_MEDIA_TYPE
                )

    async def _on_image_document(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        document = update.message.document if update.message else None
        match document:
            case None:
                return
            case doc if not is_image_media_type(doc.mime_type):
                await self.send_message(self._allowed_chat_id, MSG_NOT_AN_IMAGE)
            case doc:
                filename = safe_filename(doc.file_name)
                await self._analyze_upload(doc, filename, doc.mime_type)

    async def _on_other_document(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        await self.send_message(self._allowed_chat_id, MSG_NOT_AN_IMAGE)

    async def _on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        text = update.message.text if update.message else None
        match extract_url(text):
            case None:
                if (text or "").strip():
                    await self.send_message(self._allowed_chat_id, MSG_SEND_IMAGE_HINT)
            case url:
                match self._studio.is_busy:
                    case True:
                        await self.send_message(self._allowed_chat_id, MSG_BUSY)
                    case False:
                        await self._submit(lambda: self._studio.analyze_url(url))

    async def _submit(self, start: Callable[[], Awaitable[AnalysisSession]]) -> None:
        try:
            await start()
        except SessionBusyError:
            await self.send_message(self._allowed_chat_id, MSG_BUSY)

    async def _analyze_upload(self, attachment, filename: str, media_type: str) -> None:
        """Download a Telegram attachment to a temp file and analyze it from disk."""
        match self._studio.is_busy:
            case True:
                await self.send_message(self._allowed_chat_id, MSG_BUSY)
                return
            case False:
                pass

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / filename
            try:
                tg_file = await attachment.get_file()
                await tg_file.download_to_drive(path)
            except Exception:
                logger.exception("Telegram download failed")
                await self.send_message(self._allowed_chat_id, MSG_READ_FAILED)
                return
            await self._submit(lambda: self._studio.analyze_file(path, media_type))
