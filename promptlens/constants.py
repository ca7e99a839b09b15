"""All magic values live here — no inline literals anywhere else."""

# Telegram typing indicator re-send interval (seconds).
# The TYPING action expires after ~5 s, so we refresh every 4 s.
TELEGRAM_TYPING_INTERVAL: float = 4.0

# Analysis backends
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_OPENAI = "openai"
ANALYSIS_PROVIDERS = (PROVIDER_ANTHROPIC, PROVIDER_OPENAI)
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_ANALYSIS_MAX_TOKENS = 2048

# Image acquisition
DEFAULT_FETCH_TIMEOUT: float = 20.0
# Statuses the host uses to refuse hotlinked downloads.
FETCH_BLOCKED_STATUSES = frozenset({401, 403, 451})
TELEGRAM_PHOTO_MEDIA_TYPE = "image/jpeg"
TELEGRAM_PHOTO_FILENAME = "photo.jpg"
TELEGRAM_DOCUMENT_FILENAME = "upload"
IMAGE_MEDIA_PREFIX = "image/"
URL_SCHEMES = ("http://", "https://")

# Inference request
ANALYSIS_INSTRUCTION = (
    "You are an expert AI prompt engineer and image analyst. Your goal is to "
    "reverse-engineer images.\n"
    "When given an image, analyze it in extreme detail: composition, lighting, "
    "style, subject, camera angle, color palette and artistic medium. Then write "
    "a precise prompt that a text-to-image model (Midjourney, Stable Diffusion, "
    "DALL-E, Gemini) could use to recreate this exact image.\n"
    "Provide two versions of the prompt:\n"
    "1. A professional English prompt.\n"
    "2. A professional Arabic prompt, translated and culturally adapted where "
    "that preserves the same artistic intent.\n"
    "Return ONLY the JSON object with the fields `english` and `arabic`."
)
ANALYSIS_REQUEST = "Analyze this image and generate both prompts as instructed."
PROMPT_SCHEMA_NAME = "image_prompts"
PROMPT_TOOL_DESCRIPTION = "Record the English and Arabic image-generation prompts."
PROMPT_FIELDS = ("english", "arabic")
PROMPT_RESULT_SCHEMA = {
    "type": "object",
    "properties": {
        "english": {
            "type": "string",
            "description": "The detailed image generation prompt in English.",
        },
        "arabic": {
            "type": "string",
            "description": "The detailed image generation prompt in Arabic.",
        },
    },
    "required": list(PROMPT_FIELDS),
    "additionalProperties": False,
}

# Log messages
MSG_BOT_STARTING = "Starting PromptLens bot…"
MSG_BLOCKED_CHAT = "Blocked update from chat_id: %s"
MSG_SEND_FAIL = "✗ Send failed: %s"
MSG_NOT_CONFIGURED_LOG = "Analysis backend not configured: %s"
MSG_STALE_RESULT = "Discarding stale %s for generation %d (current %d)"
MSG_TRANSITION = "Session %s → %s (generation %d)"

# User-facing messages
MSG_READ_FAILED = "Could not read the image file. Please try again."
MSG_FETCH_FAILED = "Could not load the image from that URL. Check the link and try again."
MSG_FETCH_BLOCKED = (
    "The image host blocked the download. "
    "Please download the image and upload it here manually."
)
MSG_ANALYSIS_FAILED = "Could not analyze the image. Please try again."
MSG_ANALYSIS_NOT_CONFIGURED = "Image analysis is not configured: no API key is set for the analysis service."
MSG_ANALYZING = "جاري تحليل الصورة...\nAnalyzing composition, lighting, and style..."
MSG_RESULT_ENGLISH = "English prompt:\n\n%s"
MSG_RESULT_ARABIC = "البرومبت بالعربية:\n\n%s"
MSG_RESULT_ERROR = "Analysis failed\n\n%s\n\nSend another image or /new to start over."
MSG_BUSY = "Still analyzing the previous image. Wait for the result or send /new to start over."
MSG_NOT_AN_IMAGE = "Please send an image file (PNG, JPG, GIF, WEBP…)."
MSG_SEND_IMAGE_HINT = "Send a photo, an image file, or a direct image URL (http/https)."

CMD_NEW = "new"
MSG_NEW_SESSION = "Session cleared — send a new image."

CMD_STATUS = "status"
MSG_STATUS = (
    "Status\n"
    "  Session  : %s\n"
    "  Backend  : %s\n"
)
MSG_BACKEND_NONE = "not configured"

MSG_HELP = (
    "PromptLens — turn any image into a text-to-image prompt\n"
    "\n"
    "Send:\n"
    "  Photo or image file      — analyzed and turned into prompts\n"
    "  Image URL (http/https)   — downloaded then analyzed\n"
    "\n"
    "You get two prompts back: English and Arabic.\n"
    "\n"
    "Commands:\n"
    "  /help                    — show this message\n"
    "  /status                  — current session and backend\n"
    "  /new                     — clear the session and start fresh\n"
)
