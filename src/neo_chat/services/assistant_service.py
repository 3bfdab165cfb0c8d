import threading

from neo_chat.app.config import LOG_LEVEL, LOGGER_NAME, OPENAI_API_KEY_SECRET, get_settings
from neo_chat.infrastructure.openai_assistant_manager import OpenAIAssistant
from neo_chat.infrastructure.platform_manager import create_logger, get_secret

logger = create_logger(logger_name=LOGGER_NAME, log_level=LOG_LEVEL)

_assistant: OpenAIAssistant | None = None
_assistant_lock = threading.Lock()


def _build_assistant() -> OpenAIAssistant:
    settings = get_settings()
    api_key = settings.openai_api_key
    if not api_key:
        logger.info("OPENAI_API_KEY not set, reading it from the secret store")
        api_key = get_secret(
            OPENAI_API_KEY_SECRET, settings.secrets_path, region_name=settings.region_name
        )
    return OpenAIAssistant(api_key=api_key, organization=settings.organization_id)


def get_assistant() -> OpenAIAssistant:
    """
    Return the process-wide OpenAI client, building it on first use.

    Concurrent first callers wait on the lock and share a single instance.
    """
    global _assistant
    assistant = _assistant
    if assistant is not None:
        return assistant

    with _assistant_lock:
        if _assistant is None:
            _assistant = _build_assistant()
            logger.info("OpenAI assistant client created")
        return _assistant


def reset_assistant() -> None:
    """Drop the cached client."""
    global _assistant
    with _assistant_lock:
        _assistant = None
