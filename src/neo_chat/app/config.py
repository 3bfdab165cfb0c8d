import math
import os
import threading
from dataclasses import dataclass

from neo_chat.app.errors import ConfigurationError

# Constants that don't change
OPENAI_API_KEY_SECRET = "openai_api_key"
DEFAULT_SECRETS_PATH = "/apps/prod/neo-chat/secrets/"
DEFAULT_REGION = "us-east-1"
DEFAULT_PORT = 3001
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_WAIT_SECONDS = 60.0

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGER_NAME = "neo-chat"


@dataclass(frozen=True)
class ChatSettings:
    """Chat proxy settings loaded from the environment."""

    # OpenAI settings
    assistant_id: str
    organization_id: str | None
    openai_api_key: str | None  # None means: read it from the secret store

    # Secret store settings
    secrets_path: str
    region_name: str

    # Run polling
    poll_interval: float
    max_wait_seconds: float

    # Local server
    port: int


def _env_number(name: str, default: float, cast: type[float] | type[int] = float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Configuration value is invalid: {name}={raw!r}") from e


class Config:
    """Singleton configuration manager for the chat proxy."""

    _instance = None
    _settings: ChatSettings | None = None
    _lock = threading.Lock()

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def get_settings(self) -> ChatSettings:
        """Get settings, loading them from the environment on first use."""
        settings = self._settings
        if settings is None:
            with self._lock:
                if self._settings is None:
                    self._settings = self._load_settings()
                settings = self._settings
        return settings

    def reset(self) -> None:
        """Forget cached settings so the next call reloads them."""
        with self._lock:
            self._settings = None

    def _load_settings(self) -> ChatSettings:
        settings = ChatSettings(
            assistant_id=os.getenv("ASSISTANT_ID", "").strip(),
            organization_id=os.getenv("ORGANIZATION_ID") or None,
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            secrets_path=os.getenv("NEO_CHAT_SECRETS_PATH", DEFAULT_SECRETS_PATH),
            region_name=os.getenv("AWS_REGION", DEFAULT_REGION),
            poll_interval=_env_number("RUN_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            max_wait_seconds=_env_number("RUN_MAX_WAIT_SECONDS", DEFAULT_MAX_WAIT_SECONDS),
            port=int(_env_number("PORT", DEFAULT_PORT, int)),
        )

        self._validate_settings(settings)

        return settings

    def _validate_settings(self, settings: ChatSettings) -> None:
        """Validate numeric settings. A missing assistant id is reported per request."""
        for field in ("poll_interval", "max_wait_seconds", "port"):
            value = getattr(settings, field)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"Configuration value is invalid: {field.upper()}")


# Create singleton instance
config = Config()


# Convenience functions
def get_settings() -> ChatSettings:
    """Get chat settings from the singleton config."""
    return config.get_settings()


def reset_settings() -> None:
    config.reset()
