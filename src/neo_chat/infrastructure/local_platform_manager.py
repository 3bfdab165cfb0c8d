import logging
import os
from pathlib import Path

from neo_chat.app.errors import SecretNotFound


def create_logger(
    log_level: str = "INFO",
    logger_name: str = "neo-chat",
    logs_dir: str | Path | None = None,
) -> logging.Logger:
    """
    Create a logger that outputs to console and optionally to a file.

    Args:
        log_level (str): Logging level (e.g., "INFO", "DEBUG").
        logger_name (str): Name for the logger instance, also used as the log file name.
        logs_dir (str | Path | None): Directory for log files. Defaults to NEO_CHAT_LOGS_DIR;
            when neither is set only the console handler is added.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    if not logger.handlers:  # Prevent handler duplication
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        logs_dir = logs_dir or os.getenv("NEO_CHAT_LOGS_DIR")
        if logs_dir:
            logs_path = Path(logs_dir)
            try:
                logs_path.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(logs_path / f"{logger_name}.log")
                file_handler.setFormatter(formatter)
                logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"File logging disabled: {e}")

    return logger


def get_secret(secret_name: str, base_path: str, *, region_name: str = "us-east-1") -> str:
    """
    Read a secret from the environment variable named after it, upper-cased.

    `base_path` and `region_name` match the AWS platform manager's signature and are unused.
    """
    value = os.getenv(secret_name.upper())
    if not value:
        raise SecretNotFound(f"{secret_name.upper()} environment variable is not set")
    return value
