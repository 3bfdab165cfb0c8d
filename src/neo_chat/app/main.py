#!/usr/bin/env python3
import threading
from typing import Any

from neo_chat.app.config import LOG_LEVEL, LOGGER_NAME, get_settings
from neo_chat.app.errors import ChatError, ConfigurationError, ValidationError
from neo_chat.app.process_event import get_http_method, process_event_data
from neo_chat.infrastructure.platform_manager import create_logger
from neo_chat.services.assistant_service import get_assistant
from neo_chat.services.response_helpers import (
    create_error_response,
    create_json_response,
    create_preflight_response,
)
from neo_chat.services.run_orchestrator import run_assistant

logger = create_logger(logger_name=LOGGER_NAME, log_level=LOG_LEVEL)


def process(event: dict[str, Any], cancel_event: threading.Event | None = None) -> dict[str, Any]:
    """
    Process the incoming HTTP Gateway event.

    Args:
        event: Lambda proxy event.
        cancel_event: Set by the caller to stop waiting for the assistant run.

    Returns:
        Lambda proxy response. Every response carries the CORS headers.
    """
    # 1. Answer CORS preflight requests
    method = get_http_method(event)
    if method == "OPTIONS":
        logger.debug("Returning CORS preflight response")
        return create_preflight_response()

    # 2. Validate the request
    try:
        chat_request = process_event_data(event)
    except ValidationError as e:
        logger.error(f"Invalid request body: {e}")
        return create_error_response(400, str(e))

    user_message = chat_request.latest_content
    logger.info(f"Processing chat request with {len(chat_request.messages)} message(s)")
    logger.debug(f"User message: {user_message}")

    # 3. Run the assistant
    try:
        settings = get_settings()
        if not settings.assistant_id:
            raise ConfigurationError("ASSISTANT_ID environment variable is not set")

        outcome = run_assistant(
            get_assistant(),
            settings.assistant_id,
            user_message,
            poll_interval=settings.poll_interval,
            max_wait_seconds=settings.max_wait_seconds,
            cancel_event=cancel_event,
        )
    except ChatError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return create_error_response(e.status_code, str(e))
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return create_error_response(500, str(e))

    # 4. Return the response
    logger.info(f"Assistant response received (thread {outcome.thread_id}, run {outcome.run_id})")
    logger.debug(f"Assistant response: {outcome.reply}")
    return create_json_response(200, {"response": outcome.reply})
