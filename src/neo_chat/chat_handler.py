from typing import Any

from neo_chat.app.main import process


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda entry point for the chat proxy."""
    return process(event)
