import json
from typing import Any

from neo_chat.app.errors import ValidationError
from neo_chat.infrastructure.data_models import MESSAGE_ROLES, USER_ROLE, ChatRequest, Message


def get_http_method(event: dict[str, Any]) -> str:
    """HTTP method of an API Gateway event (HTTP API v2 or REST API v1 format)."""
    request_context = event.get("requestContext") or {}
    method = (request_context.get("http") or {}).get("method")
    if not method:
        method = event.get("httpMethod") or ""
    return str(method).upper()


def parse_body(event: dict[str, Any]) -> dict[str, Any]:
    """Parse the event body into a dict."""
    body_raw = event.get("body")

    # API Gateway sends the body as a string, the local server as bytes and tests as a dict
    if isinstance(body_raw, dict):
        return body_raw
    if body_raw is None or body_raw in ("", b""):
        raise ValidationError("Request body is required")
    if not isinstance(body_raw, str | bytes):
        raise ValidationError("Request body must be JSON")

    try:
        if isinstance(body_raw, bytes):
            body_raw = body_raw.decode("utf-8")
        body_json = json.loads(body_raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e

    if not isinstance(body_json, dict):
        raise ValidationError("Request body must be a JSON object")
    return body_json


def _parse_message(index: int, item: Any) -> Message:
    if not isinstance(item, dict):
        raise ValidationError(f"Message {index} must be an object")

    role = item.get("role", USER_ROLE)
    if role not in MESSAGE_ROLES:
        raise ValidationError(f"Message {index} has an invalid role: {role!r}")

    content = item.get("content")
    if not isinstance(content, str):
        raise ValidationError(f"Message {index} must have string content")

    return Message(role=role, content=content)


def validate_chat_request(body_json: dict[str, Any]) -> ChatRequest:
    """
    Build a ChatRequest from the parsed body.

    Accepts `{"messages": [{"role": ..., "content": ...}, ...]}`, and the older single prompt
    form `{"prompt": "..."}` which is treated as a one-message conversation.
    """
    messages_raw = body_json.get("messages")
    if messages_raw is None and isinstance(body_json.get("prompt"), str):
        messages_raw = [{"role": USER_ROLE, "content": body_json["prompt"]}]

    if not isinstance(messages_raw, list) or not messages_raw:
        raise ValidationError("Messages array is required and must not be empty")

    messages = tuple(_parse_message(i, item) for i, item in enumerate(messages_raw))

    if not messages[-1].content.strip():
        raise ValidationError("The last message must have non-empty content")

    return ChatRequest(messages=messages)


def process_event_data(event: dict[str, Any]) -> ChatRequest:
    """Parse and validate the chat request carried by the event."""
    return validate_chat_request(parse_body(event))
