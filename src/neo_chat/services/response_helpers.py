import json
from typing import Any

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "OPTIONS,POST",
}

BAD_REQUEST = "Bad Request"
INTERNAL_SERVER_ERROR = "Internal server error"


def create_response(
    status_code: int, body: str, content_type: str = "application/json"
) -> dict[str, Any]:
    """
    Create a standard Lambda proxy response. Every response carries the CORS headers.
    """
    return {
        "statusCode": status_code,
        "body": body,
        "headers": {"Content-Type": content_type, **CORS_HEADERS},
        "isBase64Encoded": False,
    }


def create_json_response(status_code: int, data: dict[str, Any]) -> dict[str, Any]:
    return create_response(status_code, json.dumps(data))


def create_preflight_response() -> dict[str, Any]:
    """Response to a CORS preflight (OPTIONS) request: 200 and no body."""
    return create_response(200, "")


def create_error_response(status_code: int, details: str) -> dict[str, Any]:
    error = BAD_REQUEST if status_code == 400 else INTERNAL_SERVER_ERROR
    return create_json_response(status_code, {"error": error, "details": details})
