# Local server for the chat proxy. Wraps the Lambda handler the way API Gateway does.
# python -m neo_chat.fast_api_server
# uvicorn neo_chat.fast_api_server:app --reload --port 3001
import asyncio
import base64
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Receive, Scope, Send

from neo_chat.app.config import LOG_LEVEL, LOGGER_NAME, get_settings, reset_settings
from neo_chat.app.errors import ChatError
from neo_chat.app.main import process
from neo_chat.infrastructure.platform_manager import create_logger
from neo_chat.services.assistant_service import get_assistant

logger = create_logger(logger_name=LOGGER_NAME, log_level=LOG_LEVEL)

DISCONNECT_CHECK_INTERVAL = 0.5


def _process_response(lambda_resp: dict[str, Any]) -> Response:
    """Convert an AWS Lambda-style proxy response into a FastAPI Response."""
    status_code = lambda_resp.get("statusCode", 200)
    headers = dict(lambda_resp.get("headers", {}))
    content_type = headers.pop("Content-Type", "application/json")
    body = lambda_resp.get("body", "")

    if lambda_resp.get("isBase64Encoded", False):
        body = base64.b64decode(body)

    if status_code == 200 and not body:
        # Preflight: headers only
        return Response(status_code=status_code, headers=headers)
    return Response(content=body, status_code=status_code, headers=headers, media_type=content_type)


def _build_event(body: bytes, request: Request) -> dict[str, Any]:
    """Convert a FastAPI request to a Lambda-style event."""
    return {
        "body": body,
        "isBase64Encoded": False,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params),
        "requestContext": {"http": {"method": request.method, "path": request.url.path}},
    }


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    """Set `cancel_event` once the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.warning(f"Client disconnected: {request.method} {request.url.path}")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_CHECK_INTERVAL)


def check_openai_connection() -> bool:
    """Log credential presence and list assistants as a connection test. Never raises."""
    logger.info("Testing OpenAI connection...")
    try:
        settings = get_settings()
        logger.info(f"Using API Key: {'Present' if settings.openai_api_key else 'Secret store'}")
        organization = "Present" if settings.organization_id else "Missing"
        logger.info(f"Using Organization ID: {organization}")
        count = get_assistant().list_assistants()
    except ChatError as e:
        logger.error(f"OpenAI connection test failed: {e}")
        return False
    logger.info(f"OpenAI connection successful. Found {count} assistants")
    return True


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await run_in_threadpool(check_openai_connection)
    yield


class RequestLoggingMiddleware:
    """
    Log the method and path of every HTTP request.

    Must stay plain ASGI: `receive` has to reach the route unwrapped for
    `_watch_disconnect` to see http.disconnect.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            logger.info(f"{scope['method']} {scope['path']}")
        await self.app(scope, receive, send)


app = FastAPI(title="Neo Chat", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)


# --- route to call the chat proxy ---
@app.post("/chat")
async def chat(request: Request) -> Response:
    body = await request.body()
    event = _build_event(body, request)

    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        lambda_response = await run_in_threadpool(process, event, cancel_event)
    finally:
        cancel_event.set()
        watcher.cancel()
    return _process_response(lambda_response)


@app.options("/chat")
async def chat_preflight(request: Request) -> Response:
    return _process_response(process(_build_event(b"", request)))


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


def main() -> None:
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    reset_settings()
    port = get_settings().port
    logger.info(f"Server running on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
