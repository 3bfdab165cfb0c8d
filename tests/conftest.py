"""
Shared fixtures for the chat proxy tests.

Nothing here talks to OpenAI or AWS: the assistant client is replaced by
`FakeAssistant`, and the environment is reset around every test.
"""

import json
from typing import Any

import pytest
from neo_chat.app.config import reset_settings
from neo_chat.infrastructure.data_models import RunStatus
from neo_chat.services.assistant_service import reset_assistant

CHAT_ENV_VARS = (
    "ASSISTANT_ID",
    "OPENAI_API_KEY",
    "ORGANIZATION_ID",
    "PORT",
    "NEO_CHAT_SECRETS_PATH",
    "AWS_REGION",
    "RUN_POLL_INTERVAL",
    "RUN_MAX_WAIT_SECONDS",
)


class FakeAssistant:
    """In-memory stand-in for OpenAIAssistant that replays a list of run statuses."""

    def __init__(
        self,
        statuses: tuple[str, ...] = ("completed",),
        reply: str | None = "Hello Nick, here is your press release.",
        error_message: str | None = None,
    ) -> None:
        self.statuses = list(statuses)
        self.reply = reply
        self.error_message = error_message
        self.threads: list[str] = []
        self.messages: list[tuple[str, str]] = []
        self.runs: list[tuple[str, str]] = []
        self.polls = 0

    def create_thread(self) -> str:
        thread_id = f"thread_{len(self.threads) + 1}"
        self.threads.append(thread_id)
        return thread_id

    def add_user_message(self, thread_id: str, content: str) -> str:
        self.messages.append((thread_id, content))
        return f"msg_{len(self.messages)}"

    def create_run(self, thread_id: str, assistant_id: str) -> str:
        self.runs.append((thread_id, assistant_id))
        return f"run_{len(self.runs)}"

    def retrieve_run(self, thread_id: str, run_id: str) -> RunStatus:
        status = self.statuses[min(self.polls, len(self.statuses) - 1)]
        self.polls += 1
        error_message = self.error_message if status == "failed" else None
        return RunStatus(run_id=run_id, status=status, error_message=error_message)

    def latest_message_text(self, thread_id: str) -> str | None:
        return self.reply


# ===== ENVIRONMENT =====


@pytest.fixture(autouse=True)
def chat_env(monkeypatch):
    """A clean, fully configured environment with fast polling."""
    for name in CHAT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ASSISTANT_ID", "asst_test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("RUN_POLL_INTERVAL", "0.001")
    reset_settings()
    reset_assistant()
    yield monkeypatch
    reset_settings()
    reset_assistant()


# ===== ASSISTANT FIXTURES =====


@pytest.fixture
def fake_assistant() -> FakeAssistant:
    return FakeAssistant()


@pytest.fixture
def make_assistant():
    """Factory for FakeAssistant with custom statuses and reply."""
    return FakeAssistant


# ===== EVENT FIXTURES =====


@pytest.fixture
def sample_messages() -> list[dict[str, str]]:
    return [
        {"role": "user", "content": "Write a press release about our launch."},
        {"role": "assistant", "content": "Sure, what is the product?"},
        {"role": "user", "content": "A marketing chatbot called Neo."},
    ]


def build_event(body: Any, method: str = "POST") -> dict[str, Any]:
    """Build an API Gateway (HTTP API) style event."""
    if isinstance(body, dict | list):
        body = json.dumps(body)
    return {
        "body": body,
        "isBase64Encoded": False,
        "headers": {"content-type": "application/json"},
        "requestContext": {"http": {"method": method, "path": "/chat"}},
    }


@pytest.fixture
def make_event():
    return build_event
