from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from openai import OpenAI, OpenAIError

from neo_chat.app.errors import ConfigurationError, UpstreamUnavailable
from neo_chat.infrastructure.data_models import USER_ROLE, RunStatus

ASSISTANTS_BETA_HEADER = {"OpenAI-Beta": "assistants=v2"}

T = TypeVar("T")


@contextmanager
def _upstream(action: str) -> Iterator[None]:
    """Convert OpenAI SDK errors raised while performing `action` to UpstreamUnavailable."""
    try:
        yield
    except OpenAIError as e:
        raise UpstreamUnavailable(f"OpenAI {action} failed: {e}") from e


def _message_text(message: Any) -> str | None:
    """Return the first text block of an OpenAI thread message."""
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", "") == "text":
            text = getattr(block, "text", None)
            value = getattr(text, "value", None)
            if isinstance(value, str):
                return value
    return None


class OpenAIAssistant:
    """
    A client for the OpenAI Assistants API (threads, messages and runs).

    Every method maps to a single API call. SDK errors are raised as UpstreamUnavailable;
    nothing is retried here.
    """

    def __init__(self, api_key: str, organization: str | None = None) -> None:
        """
        Initialize the OpenAI client.

        Args:
            api_key: The OpenAI API key
            organization: Optional OpenAI organization id

        Raises:
            ConfigurationError: If the API key is empty
        """
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")

        self.client: OpenAI = OpenAI(
            api_key=api_key,
            organization=organization,
            default_headers=ASSISTANTS_BETA_HEADER,
        )

    def _call(self, action: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with _upstream(action):
            return fn(*args, **kwargs)

    def create_thread(self) -> str:
        thread = self._call("thread creation", self.client.beta.threads.create)
        return str(thread.id)

    def add_user_message(self, thread_id: str, content: str) -> str:
        message = self._call(
            "message creation",
            self.client.beta.threads.messages.create,
            thread_id=thread_id,
            role=USER_ROLE,
            content=content,
        )
        return str(message.id)

    def create_run(self, thread_id: str, assistant_id: str) -> str:
        run = self._call(
            "run creation",
            self.client.beta.threads.runs.create,
            thread_id=thread_id,
            assistant_id=assistant_id,
        )
        return str(run.id)

    def retrieve_run(self, thread_id: str, run_id: str) -> RunStatus:
        run = self._call(
            "run retrieval",
            self.client.beta.threads.runs.retrieve,
            run_id=run_id,
            thread_id=thread_id,
        )
        last_error = getattr(run, "last_error", None)
        return RunStatus(
            run_id=run_id,
            status=str(getattr(run, "status", "")),
            error_message=getattr(last_error, "message", None),
        )

    def latest_message_text(self, thread_id: str) -> str | None:
        """
        Return the text of the most recently added message in the thread.

        Messages are listed newest first.
        """
        page = self._call(
            "message listing",
            self.client.beta.threads.messages.list,
            thread_id=thread_id,
            order="desc",
            limit=1,
        )
        messages = getattr(page, "data", None) or []
        if not messages:
            return None
        return _message_text(messages[0])

    def list_assistants(self) -> int:
        """Return the number of assistants visible to the API key. Used as a connection test."""
        page = self._call("assistant listing", self.client.beta.assistants.list)
        return len(getattr(page, "data", None) or [])
