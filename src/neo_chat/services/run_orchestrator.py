import math
import threading
import time
from collections.abc import Callable
from typing import Protocol

from neo_chat.app.config import (
    DEFAULT_MAX_WAIT_SECONDS,
    DEFAULT_POLL_INTERVAL,
    LOG_LEVEL,
    LOGGER_NAME,
)
from neo_chat.app.errors import (
    ConfigurationError,
    RequestCancelled,
    RunFailed,
    RunTimeout,
    UpstreamUnavailable,
    ValidationError,
)
from neo_chat.infrastructure.data_models import RunOutcome, RunStatus
from neo_chat.infrastructure.platform_manager import create_logger

logger = create_logger(logger_name=LOGGER_NAME, log_level=LOG_LEVEL)

COMPLETED = "completed"
FAILED_STATUSES = frozenset({"failed", "cancelled", "expired", "incomplete"})
REQUIRES_ACTION = "requires_action"


class AssistantClient(Protocol):
    def create_thread(self) -> str: ...

    def add_user_message(self, thread_id: str, content: str) -> str: ...

    def create_run(self, thread_id: str, assistant_id: str) -> str: ...

    def retrieve_run(self, thread_id: str, run_id: str) -> RunStatus: ...

    def latest_message_text(self, thread_id: str) -> str | None: ...


def _pause(
    seconds: float,
    cancel_event: threading.Event | None,
    sleep: Callable[[float], None],
) -> None:
    """Sleep between polls. Returns early, raising RequestCancelled, if the event is set."""
    if cancel_event is None:
        sleep(seconds)
        return
    if cancel_event.wait(seconds):
        raise RequestCancelled("Request cancelled while waiting for the assistant run")


def wait_for_run(
    assistant: AssistantClient,
    thread_id: str,
    run_id: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Poll the run until it completes. Returns the number of status polls made.

    Raises:
        RunFailed: If the run ends in a failure status or needs tool outputs.
        RunTimeout: If the run is still pending after `max_wait_seconds`.
        RequestCancelled: If `cancel_event` is set between polls.
    """
    if not math.isfinite(max_wait_seconds) or max_wait_seconds <= 0:
        raise ConfigurationError(f"Invalid polling budget: {max_wait_seconds!r}")

    started = clock()
    polls = 0
    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelled("Request cancelled while waiting for the assistant run")

        run = assistant.retrieve_run(thread_id, run_id)
        polls += 1

        if run.status == COMPLETED:
            return polls
        if run.status in FAILED_STATUSES:
            logger.error(f"Run {run_id} ended with status {run.status}: {run.error_message}")
            raise RunFailed(run.error_message)
        if run.status == REQUIRES_ACTION:
            logger.error(f"Run {run_id} requires tool outputs")
            raise RunFailed("run requires tool outputs, which are not supported")

        logger.info(f"Run status: {run.status}")
        elapsed = clock() - started
        if elapsed >= max_wait_seconds:
            raise RunTimeout(
                f"Assistant run did not complete within {max_wait_seconds:g} seconds "
                + f"(last status: {run.status})"
            )
        _pause(poll_interval, cancel_event, sleep)


def run_assistant(
    assistant: AssistantClient,
    assistant_id: str,
    user_message: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> RunOutcome:
    """
    Send one user message to the assistant and wait for its reply.

    A new thread and run are created on every call; nothing is reused or cleaned up.

    Args:
        assistant: The OpenAI Assistants client.
        assistant_id: The assistant to run.
        user_message: The user's message.
        poll_interval: Seconds to sleep between run status polls.
        max_wait_seconds: Polling budget before giving up with RunTimeout.
        cancel_event: Set by the caller to stop polling. The remote run is not cancelled.
        sleep, clock: Injected for tests.

    Returns:
        RunOutcome with the reply text.

    Raises:
        ConfigurationError, ValidationError, UpstreamUnavailable, RunFailed, RunTimeout,
        RequestCancelled
    """
    if not assistant_id:
        raise ConfigurationError("ASSISTANT_ID environment variable is not set")
    if not user_message or not user_message.strip():
        raise ValidationError("User message must not be empty")

    thread_id = assistant.create_thread()
    logger.info(f"Thread created: {thread_id}")

    assistant.add_user_message(thread_id, user_message)
    logger.debug(f"User message added to thread {thread_id}")

    run_id = assistant.create_run(thread_id, assistant_id)
    logger.info(f"Run created: {run_id}")

    polls = wait_for_run(
        assistant,
        thread_id,
        run_id,
        poll_interval=poll_interval,
        max_wait_seconds=max_wait_seconds,
        cancel_event=cancel_event,
        sleep=sleep,
        clock=clock,
    )
    logger.info(f"Run {run_id} completed after {polls} status poll(s)")

    reply = assistant.latest_message_text(thread_id)
    if not reply:
        raise UpstreamUnavailable("Assistant returned no message")

    return RunOutcome(thread_id=thread_id, run_id=run_id, reply=reply, polls=polls)
