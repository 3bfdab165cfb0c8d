"""
Shared data models.
"""

from dataclasses import dataclass

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
SYSTEM_ROLE = "system"
MESSAGE_ROLES = (USER_ROLE, ASSISTANT_ROLE, SYSTEM_ROLE)


@dataclass(frozen=True)
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str


@dataclass(frozen=True)
class ChatRequest:
    """A validated chat request: the conversation as sent by the UI, oldest first."""

    messages: tuple[Message, ...]

    @property
    def latest_content(self) -> str:
        return self.messages[-1].content


@dataclass(frozen=True)
class RunStatus:
    run_id: str
    status: str  # "queued" | "in_progress" | "completed" | "failed" | ...
    error_message: str | None = None


@dataclass(frozen=True)
class RunOutcome:
    thread_id: str
    run_id: str
    reply: str
    polls: int
