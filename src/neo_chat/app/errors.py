"""
Typed errors raised by the chat proxy.

Each error carries the HTTP status code the request handler reports it with.
Only `ValidationError` is a client error; everything else is a 500.
"""


class ChatError(Exception):
    """Base class for chat proxy errors."""

    status_code: int = 500


class ValidationError(ChatError):
    status_code = 400


class ConfigurationError(ChatError):
    pass


class UpstreamUnavailable(ChatError):
    """A call to OpenAI or AWS failed."""


class SecretNotFound(ChatError):
    pass


class SecretAccessDenied(ChatError):
    pass


class RunFailed(ChatError):
    """The assistant run ended in a failure status."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or "Unknown error"
        super().__init__(f"Assistant run failed: {self.reason}")


class RunTimeout(ChatError):
    pass


class RequestCancelled(ChatError):
    """The caller went away while the run was being polled."""
