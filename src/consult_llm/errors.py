"""Error taxonomy shared by the resolver, executors and tool layer."""

from __future__ import annotations

OUTPUT_SNIPPET_LIMIT = 200


def truncate(text: str, limit: int = OUTPUT_SNIPPET_LIMIT) -> str:
    """Bound raw CLI output before it goes into an error message."""
    return text if len(text) <= limit else text[:limit] + "..."


class ConsultLlmError(Exception):
    """Base class for every error raised by consult-llm."""


class ConfigurationError(ConsultLlmError):
    """Missing credential, unknown provider, or a request the backend cannot honor."""


class InvalidRequestError(ConsultLlmError):
    """Tool arguments failed validation."""


class SpawnError(ConsultLlmError):
    """A CLI executable could not be launched."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(
            f"Failed to spawn {command} CLI. Is it installed and on PATH? Error: {reason}"
        )


class ParseError(ConsultLlmError):
    """CLI output did not have the expected shape or lacked a response."""


class BackendError(ConsultLlmError):
    """The backend ran but reported failure (non-zero exit, empty API content)."""

    def __init__(self, message: str, *, exit_code: int | None = None, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)


class QuotaExceededError(BackendError):
    """The backend refused the request because a usage quota ran out."""


class ClipboardError(ConsultLlmError):
    """Web mode could not place the prompt on the clipboard."""
