"""Executor abstraction: one contract over API and CLI backends."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import BackendError, ConfigurationError, ParseError
from . import runner
from .runner import CliResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """What an executor can do with a request beyond the prompt itself."""

    is_cli: bool
    supports_threads: bool
    supports_file_refs: bool


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int


@dataclass
class ExecutionResult:
    response: str
    usage: Usage | None = None
    thread_id: str | None = None


class BaseExecutor(ABC):
    """Base class for every backend shape."""

    name: str
    capabilities: Capabilities

    async def execute(
        self,
        prompt: str,
        model: str,
        system_prompt: str,
        file_paths: Sequence[str] | None = None,
        thread_id: str | None = None,
    ) -> ExecutionResult:
        """Submit a prompt and return the model's answer.

        A thread id is only accepted when the executor supports threads; it
        is rejected here, before any process or network activity.
        """
        if thread_id and not self.capabilities.supports_threads:
            raise ConfigurationError(
                f"thread_id is not supported by the configured backend for model {model}"
            )
        return await self._execute(prompt, model, system_prompt, list(file_paths or []), thread_id)

    @abstractmethod
    async def _execute(
        self,
        prompt: str,
        model: str,
        system_prompt: str,
        file_paths: list[str],
        thread_id: str | None,
    ) -> ExecutionResult:
        """Backend-specific execution. ``file_paths`` is always a list."""


def relative_paths(file_paths: Sequence[str]) -> list[str]:
    """Paths relative to the current directory, as CLI agents expect them."""
    return [os.path.relpath(path) for path in file_paths]


class CliExecutor(BaseExecutor):
    """Executor that shells out to a local agent CLI and parses its JSON output."""

    capabilities = Capabilities(is_cli=True, supports_threads=True, supports_file_refs=True)
    display_name: str

    def __init__(
        self,
        path: str,
        *,
        reasoning_effort: str | None = None,
        timeout: float | None = None,
    ):
        self.path = path
        self.reasoning_effort = reasoning_effort
        self.timeout = timeout

    @abstractmethod
    def build_args(
        self,
        prompt: str,
        model: str,
        system_prompt: str,
        file_paths: list[str],
        thread_id: str | None,
    ) -> list[str]:
        """Build the argument vector (without the executable)."""

    @abstractmethod
    def parse_output(self, stdout: str) -> tuple[str | None, str]:
        """Return ``(thread_id, response)`` from the child's stdout."""

    def empty_response_message(self) -> str:
        return f"No response found in {self.display_name} output"

    def classify_failure(self, result: CliResult) -> BackendError:
        """Translate a non-zero exit into a domain error."""
        code = result.exit_code if result.exit_code is not None else -1
        return BackendError(
            f"{self.display_name} exited with code {code}. Error: {result.stderr.strip()}",
            exit_code=result.exit_code,
            stderr=result.stderr,
        )

    def compose_prompt(
        self, prompt: str, system_prompt: str, file_refs: str, thread_id: str | None
    ) -> str:
        """System prompt on fresh turns only; file references on every turn."""
        message = f"{prompt}\n\n{file_refs}" if file_refs else prompt
        return message if thread_id else f"{system_prompt}\n\n{message}"

    async def _execute(self, prompt, model, system_prompt, file_paths, thread_id):
        args = self.build_args(prompt, model, system_prompt, file_paths, thread_id)
        log.info(
            "[%s] Running model=%s resume=%s files=%d",
            self.name,
            model,
            bool(thread_id),
            len(file_paths),
        )
        result = await runner.run_cli(self.path, args, timeout=self.timeout)

        if result.exit_code != 0:
            raise self.classify_failure(result)

        parsed_thread_id, response = self.parse_output(result.stdout)
        if not response:
            raise ParseError(self.empty_response_message())
        return ExecutionResult(
            response=response,
            usage=None,
            thread_id=parsed_thread_id or thread_id,
        )
