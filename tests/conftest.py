"""Shared fixtures for the consult-llm test suite."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from consult_llm.config import load_config
from consult_llm.executors import runner
from consult_llm.executors.runner import CliResult

TEST_ENV = {
    "OPENAI_API_KEY": "sk-openai",
    "GEMINI_API_KEY": "gemini-key",
    "DEEPSEEK_API_KEY": "deepseek-key",
}


@pytest.fixture
def config(tmp_path: Path) -> dict:
    return load_config(environ=TEST_ENV, config_file=str(tmp_path / "missing.json"))


class FakeRunner:
    """Stands in for ``run_cli`` and records every invocation."""

    def __init__(self, result: CliResult, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, list[str], dict[str, Any]]] = []

    async def __call__(self, command: str, args: list[str], **kwargs: Any) -> CliResult:
        self.calls.append((command, list(args), kwargs))
        if self.error is not None:
            raise self.error
        return self.result

    @property
    def command(self) -> str:
        return self.calls[-1][0]

    @property
    def args(self) -> list[str]:
        return self.calls[-1][1]


@pytest.fixture
def fake_runner(monkeypatch: pytest.MonkeyPatch):
    def install(
        stdout: str = "",
        stderr: str = "",
        exit_code: int | None = 0,
        error: Exception | None = None,
    ) -> FakeRunner:
        fake = FakeRunner(CliResult(stdout, stderr, exit_code, 0.01), error)
        monkeypatch.setattr(runner, "run_cli", fake)
        return fake

    return install


class FakeCompletions:
    def __init__(self, completion: Any) -> None:
        self.completion = completion
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        return self.completion


def make_completion(content: str | None, usage: tuple[int, int] | None = (10, 1)) -> Any:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=(
            SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1])
            if usage
            else None
        ),
    )


def make_client(completion: Any) -> tuple[Any, FakeCompletions]:
    completions = FakeCompletions(completion)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions
