"""Tests for the CLI process runner, using real child processes."""

from __future__ import annotations

import asyncio
import os
import sys

import pytest

from consult_llm.errors import BackendError, ParseError, SpawnError
from consult_llm.executors import runner
from consult_llm.executors.runner import run_cli


def _python(code: str) -> tuple[str, list[str]]:
    return sys.executable, ["-c", code]


def test_buffered_mode_collects_stdout_and_stderr() -> None:
    command, args = _python("import sys; print('out'); print('err', file=sys.stderr)")
    result = asyncio.run(run_cli(command, args))

    assert result.exit_code == 0
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"
    assert result.duration >= 0


def test_non_zero_exit_is_returned_not_raised() -> None:
    command, args = _python("import sys; sys.stderr.write('bad thing'); sys.exit(3)")
    result = asyncio.run(run_cli(command, args))

    assert result.exit_code == 3
    assert "bad thing" in result.stderr


def test_arguments_are_not_shell_interpreted() -> None:
    hostile = "a b; echo injected $(whoami) | cat"
    command, args = _python("import sys; sys.stdout.write(sys.argv[1])")
    result = asyncio.run(run_cli(command, [*args, hostile]))

    assert result.stdout == hostile


def test_streaming_mode_invokes_callback_per_line() -> None:
    lines: list[str] = []
    command, args = _python("print('first'); print('second'); print('third')")
    result = asyncio.run(run_cli(command, args, on_line=lines.append))

    assert lines == ["first", "second", "third"]
    assert result.stdout == ""
    assert result.exit_code == 0


def test_missing_executable_raises_spawn_error() -> None:
    with pytest.raises(SpawnError) as excinfo:
        asyncio.run(run_cli("consult-llm-no-such-binary", ["--help"]))

    message = str(excinfo.value)
    assert "consult-llm-no-such-binary" in message
    assert "Is it installed and on PATH?" in message


def test_timeout_terminates_child_and_raises_backend_error() -> None:
    command, args = _python("import time; time.sleep(30)")

    with pytest.raises(BackendError, match="timed out after 0.2 seconds"):
        asyncio.run(run_cli(command, args, timeout=0.2))


def test_cancellation_terminates_child() -> None:
    pids: list[int] = []
    command, args = _python("import os, time; print(os.getpid(), flush=True); time.sleep(30)")

    async def scenario() -> None:
        task = asyncio.create_task(
            run_cli(command, args, on_line=lambda line: pids.append(int(line)))
        )
        while not pids:
            await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    with pytest.raises(ProcessLookupError):
        os.kill(pids[0], 0)


def test_nul_in_arguments_raises_spawn_error() -> None:
    command, args = _python("pass")

    with pytest.raises(SpawnError, match="Failed to spawn"):
        asyncio.run(run_cli(command, [*args, "a\x00b"]))


def test_overlong_streamed_line_raises_parse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(runner, "STDOUT_LIMIT", 1024)
    command, args = _python(
        "import sys, time; sys.stdout.write('x' * 8192); sys.stdout.flush(); time.sleep(30)"
    )

    with pytest.raises(ParseError, match="exceeds 1024 bytes"):
        asyncio.run(run_cli(command, args, on_line=lambda line: None))
