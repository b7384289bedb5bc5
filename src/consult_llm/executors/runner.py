"""Spawn a CLI process and collect its output."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from asyncio.subprocess import Process
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import BackendError, ParseError, SpawnError

log = logging.getLogger(__name__)

STDOUT_LIMIT = 10 * 1024 * 1024
TERMINATE_GRACE = 0.5
PREVIEW_LENGTH = 100


@dataclass
class CliResult:
    """Outcome of one finished child process."""

    stdout: str
    stderr: str
    exit_code: int | None
    duration: float


def _preview(args: list[str]) -> str:
    if not args:
        return ""
    last = args[-1]
    return last if len(last) <= PREVIEW_LENGTH else last[:PREVIEW_LENGTH] + "..."


async def _terminate(process: Process) -> None:
    """Terminate, then kill if the child ignores SIGTERM."""
    with contextlib.suppress(ProcessLookupError):
        process.terminate()
    try:
        await asyncio.wait_for(process.wait(), timeout=TERMINATE_GRACE)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()


async def _collect(
    process: Process, on_line: Callable[[str], None] | None
) -> tuple[str, str]:
    assert process.stdout is not None and process.stderr is not None

    if on_line is None:
        out, err = await process.communicate()
        return out.decode(errors="replace"), err.decode(errors="replace")

    stderr_task = asyncio.create_task(process.stderr.read())
    try:
        while True:
            try:
                raw = await process.stdout.readline()
            except ValueError as exc:
                raise ParseError(f"CLI output line exceeds {STDOUT_LIMIT} bytes") from exc
            if not raw:
                break
            on_line(raw.decode(errors="replace").rstrip("\r\n"))
        err = await stderr_task
    finally:
        if not stderr_task.done():
            stderr_task.cancel()
    await process.wait()
    return "", err.decode(errors="replace")


async def run_cli(
    command: str,
    args: list[str],
    *,
    on_line: Callable[[str], None] | None = None,
    timeout: float | None = None,
    cwd: str | None = None,
) -> CliResult:
    """Run ``command`` with ``args`` (never through a shell).

    Buffered by default: all of stdout lands in ``CliResult.stdout``. Passing
    ``on_line`` streams stdout line by line to the callback instead, and
    ``CliResult.stdout`` is left empty.

    A non-zero exit is returned, not raised; callers decide what it means.
    """
    log.debug(
        "Spawning %s CLI: prompt_length=%d preview=%r args=%s",
        command,
        len(args[-1]) if args else 0,
        _preview(args),
        args,
    )
    start = time.monotonic()
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            limit=STDOUT_LIMIT,
        )
    except (OSError, ValueError) as exc:
        log.debug("Failed to spawn %s CLI: %s", command, exc)
        raise SpawnError(command, str(exc)) from exc

    log.debug("%s CLI process spawned, pid=%s", command, process.pid)

    try:
        stdout, stderr = await asyncio.wait_for(_collect(process, on_line), timeout)
    except TimeoutError:
        log.warning("%s CLI timed out after %gs, pid=%s", command, timeout, process.pid)
        raise BackendError(f"{command} CLI timed out after {timeout:g} seconds") from None
    finally:
        if process.returncode is None:
            await _terminate(process)

    duration = time.monotonic() - start
    log.debug(
        "%s CLI process closed: code=%s duration=%dms stdout=%d stderr=%d",
        command,
        process.returncode,
        duration * 1000,
        len(stdout),
        len(stderr),
    )
    return CliResult(
        stdout=stdout, stderr=stderr, exit_code=process.returncode, duration=duration
    )
