"""Cursor agent CLI executor: ask-only mode, prompt as the last positional argument."""

from __future__ import annotations

import json
import logging

from ..errors import ParseError, truncate
from . import CliExecutor, relative_paths

log = logging.getLogger(__name__)


def parse_cursor_json(output: str) -> tuple[str | None, str]:
    """Extract ``(session_id, result)`` from ``cursor-agent --output-format json``."""
    try:
        parsed = json.loads(output)
    except json.JSONDecodeError:
        log.debug("Failed to parse Cursor CLI JSON output: %s", output)
        raise ParseError(
            f"Failed to parse Cursor CLI JSON output: {truncate(output)}"
        ) from None
    if not isinstance(parsed, dict):
        raise ParseError(f"Failed to parse Cursor CLI JSON output: {truncate(output)}")

    session_id = parsed.get("session_id")
    result = parsed.get("result")
    return (
        session_id if isinstance(session_id, str) and session_id else None,
        result if isinstance(result, str) else "",
    )


def cursor_model_name(model: str, reasoning_effort: str | None) -> str:
    """Map a catalog model id to the name cursor-agent understands.

    cursor-agent has no ``-preview`` suffixes and encodes reasoning effort in
    the model name for codex models, e.g. ``gpt-5.3-codex-high``.
    """
    name = model.replace("-preview", "")
    if reasoning_effort and "-codex" in name:
        name = f"{name}-{reasoning_effort}"
    return name


class CursorCliExecutor(CliExecutor):
    name = "cursor-cli"
    display_name = "Cursor CLI"

    def build_args(self, prompt, model, system_prompt, file_paths, thread_id):
        file_refs = ""
        if file_paths:
            listing = "\n".join(f"- {path}" for path in relative_paths(file_paths))
            file_refs = f"Please read the following files for context:\n{listing}"
        message = self.compose_prompt(prompt, system_prompt, file_refs, thread_id)

        args = [
            "--print",
            "--trust",
            "--output-format",
            "json",
            "--mode",
            "ask",
            "--model",
            cursor_model_name(model, self.reasoning_effort),
        ]
        if thread_id:
            args.extend(["--resume", thread_id])
        args.append(message)
        return args

    def parse_output(self, stdout):
        return parse_cursor_json(stdout)

    def empty_response_message(self):
        return "No result found in Cursor CLI JSON output"
