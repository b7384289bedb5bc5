"""Codex CLI executor: JSON-Lines event stream from ``codex exec --json``."""

from __future__ import annotations

import json
import logging

from . import CliExecutor, relative_paths

log = logging.getLogger(__name__)


def parse_codex_jsonl(output: str) -> tuple[str | None, str]:
    """Extract ``(thread_id, response)`` from a Codex event stream.

    Lines that are not JSON objects (Codex interleaves plain log lines, e.g.
    on resume) and events of other types are skipped. Every completed
    ``agent_message`` contributes its text, joined by newlines in order.
    """
    thread_id = None
    messages: list[str] = []

    for line in output.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        try:
            event = json.loads(stripped)
        except json.JSONDecodeError:
            log.debug("Skipped non-JSON line: %s", stripped[:200])
            continue
        if not isinstance(event, dict):
            continue

        event_type = event.get("type")
        if event_type == "thread.started":
            value = event.get("thread_id")
            if isinstance(value, str) and value:
                thread_id = value
        elif event_type == "item.completed":
            item = event.get("item")
            if not isinstance(item, dict) or item.get("type") != "agent_message":
                continue
            text = item.get("text")
            if isinstance(text, str) and text:
                messages.append(text)

    return thread_id, "\n".join(messages)


class CodexCliExecutor(CliExecutor):
    name = "codex-cli"
    display_name = "Codex CLI"

    def build_args(self, prompt, model, system_prompt, file_paths, thread_id):
        refs = " ".join(f"@{path}" for path in relative_paths(file_paths))
        message = self.compose_prompt(
            prompt, system_prompt, f"Files: {refs}" if refs else "", thread_id
        )

        args = ["exec"]
        if thread_id:
            args.append("resume")
        args.extend(["--json", "--skip-git-repo-check"])
        if self.reasoning_effort:
            args.extend(["-c", f'model_reasoning_effort="{self.reasoning_effort}"'])
        args.extend(["-m", model])
        if thread_id:
            args.append(thread_id)
        args.append(message)
        return args

    def parse_output(self, stdout):
        return parse_codex_jsonl(stdout)

    def empty_response_message(self):
        return "Codex produced no message: no agent_message found in Codex JSONL output"
