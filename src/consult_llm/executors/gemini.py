"""Gemini CLI executor: one JSON document per run, resumable by session id."""

from __future__ import annotations

import json
import logging

from ..errors import BackendError, ParseError, QuotaExceededError, truncate
from . import CliExecutor, relative_paths
from .runner import CliResult

log = logging.getLogger(__name__)

QUOTA_MARKER = "RESOURCE_EXHAUSTED"


def parse_gemini_json(output: str) -> tuple[str | None, str]:
    """Extract ``(session_id, response)`` from ``gemini -o json`` output."""
    try:
        parsed = json.loads(output)
    except json.JSONDecodeError:
        log.debug("Failed to parse Gemini JSON output: %s", output)
        raise ParseError(
            f"Failed to parse Gemini JSON output: {truncate(output)}"
        ) from None
    if not isinstance(parsed, dict):
        raise ParseError(f"Failed to parse Gemini JSON output: {truncate(output)}")

    session_id = parsed.get("session_id")
    response = parsed.get("response")
    return (
        session_id if isinstance(session_id, str) and session_id else None,
        response if isinstance(response, str) else "",
    )


def classify_gemini_failure(result: CliResult) -> BackendError | None:
    """Special-case Gemini stderr conventions. None means no special case applies."""
    stderr = result.stderr.strip()
    if QUOTA_MARKER in result.stderr:
        return QuotaExceededError(
            "Gemini quota exceeded. Consider using a cheaper model such as "
            f"gemini-2.5-flash. Error: {stderr}",
            exit_code=result.exit_code,
            stderr=result.stderr,
        )
    return None


class GeminiCliExecutor(CliExecutor):
    name = "gemini-cli"
    display_name = "Gemini CLI"

    def build_args(self, prompt, model, system_prompt, file_paths, thread_id):
        refs = " ".join(f"@{path}" for path in relative_paths(file_paths))
        message = self.compose_prompt(
            prompt, system_prompt, f"Files: {refs}" if refs else "", thread_id
        )
        args = ["-m", model, "-o", "json"]
        if thread_id:
            args.extend(["-r", thread_id])
        args.extend(["-p", message])
        return args

    def parse_output(self, stdout):
        return parse_gemini_json(stdout)

    def classify_failure(self, result):
        return classify_gemini_failure(result) or super().classify_failure(result)
