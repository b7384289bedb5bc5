"""Prompt context: inlined files and git diffs."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

from .errors import InvalidRequestError

log = logging.getLogger(__name__)

GIT_DIFF_MAX_CHARS = 1024 * 1024


@dataclass
class ContextFile:
    path: str
    content: str


def process_files(files: list[str]) -> list[ContextFile]:
    """Read files for inlining. All paths must exist."""
    resolved = [os.path.abspath(f) for f in files]
    missing = [path for path in resolved if not os.path.exists(path)]
    if missing:
        raise InvalidRequestError(f"Files not found: {', '.join(missing)}")

    context_files = []
    for original, path in zip(files, resolved):
        with open(path, encoding="utf-8", errors="replace") as f:
            context_files.append(ContextFile(path=original, content=f.read()))
    return context_files


def generate_git_diff(repo_path: str | None, files: list[str], base_ref: str = "HEAD") -> str:
    """Diff ``files`` against ``base_ref``. Failures come back as text, not exceptions."""
    try:
        if not files:
            raise ValueError("No files specified for git diff")
        proc = subprocess.run(
            ["git", "diff", base_ref, "--", *files],
            cwd=repo_path or os.getcwd(),
            capture_output=True,
            text=True,
            check=True,
        )
        output = proc.stdout
        if len(output) > GIT_DIFF_MAX_CHARS:
            output = output[:GIT_DIFF_MAX_CHARS]
            log.warning("git diff output truncated to %d characters", GIT_DIFF_MAX_CHARS)
        return output
    except subprocess.CalledProcessError as exc:
        return f"Error generating git diff: {exc.stderr.strip() or exc}"
    except (OSError, ValueError) as exc:
        return f"Error generating git diff: {exc}"


def git_diff_block(diff: str) -> str:
    return f"## Git Diff\n```diff\n{diff}\n```"


def build_prompt(user_prompt: str, files: list[ContextFile], git_diff: str | None = None) -> str:
    """Git diff first, then file contents, then the user prompt."""
    parts: list[str] = []

    if git_diff and git_diff.strip():
        parts.extend(["## Git Diff\n```diff", git_diff, "```\n"])

    if files:
        parts.append("## Relevant Files\n")
        for f in files:
            parts.append(f"### File: {f.path}")
            parts.append("```")
            parts.append(f.content)
            parts.append("```\n")

    parts.append(user_prompt)
    return "\n".join(parts)
