"""Copy text to the system clipboard for web mode."""

from __future__ import annotations

import shutil
import subprocess
import sys

from .errors import ClipboardError


def clipboard_command() -> list[str] | None:
    if sys.platform == "darwin":
        return ["pbcopy"]
    if sys.platform == "win32":
        return ["clip"]
    if shutil.which("wl-copy"):
        return ["wl-copy"]
    if shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard"]
    if shutil.which("xsel"):
        return ["xsel", "--clipboard", "--input"]
    return None


def copy_to_clipboard(text: str) -> None:
    command = clipboard_command()
    if command is None:
        raise ClipboardError(
            "Failed to copy prompt to clipboard: no clipboard tool found "
            "(pbcopy/wl-copy/xclip/xsel)"
        )
    try:
        subprocess.run(
            command,
            input=text.encode("utf-8"),
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ClipboardError(f"Failed to copy prompt to clipboard: {exc}") from exc
