"""CLI entry point for consult-llm-mcp."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import CONFIG_FILE, LOG_DIR, LOG_FILE, detect_clis, load_config
from .errors import ConfigurationError
from .models import FAMILY_BACKENDS

log = logging.getLogger(__name__)

app = typer.Typer(
    help="consult-llm-mcp - ask a more powerful model for help",
    invoke_without_command=True,
)
# stdout carries the MCP protocol.
console = Console(stderr=True)

_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "openai",
    "mcp",
    "mcp.server",
    "mcp.server.lowlevel.server",
)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Log to stderr and append to ~/.consult-llm-mcp/logs/mcp.log."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))
    except OSError as exc:
        console.print(f"[yellow]Could not open log file {LOG_FILE}: {exc}[/]")

    logging.basicConfig(
        format=_LOG_FORMAT,
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _load_config_or_exit() -> dict:
    try:
        return load_config()
    except ConfigurationError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/]")
        raise typer.Exit(1) from None


# --- Commands ---


@app.command()
def serve():
    """Serve the consult_llm tool over MCP stdio."""
    from .server import ConsultServer

    config = _load_config_or_exit()
    log.info(
        "Configuration: backends=%s default_model=%s reasoning_effort=%s cli_timeout=%s",
        config["backends"],
        config["default_model"],
        config["codex_reasoning_effort"],
        config["cli_timeout"],
    )
    asyncio.run(ConsultServer(config).run())


@app.command("init-prompt")
def init_prompt():
    """Write the default system prompt to ~/.consult-llm-mcp/SYSTEM_PROMPT.md for editing."""
    from .prompts import init_system_prompt

    try:
        path = init_system_prompt()
    except FileExistsError as exc:
        console.print(f"[yellow]System prompt already exists at: {exc}[/]")
        console.print("Remove it first if you want to reinitialize.")
        raise typer.Exit(1) from None
    console.print(f"[green]✓[/] Created system prompt at: {path}")
    console.print("You can now edit this file to customize the system prompt.")


@app.command()
def status():
    """Show configured backends, detected CLIs and API key presence."""
    config = _load_config_or_exit()

    backends = Table(title="Backends", box=None, padding=(0, 2))
    backends.add_column("family", style="bold")
    backends.add_column("backend")
    backends.add_column("api key")
    for family in FAMILY_BACKENDS:
        has_key = bool(config["api_keys"].get(family))
        backends.add_row(
            family,
            config["backends"][family],
            "[green]✓[/]" if has_key else "[dim]✗[/]",
        )

    clis = Table(title="CLIs", box=None, padding=(0, 2))
    clis.add_column("status", width=3)
    clis.add_column("name")
    clis.add_column("path")
    for name, found in detect_clis(config).items():
        path = config["paths"][name]
        if found:
            clis.add_row("[green]✓[/]", name, path)
        else:
            clis.add_row("[red]✗[/]", f"[dim]{name}[/]", f"[dim]{path}[/]")

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="bold")
    summary.add_column("value")
    summary.add_row("Config", CONFIG_FILE)
    summary.add_row("Logs", LOG_FILE)
    summary.add_row("Default model", config["default_model"] or "(fallback)")

    console.print(Panel(summary, title=f"consult-llm-mcp v{__version__}", expand=False))
    console.print(backends)
    console.print(clis)


# --- App setup ---


def _version_callback(value: bool):
    if value:
        print(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=_version_callback, is_eager=True)
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
):
    """consult-llm-mcp - ask a more powerful model for help."""
    setup_logging(debug or os.environ.get("CONSULT_LLM_DEBUG") == "1")
    if ctx.invoked_subcommand is None:
        serve()


def main():
    app()


if __name__ == "__main__":
    main()
