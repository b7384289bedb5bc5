"""MCP stdio server exposing the ``consult_llm`` tool."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Literal

from mcp.server import InitializationOptions, Server
from mcp.server.stdio import stdio_server
from mcp.types import ServerCapabilities, TextContent, Tool, ToolsCapability
from pydantic import BaseModel, Field, ValidationError, field_validator

from . import __version__
from .clipboard import copy_to_clipboard
from .context import build_prompt, generate_git_diff, git_diff_block, process_files
from .errors import ConfigurationError, InvalidRequestError
from .models import ALL_MODELS, FALLBACK_MODEL
from .prompts import get_system_prompt
from .query import query_llm
from .resolver import BackendResolver

log = logging.getLogger(__name__)

TOOL_NAME = "consult_llm"

TOOL_DESCRIPTION = """\
Ask a more powerful AI for help with complex problems. Provide your question in the prompt \
field and always include relevant code files as context.

Be specific about what you want: code implementation, code review, bug analysis, \
architecture advice, etc.

IMPORTANT: Ask neutral, open-ended questions. Avoid suggesting specific solutions or \
alternatives in your prompt as this can bias the analysis. Let the consultant LLM provide \
unbiased recommendations.

For multi-turn conversations with CLI backends (Codex, Gemini CLI, Cursor CLI), the \
response includes a [thread_id:xxx] prefix. Extract this ID and pass it as the thread_id \
parameter in follow-up requests to maintain conversation context."""


class GitDiffArgs(BaseModel):
    repo_path: str | None = Field(
        None, description="Path to git repository (defaults to current working directory)"
    )
    files: list[str] = Field(
        ..., min_length=1, description="Specific files to include in diff"
    )
    base_ref: str = Field(
        "HEAD",
        description='Git reference to compare against (e.g., "HEAD", "main", commit hash)',
    )


class ConsultLlmArgs(BaseModel):
    prompt: str = Field(
        ...,
        description=(
            "Your question or request for the consultant LLM. Ask neutral, open-ended "
            "questions without suggesting specific solutions to avoid biasing the analysis."
        ),
    )
    files: list[str] | None = Field(
        None, description="Array of file paths to include as context."
    )
    model: str | None = Field(
        None,
        description="LLM model to use. Ignored when `web_mode` is true.",
        json_schema_extra={"enum": ALL_MODELS},
    )
    task_mode: Literal["review", "debug", "plan", "create", "general"] = Field(
        "general",
        description=(
            'Controls the system prompt persona: "review" finds bugs and quality problems, '
            '"debug" does root cause analysis, "plan" explores trade-offs and recommends, '
            '"create" writes documentation or designs, "general" defers to the prompt.'
        ),
    )
    web_mode: bool = Field(
        False,
        description=(
            "If true, copy the formatted prompt to the clipboard instead of querying an LLM. "
            "Only use this when the user specifically requests it."
        ),
    )
    thread_id: str | None = Field(
        None,
        description=(
            "Thread/session ID for resuming a conversation. Works with CLI backends. "
            "Returned in the response prefix as [thread_id:xxx]."
        ),
    )
    git_diff: GitDiffArgs | None = Field(
        None, description="Generate git diff output to include as context."
    )

    @field_validator("model")
    @classmethod
    def _known_model(cls, value: str | None) -> str | None:
        if value is not None and value not in ALL_MODELS:
            raise ValueError(
                f"Unsupported model '{value}'. Expected one of: {', '.join(ALL_MODELS)}"
            )
        return value


def parse_args(arguments: Any) -> ConsultLlmArgs:
    try:
        return ConsultLlmArgs.model_validate(arguments or {})
    except ValidationError as exc:
        errors = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidRequestError(f"Invalid request parameters: {errors}") from None


def tool_schema() -> Tool:
    return Tool(
        name=TOOL_NAME,
        description=TOOL_DESCRIPTION,
        inputSchema=ConsultLlmArgs.model_json_schema(),
    )


class ConsultServer:
    """Request handling for the single tool, with a resolver that lives as long as the server."""

    def __init__(self, config: dict, resolver: BackendResolver | None = None):
        self.config = config
        self.resolver = resolver or BackendResolver(config)

    async def handle_consult_llm(self, arguments: Any) -> str:
        log.info("TOOL CALL: %s\nArguments: %s", TOOL_NAME, json.dumps(arguments, indent=2))
        args = parse_args(arguments)
        model = args.model or self.config.get("default_model") or FALLBACK_MODEL

        diff = None
        if args.git_diff:
            diff = generate_git_diff(
                args.git_diff.repo_path, args.git_diff.files, args.git_diff.base_ref
            )

        if args.web_mode:
            prompt = build_prompt(args.prompt, process_files(args.files or []), diff)
            log.info("PROMPT (web mode):\n%s", prompt)
            return self._copy_for_web(prompt, args.task_mode)

        executor = self.resolver.resolve(model)
        if args.thread_id and not executor.capabilities.supports_threads:
            raise ConfigurationError(
                f"thread_id is not supported by the configured backend for model {model}"
            )

        file_paths = None
        if executor.capabilities.supports_file_refs:
            file_paths = [os.path.abspath(f) for f in args.files] if args.files else None
            prompt = f"{git_diff_block(diff)}\n\n{args.prompt}" if diff else args.prompt
        else:
            prompt = build_prompt(args.prompt, process_files(args.files or []), diff)

        log.info("PROMPT (model: %s):\n%s", model, prompt)
        result = await query_llm(
            prompt, model, executor, file_paths, args.thread_id, args.task_mode
        )
        log.info("RESPONSE (model: %s):\n%s\n%s", model, result.response, result.cost_info)

        if result.thread_id:
            return f"[thread_id:{result.thread_id}]\n\n{result.response}"
        return result.response

    def _copy_for_web(self, prompt: str, task_mode: str) -> str:
        system_prompt = get_system_prompt(False, task_mode)
        copy_to_clipboard(f"# System Prompt\n\n{system_prompt}\n\n# User Prompt\n\n{prompt}")
        return (
            "✓ Prompt copied to clipboard!\n\n"
            "Please paste it into your browser-based LLM service and share the response "
            "here before I proceed with any implementation."
        )

    def build(self) -> Server:
        server = Server(TOOL_NAME)

        @server.list_tools()
        async def list_tools() -> list[Tool]:
            return [tool_schema()]

        @server.call_tool()
        async def call_tool(name: str, arguments: dict) -> list[TextContent]:
            if name != TOOL_NAME:
                raise ValueError(f"Unknown tool: {name}")
            try:
                text = await self.handle_consult_llm(arguments)
            except Exception as exc:
                log.error("Error processing %s request: %s", name, exc, exc_info=True)
                raise RuntimeError(f"LLM query failed: {exc}") from exc
            return [TextContent(type="text", text=text)]

        return server

    async def run(self) -> None:
        server = self.build()
        init_options = InitializationOptions(
            server_name=TOOL_NAME,
            server_version=__version__,
            capabilities=ServerCapabilities(tools=ToolsCapability()),
        )
        log.info("MCP SERVER STARTED - consult-llm-mcp v%s", __version__)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, init_options)
