"""Run one consultation through an executor."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .executors import BaseExecutor
from .pricing import format_cost_info
from .prompts import get_system_prompt

log = logging.getLogger(__name__)


@dataclass
class QueryResult:
    response: str
    cost_info: str
    thread_id: str | None = None


async def query_llm(
    prompt: str,
    model: str,
    executor: BaseExecutor,
    file_paths: list[str] | None = None,
    thread_id: str | None = None,
    task_mode: str = "general",
) -> QueryResult:
    system_prompt = get_system_prompt(executor.capabilities.is_cli, task_mode)
    result = await executor.execute(prompt, model, system_prompt, file_paths, thread_id)
    cost_info = format_cost_info(result.usage, model)
    log.info("[%s] %s: %s", executor.name, model, cost_info)
    return QueryResult(response=result.response, cost_info=cost_info, thread_id=result.thread_id)
