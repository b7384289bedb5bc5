"""Direct chat-completion executor for OpenAI-compatible HTTP APIs."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from ..errors import BackendError
from . import BaseExecutor, Capabilities, ExecutionResult, Usage

log = logging.getLogger(__name__)


class ApiExecutor(BaseExecutor):
    """Two-message, non-streaming chat completion against one provider client."""

    name = "api"
    capabilities = Capabilities(is_cli=False, supports_threads=False, supports_file_refs=False)

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def _execute(self, prompt, model, system_prompt, file_paths, thread_id):
        if file_paths:
            log.warning(
                "File paths were provided but are not supported by the API executor "
                "for model %s. They will be ignored.",
                model,
            )

        completion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        )

        response = completion.choices[0].message.content if completion.choices else None
        if not response:
            raise BackendError(f"No content returned by API for model {model}")

        usage = None
        if completion.usage is not None:
            usage = Usage(
                prompt_tokens=completion.usage.prompt_tokens or 0,
                completion_tokens=completion.usage.completion_tokens or 0,
            )
        return ExecutionResult(response=response, usage=usage)
