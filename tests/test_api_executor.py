"""Tests for the HTTP chat-completion executor."""

from __future__ import annotations

import asyncio
import logging

import pytest

from consult_llm.errors import BackendError, ConfigurationError
from consult_llm.executors import Usage
from consult_llm.executors.api import ApiExecutor

from conftest import make_client, make_completion


def test_single_turn_completion() -> None:
    client, completions = make_client(make_completion("4", usage=(10, 1)))
    executor = ApiExecutor(client)

    result = asyncio.run(executor.execute("What is 2+2?", "gpt-5.2", "You are helpful."))

    assert result.response == "4"
    assert result.usage == Usage(prompt_tokens=10, completion_tokens=1)
    assert result.thread_id is None
    assert completions.calls == [
        {
            "model": "gpt-5.2",
            "messages": [
                {"role": "system", "content": "You are helpful."},
                {"role": "user", "content": "What is 2+2?"},
            ],
        }
    ]


def test_file_paths_are_ignored_with_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    client, completions = make_client(make_completion("ok"))
    executor = ApiExecutor(client)

    with caplog.at_level(logging.WARNING, logger="consult_llm.executors.api"):
        asyncio.run(executor.execute("q", "gpt-5.2", "sys", ["/tmp/a.py"]))
        asyncio.run(executor.execute("q", "gpt-5.2", "sys"))

    assert "not supported by the API executor" in caplog.text
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1
    assert completions.calls[0] == completions.calls[1]


def test_missing_usage_is_reported_as_none() -> None:
    client, _ = make_client(make_completion("ok", usage=None))

    result = asyncio.run(ApiExecutor(client).execute("q", "gpt-5.2", "sys"))

    assert result.usage is None


@pytest.mark.parametrize("content", [None, ""])
def test_empty_content_is_a_failure(content) -> None:
    client, _ = make_client(make_completion(content))

    with pytest.raises(BackendError, match="No content returned by API for model gpt-5.2"):
        asyncio.run(ApiExecutor(client).execute("q", "gpt-5.2", "sys"))


def test_thread_id_is_rejected_before_any_request() -> None:
    client, completions = make_client(make_completion("ok"))
    executor = ApiExecutor(client)

    with pytest.raises(ConfigurationError, match="thread_id is not supported"):
        asyncio.run(executor.execute("q", "gpt-5.2", "sys", thread_id="t1"))

    assert completions.calls == []


def test_api_executor_capabilities() -> None:
    client, _ = make_client(make_completion("ok"))
    capabilities = ApiExecutor(client).capabilities

    assert not capabilities.is_cli
    assert not capabilities.supports_threads
    assert not capabilities.supports_file_refs
