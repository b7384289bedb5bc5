"""Tests for model-to-executor resolution and the provider-family rule."""

from __future__ import annotations

import pytest

from consult_llm.clients import ClientFactory
from consult_llm.config import load_config
from consult_llm.errors import ConfigurationError
from consult_llm.executors.api import ApiExecutor
from consult_llm.executors.codex import CodexCliExecutor
from consult_llm.executors.cursor import CursorCliExecutor
from consult_llm.executors.gemini import GeminiCliExecutor
from consult_llm.models import ALL_MODELS, provider_for_model
from consult_llm.resolver import BackendResolver


@pytest.mark.parametrize(
    ("model", "family"),
    [
        ("gpt-5.2", "openai"),
        ("gpt-5.3-codex", "openai"),
        ("o3", "openai"),
        ("gemini-2.5-pro", "gemini"),
        ("gemini-3.1-pro-preview", "gemini"),
        ("deepseek-reasoner", "deepseek"),
    ],
)
def test_provider_for_model(model: str, family: str) -> None:
    assert provider_for_model(model) == family


def test_every_catalog_model_has_a_family() -> None:
    for model in ALL_MODELS:
        provider_for_model(model)


def test_unknown_model_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="Unable to determine LLM provider"):
        provider_for_model("llama-3")


def test_resolution_is_deterministic_and_cached(config: dict) -> None:
    resolver = BackendResolver(config)

    first = resolver.resolve("gpt-5.2")
    second = resolver.resolve("gpt-5.2")

    assert isinstance(first, ApiExecutor)
    assert first is second


def test_models_sharing_a_backend_get_their_own_entries(config: dict) -> None:
    resolver = BackendResolver(config)

    assert resolver.resolve("gpt-5.2") is not resolver.resolve("o3")


def test_backend_change_is_never_served_a_stale_executor(config: dict) -> None:
    resolver = BackendResolver(config)
    api_executor = resolver.resolve("gemini-2.5-pro")

    config["backends"]["gemini"] = "gemini-cli"
    cli_executor = resolver.resolve("gemini-2.5-pro")

    assert isinstance(api_executor, ApiExecutor)
    assert isinstance(cli_executor, GeminiCliExecutor)


def test_set_backend_evicts_only_that_family(config: dict) -> None:
    resolver = BackendResolver(config)
    openai_executor = resolver.resolve("gpt-5.2")
    gemini_executor = resolver.resolve("gemini-2.5-pro")

    resolver.set_backend("openai", "codex-cli")

    assert isinstance(resolver.resolve("gpt-5.2"), CodexCliExecutor)
    assert resolver.resolve("gemini-2.5-pro") is gemini_executor

    resolver.set_backend("openai", "api")
    assert resolver.resolve("gpt-5.2") is not openai_executor


def test_set_backend_rejects_unsupported_pairs(config: dict) -> None:
    resolver = BackendResolver(config)

    with pytest.raises(ConfigurationError, match="Invalid backend 'gemini-cli' for openai"):
        resolver.set_backend("openai", "gemini-cli")
    with pytest.raises(ConfigurationError, match="Invalid backend 'codex-cli' for deepseek"):
        resolver.set_backend("deepseek", "codex-cli")


def test_missing_api_key_names_the_variable(tmp_path) -> None:
    config = load_config(environ={}, config_file=str(tmp_path / "missing.json"))
    resolver = BackendResolver(config)

    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        resolver.resolve("gpt-5.2")


def test_cli_backends_do_not_need_api_keys(tmp_path) -> None:
    config = load_config(
        environ={"OPENAI_BACKEND": "cursor-cli", "GEMINI_BACKEND": "gemini-cli"},
        config_file=str(tmp_path / "missing.json"),
    )
    resolver = BackendResolver(config)

    assert isinstance(resolver.resolve("gpt-5.2"), CursorCliExecutor)
    assert isinstance(resolver.resolve("gemini-2.5-pro"), GeminiCliExecutor)


def test_cli_executors_carry_configured_settings(config: dict) -> None:
    config["backends"]["openai"] = "codex-cli"
    config["paths"]["codex"] = "/opt/bin/codex"
    config["codex_reasoning_effort"] = "high"
    config["cli_timeout"] = 90.0

    executor = BackendResolver(config).resolve("gpt-5.3-codex")

    assert isinstance(executor, CodexCliExecutor)
    assert executor.path == "/opt/bin/codex"
    assert executor.reasoning_effort == "high"
    assert executor.timeout == 90.0


def test_client_factory_reuses_clients(config: dict) -> None:
    factory = ClientFactory(config)

    assert factory.get_client("openai") is factory.get_client("openai")
    assert factory.get_client("openai") is not factory.get_client("deepseek")
    assert str(factory.get_client("deepseek").base_url).startswith("https://api.deepseek.com")
