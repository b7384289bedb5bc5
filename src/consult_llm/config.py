"""Configuration management for consult-llm."""

from __future__ import annotations

import json
import logging
import os
import shutil
from collections.abc import Mapping

from .errors import ConfigurationError
from .models import ALL_MODELS, CODEX_CLI, FAMILY_BACKENDS, GEMINI_CLI

log = logging.getLogger(__name__)

CONFIG_DIR = os.path.expanduser("~/.consult-llm-mcp")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
LOG_DIR = os.path.join(CONFIG_DIR, "logs")
LOG_FILE = os.path.join(LOG_DIR, "mcp.log")

DEFAULT_PATHS = {
    "gemini": "gemini",
    "codex": "codex",
    "cursor": "cursor-agent",
}

REASONING_EFFORTS = ("none", "minimal", "low", "medium", "high", "xhigh")

_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


def api_key_env(provider: str) -> str:
    """Environment variable holding the API key for a provider."""
    return _API_KEY_ENV.get(provider, f"{provider.upper()}_API_KEY")


def migrate_backend_env(
    new_value: str | None,
    old_value: str | None,
    cli_backend: str,
    old_name: str,
    new_name: str,
) -> str | None:
    """Resolve a family backend from the current variable or its legacy *_MODE form.

    The legacy variable only knew ``api`` and ``cli``; ``cli`` maps to the
    family's dedicated CLI backend.
    """
    if new_value:
        return new_value
    if not old_value:
        return None
    log.warning("%s is deprecated, use %s instead", old_name, new_name)
    return cli_backend if old_value == "cli" else old_value


def _env(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None:
        return None
    return value.strip() or None


def _default_config() -> dict:
    return {
        "api_keys": {name: None for name in _API_KEY_ENV},
        "backends": {family: backends[0] for family, backends in FAMILY_BACKENDS.items()},
        "paths": dict(DEFAULT_PATHS),
        "default_model": None,
        "codex_reasoning_effort": None,
        "cli_timeout": None,
    }


def _read_config_file(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
        log.debug("Loaded config from %s", path)
    except Exception:
        log.exception("Failed to load %s, ignoring it", path)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: top-level value is not an object", path)
        return {}
    return data


def _merge(base: dict, override: dict) -> dict:
    """Overlay config file values on the defaults.

    Sections that are objects by default (``api_keys``, ``backends``,
    ``paths``) only accept objects of strings; anything else is logged and
    skipped, leaving the default in place.
    """
    merged = dict(base)
    for key, value in override.items():
        default = merged.get(key)
        if not isinstance(default, dict):
            merged[key] = value
            continue
        if not isinstance(value, dict):
            log.warning("Ignoring %r in config file: expected an object", key)
            continue
        section = dict(default)
        for name, entry in value.items():
            if not isinstance(entry, str):
                log.warning("Ignoring %s.%s in config file: expected a string", key, name)
                continue
            section[name] = entry
        merged[key] = section
    return merged


def _apply_env(config: dict, environ: Mapping[str, str]) -> None:
    for provider in config["api_keys"]:
        key = _env(environ, api_key_env(provider))
        if key:
            config["api_keys"][provider] = key

    openai_backend = migrate_backend_env(
        _env(environ, "OPENAI_BACKEND"),
        _env(environ, "OPENAI_MODE"),
        CODEX_CLI,
        "OPENAI_MODE",
        "OPENAI_BACKEND",
    )
    if openai_backend:
        config["backends"]["openai"] = openai_backend

    gemini_backend = migrate_backend_env(
        _env(environ, "GEMINI_BACKEND"),
        _env(environ, "GEMINI_MODE"),
        GEMINI_CLI,
        "GEMINI_MODE",
        "GEMINI_BACKEND",
    )
    if gemini_backend:
        config["backends"]["gemini"] = gemini_backend

    for name in DEFAULT_PATHS:
        path = _env(environ, f"CONSULT_LLM_{name.upper()}_PATH")
        if path:
            config["paths"][name] = path

    default_model = _env(environ, "CONSULT_LLM_DEFAULT_MODEL")
    if default_model:
        config["default_model"] = default_model

    effort = _env(environ, "CODEX_REASONING_EFFORT")
    if effort:
        config["codex_reasoning_effort"] = effort

    timeout = _env(environ, "CONSULT_LLM_CLI_TIMEOUT")
    if timeout:
        config["cli_timeout"] = timeout


def validate_config(config: dict) -> dict:
    """Check backend choices and scalar settings, normalising where needed."""
    for family, backend in config["backends"].items():
        allowed = FAMILY_BACKENDS.get(family)
        if allowed is None:
            raise ConfigurationError(f"Unknown provider family in backends: {family}")
        if backend not in allowed:
            raise ConfigurationError(
                f"Invalid backend '{backend}' for {family} models. "
                f"Expected one of: {', '.join(allowed)}"
            )

    default_model = config.get("default_model")
    if default_model and default_model not in ALL_MODELS:
        raise ConfigurationError(
            f"Invalid CONSULT_LLM_DEFAULT_MODEL '{default_model}'. "
            f"Expected one of: {', '.join(ALL_MODELS)}"
        )

    effort = config.get("codex_reasoning_effort")
    if effort and effort not in REASONING_EFFORTS:
        raise ConfigurationError(
            f"Invalid CODEX_REASONING_EFFORT '{effort}'. "
            f"Expected one of: {', '.join(REASONING_EFFORTS)}"
        )

    timeout = config.get("cli_timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid CONSULT_LLM_CLI_TIMEOUT '{timeout}': expected a number of seconds"
            ) from None
        config["cli_timeout"] = timeout if timeout > 0 else None

    return config


def load_config(
    environ: Mapping[str, str] | None = None, config_file: str = CONFIG_FILE
) -> dict:
    """Build config from defaults, ~/.consult-llm-mcp/config.json and the environment."""
    environ = os.environ if environ is None else environ
    config = _merge(_default_config(), _read_config_file(config_file))
    _apply_env(config, environ)
    return validate_config(config)


def detect_clis(config: dict | None = None) -> dict[str, bool]:
    """Check which backend CLIs are available on PATH."""
    paths = (config or {}).get("paths", DEFAULT_PATHS)
    return {
        name: shutil.which(paths.get(name, default)) is not None
        for name, default in DEFAULT_PATHS.items()
    }
