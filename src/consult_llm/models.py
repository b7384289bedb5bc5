"""Model catalog and the provider-family rule."""

from __future__ import annotations

from .errors import ConfigurationError

ALL_MODELS = [
    "o3",
    "gpt-5.2",
    "gpt-5.3-codex",
    "gemini-2.5-pro",
    "gemini-3-pro-preview",
    "gemini-3.1-pro-preview",
    "deepseek-reasoner",
]

FALLBACK_MODEL = "gpt-5.2"

FAMILY_PREFIXES: dict[str, tuple[str, ...]] = {
    "openai": ("gpt-", "o3", "o4-"),
    "gemini": ("gemini-",),
    "deepseek": ("deepseek-",),
}

API_BACKEND = "api"
GEMINI_CLI = "gemini-cli"
CODEX_CLI = "codex-cli"
CURSOR_CLI = "cursor-cli"

# First entry is the default for the family.
FAMILY_BACKENDS: dict[str, tuple[str, ...]] = {
    "openai": (API_BACKEND, CODEX_CLI, CURSOR_CLI),
    "gemini": (API_BACKEND, GEMINI_CLI, CURSOR_CLI),
    "deepseek": (API_BACKEND,),
}


def provider_for_model(model: str) -> str:
    """Return the provider family for a model id. Longest matching prefix wins."""
    best_family = None
    best_length = 0
    for family, prefixes in FAMILY_PREFIXES.items():
        for prefix in prefixes:
            if model.startswith(prefix) and len(prefix) > best_length:
                best_family = family
                best_length = len(prefix)
    if best_family is None:
        raise ConfigurationError(f"Unable to determine LLM provider for model: {model}")
    return best_family
