"""Lazily constructed, cached OpenAI-compatible clients per provider."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from .config import api_key_env
from .errors import ConfigurationError

log = logging.getLogger(__name__)

# None means the SDK default endpoint.
PROVIDER_BASE_URLS: dict[str, str | None] = {
    "openai": None,
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "deepseek": "https://api.deepseek.com",
}


class ClientFactory:
    """Builds one chat-completion client per provider and reuses it."""

    def __init__(self, config: dict):
        self.config = config
        self._clients: dict[str, AsyncOpenAI] = {}

    def get_client(self, provider: str) -> AsyncOpenAI:
        client = self._clients.get(provider)
        if client is not None:
            return client

        if provider not in PROVIDER_BASE_URLS:
            raise ConfigurationError(f"No API client available for provider: {provider}")

        api_key = self.config.get("api_keys", {}).get(provider)
        if not api_key:
            raise ConfigurationError(
                f"Missing {api_key_env(provider)}: an API key is required "
                f"to use {provider} models with the api backend"
            )

        client = AsyncOpenAI(api_key=api_key, base_url=PROVIDER_BASE_URLS[provider])
        log.debug("Created %s API client", provider)
        self._clients[provider] = client
        return client
