"""Map a model id and the configured backend preference to an executor."""

from __future__ import annotations

import logging

from .clients import ClientFactory
from .errors import ConfigurationError
from .executors import BaseExecutor
from .executors.api import ApiExecutor
from .executors.codex import CodexCliExecutor
from .executors.cursor import CursorCliExecutor
from .executors.gemini import GeminiCliExecutor
from .models import (
    API_BACKEND,
    CODEX_CLI,
    CURSOR_CLI,
    FAMILY_BACKENDS,
    GEMINI_CLI,
    provider_for_model,
)

log = logging.getLogger(__name__)


class BackendResolver:
    """Owns the executor cache for the life of the server.

    Cache keys include the backend preference, so a configuration change
    never serves an executor built for the previous backend.
    """

    def __init__(self, config: dict, clients: ClientFactory | None = None):
        self.config = config
        self.clients = clients or ClientFactory(config)
        self._executors: dict[tuple[str, str], BaseExecutor] = {}

    def backend_for(self, family: str) -> str:
        allowed = FAMILY_BACKENDS[family]
        backend = self.config.get("backends", {}).get(family, allowed[0])
        if backend not in allowed:
            raise ConfigurationError(
                f"Invalid backend '{backend}' for {family} models. "
                f"Expected one of: {', '.join(allowed)}"
            )
        return backend

    def resolve(self, model: str) -> BaseExecutor:
        family = provider_for_model(model)
        backend = self.backend_for(family)
        key = (model, backend)

        executor = self._executors.get(key)
        if executor is None:
            executor = self._build(family, backend)
            self._executors[key] = executor
            log.debug("Created %s executor for %s", executor.name, model)
        return executor

    def set_backend(self, family: str, backend: str) -> None:
        """Switch a family's backend and drop executors cached for that family."""
        if family not in FAMILY_BACKENDS:
            raise ConfigurationError(f"Unknown provider family: {family}")
        if backend not in FAMILY_BACKENDS[family]:
            raise ConfigurationError(
                f"Invalid backend '{backend}' for {family} models. "
                f"Expected one of: {', '.join(FAMILY_BACKENDS[family])}"
            )
        self.config.setdefault("backends", {})[family] = backend
        for model, cached_backend in list(self._executors):
            if provider_for_model(model) == family:
                del self._executors[(model, cached_backend)]
        log.info("Backend for %s models set to %s", family, backend)

    def _build(self, family: str, backend: str) -> BaseExecutor:
        paths = self.config.get("paths", {})
        timeout = self.config.get("cli_timeout")
        effort = self.config.get("codex_reasoning_effort")

        if backend == API_BACKEND:
            return ApiExecutor(self.clients.get_client(family))
        if backend == GEMINI_CLI:
            return GeminiCliExecutor(paths.get("gemini", "gemini"), timeout=timeout)
        if backend == CODEX_CLI:
            return CodexCliExecutor(
                paths.get("codex", "codex"), reasoning_effort=effort, timeout=timeout
            )
        if backend == CURSOR_CLI:
            return CursorCliExecutor(
                paths.get("cursor", "cursor-agent"), reasoning_effort=effort, timeout=timeout
            )
        raise ConfigurationError(f"Unknown backend: {backend}")
