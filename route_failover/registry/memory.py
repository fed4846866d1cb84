# route_failover/registry/memory.py
"""
In-process, in-memory registry.

Uses asyncio.Lock for safe concurrent access within a single event loop.
All records are lost when the process exits — appropriate for single-instance
deployments seeded from a config file, and for development/testing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from ..models import Credential, ModelSpec, priority_order
from .base import AbstractRegistry, next_priority


class InMemoryRegistry(AbstractRegistry):
    """Process-local registry (default when no redis_url is configured)."""

    def __init__(
        self,
        credentials: Iterable[Credential] = (),
        models: Iterable[ModelSpec] = (),
    ) -> None:
        # id → record
        self._credentials: dict[str, Credential] = {c.id: c for c in credentials}
        self._models: dict[str, ModelSpec] = {m.id: m for m in models}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_credentials(self) -> list[Credential]:
        async with self._lock:
            return sorted(self._credentials.values(), key=priority_order)

    async def list_models(self) -> list[ModelSpec]:
        async with self._lock:
            return sorted(self._models.values(), key=priority_order)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_credential(self, key_name: str, api_key: str) -> Credential:
        async with self._lock:
            credential = Credential(
                key_name=key_name,
                api_key=api_key,
                priority=next_priority(list(self._credentials.values())),
            )
            self._credentials[credential.id] = credential
        return credential

    async def add_model(self, model_name: str, display_name: str) -> ModelSpec:
        async with self._lock:
            model = ModelSpec(
                model_name=model_name,
                display_name=display_name,
                priority=next_priority(list(self._models.values())),
            )
            self._models[model.id] = model
        return model

    async def delete_credential(self, credential_id: str) -> bool:
        async with self._lock:
            return self._credentials.pop(credential_id, None) is not None

    async def delete_model(self, model_id: str) -> bool:
        async with self._lock:
            return self._models.pop(model_id, None) is not None

    async def set_credential_active(self, credential_id: str, active: bool) -> bool:
        async with self._lock:
            current = self._credentials.get(credential_id)
            if current is None:
                return False
            # Records are replaced, never mutated, so a list handed to an
            # in-flight dispatch stays unchanged.
            self._credentials[credential_id] = current.model_copy(update={"is_active": active})
            return True

    async def set_model_active(self, model_id: str, active: bool) -> bool:
        async with self._lock:
            current = self._models.get(model_id)
            if current is None:
                return False
            self._models[model_id] = current.model_copy(update={"is_active": active})
            return True
