# route_failover/registry/base.py
"""
Abstract interface that every registry backend must implement.

The registry is the store of Credential and ModelSpec records. It has two
audiences:
  - The router, which only reads: active records ordered by ascending
    priority, re-read on every dispatch (no caching).
  - The administrative commands, which create, list, toggle and delete
    records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models import Credential, ModelSpec, Record


def next_priority(existing: Sequence[Record]) -> int:
    """Priority for a newly created record: max existing + 1, or 0 if empty."""
    if not existing:
        return 0
    return max(r.priority for r in existing) + 1


class AbstractRegistry(ABC):
    """Interface contract for all registry implementations."""

    # ------------------------------------------------------------------
    # Read contract used by the router
    # ------------------------------------------------------------------

    async def list_active_credentials(self) -> list[Credential]:
        """
        Return active credentials ordered by ascending priority.

        Returns an empty list when none are active. Raises StoreUnavailable
        if the backing store cannot be reached.
        """
        return [c for c in await self.list_credentials() if c.is_active]

    async def list_active_models(self) -> list[ModelSpec]:
        """Return active models ordered by ascending priority."""
        return [m for m in await self.list_models() if m.is_active]

    # ------------------------------------------------------------------
    # Administrative surface
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_credentials(self) -> list[Credential]:
        """Return every credential, active or not, in priority order."""

    @abstractmethod
    async def list_models(self) -> list[ModelSpec]:
        """Return every model, active or not, in priority order."""

    @abstractmethod
    async def add_credential(self, key_name: str, api_key: str) -> Credential:
        """Create an active credential ranked after all existing ones."""

    @abstractmethod
    async def add_model(self, model_name: str, display_name: str) -> ModelSpec:
        """Create an active model ranked after all existing ones."""

    @abstractmethod
    async def delete_credential(self, credential_id: str) -> bool:
        """Delete by id. Returns False if no such credential exists."""

    @abstractmethod
    async def delete_model(self, model_id: str) -> bool:
        """Delete by id. Returns False if no such model exists."""

    @abstractmethod
    async def set_credential_active(self, credential_id: str, active: bool) -> bool:
        """Toggle participation in dispatch. Returns False if not found."""

    @abstractmethod
    async def set_model_active(self, model_id: str, active: bool) -> bool:
        """Toggle participation in dispatch. Returns False if not found."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release any resources held by this registry (e.g. Redis connections)."""
