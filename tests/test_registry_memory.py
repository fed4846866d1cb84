# tests/test_registry_memory.py
"""
Tests for InMemoryRegistry.

Verifies:
  - Priority ordering and deterministic tie-breaking.
  - Next-priority assignment on creation (max + 1, or 0).
  - Delete and activate/deactivate by id.
  - Concurrent access safety.
"""

from __future__ import annotations

import asyncio

import pytest

from route_failover.models import Credential, ModelSpec
from route_failover.registry.base import next_priority
from route_failover.registry.memory import InMemoryRegistry


class TestNextPriority:
    def test_empty_is_zero(self):
        assert next_priority([]) == 0

    def test_max_plus_one_with_gaps(self):
        records = [
            ModelSpec(model_name="a", display_name="A", priority=3),
            ModelSpec(model_name="b", display_name="B", priority=9),
            ModelSpec(model_name="c", display_name="C", priority=-1),
        ]
        assert next_priority(records) == 10


@pytest.mark.asyncio
class TestInMemoryRegistry:
    async def test_empty_registry_returns_empty_lists(self):
        registry = InMemoryRegistry()
        assert await registry.list_active_credentials() == []
        assert await registry.list_active_models() == []

    async def test_active_lists_sorted_by_priority(self):
        registry = InMemoryRegistry(
            credentials=[
                Credential(key_name="c", api_key="k3", priority=5),
                Credential(key_name="a", api_key="k1", priority=0),
                Credential(key_name="off", api_key="k0", priority=-1, is_active=False),
            ],
        )
        names = [c.key_name for c in await registry.list_active_credentials()]
        assert names == ["a", "c"]
        all_names = [c.key_name for c in await registry.list_credentials()]
        assert all_names == ["off", "a", "c"]

    async def test_ties_broken_by_creation_time_then_id(self):
        registry = InMemoryRegistry(
            models=[
                ModelSpec(id="zz", model_name="later", display_name="L", priority=1, created_at=20.0),
                ModelSpec(id="bb", model_name="same-b", display_name="B", priority=1, created_at=10.0),
                ModelSpec(id="aa", model_name="same-a", display_name="A", priority=1, created_at=10.0),
            ]
        )
        order = [m.model_name for m in await registry.list_active_models()]
        assert order == ["same-a", "same-b", "later"]
        # Stable across reads
        assert order == [m.model_name for m in await registry.list_active_models()]

    async def test_add_assigns_sequential_priorities(self):
        registry = InMemoryRegistry()
        first = await registry.add_credential("first", "sk-1")
        second = await registry.add_credential("second", "sk-2")
        assert (first.priority, second.priority) == (0, 1)
        assert first.is_active and second.is_active
        assert first.id != second.id

    async def test_add_counts_inactive_records(self):
        registry = InMemoryRegistry(
            models=[ModelSpec(model_name="old", display_name="Old", priority=4, is_active=False)]
        )
        model = await registry.add_model("vendor/new", "New")
        assert model.priority == 5
        assert [m.model_name for m in await registry.list_active_models()] == ["vendor/new"]

    async def test_delete_by_id(self):
        registry = InMemoryRegistry()
        credential = await registry.add_credential("gone", "sk-gone")
        assert await registry.delete_credential(credential.id) is True
        assert await registry.list_credentials() == []
        assert await registry.delete_credential(credential.id) is False

    async def test_delete_model_unknown_id(self):
        registry = InMemoryRegistry()
        assert await registry.delete_model("nope") is False

    async def test_set_active_toggles_participation(self):
        registry = InMemoryRegistry()
        model = await registry.add_model("vendor/x", "X")
        assert await registry.set_model_active(model.id, False) is True
        assert await registry.list_active_models() == []
        assert await registry.set_model_active(model.id, True) is True
        assert len(await registry.list_active_models()) == 1
        assert await registry.set_credential_active("missing", False) is False

    async def test_snapshot_not_mutated_by_later_toggle(self):
        registry = InMemoryRegistry()
        credential = await registry.add_credential("k", "sk-k")
        snapshot = await registry.list_active_credentials()
        await registry.set_credential_active(credential.id, False)
        assert snapshot[0].is_active is True

    async def test_concurrent_adds(self):
        registry = InMemoryRegistry()
        await asyncio.gather(*[registry.add_model(f"m{i}", f"M{i}") for i in range(50)])
        priorities = sorted(m.priority for m in await registry.list_models())
        assert priorities == list(range(50))
