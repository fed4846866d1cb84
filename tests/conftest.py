# tests/conftest.py
"""
Shared pytest fixtures for route-failover tests.
"""

from __future__ import annotations

import pytest

from route_failover.config import RouterConfig
from route_failover.exceptions import UpstreamAttemptFailed
from route_failover.models import Credential, ModelSpec, UpstreamCompletion
from route_failover.providers.base import BaseUpstream
from route_failover.registry.memory import InMemoryRegistry


class FakeUpstream(BaseUpstream):
    """
    Scripted upstream. Answers only for the (api_key, model_name) pairs in
    *succeed*; every call is recorded in order.
    """

    def __init__(self, succeed: set[tuple[str, str]] | None = None, usage: dict | None = None) -> None:
        self.succeed = succeed or set()
        self.usage = usage if usage is not None else {"total_tokens": 12}
        self.calls: list[tuple[str, str, str]] = []
        self.closed = False

    async def complete(self, api_key: str, model_name: str, message: str) -> UpstreamCompletion:
        self.calls.append((api_key, model_name, message))
        if (api_key, model_name) in self.succeed:
            return UpstreamCompletion(content=f"answer from {model_name}", usage=self.usage)
        raise UpstreamAttemptFailed(f"rejected {model_name}", status=429)

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return [(key, model) for key, model, _ in self.calls]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def credentials() -> list[Credential]:
    return [
        Credential(id="k-primary", key_name="primary", api_key="sk-primary-0000", priority=0),
        Credential(id="k-backup", key_name="backup", api_key="sk-backup-1111", priority=1),
    ]


@pytest.fixture
def models() -> list[ModelSpec]:
    return [
        ModelSpec(id="m-fast", model_name="vendor/fast", display_name="Fast", priority=0),
        ModelSpec(id="m-cheap", model_name="vendor/cheap", display_name="Cheap", priority=1),
    ]


@pytest.fixture
def registry(credentials, models) -> InMemoryRegistry:
    return InMemoryRegistry(credentials, models)


@pytest.fixture
def fake_upstream_cls():
    return FakeUpstream


@pytest.fixture
def router_config() -> RouterConfig:
    return RouterConfig(upstream_url="https://upstream.test/v1/chat/completions", timeout_seconds=5)
