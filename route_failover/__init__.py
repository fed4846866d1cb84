# route_failover/__init__.py
"""
route-failover — priority-ordered failover across API keys and models.

Public API surface:
  FailoverRouter        — main class; call route(message)
  RouterConfig          — top-level configuration model
  Credential            — API key record (key_name, api_key, priority)
  ModelSpec             — model record (model_name, display_name, priority)
  RouteSuccess          — result returned by route()
  AttemptEvent          — event fired by the on_attempt callback
  InMemoryRegistry / RedisRegistry — registry backends
  RouterError and subclasses — the error taxonomy
"""

from .router import FailoverRouter, iter_dispatch_pairs
from .config import RouterConfig
from .models import AttemptEvent, Credential, DispatchAttempt, ModelSpec, RouteSuccess
from .registry import AbstractRegistry, InMemoryRegistry, RedisRegistry
from .exceptions import (
    AllAttemptsFailed,
    InternalFault,
    InvalidRequest,
    NoCredentialsConfigured,
    NoModelsConfigured,
    RouterError,
    StoreUnavailable,
    UpstreamAttemptFailed,
)

__all__ = [
    "FailoverRouter",
    "iter_dispatch_pairs",
    "RouterConfig",
    "AttemptEvent",
    "Credential",
    "DispatchAttempt",
    "ModelSpec",
    "RouteSuccess",
    "AbstractRegistry",
    "InMemoryRegistry",
    "RedisRegistry",
    "AllAttemptsFailed",
    "InternalFault",
    "InvalidRequest",
    "NoCredentialsConfigured",
    "NoModelsConfigured",
    "RouterError",
    "StoreUnavailable",
    "UpstreamAttemptFailed",
]

__version__ = "0.1.0"
