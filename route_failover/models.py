# route_failover/models.py
"""
Pydantic v2 data models used throughout route-failover.

Credential and ModelSpec are the registry records. DispatchAttempt,
UpstreamCompletion, RouteSuccess and AttemptEvent only exist for the
duration of a single inbound request.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Union

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


class Credential(BaseModel):
    """A named secret used to authenticate against the upstream provider."""

    id: str = Field(default_factory=_new_id)
    key_name: str = Field(..., description="Human label, reported back as key_used.")
    api_key: str = Field(..., repr=False, description="Bearer secret. Never logged.")
    priority: int = Field(default=0, description="Lower is tried first.")
    is_active: bool = Field(default=True)
    created_at: float = Field(default_factory=time.time)

    @property
    def masked_key(self) -> str:
        """The secret with all but its last four characters hidden."""
        if len(self.api_key) <= 8:
            return "****"
        return f"{self.api_key[:4]}...{self.api_key[-4:]}"


class ModelSpec(BaseModel):
    """An upstream model identifier with a priority rank and a label."""

    model_config = {"protected_namespaces": ()}

    id: str = Field(default_factory=_new_id)
    model_name: str = Field(..., description="Upstream identifier, e.g. 'openai/gpt-4o-mini'.")
    display_name: str = Field(..., description="Human-readable label.")
    priority: int = Field(default=0)
    is_active: bool = Field(default=True)
    created_at: float = Field(default_factory=time.time)


Record = Union[Credential, ModelSpec]


def priority_order(record: Record) -> tuple[int, float, str]:
    """
    Sort key for registry records.

    Priorities need not be unique; ties fall back to creation time and then
    id so the order is deterministic for a given snapshot.
    """
    return (record.priority, record.created_at, record.id)


class DispatchAttempt(BaseModel):
    """One (credential, model) pair scheduled for a single outbound call."""

    credential: Credential
    model: ModelSpec
    attempt_number: int = Field(..., ge=1)

    def describe(self) -> str:
        return f"{self.model.model_name} ({self.credential.key_name})"


class UpstreamCompletion(BaseModel):
    """A validated successful response from the upstream provider."""

    content: str
    usage: dict[str, Any] | None = None


class RouteRequest(BaseModel):
    """Inbound request body. Validation of `message` is done by the router."""

    message: Any = None


class RouteSuccess(BaseModel):
    """
    The result returned to the caller after a successful dispatch.

    Field names are part of the inbound HTTP contract.
    """

    response: str = Field(..., description="The completion text.")
    model_used: str = Field(..., description="Upstream identifier of the model that answered.")
    model_display_name: str
    key_used: str = Field(..., description="Label of the credential that answered.")
    usage: dict[str, Any] | None = Field(
        default=None,
        description="Opaque usage object as supplied by the provider.",
    )


class AttemptEvent(BaseModel):
    """
    Fired after every attempt via the optional on_attempt callback.
    Forward it to metrics, tracing, or an audit log.
    """

    model_config = {"protected_namespaces": ()}

    key_name: str
    model_name: str
    attempt_number: int
    ok: bool
    error: str | None = None
    latency_ms: float
    timestamp: float = Field(default_factory=time.time)
