# route_failover/providers/base.py
"""
BaseUpstream — abstract contract for the outbound completion transport.

The router never speaks HTTP itself; it hands each (credential, model)
pair to an upstream adapter and reacts only to the outcome.

This design means:
  - Status-code handling, timeouts and payload validation are contained
    inside the adapter.
  - The router only needs to distinguish "returned a completion" from
    "raised UpstreamAttemptFailed".
  - Tests swap in a fake upstream without touching the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import UpstreamCompletion


class BaseUpstream(ABC):
    """Abstract base class for upstream completion adapters."""

    @abstractmethod
    async def complete(
        self,
        api_key: str,
        model_name: str,
        message: str,
    ) -> UpstreamCompletion:
        """
        Send one single-turn completion request.

        Parameters
        ----------
        api_key:
            Bearer secret of the credential being tried.
        model_name:
            Upstream model identifier.
        message:
            The user message, sent as the only chat message.

        Returns
        -------
        UpstreamCompletion
            The completion text and the provider's opaque usage object.

        Raises
        ------
        UpstreamAttemptFailed
            On non-2xx status, transport failure, timeout, or a success
            response whose body lacks a completion. Cancellation is never
            converted: asyncio.CancelledError propagates unchanged.
        """

    async def close(self) -> None:
        """Release any resources held by this adapter (HTTP clients, etc.)."""
