# route_failover/router.py
"""
FailoverRouter — the class the server, the CLI and library users talk to.

Orchestrates one dispatch:
  1. Validate the inbound message.
  2. Read active credentials and models from the registry (fresh, no cache).
  3. Walk the (credential, model) pairs — credentials outer, models inner,
     both by ascending priority — one outbound call at a time.
  4. Return the first success, or raise AllAttemptsFailed carrying only the
     most recent error once every pair has been tried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from typing import Any

from .config import RouterConfig
from .exceptions import (
    AllAttemptsFailed,
    InvalidRequest,
    NoCredentialsConfigured,
    NoModelsConfigured,
    UpstreamAttemptFailed,
)
from .models import AttemptEvent, Credential, DispatchAttempt, ModelSpec, RouteSuccess
from .providers.base import BaseUpstream
from .providers.openrouter import OpenRouterUpstream
from .registry.base import AbstractRegistry
from .registry.memory import InMemoryRegistry

logger = logging.getLogger(__name__)


def iter_dispatch_pairs(
    credentials: Sequence[Credential],
    models: Sequence[ModelSpec],
) -> Iterator[DispatchAttempt]:
    """
    Lazily yield every (credential, model) pair in dispatch order.

    Credential priority dominates: all models are exhausted for one
    credential before the next credential is paired with anything.
    """
    attempt_number = 0
    for credential in credentials:
        for model in models:
            attempt_number += 1
            yield DispatchAttempt(
                credential=credential,
                model=model,
                attempt_number=attempt_number,
            )


class FailoverRouter:
    """
    Priority-ordered, first-success-wins failover router.

    Parameters
    ----------
    config:
        Router configuration. Use one of the factory class methods
        (from_dict, from_yaml, from_env) for convenient construction.
    registry:
        Source of credential and model records. Defaults to a RedisRegistry
        when ``config.redis_url`` is set, else an InMemoryRegistry seeded
        from ``config.credentials`` / ``config.models``.
    upstream:
        Outbound completion adapter. Defaults to OpenRouterUpstream built
        from the config.

    The router keeps no per-request state, so one instance can serve any
    number of concurrent requests.
    """

    def __init__(
        self,
        config: RouterConfig,
        registry: AbstractRegistry | None = None,
        upstream: BaseUpstream | None = None,
    ) -> None:
        self._config = config
        self._registry = registry or self._default_registry(config)
        self._upstream = upstream or OpenRouterUpstream(
            url=config.upstream_url,
            timeout_seconds=config.timeout_seconds,
            referer=config.referer,
            title=config.title,
        )

    @staticmethod
    def _default_registry(config: RouterConfig) -> AbstractRegistry:
        if config.redis_url:
            from .registry.redis import RedisRegistry

            return RedisRegistry(config.redis_url)
        return InMemoryRegistry(config.credentials, config.models)

    @property
    def registry(self) -> AbstractRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> "FailoverRouter":
        """Construct from a plain Python dictionary."""
        on_attempt = kwargs.pop("on_attempt", None)
        cfg = RouterConfig.from_dict(data)
        if on_attempt is not None:
            cfg = cfg.model_copy(update={"on_attempt": on_attempt})
        return cls(cfg, **kwargs)

    @classmethod
    def from_yaml(cls, path: str, **kwargs: Any) -> "FailoverRouter":
        """Construct from a YAML config file."""
        on_attempt = kwargs.pop("on_attempt", None)
        cfg = RouterConfig.from_yaml(path)
        if on_attempt is not None:
            cfg = cfg.model_copy(update={"on_attempt": on_attempt})
        return cls(cfg, **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "FailoverRouter":
        """Construct from environment variables."""
        on_attempt = kwargs.pop("on_attempt", None)
        cfg = RouterConfig.from_env()
        if on_attempt is not None:
            cfg = cfg.model_copy(update={"on_attempt": on_attempt})
        return cls(cfg, **kwargs)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def route(self, message: Any) -> RouteSuccess:
        """
        Dispatch *message* to the first (credential, model) pair that answers.

        Raises
        ------
        InvalidRequest
            *message* is not a non-blank string. Nothing is read or sent.
        NoCredentialsConfigured / NoModelsConfigured
            The registry has no active records of that kind. Nothing is sent.
        StoreUnavailable
            The registry could not be read.
        AllAttemptsFailed
            Every pair was tried exactly once and none succeeded.
        """
        if not isinstance(message, str) or not message.strip():
            raise InvalidRequest("message must be a non-empty string")

        credentials = await self._registry.list_active_credentials()
        if not credentials:
            raise NoCredentialsConfigured("No active credentials in the registry")

        models = await self._registry.list_active_models()
        if not models:
            raise NoModelsConfigured("No active models in the registry")

        last_error: str | None = None
        attempts = 0
        for attempt in iter_dispatch_pairs(credentials, models):
            attempts = attempt.attempt_number
            logger.debug("Attempt %d: %s", attempt.attempt_number, attempt.describe())

            t0 = time.monotonic()
            try:
                completion = await self._upstream.complete(
                    api_key=attempt.credential.api_key,
                    model_name=attempt.model.model_name,
                    message=message,
                )
            except UpstreamAttemptFailed as exc:
                detail = f"HTTP {exc.status}: {exc.detail}" if exc.status else exc.detail
                last_error = f"{attempt.describe()}: {detail}"
            except Exception as exc:
                last_error = f"{attempt.describe()}: {str(exc) or type(exc).__name__}"
            else:
                latency_ms = (time.monotonic() - t0) * 1000
                logger.info(
                    "Routed via %s on attempt %d (%.0fms)",
                    attempt.describe(),
                    attempt.attempt_number,
                    latency_ms,
                )
                await self._fire(attempt, ok=True, error=None, latency_ms=latency_ms)
                return RouteSuccess(
                    response=completion.content,
                    model_used=attempt.model.model_name,
                    model_display_name=attempt.model.display_name,
                    key_used=attempt.credential.key_name,
                    usage=completion.usage,
                )

            latency_ms = (time.monotonic() - t0) * 1000
            logger.warning("Attempt %d failed: %s", attempt.attempt_number, last_error)
            await self._fire(attempt, ok=False, error=last_error, latency_ms=latency_ms)

        raise AllAttemptsFailed(last_error, attempts=attempts)

    async def _fire(
        self,
        attempt: DispatchAttempt,
        ok: bool,
        error: str | None,
        latency_ms: float,
    ) -> None:
        """Invoke the on_attempt callback; its errors never affect routing."""
        if not self._config.on_attempt:
            return
        event = AttemptEvent(
            key_name=attempt.credential.key_name,
            model_name=attempt.model.model_name,
            attempt_number=attempt.attempt_number,
            ok=ok,
            error=error,
            latency_ms=latency_ms,
        )
        try:
            await self._config.on_attempt(event)
        except Exception:
            logger.exception("on_attempt callback raised; ignoring")

    async def close(self) -> None:
        """Release all resources (HTTP client, Redis connection, etc.)."""
        await self._upstream.close()
        await self._registry.close()

    async def __aenter__(self) -> "FailoverRouter":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
