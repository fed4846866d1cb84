# route_failover/providers/openrouter.py
"""
OpenRouter (OpenAI-compatible) upstream adapter.

Posts `{"model": ..., "messages": [{"role": "user", "content": ...}]}` to
the configured chat completions URL with a bearer token, and validates the
shape of a 2xx body before calling it a success.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..constants import DEFAULT_TIMEOUT_SECONDS, DEFAULT_UPSTREAM_URL, MAX_ERROR_DETAIL_CHARS
from ..exceptions import UpstreamAttemptFailed
from ..models import UpstreamCompletion
from .base import BaseUpstream

logger = logging.getLogger(__name__)


def _truncate(text: str) -> str:
    if len(text) <= MAX_ERROR_DETAIL_CHARS:
        return text
    return text[:MAX_ERROR_DETAIL_CHARS] + "..."


def parse_completion(payload: Any) -> UpstreamCompletion:
    """
    Extract `choices[0].message.content` and `usage` from a response body.

    Raises UpstreamAttemptFailed if the body does not carry a string
    completion at that location.
    """
    if not isinstance(payload, dict):
        raise UpstreamAttemptFailed("Malformed response: body is not a JSON object")

    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise UpstreamAttemptFailed("Malformed response: no completion choices")

    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise UpstreamAttemptFailed("Malformed response: choices[0].message.content missing")

    usage = payload.get("usage")
    return UpstreamCompletion(content=content, usage=usage if isinstance(usage, dict) else None)


class OpenRouterUpstream(BaseUpstream):
    """
    Adapter wrapping an httpx.AsyncClient.

    Parameters
    ----------
    url:
        Chat completions endpoint.
    timeout_seconds:
        Per-attempt timeout.
    referer, title:
        Optional attribution headers (HTTP-Referer / X-Title).
    client:
        Pre-configured httpx.AsyncClient. When omitted the adapter creates
        and owns one.
    """

    def __init__(
        self,
        url: str = DEFAULT_UPSTREAM_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        referer: str | None = None,
        title: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._extra_headers: dict[str, str] = {}
        if referer:
            self._extra_headers["HTTP-Referer"] = referer
        if title:
            self._extra_headers["X-Title"] = title

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        )

    async def complete(
        self,
        api_key: str,
        model_name: str,
        message: str,
    ) -> UpstreamCompletion:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            **self._extra_headers,
        }
        body = {
            "model": model_name,
            "messages": [{"role": "user", "content": message}],
        }

        try:
            response = await self._client.post(self.url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise UpstreamAttemptFailed(f"Request timed out ({type(exc).__name__})") from exc
        except httpx.HTTPError as exc:
            raise UpstreamAttemptFailed(str(exc) or type(exc).__name__) from exc

        logger.debug("Upstream answered %s for model %s", response.status_code, model_name)
        if not response.is_success:
            raise UpstreamAttemptFailed(_truncate(response.text), status=response.status_code)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise UpstreamAttemptFailed(
                "Malformed response: body is not valid JSON", status=response.status_code
            ) from exc

        return parse_completion(payload)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
