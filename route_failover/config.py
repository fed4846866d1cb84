# route_failover/config.py
"""
RouterConfig — top-level configuration.

Supports construction from:
  - Python dict   → RouterConfig.from_dict(data)
  - YAML file     → RouterConfig.from_yaml("router.yaml")
  - Environment   → RouterConfig.from_env()
"""

from __future__ import annotations

import os
import re
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TITLE,
    DEFAULT_UPSTREAM_URL,
)
from .models import Credential, ModelSpec


class RouterConfig(BaseModel):
    """
    Top-level configuration for the failover router.

    Instantiate directly or use one of the factory class methods:
      RouterConfig.from_dict(data)
      RouterConfig.from_yaml(path)
      RouterConfig.from_env()
    """

    model_config = {"arbitrary_types_allowed": True}

    upstream_url: str = Field(default=DEFAULT_UPSTREAM_URL)
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout applied to each outbound attempt.",
    )
    referer: str | None = Field(
        default=None,
        description="Optional HTTP-Referer sent upstream for attribution.",
    )
    title: str | None = Field(default=DEFAULT_TITLE, description="Optional X-Title header.")
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL. If unset, an in-memory registry seeded from "
        "`credentials` and `models` is used.",
    )
    credentials: list[Credential] = Field(default_factory=list)
    models: list[ModelSpec] = Field(default_factory=list)
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)
    on_attempt: Callable | None = Field(
        default=None,
        description="Optional async callback fired after every attempt. Receives an AttemptEvent.",
        exclude=True,
    )

    @field_validator("credentials", "models", mode="before")
    @classmethod
    def default_priorities(cls, v: Any) -> Any:
        """Seed records without an explicit priority are ranked by list position."""
        if not isinstance(v, list):
            return v
        seeded = []
        for index, item in enumerate(v):
            if isinstance(item, dict) and "priority" not in item:
                item = {**item, "priority": index}
            seeded.append(item)
        return seeded

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        return v.upper()

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> "RouterConfig":
        """Build config from a plain Python dictionary."""
        merged = {**data, **kwargs}
        return cls.model_validate(merged)

    @classmethod
    def from_yaml(cls, path: str, **kwargs: Any) -> "RouterConfig":
        """
        Build config from a YAML file.

        Environment variable interpolation is supported:
          api_key: "${OPENROUTER_API_KEY}"
        """
        with open(path) as f:
            raw = f.read()

        # Interpolate ${ENV_VAR} placeholders
        def _replace(match: re.Match) -> str:  # type: ignore[type-arg]
            var = match.group(1)
            value = os.environ.get(var)
            if value is None:
                raise EnvironmentError(
                    f"Environment variable '{var}' referenced in '{path}' is not set."
                )
            return value

        raw = re.sub(r"\$\{([^}]+)\}", _replace, raw)
        data = yaml.safe_load(raw) or {}
        return cls.from_dict(data, **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RouterConfig":
        """
        Build a config from environment variables.

          OPENROUTER_API_KEY            → seeds one credential named "default"
          ROUTE_FAILOVER_MODELS         → comma list of "model_name[=Display Name]"
          ROUTE_FAILOVER_UPSTREAM_URL   → upstream_url
          ROUTE_FAILOVER_TIMEOUT_SECONDS → timeout_seconds
          ROUTE_FAILOVER_REFERER        → referer
          ROUTE_FAILOVER_TITLE          → title
          ROUTE_FAILOVER_REDIS_URL      → redis_url
          ROUTE_FAILOVER_LOG_LEVEL      → log_level
        """
        data: dict[str, Any] = {}

        api_key = os.environ.get("OPENROUTER_API_KEY")
        if api_key:
            data["credentials"] = [{"key_name": "default", "api_key": api_key}]

        raw_models = os.environ.get("ROUTE_FAILOVER_MODELS", "")
        models: list[dict[str, Any]] = []
        for entry in raw_models.split(","):
            entry = entry.strip()
            if not entry:
                continue
            name, _, display = entry.partition("=")
            models.append({"model_name": name.strip(), "display_name": display.strip() or name.strip()})
        if models:
            data["models"] = models

        _simple = [
            ("ROUTE_FAILOVER_UPSTREAM_URL", "upstream_url"),
            ("ROUTE_FAILOVER_TIMEOUT_SECONDS", "timeout_seconds"),
            ("ROUTE_FAILOVER_REFERER", "referer"),
            ("ROUTE_FAILOVER_TITLE", "title"),
            ("ROUTE_FAILOVER_REDIS_URL", "redis_url"),
            ("ROUTE_FAILOVER_LOG_LEVEL", "log_level"),
        ]
        for env_var, field_name in _simple:
            value = os.environ.get(env_var)
            if value:
                data[field_name] = value

        data.update(kwargs)
        return cls.from_dict(data)
