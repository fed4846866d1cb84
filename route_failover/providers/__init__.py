# route_failover/providers/__init__.py
from .base import BaseUpstream
from .openrouter import OpenRouterUpstream, parse_completion

__all__ = [
    "BaseUpstream",
    "OpenRouterUpstream",
    "parse_completion",
]
