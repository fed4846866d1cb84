from .base import AbstractRegistry, next_priority
from .memory import InMemoryRegistry
from .redis import RedisRegistry

__all__ = ["AbstractRegistry", "InMemoryRegistry", "RedisRegistry", "next_priority"]
