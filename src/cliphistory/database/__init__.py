"""
Storage backends for cliphistory.

Provides the ``Store`` interface plus in-memory and Redis implementations.
"""

from cliphistory.database.base import Store
from cliphistory.database.memory import InMemoryStore
from cliphistory.database.redis_manager import RedisStore

__all__ = [
    'InMemoryStore',
    'RedisStore',
    'Store',
]
