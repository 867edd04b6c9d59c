"""
Durable key-value slots for the clipboard history snapshot.
"""

from clipkeep.database.base import KeyValueStore, MemoryKeyValueStore
from clipkeep.database.file_store import FileKeyValueStore
from clipkeep.database.redis_manager import RedisKeyValueStore

__all__ = [
    'KeyValueStore',
    'MemoryKeyValueStore',
    'FileKeyValueStore',
    'RedisKeyValueStore',
]
