"""
Memory Cache Module

Provides the in-memory TTL store that sits in front of the
upstream directory APIs.
"""

from .memory_store import MemoryStore, CacheEntry

__all__ = [
    "MemoryStore",
    "CacheEntry",
]
