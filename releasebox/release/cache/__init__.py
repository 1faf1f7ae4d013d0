"""Build cache key derivation and storage."""

from .build_cache import BuildCache, create_build_cache
from .cache_key_builder import CacheKeyBuilder, create_cache_key_builder, hash_lockfiles


__all__ = [
    "BuildCache",
    "create_build_cache",
    "CacheKeyBuilder",
    "create_cache_key_builder",
    "hash_lockfiles",
]
