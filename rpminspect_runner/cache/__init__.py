"""Task-scoped results cache and run-once protocol."""

from rpminspect_runner.cache.store import TaskCacheStore

__all__ = ["TaskCacheStore"]
