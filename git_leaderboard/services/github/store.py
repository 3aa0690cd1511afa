"""
Key-value storage behind the response cache.

The cache only needs string get/set/delete plus key enumeration, the same
surface a browser's localStorage offers. ``MemoryStore`` mimics that store's
behaviour on a full quota: the write is refused rather than something being
evicted, and the cache decides what to purge.
"""

from typing import Protocol

from cachetools import Cache  # type: ignore[import-untyped]


class StorageQuotaExceeded(Exception):
    """The store has no room left for a write."""


class KeyValueStore(Protocol):
    """Minimal string store used by ResponseCache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class _QuotaCache(Cache):  # type: ignore[misc]
    """cachetools.Cache that refuses writes instead of evicting."""

    def popitem(self) -> tuple[str, str]:
        raise StorageQuotaExceeded(
            f"Storage quota of {self.maxsize} bytes exceeded ({self.currsize} in use)"
        )


class MemoryStore:
    """In-process KeyValueStore bounded by the total size of stored values."""

    def __init__(self, quota_bytes: int = 5 * 1024 * 1024) -> None:
        self._data = _QuotaCache(maxsize=quota_bytes, getsizeof=len)

    def get(self, key: str) -> str | None:
        value: str | None = self._data.get(key)
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._data[key] = value
        except ValueError as e:
            # Single value larger than the whole quota
            raise StorageQuotaExceeded(str(e)) from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data.keys())

    @property
    def used_bytes(self) -> int:
        used: int = self._data.currsize
        return used
