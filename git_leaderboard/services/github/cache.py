"""
TTL caching for GitHub API responses.

Entries are JSON documents ``{"timestamp": <epoch seconds>, "data": <payload>}``
written to a KeyValueStore under one namespace prefix, so the whole cache can be
enumerated and purged without touching anything else in the store.

Every entry lives for the same TTL (30 minutes by default) regardless of what
it holds. Writes never raise: oversized payloads are skipped and a full store
is handled by purging expired entries, then the whole namespace.
"""

import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from datetime import date, datetime
from functools import wraps
from typing import Any, TypeVar

from git_leaderboard.config import settings
from git_leaderboard.services.github.store import KeyValueStore, StorageQuotaExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


def make_cache_key(namespace: str, *parts: Any) -> str:
    """
    Build a cache key for one logical query.

    Datetimes are truncated to the day so that windows computed from "now"
    a few seconds apart share an entry; ``None`` renders as ``all``.

    Usage:
        make_cache_key("commits", "acme/api", "main", since) -> "commits:acme/api:main:2026-10-11"
    """
    rendered: list[str] = [namespace]
    for part in parts:
        if part is None:
            rendered.append("all")
        elif isinstance(part, datetime | date):
            rendered.append(part.strftime("%Y-%m-%d"))
        else:
            rendered.append(str(part))
    return ":".join(rendered)


class ResponseCache:
    """Namespaced, TTL-expiring JSON cache over a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int = settings.cache_ttl_seconds,
        max_entry_bytes: int = settings.cache_max_entry_bytes,
        namespace: str = settings.cache_namespace,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.max_entry_bytes = max_entry_bytes
        self.namespace = namespace
        self._clock = clock

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _is_expired(self, entry: dict[str, Any]) -> bool:
        return self._clock() - entry["timestamp"] >= self.ttl_seconds

    def _load(self, full_key: str) -> dict[str, Any] | None:
        raw = self.store.get(full_key)
        if raw is None:
            return None
        try:
            entry = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(entry, dict) or "timestamp" not in entry:
            return None
        return entry

    def get(self, key: str) -> Any | None:
        """Return the cached payload, or None if absent or expired."""
        full_key = self._full_key(key)
        if self.store.get(full_key) is None:
            return None

        entry = self._load(full_key)
        if entry is None or self._is_expired(entry):
            self.store.delete(full_key)
            return None
        return entry["data"]

    def set(self, key: str, payload: Any) -> None:
        """
        Store a payload. Never raises on storage problems.

        Payloads go through JSON, so callers pass plain lists and dicts with
        string keys; tuples come back as lists. Anything JSON cannot encode is
        logged and skipped.
        """
        try:
            serialized = json.dumps({"timestamp": self._clock(), "data": payload})
        except (TypeError, ValueError) as e:
            logger.warning(f"Cache payload not serializable, not caching {key}: {e}")
            return
        size = len(serialized.encode("utf-8"))
        if size > self.max_entry_bytes:
            logger.warning(
                f"Cache entry too large, not caching {key} ({size // 1024}KB "
                f"> {self.max_entry_bytes // 1024}KB)"
            )
            return

        full_key = self._full_key(key)
        try:
            self.store.set(full_key, serialized)
            return
        except StorageQuotaExceeded:
            removed = self.clear_expired()
            logger.warning(f"Cache storage full, purged {removed} expired entries")

        try:
            self.store.set(full_key, serialized)
        except StorageQuotaExceeded:
            logger.warning("Cache storage still full, clearing the whole cache")
            self.clear()

    def delete(self, key: str) -> None:
        self.store.delete(self._full_key(key))

    def _own_keys(self) -> list[str]:
        return [k for k in self.store.keys() if k.startswith(self.namespace)]

    def clear(self) -> None:
        """Remove every entry in this cache's namespace."""
        keys = self._own_keys()
        for full_key in keys:
            self.store.delete(full_key)
        logger.debug(f"Cleared {len(keys)} cached GitHub responses")

    def clear_expired(self) -> int:
        """Remove expired or unreadable entries. Returns how many were removed."""
        removed = 0
        for full_key in self._own_keys():
            entry = self._load(full_key)
            if entry is None or self._is_expired(entry):
                self.store.delete(full_key)
                removed += 1
        return removed

    def stats(self) -> dict[str, int]:
        """Entry count and stored size, for monitoring."""
        keys = self._own_keys()
        stored = sum(len(self.store.get(k) or "") for k in keys)
        return {"entries": len(keys), "bytes": stored}


def _encode(result: list[Any]) -> list[dict[str, Any]]:
    return [asdict(item) for item in result]


def _decode(model: type[T], data: list[dict[str, Any]]) -> list[T]:
    from_dict = getattr(model, "from_dict", None)
    if from_dict is not None:
        return [from_dict(item) for item in data]
    return [model(**item) for item in data]


def cached_github_call(
    namespace: str,
    model: type[Any],
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """
    Decorator for caching async GitHub read operations that return dataclass lists.

    Usage:
        @cached_github_call(CACHE_NS_COMMITS, Commit)
        async def get_commits(self, owner, repo, branch, since=None, max_pages=None):
            ...

    The key is the namespace followed by every bound argument except ``self``
    (defaults included). The instance's ``cache`` attribute is used; with no
    cache the call goes straight through. ``None`` results are not cached.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            cache: ResponseCache | None = self.cache
            if cache is None:
                return await func(self, *args, **kwargs)

            bound = signature.bind(self, *args, **kwargs)
            bound.apply_defaults()
            key = make_cache_key(namespace, *list(bound.arguments.values())[1:])

            cached = cache.get(key)
            if cached is not None:
                logger.debug(f"Cache HIT: {func.__name__} ({key})")
                return _decode(model, cached)

            logger.debug(f"Cache MISS: {func.__name__} ({key})")
            result = await func(self, *args, **kwargs)
            if result is not None:
                cache.set(key, _encode(result))
            return result

        return wrapper

    return decorator
