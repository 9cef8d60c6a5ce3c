"""Disk-based caching for documents fetched from URLs.

Uses :mod:`diskcache` to persist fetched document bodies on the filesystem
with a configurable time-to-live (TTL).  Only successful (2xx) responses
are stored.

Cache keys are SHA-256 hashes of the URL.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

from openrpc_schema_utils.models import CacheConfig


class DocumentCache:
    """Disk-backed cache for fetched document bodies.

    Stores ``{"content": str, "content_type": str}`` dicts in a
    :class:`diskcache.Cache` directory.  Entries expire after
    :attr:`~openrpc_schema_utils.models.CacheConfig.ttl_seconds`.

    Args:
        cache_dir: Root directory for the cache.  A ``documents/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        cache = DocumentCache("/tmp/openrpc-cache", CacheConfig(enabled=True))
        cache.set("https://example.com/openrpc.json", '{"openrpc": "1.2.6"}', "application/json")
        hit = cache.get("https://example.com/openrpc.json")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "documents"))

    def get(self, url: str) -> Optional[dict[str, str]]:
        """Look up a cached document body.

        Returns:
            A ``dict`` with ``content`` and ``content_type`` keys on a cache
            hit, or ``None`` on a miss or when caching is disabled.
        """
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(url))

    def set(self, url: str, content: str, content_type: str = "") -> None:
        """Store a fetched document body.  A no-op when caching is disabled."""
        if self._cache is None:
            return
        self._cache.set(
            self._make_key(url),
            {"content": content, "content_type": content_type},
            expire=self._config.ttl_seconds,
        )

    def invalidate(self, url: str) -> None:
        """Remove the entry for *url*, if any."""
        if self._cache is None:
            return
        self._cache.delete(self._make_key(url))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), and when enabled:
            ``size`` (number of entries), ``directory`` (str path), and
            ``ttl_seconds`` (int).
        """
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "documents"),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def __enter__(self) -> DocumentCache:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def _make_key(url: str) -> str:
        return hashlib.sha256(url.encode()).hexdigest()
