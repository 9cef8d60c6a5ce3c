"""Disk-based caching of fetched OpenRPC documents.

This package provides :class:`DocumentCache`, which stores the bodies of
documents fetched over HTTP using :mod:`diskcache`.  Entries are keyed by
URL with a configurable TTL.

The cache is consumed by :func:`~openrpc_schema_utils.loader.fetch_url`
and is controlled by the ``cache`` section of the configuration
(:class:`~openrpc_schema_utils.models.CacheConfig`).
"""

from openrpc_schema_utils.cache.cache import DocumentCache

__all__ = ["DocumentCache"]
