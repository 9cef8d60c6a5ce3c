"""Acquire OpenRPC documents from objects, JSON text, URLs, or local files.

This module handles all I/O for turning a document reference into a Python
value.  A reference is classified by :func:`classify_reference` into one of
four :class:`~openrpc_schema_utils.models.ReferenceKind` values, checked in
this order:

1. anything that is not a string is already a document;
2. a string that parses as JSON is the document's text;
3. an ``http://`` or ``https://`` string is fetched with :func:`fetch_url`;
4. any other string is a file path read with :func:`read_file`.

Fetched and read bodies may be JSON or YAML.  All failures surface as
:class:`~openrpc_schema_utils.exceptions.DocumentLoadError`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from openrpc_schema_utils.cache import DocumentCache
from openrpc_schema_utils.config import get_cache_dir, load_config
from openrpc_schema_utils.exceptions import DocumentLoadError
from openrpc_schema_utils.models import ReferenceKind, SchemaUtilsConfig

logger = logging.getLogger(__name__)


def is_json(text: str) -> bool:
    """Return True if *text* parses as JSON."""
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def is_url(text: str) -> bool:
    """Return True if *text* is an HTTP(S) URL."""
    return text.startswith(("http://", "https://"))


def classify_reference(reference: Any) -> ReferenceKind:
    """Decide how *reference* should be acquired.  Performs no I/O."""
    if not isinstance(reference, str):
        return ReferenceKind.DOCUMENT
    if is_json(reference):
        return ReferenceKind.JSON_TEXT
    if is_url(reference):
        return ReferenceKind.URL
    return ReferenceKind.PATH


def default_reference(config: SchemaUtilsConfig) -> str:
    """Path of the default document in the current working directory."""
    return str(Path.cwd() / config.default_document)


async def acquire_document(
    reference: Any,
    *,
    config: Optional[SchemaUtilsConfig] = None,
) -> Any:
    """Turn a document reference into an in-memory document.

    Args:
        reference: An already-parsed document, a JSON string, a URL, or a
            file path.
        config: Settings for HTTP fetching and caching.  Loaded with
            :func:`~openrpc_schema_utils.config.load_config` when omitted.

    Returns:
        The raw, unvalidated document.

    Raises:
        DocumentLoadError: If the document cannot be fetched, read, or
            parsed.
    """
    kind = classify_reference(reference)
    logger.debug("Acquiring document from %s reference", kind.value)

    if kind is ReferenceKind.DOCUMENT:
        return reference
    if kind is ReferenceKind.JSON_TEXT:
        return json.loads(reference)
    if kind is ReferenceKind.URL:
        return await fetch_url(reference, config=config)
    return await read_file(reference)


def _http_client(config: SchemaUtilsConfig) -> httpx.AsyncClient:
    """Build the HTTP client used for a single fetch."""
    return httpx.AsyncClient(
        timeout=config.http.timeout,
        verify=config.http.verify_ssl,
        follow_redirects=config.http.follow_redirects,
    )


def _hint_from_content_type(content_type: str) -> str:
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type:
        return "yaml"
    return ""


async def fetch_url(url: str, *, config: Optional[SchemaUtilsConfig] = None) -> dict[str, Any]:
    """Fetch and parse a document from a URL.  Supports JSON and YAML responses.

    When caching is enabled in *config*, a fresh cached body is used
    instead of a network round-trip, and successful responses are stored.
    Cache access runs in a worker thread, like file reads.

    Args:
        url: The HTTP(S) URL to fetch.
        config: HTTP and cache settings.

    Returns:
        The parsed document.

    Raises:
        DocumentLoadError: If the URL cannot be fetched or the content
            cannot be parsed.
    """
    if config is None:
        config = load_config()

    cache: Optional[DocumentCache] = None
    if config.cache.enabled:
        cache = await asyncio.to_thread(DocumentCache, get_cache_dir(), config.cache)

    try:
        cached = await asyncio.to_thread(cache.get, url) if cache is not None else None
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            return _parse_content(
                cached["content"],
                hint=_hint_from_content_type(cached["content_type"]),
                source=url,
            )

        try:
            async with _http_client(config) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DocumentLoadError(
                f"HTTP {exc.response.status_code} fetching document from {url}"
            ) from exc
        except httpx.RequestError as exc:
            raise DocumentLoadError(f"Failed to fetch document from {url}: {exc}") from exc

        content = response.text
        content_type = response.headers.get("content-type", "")
        document = _parse_content(
            content, hint=_hint_from_content_type(content_type), source=url
        )
        if cache is not None:
            await asyncio.to_thread(cache.set, url, content, content_type)
        return document
    finally:
        if cache is not None:
            await asyncio.to_thread(cache.close)


async def read_file(path: str | Path) -> dict[str, Any]:
    """Read and parse a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Args:
        path: Path to the local file.

    Returns:
        The parsed document.

    Raises:
        DocumentLoadError: If the file does not exist, cannot be read, is
            empty, or cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(f"Document file not found: {path}")

    try:
        content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise DocumentLoadError(f"Document file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint, source=str(path))


def _parse_content(content: str, hint: str = "", source: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').
        source: Where the content came from, for error messages.

    Returns:
        The parsed dictionary.

    Raises:
        DocumentLoadError: If the content cannot be parsed as either format
            or does not hold an object.
    """
    where = f" in {source}" if source else ""
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise DocumentLoadError(
                    f"Document{where} must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DocumentLoadError(f"Invalid JSON{where}: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise DocumentLoadError(
                f"Document{where} must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = f"Failed to parse document{where} as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise DocumentLoadError(msg)


def reference_base_uri(reference: Any) -> str:
    """URI that relative ``$ref`` targets in the referenced document resolve against.

    URLs are their own base and files resolve next to themselves; in-memory
    documents and JSON text resolve against the current working directory.
    """
    kind = classify_reference(reference)
    if kind is ReferenceKind.URL:
        return reference
    if kind is ReferenceKind.PATH:
        return Path(reference).resolve().as_uri()
    return Path.cwd().as_uri() + "/"
