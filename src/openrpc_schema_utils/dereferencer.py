"""Resolve ``$ref`` JSON Reference pointers in OpenRPC documents.

OpenRPC documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to share content descriptors,
schemas, errors and examples.  This module performs a recursive deep-copy
traversal of a document, replacing every ``$ref`` with the object it points
to.

Both **internal** references (``#/...``) and **external** references
(``common.json#/Pet``, ``https://example.com/types.json``) are supported.
External targets are resolved relative to the URI of the document that
contains them and loaded through
:func:`~openrpc_schema_utils.loader.read_file` or
:func:`~openrpc_schema_utils.loader.fetch_url`; each external document is
loaded at most once per call.

Circular references are detected via a ``seen`` set and left unresolved to
prevent infinite recursion: a schema that references itself keeps its
``$ref`` dict at the cycle point.

The single public function is :func:`dereference_document`.
"""

from __future__ import annotations

import copy
import logging
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urldefrag, urljoin, urlparse
from urllib.request import url2pathname

from openrpc_schema_utils.exceptions import ReferenceResolutionError
from openrpc_schema_utils.loader import fetch_url, read_file
from openrpc_schema_utils.models import SchemaUtilsConfig

logger = logging.getLogger(__name__)

_ARRAY_INDEX = re.compile(r"0|[1-9][0-9]*")


async def dereference_document(
    document: Any,
    *,
    base_uri: Optional[str] = None,
    config: Optional[SchemaUtilsConfig] = None,
) -> Any:
    """Resolve all ``$ref`` JSON Reference pointers in *document*.

    Creates a deep copy of the input and recursively replaces every
    ``{"$ref": "..."}`` dict with the object it points to.

    Args:
        document: The OpenRPC document.  It is not modified.
        base_uri: URI that relative external references resolve against,
            typically the document's own URL or ``file://`` URI.  Defaults
            to the current working directory.
        config: HTTP and cache settings used when fetching external
            documents over HTTP.

    Returns:
        A **new** document with all resolvable ``$ref`` pointers replaced
        by their target objects.

    Raises:
        ReferenceResolutionError: If a ``$ref`` points to a location that
            does not exist, or uses an unsupported URI scheme.
        DocumentLoadError: If an external document cannot be loaded.

    Example::

        resolved = await dereference_document(
            {
                "methods": [{"$ref": "#/components/x-methods/ping"}],
                "components": {"x-methods": {"ping": {"name": "ping", "params": []}}},
            }
        )
        # resolved["methods"][0] == {"name": "ping", "params": []}
    """
    root = copy.deepcopy(document)
    base = base_uri or Path.cwd().as_uri() + "/"
    resolver = _Resolver(root, base, config)
    resolved = await resolver.resolve(root, root, base)
    logger.debug("Dereferenced document (%d external document(s) loaded)", resolver.loaded)
    return resolved


class _Resolver:
    """Per-call resolution state: the loaded documents keyed by URI."""

    def __init__(self, root: Any, base_uri: str, config: Optional[SchemaUtilsConfig]) -> None:
        self._config = config
        self._documents: dict[str, Any] = {urldefrag(base_uri).url: root}
        self.loaded = 0

    async def resolve(
        self,
        obj: Any,
        root: Any,
        base_uri: str,
        seen: frozenset[str] = frozenset(),
    ) -> Any:
        """Recursively resolve all ``$ref`` pointers within *obj*.

        Walks dicts and lists depth-first.  When a dict containing a string
        ``$ref`` is found, the reference is resolved and the result is
        processed in turn (resolved targets may themselves contain
        ``$ref`` pointers), relative to the document the target lives in.

        ``seen`` holds the absolute references currently on the resolution
        stack; each branch extends its own copy so that sibling references
        do not interfere with each other.
        """
        if isinstance(obj, dict):
            ref = obj.get("$ref")
            if isinstance(ref, str):
                target, target_uri, fragment = _split_target(base_uri, ref)
                if target in seen:
                    return obj
                target_root = await self._document(target_uri, root, base_uri)
                resolved = _resolve_pointer(fragment, target_root, ref)
                return await self.resolve(resolved, target_root, target_uri, seen | {target})

            return {key: await self.resolve(value, root, base_uri, seen) for key, value in obj.items()}

        if isinstance(obj, list):
            return [await self.resolve(item, root, base_uri, seen) for item in obj]

        return obj

    async def _document(self, uri: str, current_root: Any, current_base: str) -> Any:
        """Return the document at *uri*, loading it on first use."""
        if uri == urldefrag(current_base).url:
            return current_root
        if uri not in self._documents:
            self._documents[uri] = await self._load(uri)
            self.loaded += 1
        return self._documents[uri]

    async def _load(self, uri: str) -> Any:
        scheme = urlparse(uri).scheme
        logger.debug("Loading external reference target %s", uri)
        if scheme in ("http", "https"):
            return await fetch_url(uri, config=self._config)
        if scheme == "file":
            return await read_file(url2pathname(urlparse(uri).path))
        raise ReferenceResolutionError(
            f"Cannot load external $ref target {uri}: unsupported scheme '{scheme}'"
        )


def _split_target(base_uri: str, ref: str) -> tuple[str, str, str]:
    """Return the absolute reference, its document URI and its fragment."""
    try:
        target = urljoin(base_uri, ref)
        target_uri, fragment = urldefrag(target)
    except ValueError as exc:
        raise ReferenceResolutionError(f"Cannot resolve $ref '{ref}': {exc}") from exc
    return target, target_uri, fragment


def _resolve_pointer(fragment: str, root: Any, ref: str) -> Any:
    """Resolve a URI fragment JSON Pointer against *root*.

    Handles percent-encoding and RFC 6901 escaping (``~0`` for ``~``,
    ``~1`` for ``/``).  An empty fragment addresses the whole document.

    Raises:
        ReferenceResolutionError: If the fragment is not a JSON Pointer or
            any segment does not exist in the document.
    """
    pointer = unquote(fragment)
    if not pointer:
        return root
    if not pointer.startswith("/"):
        raise ReferenceResolutionError(
            f"Cannot resolve $ref '{ref}': '{pointer}' is not a JSON Pointer"
        )

    current: Any = root
    for segment in pointer[1:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise ReferenceResolutionError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            if not _ARRAY_INDEX.fullmatch(segment) or int(segment) >= len(current):
                raise ReferenceResolutionError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                )
            current = current[int(segment)]
        else:
            raise ReferenceResolutionError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current
