"""The bundled OpenRPC meta-schema.

The JSON file next to this module is parsed once per process; every caller
of :func:`get_meta_schema` receives its own deep copy so that extension
injection can never leak from one validation into another.
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from importlib import resources
from typing import Any

META_SCHEMA_RESOURCE = "openrpc.json"

JSON_SCHEMA_DEFINITION = "JSONSchema"
"""Name of the definition that describes an inline JSON Schema value."""


@lru_cache(maxsize=1)
def _load_meta_schema() -> dict[str, Any]:
    text = resources.files(__name__).joinpath(META_SCHEMA_RESOURCE).read_text(encoding="utf-8")
    return json.loads(text)


def get_meta_schema() -> dict[str, Any]:
    """Return a fresh, mutable copy of the OpenRPC meta-schema."""
    return copy.deepcopy(_load_meta_schema())


__all__ = ["JSON_SCHEMA_DEFINITION", "get_meta_schema"]
