"""Canonical Pydantic models shared across openrpc-schema-utils modules.

The models fall into two groups:

**Configuration models** -- loaded from the user's config directory and
environment by :func:`~openrpc_schema_utils.config.load_config`:
    :class:`HTTPConfig`, :class:`CacheConfig`, :class:`SchemaUtilsConfig`.

**Pipeline models** -- produced while acquiring and validating a document:
    :class:`ReferenceKind`, :class:`ExtensionDeclaration`, :class:`Violation`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration Models ---


class HTTPConfig(BaseModel):
    """Settings for fetching documents (and external ``$ref`` targets) over HTTP."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")


class CacheConfig(BaseModel):
    """On-disk cache settings for documents fetched from URLs."""

    enabled: bool = Field(default=False, description="Cache fetched document bodies")
    ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")


class SchemaUtilsConfig(BaseModel):
    """Library configuration, persisted at ``~/.config/openrpc-schema-utils/config.json``.

    Fields here have the lowest precedence and can be overridden by
    environment variables. See :func:`~openrpc_schema_utils.config.load_config`.
    """

    http: HTTPConfig = Field(default_factory=HTTPConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    default_document: str = Field(
        default="openrpc.json",
        description="File name looked up in the working directory when no reference is given",
    )


# --- Pipeline Models ---


class ReferenceKind(str, enum.Enum):
    """How a document reference passed to the parser should be acquired."""

    DOCUMENT = "document"
    JSON_TEXT = "json_text"
    URL = "url"
    PATH = "path"


class ExtensionDeclaration(BaseModel):
    """A single entry of a document's ``x-extensions`` list.

    Declares a vendor property ``name`` whose value must match ``schema``
    wherever it appears on one of the ``restricted`` meta-schema
    definitions.  When ``required`` is true the property becomes mandatory
    on each of those definitions.

    Example::

        ExtensionDeclaration.model_validate({
            "name": "x-rate-limit",
            "schema": {"type": "integer"},
            "restricted": ["methodObject"],
            "required": True,
        })
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(min_length=1)
    schema_: Any = Field(alias="schema")
    restricted: list[str]
    required: bool = False
    description: Optional[str] = None
    summary: Optional[str] = None
    version: Optional[str] = None


class Violation(BaseModel):
    """One mismatch between a document and the meta-schema.

    Both paths are JSON Pointers; the empty string addresses the root.
    """

    keyword: str = Field(description="The JSON Schema keyword that failed")
    schema_path: str = Field(description="Pointer into the meta-schema")
    instance_path: str = Field(description="Pointer into the document")
    message: str
