"""openrpc-schema-utils -- parse, validate, and dereference OpenRPC documents.

Typical usage::

    import asyncio

    from openrpc_schema_utils import parse_open_rpc_document, validate_open_rpc_document

    document = asyncio.run(parse_open_rpc_document("https://example.com/openrpc.json"))

    result = validate_open_rpc_document({"openrpc": "1.2.6"})
    if result is not True:
        print(result)

Sub-modules:

* :mod:`~openrpc_schema_utils.parser` -- The acquire / validate /
  dereference pipeline.
* :mod:`~openrpc_schema_utils.validator` -- Meta-schema validation and
  sanitization.
* :mod:`~openrpc_schema_utils.extensions` -- ``x-extensions`` merging.
* :mod:`~openrpc_schema_utils.loader` -- I/O layer (object, JSON text,
  URL, file).
* :mod:`~openrpc_schema_utils.dereferencer` -- ``$ref`` resolution.
"""

from openrpc_schema_utils.config import load_config
from openrpc_schema_utils.dereferencer import dereference_document
from openrpc_schema_utils.exceptions import (
    ConfigError,
    DocumentLoadError,
    ExtensionConfigurationError,
    OpenRPCDocumentDereferencingError,
    OpenRPCDocumentValidationError,
    ReferenceResolutionError,
    SchemaUtilsError,
)
from openrpc_schema_utils.extensions import apply_extensions_to_meta_schema
from openrpc_schema_utils.loader import acquire_document, classify_reference, fetch_url, read_file
from openrpc_schema_utils.meta_schema import get_meta_schema
from openrpc_schema_utils.parser import parse_open_rpc_document
from openrpc_schema_utils.validator import sanitize_meta_schema, validate_open_rpc_document

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DocumentLoadError",
    "ExtensionConfigurationError",
    "OpenRPCDocumentDereferencingError",
    "OpenRPCDocumentValidationError",
    "ReferenceResolutionError",
    "SchemaUtilsError",
    "acquire_document",
    "apply_extensions_to_meta_schema",
    "classify_reference",
    "dereference_document",
    "fetch_url",
    "get_meta_schema",
    "load_config",
    "parse_open_rpc_document",
    "read_file",
    "sanitize_meta_schema",
    "validate_open_rpc_document",
]
