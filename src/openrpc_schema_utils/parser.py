"""End-to-end OpenRPC document parsing: acquire, validate, dereference.

:func:`parse_open_rpc_document` is a strict three-stage pipeline.  Any
stage failure aborts the whole call; there are no retries and no partial
results:

1. **Acquire** -- :func:`~openrpc_schema_utils.loader.acquire_document`
   turns the reference into a raw document.  Load failures propagate as
   :class:`~openrpc_schema_utils.exceptions.DocumentLoadError`.
2. **Validate** --
   :func:`~openrpc_schema_utils.validator.validate_open_rpc_document`
   checks the document against the extension-augmented meta-schema.  A
   returned validation error is raised; nothing is dereferenced.
3. **Dereference** --
   :func:`~openrpc_schema_utils.dereferencer.dereference_document`
   inlines every ``$ref``.  Its failures are wrapped in
   :class:`~openrpc_schema_utils.exceptions.OpenRPCDocumentDereferencingError`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from openrpc_schema_utils.config import load_config
from openrpc_schema_utils.dereferencer import dereference_document
from openrpc_schema_utils.exceptions import (
    DocumentLoadError,
    OpenRPCDocumentDereferencingError,
    ReferenceResolutionError,
)
from openrpc_schema_utils.loader import (
    acquire_document,
    default_reference,
    reference_base_uri,
)
from openrpc_schema_utils.models import SchemaUtilsConfig
from openrpc_schema_utils.validator import validate_open_rpc_document

logger = logging.getLogger(__name__)


async def parse_open_rpc_document(
    reference: Any = None,
    *,
    config: Optional[SchemaUtilsConfig] = None,
) -> Any:
    """Resolve, validate and dereference an OpenRPC document.

    Args:
        reference: The OpenRPC document or a reference to one.  A
            non-string is used as the document itself.  A string may be the
            document as JSON text, a URL that serves it, or a path to a file
            containing it.  When omitted, ``openrpc.json`` (see
            :attr:`~openrpc_schema_utils.models.SchemaUtilsConfig.default_document`)
            in the current working directory is read.
        config: HTTP, cache and default-document settings.  Loaded with
            :func:`~openrpc_schema_utils.config.load_config` when omitted.

    Returns:
        A copy of the document with every ``$ref`` dereferenced.

    Raises:
        DocumentLoadError: If the document cannot be fetched, read or
            parsed.
        ExtensionConfigurationError: If the document's ``x-extensions``
            cannot be applied to the meta-schema.
        OpenRPCDocumentValidationError: If the document does not conform to
            the meta-schema.
        OpenRPCDocumentDereferencingError: If a ``$ref`` cannot be resolved.

    Example::

        document = await parse_open_rpc_document("https://example.com/openrpc.json")
        from_file = await parse_open_rpc_document("./openrpc.json")
        from_text = await parse_open_rpc_document('{"openrpc": "1.2.6", ...}')
        from_cwd = await parse_open_rpc_document()
    """
    if config is None:
        config = load_config()
    if reference is None:
        reference = default_reference(config)

    document = await acquire_document(reference, config=config)

    result = validate_open_rpc_document(document)
    if result is not True:
        raise result

    try:
        resolved = await dereference_document(
            document,
            base_uri=reference_base_uri(reference),
            config=config,
        )
    except (ReferenceResolutionError, DocumentLoadError) as exc:
        raise OpenRPCDocumentDereferencingError(exc) from exc

    logger.debug("Parsed OpenRPC document")
    return resolved
