"""Validate OpenRPC documents against the (extension-augmented) meta-schema.

Validation is a three-step affair:

1. :func:`~openrpc_schema_utils.extensions.apply_extensions_to_meta_schema`
   builds a private copy of the meta-schema with the document's
   ``x-extensions`` injected.
2. :func:`sanitize_meta_schema` strips the identity fields (``$id`` and
   ``$schema``) from the root and from the nested JSON Schema definition,
   so that internal ``#/definitions/...`` references resolve against the
   meta-schema itself instead of triggering a remote lookup.
3. A fresh :class:`jsonschema.Draft7Validator` checks the document and
   every reported error is converted into a
   :class:`~openrpc_schema_utils.models.Violation`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from typing import Any, Literal

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError
from referencing.exceptions import Unresolvable

from openrpc_schema_utils.exceptions import (
    ExtensionConfigurationError,
    OpenRPCDocumentValidationError,
)
from openrpc_schema_utils.extensions import apply_extensions_to_meta_schema
from openrpc_schema_utils.meta_schema import JSON_SCHEMA_DEFINITION
from openrpc_schema_utils.models import Violation

logger = logging.getLogger(__name__)

_IDENTITY_KEYS = ("$id", "$schema")


def sanitize_meta_schema(meta_schema: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *meta_schema* without its identity fields.

    ``$id`` and ``$schema`` are removed from the root and from the
    ``JSONSchema`` definition.  Applying it twice gives the same result as
    applying it once.
    """
    sanitized = copy.deepcopy(meta_schema)
    for key in _IDENTITY_KEYS:
        sanitized.pop(key, None)

    json_schema = sanitized.get("definitions", {}).get(JSON_SCHEMA_DEFINITION)
    if isinstance(json_schema, dict):
        for key in _IDENTITY_KEYS:
            json_schema.pop(key, None)
    return sanitized


def _to_pointer(parts: Iterable[Any]) -> str:
    """Render path segments as an RFC 6901 JSON Pointer."""
    return "".join(
        "/" + str(part).replace("~", "~0").replace("/", "~1") for part in parts
    )


def _flatten(errors: Iterable[JSONSchemaValidationError]) -> Iterator[JSONSchemaValidationError]:
    """Yield each error followed by the branch errors of ``oneOf``/``anyOf`` failures."""
    for error in errors:
        yield error
        yield from _flatten(error.context)


def _to_violation(error: JSONSchemaValidationError) -> Violation:
    return Violation(
        keyword=str(error.validator),
        schema_path="#" + _to_pointer(error.absolute_schema_path),
        instance_path=_to_pointer(error.absolute_path),
        message=error.message,
    )


def validate_open_rpc_document(
    document: Any,
) -> Literal[True] | OpenRPCDocumentValidationError:
    """Check *document* against the OpenRPC meta-schema and its declared extensions.

    Args:
        document: The OpenRPC document to validate.

    Returns:
        ``True`` if the document is valid, otherwise an
        :class:`~openrpc_schema_utils.exceptions.OpenRPCDocumentValidationError`
        carrying every violation (including the failing branches of
        ``oneOf``/``anyOf`` keywords), ordered by location in the document.

    Raises:
        ExtensionConfigurationError: If the document's ``x-extensions``
            cannot be applied to the meta-schema.  This is a broken
            declaration, not a validation failure, so it is raised rather
            than returned.

    Example::

        result = validate_open_rpc_document({})
        if result is not True:
            for violation in result.errors:
                print(violation.instance_path, violation.message)
    """
    meta_schema = sanitize_meta_schema(apply_extensions_to_meta_schema(document))
    validator = Draft7Validator(meta_schema, format_checker=Draft7Validator.FORMAT_CHECKER)

    try:
        errors = sorted(
            _flatten(validator.iter_errors(document)),
            key=lambda e: list(e.absolute_path),
        )
    except Unresolvable as exc:
        raise ExtensionConfigurationError(
            f"An extension schema contains a reference that cannot be resolved: {exc}"
        ) from exc

    if errors:
        logger.debug("Document failed validation with %d violation(s)", len(errors))
        return OpenRPCDocumentValidationError([_to_violation(error) for error in errors])

    logger.debug("Document is valid")
    return True
