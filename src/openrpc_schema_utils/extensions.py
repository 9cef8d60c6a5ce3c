"""Merge document-declared extensions into the OpenRPC meta-schema.

An OpenRPC document may declare vendor properties in a top-level
``x-extensions`` list.  Each entry names the property, the JSON Schema its
value must satisfy, the meta-schema definitions it may appear on
(``restricted``), and whether it is mandatory there (``required``)::

    {
        "x-extensions": [
            {
                "name": "x-rate-limit",
                "schema": {"type": "integer", "minimum": 1},
                "restricted": ["methodObject"],
                "required": true
            }
        ]
    }

:func:`apply_extensions_to_meta_schema` injects each declaration into the
``properties`` (and, when required, ``required``) of every restricted
definition, in declaration order, so that a later declaration for the same
definition and name overwrites an earlier one.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from pydantic import ValidationError as PydanticValidationError

from openrpc_schema_utils.exceptions import ExtensionConfigurationError
from openrpc_schema_utils.meta_schema import get_meta_schema
from openrpc_schema_utils.models import ExtensionDeclaration

logger = logging.getLogger(__name__)

EXTENSIONS_KEY = "x-extensions"


def get_extension_declarations(document: Any) -> list[ExtensionDeclaration]:
    """Parse the ``x-extensions`` list of *document*.

    Returns:
        The declarations in document order; empty when the document has no
        ``x-extensions`` (or is not a mapping at all, in which case the
        validator reports it).

    Raises:
        ExtensionConfigurationError: If ``x-extensions`` is not a list or
            one of its entries is malformed.
    """
    if not isinstance(document, dict) or EXTENSIONS_KEY not in document:
        return []

    raw = document[EXTENSIONS_KEY]
    if not isinstance(raw, list):
        raise ExtensionConfigurationError(
            f"'{EXTENSIONS_KEY}' must be a list of extension declarations "
            f"(got {type(raw).__name__})"
        )

    declarations: list[ExtensionDeclaration] = []
    for index, entry in enumerate(raw):
        name = entry.get("name") if isinstance(entry, dict) else None
        try:
            declarations.append(ExtensionDeclaration.model_validate(entry))
        except PydanticValidationError as exc:
            raise ExtensionConfigurationError(
                f"Invalid extension declaration at {EXTENSIONS_KEY}[{index}]: {exc}",
                extension_name=name if isinstance(name, str) else None,
            ) from exc
    return declarations


def apply_extensions_to_meta_schema(
    document: Any,
    meta_schema: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Return the meta-schema augmented with *document*'s extension declarations.

    The result is always a new object: the bundled meta-schema (or the
    *meta_schema* passed in) is copied before anything is injected, so the
    caller may sanitize or otherwise mutate it freely.

    Args:
        document: The OpenRPC document whose ``x-extensions`` are applied.
        meta_schema: Base meta-schema to extend.  Defaults to the bundled
            OpenRPC meta-schema.

    Returns:
        The augmented (not yet sanitized) meta-schema.

    Raises:
        ExtensionConfigurationError: If a declaration is malformed, its
            ``schema`` is not a valid JSON Schema, or one of its
            ``restricted`` entries names a definition the meta-schema does
            not have.
    """
    extended = get_meta_schema() if meta_schema is None else copy.deepcopy(meta_schema)
    declarations = get_extension_declarations(document)
    if not declarations:
        return extended

    definitions = extended.get("definitions", {})
    for declaration in declarations:
        try:
            Draft7Validator.check_schema(declaration.schema_)
        except SchemaError as exc:
            raise ExtensionConfigurationError(
                f"Extension '{declaration.name}' declares an invalid schema: {exc.message}",
                extension_name=declaration.name,
            ) from exc

        for definition_name in declaration.restricted:
            definition = definitions.get(definition_name)
            if not isinstance(definition, dict):
                raise ExtensionConfigurationError(
                    f"Extension '{declaration.name}' is restricted to "
                    f"'{definition_name}', which is not a definition in the "
                    "OpenRPC meta-schema",
                    extension_name=declaration.name,
                    definition_name=definition_name,
                )

            properties = definition.setdefault("properties", {})
            properties[declaration.name] = copy.deepcopy(declaration.schema_)

            if declaration.required:
                required = definition.setdefault("required", [])
                if declaration.name not in required:
                    required.append(declaration.name)

        logger.debug(
            "Applied extension %s to %s (required=%s)",
            declaration.name,
            ", ".join(declaration.restricted) or "<none>",
            declaration.required,
        )

    return extended
