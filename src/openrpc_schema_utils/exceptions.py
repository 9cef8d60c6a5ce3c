"""Exception hierarchy for openrpc-schema-utils.

Every error raised by the library inherits from :class:`SchemaUtilsError`,
so callers can catch the whole family at once or branch on the concrete
subclass to decide how to remediate.

Subclass hierarchy::

    SchemaUtilsError
    +-- DocumentLoadError                  (acquisition: file, URL, parse)
    +-- ExtensionConfigurationError        (broken ``x-extensions`` entry)
    +-- OpenRPCDocumentValidationError     (meta-schema violations)
    +-- ReferenceResolutionError           (``$ref`` engine failure)
    +-- OpenRPCDocumentDereferencingError  (pipeline-level wrapper)
    +-- ConfigError                        (invalid library configuration)
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from openrpc_schema_utils.models import Violation


class SchemaUtilsError(Exception):
    """Base exception for all openrpc-schema-utils errors."""


class DocumentLoadError(SchemaUtilsError):
    """Raised when a document cannot be read, fetched, or parsed."""


class ExtensionConfigurationError(SchemaUtilsError):
    """Raised when an ``x-extensions`` declaration cannot be applied.

    This signals a defect in the extension declaration itself (for example
    a ``restricted`` entry naming a definition the meta-schema does not
    have), never a document that fails validation.

    Args:
        message: Human-readable error description.
        extension_name: The ``name`` of the offending extension, if known.
        definition_name: The meta-schema definition that could not be
            found, if that was the cause.
    """

    def __init__(
        self,
        message: str,
        extension_name: Optional[str] = None,
        definition_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.extension_name = extension_name
        self.definition_name = definition_name


class OpenRPCDocumentValidationError(SchemaUtilsError):
    """An OpenRPC document that does not conform to the meta-schema.

    Instances are *returned* by
    :func:`~openrpc_schema_utils.validator.validate_open_rpc_document` and
    *raised* by
    :func:`~openrpc_schema_utils.parser.parse_open_rpc_document`.

    Args:
        errors: The ordered violations reported by the validation engine.
    """

    def __init__(self, errors: list[Violation]):
        self.errors = list(errors)
        serialized = json.dumps(
            [violation.model_dump() for violation in self.errors], indent=2
        )
        super().__init__(
            "\n".join(
                [
                    "Error validating OpenRPC document against the OpenRPC meta-schema.",
                    "The errors found are as follows:",
                    serialized,
                ]
            )
        )


class ReferenceResolutionError(SchemaUtilsError):
    """Raised by the dereferencer when a ``$ref`` cannot be resolved."""


class OpenRPCDocumentDereferencingError(SchemaUtilsError):
    """Raised when a validated document cannot be dereferenced.

    Args:
        exc: The error that originated from the dereferencer (or from
            loading one of its external targets).
    """

    def __init__(self, exc: Exception):
        super().__init__(
            "The json schema provided cannot be dereferenced. "
            f"Received Error: \n {exc}"
        )
        self.cause_message = str(exc)


class ConfigError(SchemaUtilsError):
    """Raised for configuration problems (invalid JSON, bad values, bad env vars)."""
