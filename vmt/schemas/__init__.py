"""
Module 01 - Schemas & Serialization
File: __init__.py

Purpose: Export value serialization, version constants and the error
taxonomy. The proof wire schema lives in vmt.schemas.proof and is not
re-exported here because it depends on vmt.crypto.
"""

# Version constants
from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    is_compatible_schema_version,
)

# Value serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    JSON_VALUE_TAG,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    loads_canonical,
    serialize_value,
)

# Error models and exceptions
from .errors import (
    ConfigurationError,
    DuplicateValueError,
    EmptyInputError,
    ErrorCodes,
    MalformedProofError,
    NotFoundError,
    SerializationError,
    VmtError,
    VmtException,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "is_compatible_schema_version",
    # Serialization
    "CANONICAL_JSON_SEPARATORS",
    "JSON_VALUE_TAG",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "loads_canonical",
    "serialize_value",
    # Errors
    "ConfigurationError",
    "DuplicateValueError",
    "EmptyInputError",
    "ErrorCodes",
    "MalformedProofError",
    "NotFoundError",
    "SerializationError",
    "VmtError",
    "VmtException",
]
