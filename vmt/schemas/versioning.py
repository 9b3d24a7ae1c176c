"""
Module 01 - Schemas & Serialization
File: versioning.py

Purpose: Centralize the proof wire-format version constants.
This file must stay tiny and have no imports from other schema files
to avoid circular dependencies.
"""

# Current proof schema version - embedded in every serialized proof
SCHEMA_VERSION: str = "v1"

# Supported versions for forward compatibility
SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})


def is_compatible_schema_version(version: str) -> bool:
    """Check if a schema version is compatible without raising."""
    return version in SUPPORTED_SCHEMA_VERSIONS
