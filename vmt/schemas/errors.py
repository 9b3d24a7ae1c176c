"""
Module 01 - Schemas & Serialization
File: errors.py

Purpose: Standard error taxonomy for tree construction, proof generation
and proof validation. Defines both Pydantic models for structured error
reporting and Python exceptions for control flow.

A failed proof validation is NOT an error: validators return False for a
hash mismatch. Exceptions are reserved for malformed input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Construction Errors
    EMPTY_INPUT = "EMPTY_INPUT"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    DUPLICATE_VALUE = "DUPLICATE_VALUE"

    # Proof Errors
    VALUE_NOT_FOUND = "VALUE_NOT_FOUND"
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class VmtError(BaseModel):
    """
    Error model for structured error communication.

    Used when an error has to cross a boundary as data (logs, reports)
    rather than as a raised exception.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_PROOF],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "VmtException":
        """Convert this error model to the matching exception type."""
        exc_type = _EXCEPTIONS_BY_CODE.get(self.code)
        if exc_type is None:
            return VmtException(
                message=self.message,
                code=self.code,
                details=self.details,
            )
        return exc_type(message=self.message, details=dict(self.details))


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class VmtException(Exception):
    """
    Base exception for all tree and proof errors.

    Carries structured error information and can be converted to a
    VmtError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "VMT_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> VmtError:
        """Convert this exception to a VmtError model."""
        return VmtError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputError(VmtException):
    """Raised when a tree is built from an empty sequence of values."""

    def __init__(
        self,
        message: str = "Cannot build a Merkle tree from an empty sequence",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_INPUT,
            details=details,
        )


class SerializationError(VmtException):
    """Raised when a value cannot be converted to bytes."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SERIALIZATION_ERROR,
            details=details,
        )


class DuplicateValueError(VmtException):
    """Raised when duplicate values are rejected at build time."""

    def __init__(
        self,
        message: str,
        first_index: int | None = None,
        duplicate_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if first_index is not None:
            full_details["first_index"] = first_index
        if duplicate_index is not None:
            full_details["duplicate_index"] = duplicate_index
        super().__init__(
            message=message,
            code=ErrorCodes.DUPLICATE_VALUE,
            details=full_details,
        )


class NotFoundError(VmtException):
    """Raised when a proof is requested for a value that is not in the tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.VALUE_NOT_FOUND,
            details=details,
        )


class MalformedProofError(VmtException):
    """Raised when a proof is structurally invalid (not merely wrong)."""

    def __init__(
        self,
        message: str,
        sibling_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if sibling_index is not None:
            full_details["sibling_index"] = sibling_index
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=full_details,
        )


class ConfigurationError(VmtException):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_name:
            full_details["field"] = field_name
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[VmtException]] = {
    ErrorCodes.EMPTY_INPUT: EmptyInputError,
    ErrorCodes.SERIALIZATION_ERROR: SerializationError,
    ErrorCodes.DUPLICATE_VALUE: DuplicateValueError,
    ErrorCodes.VALUE_NOT_FOUND: NotFoundError,
    ErrorCodes.MALFORMED_PROOF: MalformedProofError,
    ErrorCodes.CONFIGURATION_ERROR: ConfigurationError,
}
