"""Exceptions raised by vprofile."""

from enum import Enum


class ErrorKind(Enum):
    """Categories of failure reported by vprofile operations."""
    INVALID_ARGUMENT = "invalid_argument"
    NOT_DERIVABLE = "not_derivable"
    OUT_OF_MEMORY = "out_of_memory"
    INCONSISTENT_COLLOCATION = "inconsistent_collocation"


class VProfileError(Exception):
    """Base class for all vprofile errors.

    Attributes:
        kind: Category of the failure
        message: Human readable description
    """

    kind = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidArgumentError(VProfileError, ValueError):
    """Raised for wrong dimensions, mismatched extents or data types."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotDerivableError(VProfileError):
    """Raised when a variable cannot be produced from a product."""

    kind = ErrorKind.NOT_DERIVABLE


class OutOfMemoryError(VProfileError, MemoryError):
    """Raised when a temporary buffer cannot be allocated."""

    kind = ErrorKind.OUT_OF_MEMORY


class InconsistentCollocationError(VProfileError):
    """Raised when a product and a collocation result do not line up."""

    kind = ErrorKind.INCONSISTENT_COLLOCATION
