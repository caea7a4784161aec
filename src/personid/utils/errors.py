"""Typed exceptions for input validation and I/O formats."""


class PersonIdError(Exception):
    """Base class for all package errors."""


class InvalidInputError(PersonIdError, ValueError):
    """Raised when pipeline inputs are inconsistent.

    Examples are feature vectors and evidence lists of different lengths, or
    document indices that are duplicated or out of range.
    """


class IOFormatError(PersonIdError, ValueError):
    """Base class for I/O format related errors."""


class UnsupportedFormatError(IOFormatError):
    """Raised when no reader or writer is registered for a file format."""


class MalformedDocumentError(IOFormatError):
    """Raised when an evidence document record cannot be decoded."""
