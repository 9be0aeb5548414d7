"""
Structural errors raised while patching a PE image.

Every error carries an ErrorKind so callers can dispatch on the kind
without string matching, and each kind has its own subclass so callers
can also catch them individually.
"""

from enum import Enum


class ErrorKind(Enum):
    """Why an append was rejected."""

    INVALID_PE_HEADER = "invalid_pe_header"
    MISSING_OPTIONAL_HEADER = "missing_optional_header"
    UNSUPPORTED_PE_FORMAT = "unsupported_pe_format"
    CERT_LENGTH_MISMATCH = "cert_length_mismatch"
    OUT_OF_BOUNDS = "out_of_bounds"


class TrailerError(ValueError):
    """Base class for structural errors in a PE image."""

    kind: ErrorKind


class InvalidPEHeaderError(TrailerError):
    """The DOS header does not point at a "PE\\0\\0" signature."""

    kind = ErrorKind.INVALID_PE_HEADER


class MissingOptionalHeaderError(TrailerError):
    """The COFF header declares a zero-sized optional header."""

    kind = ErrorKind.MISSING_OPTIONAL_HEADER


class UnsupportedPEFormatError(TrailerError):
    """The optional header is not PE32 (e.g. PE32+)."""

    kind = ErrorKind.UNSUPPORTED_PE_FORMAT


class CertLengthMismatchError(TrailerError):
    """The certificate table length disagrees with its data directory."""

    kind = ErrorKind.CERT_LENGTH_MISMATCH


class OutOfBoundsError(TrailerError):
    """A read or write would fall outside the image."""

    kind = ErrorKind.OUT_OF_BOUNDS
