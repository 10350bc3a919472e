"""
Error types raised by omicsfuse.

All errors surface immediately to the caller; nothing is retried and no view
is silently dropped from a fusion run.
"""


class OmicsFuseError(Exception):
    """Base class for all omicsfuse errors."""


class InvalidInput(OmicsFuseError, ValueError):
    """Non-finite values, empty or degenerate matrices, too few views."""


class DimensionMismatch(OmicsFuseError, ValueError):
    """Views or matrices disagree on patient count / shape."""


class InvalidParameter(OmicsFuseError, ValueError):
    """K, alpha, T, C or top-K outside its valid domain."""


class NumericalFailure(OmicsFuseError, ArithmeticError):
    """Eigensolver failure, zero-sum rows or a scaling that does not converge."""
