"""Custom exception hierarchy for pycello."""

from __future__ import annotations


class CelloError(Exception):
    """Base exception for all pycello errors."""


class CelloFormatError(CelloError):
    """Malformed registry dump or attribute-file text.

    Fatal for the whole parse; no partial results are produced.
    """

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        line: str = "",
    ) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(message)


class CelloInvalidDataError(CelloError):
    """A raw field value could not be coerced to its declared type.

    Raised for integers that fit neither the signed nor the unsigned
    range of the field, and for boolean tokens other than ``Yes``/``No``.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str = "",
        value: str = "",
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class CelloPlatformUnsupportedError(CelloError):
    """No battery source exists for the current operating system."""

    def __init__(self, message: str, *, platform: str = "") -> None:
        self.platform = platform
        super().__init__(message)


class CelloUnitMismatchError(CelloError, ValueError):
    """Two capacity values with different units were combined."""
