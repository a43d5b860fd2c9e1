"""Normalization helpers.

Centralizes raw-text coercion for platform battery fields and the small
numeric helpers shared by the platform engines.

Coercion functions raise :class:`~pycello.exceptions.CelloInvalidDataError`.
It is not a ``ValueError`` subclass, so when these functions
run inside pydantic validators the error propagates unwrapped instead of
being folded into a ``ValidationError``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BeforeValidator, ValidationInfo

from pycello.exceptions import CelloInvalidDataError

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")

_YES = "Yes"
_NO = "No"


def _parse_integer(text: str, field: str) -> int:
    if not _INTEGER_RE.match(text):
        raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text)
    return int(text)


def parse_signed(text: str, bits: int, *, field: str = "", reparse_negative: bool = True) -> int:
    """Parse *text* as a signed integer of *bits* width.

    Text outside the signed range but inside the unsigned range of the
    same width is reinterpreted as two's complement, which recovers
    negative quantities some sources print as large unsigned numbers
    (``65535`` -> ``-1`` for 16 bits).
    """
    value = _parse_integer(text, field)
    return _fit_signed(value, bits, field=field, text=text, reparse_negative=reparse_negative)


def parse_unsigned(text: str, bits: int, *, field: str = "") -> int:
    """Parse *text* as an unsigned integer of *bits* width."""
    value = _parse_integer(text, field)
    return _fit_unsigned(value, bits, field=field, text=text)


def _fit_signed(value: int, bits: int, *, field: str, text: str, reparse_negative: bool) -> int:
    limit = 1 << (bits - 1)
    if -limit <= value < limit:
        return value
    if reparse_negative and limit <= value < (limit << 1):
        return value - (limit << 1)
    raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text)


def _fit_unsigned(value: int, bits: int, *, field: str, text: str) -> int:
    if 0 <= value < (1 << bits):
        return value
    raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text)


def parse_yes_no(text: str, *, field: str = "") -> bool:
    """Parse the registry boolean tokens ``Yes`` and ``No``."""
    if text == _YES:
        return True
    if text == _NO:
        return False
    raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text)


def parse_decimal(text: str, *, field: str = "") -> float:
    try:
        result = float(text)
    except ValueError:
        raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text) from None
    if math.isnan(result) or math.isinf(result):
        raise CelloInvalidDataError(f"Invalid {field or 'value'}: {text!r}", field=field, value=text)
    return result


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def _field_name(info: ValidationInfo) -> str:
    return info.field_name or ""


def signed_field(bits: int, *, reparse_negative: bool = True) -> Callable[[Any, ValidationInfo], int | None]:
    """Build a ``BeforeValidator`` function for a signed integer field."""

    def _validate(value: Any, info: ValidationInfo) -> int | None:
        if value is None:
            return None
        name = _field_name(info)
        if isinstance(value, int) and not isinstance(value, bool):
            return _fit_signed(value, bits, field=name, text=str(value), reparse_negative=reparse_negative)
        if isinstance(value, str):
            return parse_signed(value, bits, field=name, reparse_negative=reparse_negative)
        raise CelloInvalidDataError(f"Invalid {name}: {value!r}", field=name, value=repr(value))

    return _validate


def unsigned_field(bits: int) -> Callable[[Any, ValidationInfo], int | None]:
    """Build a ``BeforeValidator`` function for an unsigned integer field."""

    def _validate(value: Any, info: ValidationInfo) -> int | None:
        if value is None:
            return None
        name = _field_name(info)
        if isinstance(value, int) and not isinstance(value, bool):
            return _fit_unsigned(value, bits, field=name, text=str(value))
        if isinstance(value, str):
            return parse_unsigned(value, bits, field=name)
        raise CelloInvalidDataError(f"Invalid {name}: {value!r}", field=name, value=repr(value))

    return _validate


def _validate_yes_no(value: Any, info: ValidationInfo) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    name = _field_name(info)
    if isinstance(value, str):
        return parse_yes_no(value, field=name)
    raise CelloInvalidDataError(f"Invalid {name}: {value!r}", field=name, value=repr(value))


def _validate_decimal(value: Any, info: ValidationInfo) -> float | None:
    if value is None:
        return None
    name = _field_name(info)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        return parse_decimal(value, field=name)
    raise CelloInvalidDataError(f"Invalid {name}: {value!r}", field=name, value=repr(value))


def _validate_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


Int16 = Annotated[int | None, BeforeValidator(signed_field(16))]
Int32 = Annotated[int | None, BeforeValidator(signed_field(32))]
Int64 = Annotated[int | None, BeforeValidator(signed_field(64))]
UInt32 = Annotated[int | None, BeforeValidator(unsigned_field(32))]
UInt64 = Annotated[int | None, BeforeValidator(unsigned_field(64))]
YesNo = Annotated[bool | None, BeforeValidator(_validate_yes_no)]
Float = Annotated[float | None, BeforeValidator(_validate_decimal)]
Text = Annotated[str | None, BeforeValidator(_validate_text)]


# ---------------------------------------------------------------------------
# Derived metrics
# ---------------------------------------------------------------------------


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def percentage(numerator: float | None, denominator: float | None) -> float | None:
    """Return ``numerator / denominator * 100`` clamped to [0, 100].

    ``None`` when either side is missing or the denominator is not positive.
    """
    if numerator is None or denominator is None or denominator <= 0:
        return None
    return clamp_percentage(numerator / denominator * 100.0)


def non_negative_or_none(value: int | float | None) -> int | float | None:
    """Map negative "unknown" markers to ``None``."""
    if value is None or value < 0:
        return None
    return value


def unless_sentinel(value: int | None, sentinel: int) -> int | None:
    if value is None or value == sentinel:
        return None
    return value
