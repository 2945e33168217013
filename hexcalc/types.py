"""Value model and formatting helpers for hexcalc.

Every intermediate and final result of an evaluation is a `Value`: a
tagged record whose `kind` says how to read its `payload`. Integers live
in a signed 64-bit two's-complement domain, so every integer producing
operation passes its result through `wrap_int64`. Rendering helpers turn a
value into the decimal, hexadecimal and binary text handed back to the
host.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple
import math

from .errors import EvalError, ErrorKind


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MASK = (1 << 64) - 1


class Kind(Enum):
    INT = 'int'
    FLOAT = 'float'
    BOOL = 'bool'
    STR = 'str'
    VOID = 'void'


class Domain(Enum):
    """Fixed-width numeric domains accepted by `to_number`."""
    INT64 = 'int64'
    UINT64 = 'uint64'
    FLOAT64 = 'float64'


def wrap_int64(n: int) -> int:
    """Fold an arbitrary Python int into the signed 64-bit range."""
    n &= UINT64_MASK
    if n > INT64_MAX:
        n -= 1 << 64
    return n


@dataclass(frozen=True)
class Value:
    """A dynamically typed calculator value.

    Build values through the constructors below rather than directly so
    the payload always agrees with the kind (bools are never stored as
    ints, integers are always wrapped to 64 bits).
    """
    kind: Kind
    payload: Any = None

    def __repr__(self) -> str:
        if self.kind is Kind.VOID:
            return 'Value(void)'
        return f"Value({self.kind.value}, {self.payload!r})"

    # Convenience constructors
    @staticmethod
    def integer(n: int) -> 'Value':
        return Value(Kind.INT, wrap_int64(int(n)))

    @staticmethod
    def floating(x: float) -> 'Value':
        return Value(Kind.FLOAT, float(x))

    @staticmethod
    def boolean(b: bool) -> 'Value':
        return Value(Kind.BOOL, bool(b))

    @staticmethod
    def string(s: str) -> 'Value':
        return Value(Kind.STR, str(s))

    @staticmethod
    def void() -> 'Value':
        return VOID

    @property
    def is_numeric(self) -> bool:
        return self.kind in (Kind.INT, Kind.FLOAT)


VOID = Value(Kind.VOID)


def type_name(value: Value) -> str:
    return value.kind.value


def is_truthy(value: Value) -> bool:
    kind = value.kind
    if kind is Kind.BOOL:
        return value.payload
    if kind is Kind.INT:
        return value.payload != 0
    if kind is Kind.FLOAT:
        return value.payload != 0.0
    if kind is Kind.STR:
        return len(value.payload) > 0
    if kind is Kind.VOID:
        return False
    raise EvalError(ErrorKind.TYPE_MISMATCH, f"unknown value kind {kind}")


def round_to_int_away_from_zero(x: float) -> int:
    """Round a floating point number to the nearest integer away from zero.

    Python's built-in round uses bankers rounding; calculators round
    halves away from zero.
    """
    return math.floor(x + 0.5) if x >= 0 else math.ceil(x - 0.5)


def to_number(value: Value, domain: Domain = Domain.INT64) -> Any:
    """Convert a numeric or boolean value into a fixed-width domain.

    Floats are truncated toward zero when an integer domain is requested.
    Strings, void and non-finite floats cannot be represented and raise
    an EvalError instead of quietly becoming zero.
    """
    kind = value.kind
    if kind is Kind.BOOL:
        raw: Any = 1 if value.payload else 0
    elif kind is Kind.INT:
        raw = value.payload
    elif kind is Kind.FLOAT:
        raw = value.payload
        if domain is not Domain.FLOAT64:
            if not math.isfinite(raw):
                raise EvalError(ErrorKind.TYPE_MISMATCH, f"cannot convert {format_float(raw)} to an integer")
            raw = int(raw)
    elif kind is Kind.STR:
        raise EvalError(ErrorKind.TYPE_MISMATCH, f"cannot convert string {value.payload!r} to a number")
    elif kind is Kind.VOID:
        raise EvalError(ErrorKind.TYPE_MISMATCH, 'cannot convert void to a number')
    else:
        raise EvalError(ErrorKind.TYPE_MISMATCH, f"unknown value kind {kind}")

    if domain is Domain.FLOAT64:
        return float(raw)
    if domain is Domain.UINT64:
        return raw & UINT64_MASK
    return wrap_int64(raw)


def format_float(x: float) -> str:
    if math.isnan(x):
        return 'nan'
    if math.isinf(x):
        return 'inf' if x > 0 else '-inf'
    if x.is_integer() and abs(x) < 1e21:
        return str(int(x))
    return repr(x)


def to_string(value: Value) -> str:
    """Render a value in its natural decimal text form."""
    kind = value.kind
    if kind is Kind.INT:
        return str(value.payload)
    if kind is Kind.FLOAT:
        return format_float(value.payload)
    if kind is Kind.BOOL:
        return 'true' if value.payload else 'false'
    if kind is Kind.STR:
        return value.payload
    if kind is Kind.VOID:
        return ''
    raise EvalError(ErrorKind.TYPE_MISMATCH, f"unknown value kind {kind}")


def _renderable(value: Value) -> bool:
    if value.kind is Kind.INT:
        return True
    return value.kind is Kind.FLOAT and math.isfinite(value.payload)


def to_hex(value: Value) -> str:
    if not _renderable(value):
        return ''
    return f"0x{to_number(value, Domain.UINT64):X}"


def to_bin(value: Value) -> str:
    if not _renderable(value):
        return ''
    return f"0b{to_number(value, Domain.UINT64):b}"


def render(value: Value) -> Tuple[str, str, str]:
    """Return the (decimal, hex, binary) texts for a result value."""
    return to_string(value), to_hex(value), to_bin(value)
