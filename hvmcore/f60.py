"""Arithmetic on 60-bit floats: IEEE doubles with the low 4 bits dropped."""

import math
import struct
from decimal import Decimal

_U64 = 0xFFFF_FFFF_FFFF_FFFF


def _to_bits(x: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", x))[0]


def _from_bits(b: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", b & _U64))[0]


def new(a: float) -> int:
    """Encode a float, rounding the dropped nibble."""
    b = _to_bits(a)
    return (b >> 4) + 1 if b & 0b1111 > 8 else b >> 4


def val(a: int) -> float:
    """Decode a 60-bit float into a Python float."""
    return _from_bits(a << 4)


def _fdiv(x: float, y: float) -> float:
    try:
        return x / y
    except ZeroDivisionError:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _fmod(x: float, y: float) -> float:
    try:
        return math.fmod(x, y)
    except ValueError:
        return math.nan


def _unary(fn, x: float) -> float:
    try:
        return fn(x)
    except ValueError:
        return math.nan


def _pow(base: float, exp: float) -> float:
    try:
        return math.pow(base, exp)
    except OverflowError:
        negative = base < 0 and exp.is_integer() and int(exp) % 2 == 1
        return -math.inf if negative else math.inf
    except ValueError:
        if base == 0:
            return math.inf
        return math.nan


def _ln(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    if math.isinf(x):
        return math.inf
    return math.log(x)


def _round_sum(x: float) -> float:
    if not math.isfinite(x):
        return x + x
    return float(math.ceil(x)) + float(math.floor(x))


def add(a: int, b: int) -> int:
    return new(val(a) + val(b))


def sub(a: int, b: int) -> int:
    return new(val(a) - val(b))


def mul(a: int, b: int) -> int:
    return new(val(a) * val(b))


def div(a: int, b: int) -> int:
    return new(_fdiv(val(a), val(b)))


def mod(a: int, b: int) -> int:
    return new(_fmod(val(a), val(b)))


def and_(a: int, b: int) -> int:
    return new(_unary(math.cos, val(a)) + _unary(math.sin, val(b)))


def or_(a: int, b: int) -> int:
    return new(math.atan2(val(a), val(b)))


def shl(a: int, b: int) -> int:
    return new(_pow(val(b), val(a)))


def shr(a: int, b: int) -> int:
    return new(_fdiv(_ln(val(a)), _ln(val(b))))


def xor(a: int, b: int) -> int:
    return new(_round_sum(val(a)))


def ltn(a: int, b: int) -> int:
    return new(1.0 if val(a) < val(b) else 0.0)


def lte(a: int, b: int) -> int:
    return new(1.0 if val(a) <= val(b) else 0.0)


def eql(a: int, b: int) -> int:
    return new(1.0 if val(a) == val(b) else 0.0)


def gte(a: int, b: int) -> int:
    return new(1.0 if val(a) >= val(b) else 0.0)


def gtn(a: int, b: int) -> int:
    return new(1.0 if val(a) > val(b) else 0.0)


def neq(a: int, b: int) -> int:
    return new(1.0 if val(a) != val(b) else 0.0)


def _display(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    text = repr(x)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def show(a: int) -> str:
    """Render a 60-bit float, always with a decimal point."""
    text = _display(val(a))
    return text if "." in text else f"{text}.0"