"""Arithmetic on 60-bit unsigned integers stored in Python ints."""

MASK = 0xFFF_FFFF_FFFF_FFFF
_MODULUS = 0x1000000000000000
_U64 = 0xFFFF_FFFF_FFFF_FFFF


def new(a: int) -> int:
    """Truncate an integer to its low 60 bits."""
    return a & MASK


def val(a: int) -> int:
    """Return the integer value of a 60-bit number."""
    return a & MASK


def add(a: int, b: int) -> int:
    return new(a + b)


def sub(a: int, b: int) -> int:
    return a - b if a >= b else _MODULUS - (b - a)


def mul(a: int, b: int) -> int:
    return new((a * b) & _U64)


def div(a: int, b: int) -> int:
    """Integer division; raises ZeroDivisionError when ``b`` is zero."""
    return a // b


def mod(a: int, b: int) -> int:
    """Remainder; raises ZeroDivisionError when ``b`` is zero."""
    return a % b


def and_(a: int, b: int) -> int:
    return a & b


def or_(a: int, b: int) -> int:
    return a | b


def xor(a: int, b: int) -> int:
    return a ^ b


def shl(a: int, b: int) -> int:
    return new((a << (b & 63)) & _U64)


def shr(a: int, b: int) -> int:
    return a >> (b & 63)


def ltn(a: int, b: int) -> int:
    return int(a < b)


def lte(a: int, b: int) -> int:
    return int(a <= b)


def eql(a: int, b: int) -> int:
    return int(a == b)


def gte(a: int, b: int) -> int:
    return int(a >= b)


def gtn(a: int, b: int) -> int:
    return int(a > b)


def neq(a: int, b: int) -> int:
    return int(a != b)


def show(a: int) -> str:
    return str(a)