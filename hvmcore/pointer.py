"""Tagged 64-bit pointers: a 4-bit tag, a 28-bit extension and a 32-bit value."""

from collections.abc import Mapping
from enum import IntEnum

VAL = 1
EXT = 0x100000000
TAG = 0x1000000000000000


class Tag(IntEnum):
    """Pointer tags."""

    DP0 = 0x0
    DP1 = 0x1
    VAR = 0x2
    ARG = 0x3
    ERA = 0x4
    LAM = 0x5
    APP = 0x6
    SUP = 0x7
    CTR = 0x8
    FUN = 0x9
    OP2 = 0xA
    U60 = 0xB
    F60 = 0xC
    NIL = 0xF


class Oper(IntEnum):
    """Numeric operation codes stored in the extension of an OP2 pointer."""

    ADD = 0x0
    SUB = 0x1
    MUL = 0x2
    DIV = 0x3
    MOD = 0x4
    AND = 0x5
    OR = 0x6
    XOR = 0x7
    SHL = 0x8
    SHR = 0x9
    LTN = 0xA
    LTE = 0xB
    EQL = 0xC
    GTE = 0xD
    GTN = 0xE
    NEQ = 0xF


def var(pos: int) -> int:
    return (Tag.VAR * TAG) | pos


def dp0(col: int, pos: int) -> int:
    return (Tag.DP0 * TAG) | (col * EXT) | pos


def dp1(col: int, pos: int) -> int:
    return (Tag.DP1 * TAG) | (col * EXT) | pos


def arg(pos: int) -> int:
    return (Tag.ARG * TAG) | pos


def era() -> int:
    return Tag.ERA * TAG


def lam(pos: int) -> int:
    return (Tag.LAM * TAG) | pos


def app(pos: int) -> int:
    return (Tag.APP * TAG) | pos


def sup(col: int, pos: int) -> int:
    return (Tag.SUP * TAG) | (col * EXT) | pos


def op2(ope: int, pos: int) -> int:
    return (Tag.OP2 * TAG) | (ope * EXT) | pos


def u6o(val: int) -> int:
    return (Tag.U60 * TAG) | val


def f6o(val: int) -> int:
    return (Tag.F60 * TAG) | val


def ctr(fun: int, pos: int) -> int:
    return (Tag.CTR * TAG) | (fun * EXT) | pos


def fun(fun: int, pos: int) -> int:
    return (Tag.FUN * TAG) | (fun * EXT) | pos


def get_tag(lnk: int) -> int:
    return lnk // TAG


def get_ext(lnk: int) -> int:
    return (lnk // EXT) & 0xFFF_FFFF


def get_val(lnk: int) -> int:
    return lnk & 0xFFFF_FFFF


def get_num(lnk: int) -> int:
    return lnk & 0xFFF_FFFF_FFFF_FFFF


def get_loc(lnk: int, arg: int) -> int:
    return get_val(lnk) + arg


def arity_of(arit: Mapping[int, int], lnk: int) -> int:
    """Arity of the function or constructor named by ``lnk``; 0 if unknown."""
    return arit.get(get_ext(lnk), 0)