"""Human-readable dumps of pointers, heaps and terms, and a heap consistency check."""

import math
from collections.abc import Sequence
from decimal import Decimal

from . import f60, u60
from .heap import Heap
from .pointer import Tag, arity_of, era, get_ext, get_loc, get_tag, get_val

_TAG_NAMES = {
    Tag.DP0: "Dp0",
    Tag.DP1: "Dp1",
    Tag.VAR: "Var",
    Tag.ARG: "Arg",
    Tag.ERA: "Era",
    Tag.LAM: "Lam",
    Tag.APP: "App",
    Tag.SUP: "Sup",
    Tag.CTR: "Ctr",
    Tag.FUN: "Fun",
    Tag.OP2: "Op2",
    Tag.U60: "Data.U60",
    Tag.F60: "F60",
}

_OPER_SYMBOLS = ("+", "-", "*", "/", "%", "&", "|", "^",
                 "<<", ">>", "<", "<=", "=", ">=", ">", "!=")


def _format_float(x: float) -> str:
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


def show_ptr(x: int) -> str:
    """Render a pointer as ``Tag(ext, val)``; the empty pointer is ``~``."""
    if x == 0:
        return "~"
    name = _TAG_NAMES.get(get_tag(x), "?")
    return f"{name}({get_ext(x):07x}, {get_val(x):08x})"


def show_heap(heap: Heap) -> str:
    """List every non-empty cell of the heap, one per line."""
    return "".join(
        f"{idx:04x} | {show_ptr(ptr)}\n" for idx, ptr in enumerate(heap.node) if ptr != 0
    )


def show_at(heap: Heap, prog, host: int, tlocs: Sequence[int] = ()) -> str:
    """Render the term stored at ``host``, followed by its floating duplications.

    ``prog`` supplies ``aris`` and ``nams`` mappings; a location in ``tlocs``
    is marked with the index of the thread working on it.
    """
    lets: dict[int, int] = {}
    names: dict[int, str] = {}

    def fresh(loc: int) -> None:
        names[loc] = str(len(names))

    def find_lets(loc: int) -> None:
        term = heap.load_ptr(loc)
        if term == 0:
            return
        tag = get_tag(term)
        if tag == Tag.LAM:
            fresh(get_loc(term, 0))
            find_lets(get_loc(term, 1))
        elif tag in (Tag.APP, Tag.SUP, Tag.OP2):
            find_lets(get_loc(term, 0))
            find_lets(get_loc(term, 1))
        elif tag in (Tag.DP0, Tag.DP1):
            node = get_loc(term, 0)
            if node not in lets:
                fresh(node)
                lets[node] = node
                find_lets(get_loc(term, 2))
        elif tag in (Tag.CTR, Tag.FUN):
            for i in range(arity_of(prog.aris, term)):
                find_lets(get_loc(term, i))

    def bound(prefix: str, loc: int) -> str:
        name = names.get(loc)
        return f"{prefix}{name}" if name is not None else f"{prefix}^{loc}"

    def go(loc: int) -> str:
        term = heap.load_ptr(loc)
        done = "<>"
        if term != 0:
            tag = get_tag(term)
            if tag == Tag.DP0:
                done = bound("a", get_loc(term, 0))
            elif tag == Tag.DP1:
                done = bound("b", get_loc(term, 0))
            elif tag == Tag.VAR:
                done = bound("x", get_loc(term, 0))
            elif tag == Tag.LAM:
                name = names.get(get_loc(term, 0), "<lam>")
                done = f"λx{name} {go(get_loc(term, 1))}"
            elif tag == Tag.APP:
                done = f"({go(get_loc(term, 0))} {go(get_loc(term, 1))})"
            elif tag == Tag.SUP:
                done = f"{{{go(get_loc(term, 0))} {go(get_loc(term, 1))}}}"
            elif tag == Tag.OP2:
                oper = get_ext(term)
                symb = _OPER_SYMBOLS[oper] if oper < len(_OPER_SYMBOLS) else "<oper>"
                done = f"({symb} {go(get_loc(term, 0))} {go(get_loc(term, 1))})"
            elif tag == Tag.U60:
                done = str(u60.val(get_val(term)))
            elif tag == Tag.F60:
                done = _format_float(f60.val(get_val(term)))
            elif tag in (Tag.CTR, Tag.FUN):
                args = "".join(
                    f" {go(get_loc(term, i))}" for i in range(arity_of(prog.aris, term))
                )
                done = f"({prog.nams.get(get_ext(term), '<?>')}{args})"
            elif tag == Tag.ERA:
                done = "*"
            else:
                done = f"<era:{tag}>"
        for tid, tid_loc in enumerate(tlocs):
            if host_matches(loc, tid_loc):
                return f"<{tid}>{done}"
        return done

    def host_matches(loc: int, tid_loc: int) -> bool:
        return loc == tid_loc

    find_lets(host)
    parts = [go(host)]
    for _, pos in sorted(lets.items()):
        name = names.get(pos, "?h")
        nam0 = "*" if heap.load_ptr(pos) == era() else f"a{name}"
        nam1 = "*" if heap.load_ptr(pos + 1) == era() else f"b{name}"
        parts.append(f"\ndup {nam0} {nam1} = {go(pos + 2)};")
    return "".join(parts)


def validate_heap(heap: Heap) -> None:
    """Check that every argument cell points at a variable that points back to it.

    Raises RuntimeError describing the heap when the check fails.
    """
    for idx, ptr in enumerate(heap.node):
        if get_tag(ptr) != Tag.ARG:
            continue
        occurrence = heap.load_ptr(get_loc(ptr, 0))
        tag = get_tag(occurrence)
        if tag in (Tag.VAR, Tag.DP0):
            ok = get_loc(occurrence, 0) == idx
        elif tag == Tag.DP1:
            ok = get_loc(occurrence, 0) == idx - 1
        else:
            ok = False
        if not ok:
            raise RuntimeError(
                f"Invalid heap state, due to arg at '{idx:04x}' of:\n{show_heap(heap)}"
            )