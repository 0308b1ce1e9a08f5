"""Runtime terms, rule bodies built from them, and their allocation on the heap."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from .heap import Heap
from .pointer import (
    EXT,
    Tag,
    app,
    ctr,
    dp0,
    dp1,
    era,
    f6o,
    fun,
    get_tag,
    lam,
    op2,
    sup,
    u6o,
)
from .pointer import arg as _arg_ptr
from .pointer import var as _var_ptr

_STRING_NIL = 0
_STRING_CONS = 1
_DUP_LABELS = 1 << 28


# Runtime terms


@dataclass(frozen=True)
class CoreVar:
    """A variable, referenced by its binding index."""

    bidx: int


@dataclass(frozen=True)
class CoreGlo:
    """A global variable: ``misc`` is VAR, DP0 or DP1."""

    glob: int
    misc: int


@dataclass(frozen=True)
class CoreDup:
    eras: tuple[bool, bool]
    glob: int
    expr: "Core"
    body: "Core"


@dataclass(frozen=True)
class CoreSup:
    val0: "Core"
    val1: "Core"


@dataclass(frozen=True)
class CoreLet:
    expr: "Core"
    body: "Core"


@dataclass(frozen=True)
class CoreLam:
    eras: bool
    glob: int
    body: "Core"


@dataclass(frozen=True)
class CoreApp:
    func: "Core"
    argm: "Core"


@dataclass(frozen=True)
class CoreFun:
    func: int
    args: tuple["Core", ...] = ()


@dataclass(frozen=True)
class CoreCtr:
    func: int
    args: tuple["Core", ...] = ()


@dataclass(frozen=True)
class CoreU60:
    numb: int


@dataclass(frozen=True)
class CoreF60:
    numb: int


@dataclass(frozen=True)
class CoreOp2:
    oper: int
    val0: "Core"
    val1: "Core"


Core = Union[
    CoreVar, CoreGlo, CoreDup, CoreSup, CoreLet, CoreLam,
    CoreApp, CoreFun, CoreCtr, CoreU60, CoreF60, CoreOp2,
]


# Rule body cells


@dataclass(frozen=True)
class ValCell:
    """A fixed pointer value that needs no adjustment."""

    value: int


@dataclass(frozen=True)
class VarCell:
    """A link to a variable bound on the rule's left-hand side."""

    index: int


@dataclass(frozen=True)
class PtrCell:
    """A pointer into a node of the body, adjusted to where the node is allocated."""

    value: int
    targ: int
    slot: int


Cell = Union[ValCell, VarCell, PtrCell]


@dataclass
class RuleBody:
    """A pre-linked right-hand side: a root cell, its nodes and its dup-label count."""

    cell: Cell
    nodes: list[list[Cell]]
    dupk: int


@dataclass(frozen=True)
class RuleVar:
    """A left-hand side variable: argument ``param``, optionally field ``field`` of it."""

    param: int
    field: Optional[int] = None
    erase: bool = False


@dataclass
class Rule:
    """A compiled rewrite rule."""

    hoas: bool
    cond: list[int]
    vars: list[RuleVar]
    core: Core
    body: RuleBody
    free: list[tuple[int, int]] = field(default_factory=list)


def get_global_name_misc(name: str) -> Optional[int]:
    """Kind of a ``$``-prefixed global name: DP0, DP1 or VAR; None for other names."""
    if not name.startswith("$"):
        return None
    if name.startswith("$0"):
        return Tag.DP0
    if name.startswith("$1"):
        return Tag.DP1
    return Tag.VAR


# Body construction


def _link_cell(nodes: list[list[Cell]], targ: int, slot: int, elem: Cell) -> None:
    nodes[targ][slot] = elem
    if isinstance(elem, PtrCell):
        tag = get_tag(elem.value)
        if tag <= Tag.VAR:
            nodes[elem.targ][elem.slot + (tag & 0x01)] = PtrCell(_arg_ptr(0), targ, slot)


class _BodyBuilder:
    def __init__(self, free_vars: int) -> None:
        self.links: list[tuple[int, int, Cell]] = []
        self.nodes: list[list[Cell]] = []
        self.lams: dict[int, int] = {}
        self.dups: dict[int, tuple[int, int]] = {}
        self.vars: list[Cell] = [VarCell(i) for i in range(free_vars)]
        self.dupk = 0

    def new_node(self, size: int) -> int:
        self.nodes.append([ValCell(0)] * size)
        return len(self.nodes) - 1

    def alloc_lam(self, glob: int) -> int:
        if glob in self.lams:
            return self.lams[glob]
        targ = self.new_node(2)
        _link_cell(self.nodes, targ, 0, ValCell(era()))
        if glob != 0:
            self.lams[glob] = targ
        return targ

    def alloc_dup(self, glob: int) -> tuple[int, int]:
        if glob in self.dups:
            return self.dups[glob]
        dupc = self.dupk
        self.dupk += 1
        targ = self.new_node(3)
        self.links.append((targ, 0, ValCell(era())))
        self.links.append((targ, 1, ValCell(era())))
        if glob != 0:
            self.dups[glob] = (targ, dupc)
        return targ, dupc

    def binary(self, value: int, left: Core, right: Core) -> Cell:
        targ = self.new_node(2)
        self.links.append((targ, 0, self.gen(left)))
        self.links.append((targ, 1, self.gen(right)))
        return PtrCell(value, targ, 0)

    def nary(self, make, func: int, args: Sequence[Core]) -> Cell:
        if not args:
            return ValCell(make(func, 0))
        targ = self.new_node(len(args))
        for i, item in enumerate(args):
            self.links.append((targ, i, self.gen(item)))
        return PtrCell(make(func, 0), targ, 0)

    def gen(self, term: Core) -> Cell:
        if isinstance(term, CoreVar):
            if term.bidx < len(self.vars):
                return self.vars[term.bidx]
            raise ValueError(f"unbound variable: index {term.bidx}")
        if isinstance(term, CoreGlo):
            if term.misc == Tag.VAR:
                return PtrCell(_var_ptr(0), self.alloc_lam(term.glob), 0)
            if term.misc == Tag.DP0:
                targ, dupc = self.alloc_dup(term.glob)
                return PtrCell(dp0(dupc, 0), targ, 0)
            if term.misc == Tag.DP1:
                targ, dupc = self.alloc_dup(term.glob)
                return PtrCell(dp1(dupc, 0), targ, 0)
            raise ValueError(f"invalid global variable kind: {term.misc}")
        if isinstance(term, CoreDup):
            targ, dupc = self.alloc_dup(term.glob)
            self.links.append((targ, 2, self.gen(term.expr)))
            self.vars.append(PtrCell(dp0(dupc, 0), targ, 0))
            self.vars.append(PtrCell(dp1(dupc, 0), targ, 0))
            try:
                return self.gen(term.body)
            finally:
                del self.vars[-2:]
        if isinstance(term, CoreSup):
            dupc = self.dupk
            self.dupk += 1
            return self.binary(sup(dupc, 0), term.val0, term.val1)
        if isinstance(term, CoreLet):
            self.vars.append(self.gen(term.expr))
            try:
                return self.gen(term.body)
            finally:
                self.vars.pop()
        if isinstance(term, CoreLam):
            targ = self.alloc_lam(term.glob)
            self.vars.append(PtrCell(_var_ptr(0), targ, 0))
            try:
                self.links.append((targ, 1, self.gen(term.body)))
            finally:
                self.vars.pop()
            return PtrCell(lam(0), targ, 0)
        if isinstance(term, CoreApp):
            return self.binary(app(0), term.func, term.argm)
        if isinstance(term, CoreFun):
            return self.nary(fun, term.func, term.args)
        if isinstance(term, CoreCtr):
            return self.nary(ctr, term.func, term.args)
        if isinstance(term, CoreU60):
            return ValCell(u6o(term.numb))
        if isinstance(term, CoreF60):
            return ValCell(f6o(term.numb))
        if isinstance(term, CoreOp2):
            return self.binary(op2(term.oper, 0), term.val0, term.val1)
        raise TypeError(f"not a runtime term: {term!r}")


def build_body(term: Core, free_vars: int) -> RuleBody:
    """Flatten a term into linked nodes, with ``free_vars`` left-hand side variables."""
    builder = _BodyBuilder(free_vars)
    root = builder.gen(term)
    for targ, slot, elem in builder.links:
        _link_cell(builder.nodes, targ, slot, elem)
    return RuleBody(root, builder.nodes, builder.dupk)


# Allocation


def get_var(heap: Heap, term: int, var: RuleVar) -> int:
    """Take the value of a left-hand side variable out of the matched term."""
    if var.field is not None:
        return heap.take_arg(heap.load_arg(term, var.param), var.field)
    return heap.take_arg(term, var.param)


def alloc_body(heap: Heap, tid: int, term: int, vars: Sequence[RuleVar], body: RuleBody) -> int:
    """Allocate a rule body on the heap and return the pointer to its root."""
    lvar = heap.lvar[tid]
    aloc = [heap.alloc(tid, len(node)) for node in body.nodes]
    if lvar.dups + body.dupk >= _DUP_LABELS:
        lvar.dups = 0

    def cell_to_ptr(cell: Cell) -> int:
        if isinstance(cell, ValCell):
            return cell.value
        if isinstance(cell, VarCell):
            return get_var(heap, term, vars[cell.index])
        ptr = cell.value + aloc[cell.targ] + cell.slot
        if get_tag(cell.value) <= Tag.DP1:
            ptr += (lvar.dups & 0xFFF_FFFF) * EXT
        return ptr

    for host, node in zip(aloc, body.nodes):
        for j, cell in enumerate(node):
            ptr = cell_to_ptr(cell)
            if isinstance(cell, VarCell):
                heap.link(host + j, ptr)
            else:
                heap.node[host + j] = ptr
    done = cell_to_ptr(body.cell)
    lvar.dups += body.dupk
    return done


def alloc_closed_core(heap: Heap, tid: int, term: Core) -> int:
    """Allocate a closed term under a fresh host cell and return the host location."""
    host = heap.alloc(tid, 1)
    ptr = alloc_body(heap, tid, 0, [], build_body(term, 0))
    heap.link(host, ptr)
    return host


def make_string(heap: Heap, tid: int, text: str) -> int:
    """Allocate ``text`` as a cons list of character codes."""
    term = ctr(_STRING_NIL, 0)
    for char in reversed(text):
        node = heap.alloc(tid, 2)
        heap.link(node, u6o(ord(char)))
        heap.link(node + 1, term)
        term = ctr(_STRING_CONS, node)
    return term