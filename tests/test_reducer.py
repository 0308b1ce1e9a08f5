from hvmcore import u60
from hvmcore.body import (
    CoreApp,
    CoreCtr,
    CoreDup,
    CoreFun,
    CoreLam,
    CoreOp2,
    CoreU60,
    CoreVar,
    Rule,
    RuleVar,
    alloc_closed_core,
    build_body,
)
from hvmcore.heap import Heap
from hvmcore.pointer import Oper, Tag, get_loc, get_num, get_tag, u6o, var
from hvmcore.precomp import BOTH, PRECOMP_COUNT, U60_IF
from hvmcore.program import Program
from hvmcore.reducer import normalize, reduce


def _setup(core, tids=1):
    heap = Heap(1 << 12, tids)
    prog = Program()
    host = alloc_closed_core(heap, 0, core)
    return heap, prog, host


def test_reduce_addition():
    heap, prog, host = _setup(CoreOp2(Oper.ADD, CoreU60(2), CoreU60(3)))
    result = reduce(heap, prog, [0], host, False, False)
    assert result == u6o(u60.add(2, 3))
    assert heap.load_ptr(host) == result


def test_reduce_beta():
    core = CoreApp(CoreLam(False, 0, CoreVar(0)), CoreU60(7))
    heap, prog, host = _setup(core)
    before = heap.cost
    result = reduce(heap, prog, [0], host, False, False)
    assert get_tag(result) == Tag.U60
    assert get_num(result) == 7
    assert heap.cost > before


def test_reduce_duplication():
    body = CoreDup((False, False), 0, CoreVar(0),
                   CoreOp2(Oper.ADD, CoreVar(1), CoreVar(2)))
    core = CoreApp(CoreLam(False, 0, body), CoreU60(4))
    heap, prog, host = _setup(core)
    result = reduce(heap, prog, [0], host, False, False)
    assert result == u6o(u60.add(4, 4))


def test_reduce_compiled_if():
    core = CoreFun(U60_IF, (CoreU60(0), CoreU60(10), CoreU60(20)))
    heap, prog, host = _setup(core)
    assert reduce(heap, prog, [0], host) == u6o(20)


def test_reduce_interpreted_function_with_strict_argument():
    fid = PRECOMP_COUNT
    rhs = CoreOp2(Oper.MUL, CoreVar(0), CoreU60(2))
    rule = Rule(hoas=False, cond=[var(0)], vars=[RuleVar(0)], core=rhs,
                body=build_body(rhs, 1))
    heap = Heap(1 << 12, 1)
    prog = Program()
    prog.define(fid, "Double", (True,), [rule])
    host = alloc_closed_core(
        heap, 0, CoreFun(fid, (CoreOp2(Oper.ADD, CoreU60(20), CoreU60(1)),)))
    result = reduce(heap, prog, [0], host)
    assert result == u6o(u60.mul(u60.add(20, 1), 2))


def test_weak_reduction_leaves_fields_unreduced():
    core = CoreCtr(BOTH, (CoreOp2(Oper.ADD, CoreU60(1), CoreU60(2)), CoreU60(5)))
    heap, prog, host = _setup(core)
    term = reduce(heap, prog, [0], host, False, False)
    assert get_tag(term) == Tag.CTR
    assert get_tag(heap.load_ptr(get_loc(term, 0))) == Tag.OP2


def test_full_reduction_reduces_fields():
    core = CoreCtr(BOTH, (CoreOp2(Oper.ADD, CoreU60(1), CoreU60(2)),
                          CoreOp2(Oper.SUB, CoreU60(9), CoreU60(4))))
    heap, prog, host = _setup(core)
    term = reduce(heap, prog, [0], host, True, False)
    assert heap.load_ptr(get_loc(term, 0)) == u6o(u60.add(1, 2))
    assert heap.load_ptr(get_loc(term, 1)) == u6o(u60.sub(9, 4))


def test_normalize_reaches_fixed_point():
    core = CoreCtr(BOTH, (CoreApp(CoreLam(False, 0, CoreVar(0)), CoreU60(3)),
                          CoreOp2(Oper.MUL, CoreU60(6), CoreU60(7))))
    heap, prog, host = _setup(core)
    term = normalize(heap, prog, [0], host, False)
    assert heap.load_ptr(get_loc(term, 0)) == u6o(3)
    assert heap.load_ptr(get_loc(term, 1)) == u6o(u60.mul(6, 7))
    cost = heap.cost
    normalize(heap, prog, [0], host, False)
    assert heap.cost == cost


def test_reduce_with_two_threads():
    heap, prog, host = _setup(CoreOp2(Oper.ADD, CoreU60(2), CoreU60(3)), tids=2)
    result = reduce(heap, prog, [0, 1], host, False, False)
    assert result == u6o(u60.add(2, 3))


def test_debug_prints_steps(capsys):
    heap, prog, host = _setup(CoreOp2(Oper.ADD, CoreU60(2), CoreU60(3)))
    reduce(heap, prog, [0], host, False, True)
    out = capsys.readouterr().out
    assert "----------------" in out
    assert str(u60.add(2, 3)) in out


def test_reduce_without_threads_is_an_error():
    heap, prog, host = _setup(CoreU60(1))
    try:
        reduce(heap, prog, [], host)
    except ValueError as exc:
        assert "thread" in str(exc)
    else:
        raise AssertionError("expected ValueError")