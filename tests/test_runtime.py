import pytest

from hvmcore import u60
from hvmcore.body import CoreApp, CoreCtr, CoreLam, CoreOp2, CoreU60, CoreVar
from hvmcore.pointer import Oper, Tag, get_loc, get_tag, u6o
from hvmcore.precomp import BOTH
from hvmcore.runtime import (
    CELLS_PER_GB,
    Runtime,
    default_heap_size,
    default_heap_tids,
)


@pytest.fixture
def rt():
    return Runtime(1 << 12, 1, False)


def test_normalize_core_and_show(rt):
    host = rt.normalize_core(CoreCtr(BOTH, (CoreU60(1), CoreU60(2))))
    assert rt.show(host) == "(Both 1 2)"


def test_normalize_core_computes(rt):
    host = rt.normalize_core(CoreOp2(Oper.MUL, CoreU60(6), CoreU60(7)))
    assert rt.load_ptr(host) == u6o(u60.mul(6, 7))
    assert rt.show(host) == str(u60.mul(6, 7))


def test_reduce_counts_rewrites(rt):
    host = rt.alloc_core(CoreApp(CoreLam(False, 0, CoreVar(0)), CoreU60(7)))
    before = rt.get_rewrites()
    rt.reduce(host)
    assert rt.show(host) == "7"
    assert rt.get_rewrites() > before


def test_weak_versus_full(rt):
    core = CoreCtr(BOTH, (CoreOp2(Oper.ADD, CoreU60(1), CoreU60(1)), CoreU60(0)))
    host = rt.alloc_core(core)
    rt.reduce(host)
    field = get_loc(rt.load_ptr(host), 0)
    assert get_tag(rt.load_ptr(field)) == Tag.OP2
    rt.normalize(host)
    assert rt.load_ptr(field) == u6o(u60.add(1, 1))


def test_names_and_arities(rt):
    assert rt.get_name(BOTH) == "Both"
    assert rt.get_name(123456) == "?"
    assert rt.get_arity(BOTH) == len(rt.prog.aris and [0, 0])
    assert rt.get_arity(123456) == 0xFFFF_FFFF_FFFF_FFFF


def test_alloc_link_free(rt):
    loc = rt.alloc(2)
    rt.link(loc, u6o(5))
    rt.link(loc + 1, u6o(6))
    assert rt.load_ptr(loc) == u6o(5)
    rt.free(loc, 2)
    assert rt.load_ptr(loc) == 0
    assert rt.load_ptr(loc + 1) == 0


def test_collect_frees_fields(rt):
    host = rt.alloc_core(CoreCtr(BOTH, (CoreU60(3), CoreU60(4))))
    term = rt.load_ptr(host)
    rt.collect(term)
    assert rt.load_ptr(get_loc(term, 0)) == 0
    assert rt.load_ptr(get_loc(term, 1)) == 0


def test_runtime_with_two_threads():
    rt = Runtime(1 << 12, 2, False)
    assert rt.tids == [0, 1]
    host = rt.normalize_core(CoreOp2(Oper.ADD, CoreU60(2), CoreU60(3)))
    assert rt.load_ptr(host) == u6o(u60.add(2, 3))


def test_defaults_are_bounded():
    assert 0 <= default_heap_size() <= 16 * CELLS_PER_GB
    assert default_heap_tids() >= 1


def test_zero_threads_is_rejected():
    with pytest.raises(ValueError):
        Runtime(1 << 8, 0, False)