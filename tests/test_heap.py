import pytest

from hvmcore.heap import LOCK_OPEN, Heap
from hvmcore.pointer import app, arg, ctr, dp0, dp1, era, lam, u6o, var


def test_alloc_zero_returns_zero():
    heap = Heap(16, 1)
    assert heap.alloc(0, 0) == 0


def test_first_alloc_starts_at_area_start():
    heap = Heap(16, 1)
    assert heap.alloc(0, 2) == 0


def test_alloc_skips_used_cells():
    heap = Heap(16, 1)
    first = heap.alloc(0, 2)
    heap.node[first] = u6o(1)
    heap.node[first + 1] = u6o(2)
    second = heap.alloc(0, 3)
    assert all(heap.node[second + i] == 0 for i in range(3))
    assert second >= first + 2 or second + 3 <= first


def test_alloc_raises_when_full():
    heap = Heap(4, 1)
    heap.node[:] = [u6o(1)] * 4
    with pytest.raises(MemoryError):
        heap.alloc(0, 1)


def test_thread_areas_partition_heap():
    heap = Heap(64, 4)
    assert heap.lvar[0].amin == 0
    assert heap.lvar[-1].amax == 64
    for left, right in zip(heap.lvar, heap.lvar[1:]):
        assert left.amax == right.amin
    loc = heap.alloc(2, 3)
    assert heap.lvar[2].amin <= loc < heap.lvar[2].amax


def test_zero_threads_rejected():
    with pytest.raises(ValueError):
        Heap(16, 0)


def test_link_var_writes_back_arg():
    heap = Heap(16, 1)
    heap.link(5, var(2))
    assert heap.node[5] == var(2)
    assert heap.node[2] == arg(5)


def test_link_dp1_binds_second_slot():
    heap = Heap(16, 1)
    heap.link(7, dp1(3, 2))
    assert heap.node[3] == arg(7)
    assert heap.node[2] == 0


def test_take_ptr_clears_cell():
    heap = Heap(8, 1)
    heap.node[4] = u6o(9)
    assert heap.take_ptr(4) == u6o(9)
    assert heap.node[4] == 0


def test_move_ptr_and_args():
    heap = Heap(8, 1)
    heap.node[1] = u6o(3)
    heap.move_ptr(1, 6)
    assert heap.node[1] == 0
    assert heap.load_arg(app(5), 1) == u6o(3)
    assert heap.take_arg(app(5), 1) == u6o(3)
    assert heap.load_ptr(6) == 0


def test_free_zeroes_cells():
    heap = Heap(8, 1)
    heap.node[2:5] = [u6o(1), u6o(2), u6o(3)]
    heap.free(0, 2, 3)
    assert heap.node == [0] * 8


def test_cost_sums_threads():
    heap = Heap(8, 2)
    heap.inc_cost(0)
    heap.inc_cost(1)
    heap.inc_cost(1)
    assert heap.cost == 3


def test_gen_dup_is_sequential():
    heap = Heap(8, 2)
    first = heap.gen_dup(1)
    assert heap.gen_dup(1) == first + 1
    assert heap.gen_dup(0) == 0


def test_locks():
    heap = Heap(8, 2)
    term = lam(3)
    assert heap.acquire_lock(1, term)
    assert heap.lock[3] == 1
    assert not heap.acquire_lock(0, term)
    heap.release_lock(1, term)
    assert heap.lock[3] == LOCK_OPEN
    assert heap.acquire_lock(0, term)


def test_atomic_relink():
    heap = Heap(8, 2)
    heap.node[4] = var(0)
    assert not heap.atomic_relink(4, u6o(1), u6o(2))
    assert heap.node[4] == var(0)
    assert heap.atomic_relink(4, var(0), var(6))
    assert heap.node[4] == var(6)
    assert heap.node[6] == arg(4)


def test_atomic_subst_replaces_occurrence():
    heap = Heap(16, 1)
    heap.link(3, var(2))
    heap.atomic_subst({}, 0, var(2), u6o(7))
    assert heap.node[3] == u6o(7)


def test_atomic_subst_collects_unused_value():
    heap = Heap(16, 1)
    heap.node[0] = era()
    heap.node[4] = u6o(1)
    heap.node[5] = u6o(2)
    heap.atomic_subst({}, 0, var(0), app(4))
    assert heap.node[4:6] == [0, 0]


def test_atomic_subst_single_thread_bad_binder():
    heap = Heap(16, 1)
    heap.node[0] = u6o(1)
    with pytest.raises(RuntimeError):
        heap.atomic_subst({}, 0, var(0), u6o(2))


def test_collect_lambda():
    heap = Heap(16, 1)
    heap.link(3, var(2))
    heap.collect({}, 0, lam(2))
    assert heap.node == [0] * 16


def test_collect_constructor():
    heap = Heap(16, 1)
    heap.node[0] = u6o(7)
    heap.node[1] = lam(2)
    heap.node[2] = era()
    heap.node[3] = u6o(8)
    heap.collect({1: 2}, 0, ctr(1, 0))
    assert heap.node == [0] * 16


def test_collect_dup_after_both_variables():
    heap = Heap(16, 1)
    heap.node[2] = u6o(5)
    heap.link(5, dp0(3, 0))
    heap.link(6, dp1(3, 0))
    heap.collect({}, 0, dp0(3, 0))
    assert heap.node[0] == era()
    assert heap.node[2] == u6o(5)
    heap.collect({}, 0, dp1(3, 0))
    assert heap.node[0:3] == [0, 0, 0]
    assert heap.lock[0] == LOCK_OPEN