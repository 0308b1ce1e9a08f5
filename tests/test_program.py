from hvmcore.body import CoreFun, CoreU60, CoreVar, Rule, RuleVar, alloc_closed_core, build_body
from hvmcore.context import ReduceCtx
from hvmcore.heap import Heap
from hvmcore.pointer import Tag, u6o, var
from hvmcore.precomp import (
    HVM_QUERY,
    PRECOMP,
    STRING_CONS,
    STRING_NIL,
    U60_IF,
    u60_if_apply,
    u60_if_visit,
)
from hvmcore.program import (
    ApplyObj,
    CompiledFunction,
    InterpretedFunction,
    Program,
    VisitObj,
    interpreted_function,
)
from hvmcore.queues import REDEX_CONT_RET
from hvmcore.rules import fun


def _identity_rule():
    core = CoreVar(0)
    return Rule(hoas=False, cond=[var(0)], vars=[RuleVar(0)], core=core, body=build_body(core, 1))


def test_builtins_are_registered():
    prog = Program()
    assert prog.nams[U60_IF] == "Data.U60.if"
    assert prog.aris[STRING_CONS] == 2
    assert prog.aris[STRING_NIL] == 0
    assert len(prog.nams) == len(PRECOMP)


def test_compiled_builtins_carry_their_rules():
    prog = Program()
    function = prog.funs[U60_IF]
    assert isinstance(function, CompiledFunction)
    assert function.visit is u60_if_visit
    assert function.apply is u60_if_apply
    assert STRING_NIL not in prog.funs
    assert HVM_QUERY in prog.funs


def test_interpreted_function_strictness():
    rule = _identity_rule()
    function = interpreted_function([True, False, True], [rule])
    assert function.smap == (True, False, True)
    assert function.visit == VisitObj([True, False, True], [0, 2])
    assert function.apply == ApplyObj([rule])


def test_add_function_uses_next_id():
    prog = Program()
    function = interpreted_function([False], [_identity_rule()])
    fid = prog.add_function("Id", function)
    assert fid == len(PRECOMP)
    assert prog.nams[fid] == "Id"
    assert prog.funs[fid] is function
    assert prog.aris[fid] == 1
    assert prog.add_function("Other", function) == fid + 1


def test_define_registers_function():
    prog = Program()
    function = prog.define(40, "Pair.fst", [True, False], [])
    assert isinstance(function, InterpretedFunction)
    assert prog.funs[40] is function
    assert prog.nams[40] == "Pair.fst"
    assert prog.aris[40] == 2
    assert function.visit.strict_idx == [0]


def test_defined_function_rewrites_on_heap():
    prog = Program()
    fid = 40
    prog.define(fid, "Id", [False], [_identity_rule()])
    heap = Heap(128, 1)
    host = alloc_closed_core(heap, 0, CoreFun(fid, (CoreU60(42),)))
    term = heap.load_ptr(host)
    ctx = ReduceCtx(heap, prog, 0, True, term, heap.vstk[0], heap.rbag, REDEX_CONT_RET, host)
    function = prog.funs[fid]
    assert fun.apply(ctx, fid, function.visit, function.apply) is True
    assert heap.load_ptr(host) == u6o(42)
    assert heap.cost == 1


def test_redefinition_replaces_function():
    prog = Program()
    prog.define(40, "A", [False], [])
    prog.define(40, "B", [True, True, True], [])
    assert prog.nams[40] == "B"
    assert prog.aris[40] == 3
    assert prog.funs[40].visit.strict_map == [True, True, True]