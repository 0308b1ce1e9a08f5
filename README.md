# hvmcore

A runtime that evaluates lambda-calculus terms by graph rewriting. Terms
live in a flat heap of 64-bit tagged pointers; reduction applies the
interaction rules for applications, duplications, superpositions, numeric
operations and pattern-matching functions until a term reaches weak head
normal form or full normal form.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `hvmcore.u60`, `hvmcore.f60`: 60-bit unsigned integers and 60-bit floats
  (doubles with the low four bits dropped), with the sixteen binary
  operations the runtime understands (`add`, `sub`, ..., `neq`) and `show`.
- `hvmcore.pointer`: the pointer format. `Tag` and `Oper` enumerate tags
  and operation codes; `var`, `dp0`, `dp1`, `arg`, `era`, `lam`, `app`,
  `sup`, `op2`, `u6o`, `f6o`, `ctr`, `fun` build pointers; `get_tag`,
  `get_ext`, `get_val`, `get_num`, `get_loc` and `arity_of` read them.
- `hvmcore.queues`: `RedexBag` and `VisitQueue`, the work structures the
  reducer uses, with their packing helpers (`new_redex`, `new_visit`, ...).
- `hvmcore.heap`: `Heap`, with `alloc`, `free`, `link`, `load_ptr`,
  `take_ptr`, `atomic_subst`, node locks and `collect` (garbage collection
  of unreachable terms). Its `cost` property is the number of rewrites done.
- `hvmcore.body`: the core term classes (`CoreVar`, `CoreGlo`, `CoreDup`,
  `CoreSup`, `CoreLet`, `CoreLam`, `CoreApp`, `CoreFun`, `CoreCtr`,
  `CoreU60`, `CoreF60`, `CoreOp2`), `Rule` and `RuleVar`, `build_body`
  (turns a core term into a template of linked nodes) and `alloc_body`,
  `alloc_closed_core` and `make_string`, which place terms on the heap.
- `hvmcore.context`: `ReduceCtx`, the state handed to rewrite rules, and
  `is_whnf`.
- `hvmcore.rules`: the rewrite rules, one module each for `app`, `dup`,
  `op2` and `fun`.
- `hvmcore.precomp`: the built-in symbols every program starts with
  (`PRECOMP`), including the native functions `Data.U60.if`,
  `Data.U60.swap` and `Apps.HVM.query` (reads a line from standard input).
- `hvmcore.program`: `Program`, the tables of functions, arities and names
  by id. `Program.define(fid, name, smap, rules)` adds a rule-based function;
  `Program.add_function(name, function)` registers one under the next free id.
- `hvmcore.reducer`: `reduce(heap, prog, tids, root, full, debug)` and
  `normalize(...)`. With more than one thread id, workers run in threads and
  steal work from each other.
- `hvmcore.runtime`: `Runtime`, a front for all of the above, plus
  `default_heap_size` and `default_heap_tids`.
- `hvmcore.debug`: `show_ptr`, `show_heap`, `show_at` and `validate_heap`.

## Example

```python
from hvmcore.body import CoreApp, CoreFun, CoreLam, CoreOp2, CoreU60, CoreVar
from hvmcore.pointer import Oper
from hvmcore.precomp import U60_IF
from hvmcore.runtime import Runtime

rt = Runtime(size=1 << 16, tids=1, dbug=False)

# (λx (+ x 1) 41)
term = CoreApp(
    func=CoreLam(eras=False, glob=0,
                 body=CoreOp2(oper=Oper.ADD, val0=CoreVar(bidx=0), val1=CoreU60(numb=1))),
    argm=CoreU60(numb=41),
)
host = rt.normalize_core(term)
print(rt.show(host))        # 42
print(rt.get_rewrites())    # number of graph rewrites performed

# (Data.U60.if 1 10 20)
host = rt.normalize_core(CoreFun(func=U60_IF, args=(CoreU60(1), CoreU60(10), CoreU60(20))))
print(rt.show(host))        # 10
```

`Runtime.alloc_core` places a term on the heap without evaluating it;
`Runtime.reduce` brings it to weak head normal form and `Runtime.normalize`
to full normal form. When `size` or `tids` is left out, `Runtime` takes
three quarters of free memory (at most 16 GB worth of cells) and one thread
per available core, so passing a size explicitly is usually wise.

## What it does not do

- There is no text syntax and no parser: terms are built from the `Core*`
  classes, and functions from `Rule` objects passed to `Program.define`.
- There is no command-line tool.
- `Apps.HVM.log`, `Apps.HVM.print`, `Apps.HVM.sleep`, `Apps.HVM.store` and
  `Apps.HVM.load` are known names with arities, but have no rules; terms
  using them do not reduce.