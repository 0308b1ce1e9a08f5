"""A program: the functions, arities and names a heap is reduced against."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Union

from .body import Rule
from .context import ReduceCtx
from .precomp import PRECOMP


@dataclass
class VisitObj:
    """Which arguments of a function are strict."""

    strict_map: list[bool]
    strict_idx: list[int]


@dataclass
class ApplyObj:
    """The rewrite rules of a function, tried in order."""

    rules: list[Rule]


@dataclass
class InterpretedFunction:
    """A function defined by rewrite rules."""

    smap: tuple[bool, ...]
    visit: VisitObj
    apply: ApplyObj


@dataclass
class CompiledFunction:
    """A function with native visit and apply rules."""

    smap: tuple[bool, ...]
    visit: Callable[[ReduceCtx], bool]
    apply: Callable[[ReduceCtx], bool]


Function = Union[InterpretedFunction, CompiledFunction]


def interpreted_function(smap: Iterable[bool], rules: Iterable[Rule]) -> InterpretedFunction:
    """Build a rule-based function from its strictness map and rules."""
    strict = tuple(bool(flag) for flag in smap)
    visit = VisitObj(
        strict_map=list(strict),
        strict_idx=[i for i, flag in enumerate(strict) if flag],
    )
    return InterpretedFunction(strict, visit, ApplyObj(list(rules)))


class Program:
    """Functions, arities and names by id, starting with the built-ins."""

    def __init__(self) -> None:
        self.funs: dict[int, Function] = {}
        self.aris: dict[int, int] = {}
        self.nams: dict[int, str] = {}
        for precomp in PRECOMP:
            if precomp.compiled:
                self.funs[precomp.id] = CompiledFunction(
                    precomp.smap, precomp.visit, precomp.apply
                )
            self.nams[precomp.id] = precomp.name
            self.aris[precomp.id] = precomp.arity

    def add_function(self, name: str, function: Function) -> int:
        """Register ``function`` under the next free id and return that id."""
        fid = max(self.nams, default=-1) + 1
        self.nams[fid] = name
        self.funs[fid] = function
        self.aris[fid] = len(function.smap)
        return fid

    def define(self, fid: int, name: str, smap: Iterable[bool],
               rules: Iterable[Rule]) -> InterpretedFunction:
        """Define (or redefine) the rule-based function ``fid``."""
        function = interpreted_function(smap, rules)
        self.funs[fid] = function
        self.nams[fid] = name
        self.aris[fid] = len(function.smap)
        return function