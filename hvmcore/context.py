"""The state handed to reduction rules, and the weak-head-normal-form test."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .heap import Heap
from .pointer import Tag, get_tag
from .queues import RedexBag, VisitQueue

_WHNF_TAGS = frozenset({Tag.ERA, Tag.LAM, Tag.SUP, Tag.CTR, Tag.U60, Tag.F60})


@dataclass
class ReduceCtx:
    """A reducer thread's view of one step.

    Rules read ``term`` and may move the thread by assigning ``cont`` and ``host``.
    """

    heap: Heap
    prog: Any
    tid: int
    hold: bool
    term: int
    visit: VisitQueue
    redex: RedexBag
    cont: int
    host: int


def is_whnf(term: int) -> bool:
    """Whether a pointer is already in weak head normal form."""
    return get_tag(term) in _WHNF_TAGS