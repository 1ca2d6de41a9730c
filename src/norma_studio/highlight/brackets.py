"""Caret-aware bracket pairing over a fragment stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Set

from .models import BracketDirection, Fragment


@dataclass(slots=True)
class BracketStackEntry:
    index: int
    fragment: Fragment
    touches_cursor: bool


def touches_cursor(fragment: Fragment, sel_start: int, sel_end: int) -> bool:
    return sel_start == fragment.start and sel_end <= fragment.end


def match_brackets(
    fragments: Sequence[Fragment], sel_start: int, sel_end: int
) -> Set[int]:
    """Indexes of bracket fragments whose pair is touched by the selection.

    Each pair name keeps its own stack, so different bracket kinds never
    match each other. A closing bracket with nothing open is skipped, and
    openers still on a stack at the end stay unlinked.
    """

    stacks: Dict[str, List[BracketStackEntry]] = {}
    linked: Set[int] = set()
    for index, fragment in enumerate(fragments):
        role = fragment.rule.bracket if fragment.rule is not None else None
        if role is None:
            continue
        touching = touches_cursor(fragment, sel_start, sel_end)
        stack = stacks.setdefault(role.pair_name, [])
        if role.direction is BracketDirection.OPENING:
            stack.append(BracketStackEntry(index, fragment, touching))
            continue
        if not stack:
            continue
        opener = stack.pop()
        if opener.touches_cursor or touching:
            linked.add(opener.index)
            linked.add(index)
    return linked


__all__ = ["BracketStackEntry", "match_brackets", "touches_cursor"]
