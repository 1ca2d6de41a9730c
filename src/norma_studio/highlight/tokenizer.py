"""Splits source text into fragments using an ordered rule list."""

from __future__ import annotations

import re
from functools import reduce
from typing import List, Optional, Pattern, Sequence

from .models import Fragment, LexicalRule


def combine_rules(rules: Sequence[LexicalRule]) -> Pattern[str]:
    """One alternation of every rule pattern, carrying the union of flags."""

    if not rules:
        raise ValueError("at least one rule is required")
    alternatives = "|".join(f"({rule.pattern.pattern})" for rule in rules)
    flags = reduce(lambda acc, rule: acc | rule.pattern.flags, rules, 0)
    # Compiled str patterns always carry re.UNICODE; drop it so mixing is legal.
    return re.compile(alternatives, flags & ~re.UNICODE)


class Tokenizer:
    def __init__(self, rules: Sequence[LexicalRule]) -> None:
        self.rules = tuple(rules)
        self.pattern = combine_rules(self.rules)

    def classify(self, piece: str) -> Optional[LexicalRule]:
        """First rule, in declared order, whose pattern finds ``piece``."""

        for rule in self.rules:
            if rule.test(piece):
                return rule
        return None

    def split(self, text: str) -> List[str]:
        """Alternating plain and matched slices, starting and ending plain."""

        pieces: List[str] = []
        last = 0
        for match in self.pattern.finditer(text):
            pieces.append(text[last : match.start()])
            pieces.append(match.group(0))
            last = match.end()
        pieces.append(text[last:])
        return pieces

    def tokenize(self, text: str) -> List[Fragment]:
        fragments: List[Fragment] = []
        offset = 0
        for index, piece in enumerate(self.split(text)):
            matched = index % 2 == 1
            rule = self.classify(piece) if matched else None
            fragments.append(Fragment(piece, offset, rule))
            offset += len(piece)
        return fragments


__all__ = ["Tokenizer", "combine_rules"]
