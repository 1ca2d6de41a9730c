"""Tokenize + bracket pairing in a single render pass."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .brackets import match_brackets
from .models import Fragment, LexicalRule, RenderNode
from .rules import norma_rules
from .tokenizer import Tokenizer


class Highlighter:
    """Turns buffer text plus selection into render nodes.

    ``render`` depends only on its arguments and the fixed rule list.
    """

    def __init__(self, rules: Sequence[LexicalRule]) -> None:
        self.tokenizer = Tokenizer(rules)

    @classmethod
    def default(cls) -> "Highlighter":
        return cls(norma_rules())

    @property
    def rules(self) -> tuple[LexicalRule, ...]:
        return self.tokenizer.rules

    def fragments(self, text: str) -> List[Fragment]:
        return self.tokenizer.tokenize(text)

    def render(
        self, text: str, sel_start: int, sel_end: Optional[int] = None
    ) -> List[RenderNode]:
        if sel_end is None:
            sel_end = sel_start
        fragments = self.tokenizer.tokenize(text)
        linked = match_brackets(fragments, sel_start, sel_end)
        nodes: List[RenderNode] = []
        for index, fragment in enumerate(fragments):
            if fragment.rule is None:
                nodes.append(RenderNode(fragment.text))
            else:
                nodes.append(
                    RenderNode(
                        fragment.text,
                        class_name=fragment.rule.class_name,
                        linked=index in linked,
                    )
                )
        return nodes


__all__ = ["Highlighter"]
