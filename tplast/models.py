"""Normalized tree data models.

``Program`` is the root the analysis consumer receives. It owns the
normalized top-level template nodes, the comment tokens and the document
range. Every other node in the tree is a template or expression node that
the normalizer has stamped with a string ``kind``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

PROGRAM_KIND = "Program"
BLOCK_COMMENT_KIND = "Block"


@dataclass
class Position:
    line: int = 0  # 1-based once converted from a source span, 0 for the empty document
    column: int = 0


@dataclass
class SourceLoc:
    start: Position = field(default_factory=Position)
    end: Position = field(default_factory=Position)


@dataclass
class Token:
    """A flat, position-tagged unit. Only comments are tokenized."""

    kind: str
    text: str
    loc: SourceLoc
    range: tuple[int, int]


@dataclass
class Program:
    """Root node of a normalized template."""

    text: str
    template_nodes: list = field(default_factory=list)
    comments: list[Token] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)
    range: tuple[int, int] = (0, 0)
    loc: SourceLoc = field(default_factory=SourceLoc)
    kind: str = PROGRAM_KIND


@dataclass
class DocumentSpan:
    """The aggregated extent of a template's top-level nodes."""

    start: Any  # ParseSourceSpan with the smallest start offset
    end: Any  # ParseSourceSpan with the largest end offset

    @property
    def range(self) -> tuple[int, int]:
        return (self.start.start.offset, self.end.end.offset)

    @property
    def loc(self) -> SourceLoc:
        from tplast.source_loc import convert_node_source_span_to_loc

        return SourceLoc(
            start=convert_node_source_span_to_loc(self.start).start,
            end=convert_node_source_span_to_loc(self.end).end,
        )


@dataclass
class ParserServices:
    """Span conversion helpers handed to analysis consumers."""

    convert_node_source_span_to_loc: Callable[[Any], SourceLoc]
    convert_element_source_span_to_loc: Callable[[Any], SourceLoc]


@dataclass
class ParseResult:
    """Everything a generic analysis consumer needs from one template."""

    ast: Program
    scope_manager: Any  # tplast.scope.ScopeManager
    visitor_keys: dict[str, list[str]]
    services: ParserServices
