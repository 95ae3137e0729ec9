"""Template (markup) nodes produced by the template parser.

None of these carry a string ``kind``; ``BoundAttribute`` and ``BoundEvent``
use the ``kind`` attribute for a classification enum instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from tplast.template.expression import ASTWithSource
from tplast.template.source import ParseSourceSpan


class BindingKind(IntEnum):
    PROPERTY = 0  # [value]="expr"
    ATTRIBUTE = 1  # [attr.role]="expr"
    CLASS = 2  # [class.active]="expr"
    STYLE = 3  # [style.width]="expr"
    TWO_WAY = 4  # [(ngModel)]="expr"


class EventKind(IntEnum):
    REGULAR = 0  # (click)="handler()"
    TWO_WAY = 1  # the change half of [(ngModel)]


@dataclass
class Text:
    value: str
    source_span: ParseSourceSpan


@dataclass
class BoundText:
    """Text containing ``{{ }}`` interpolations."""

    value: ASTWithSource
    source_span: ParseSourceSpan


@dataclass
class Comment:
    value: str
    source_span: ParseSourceSpan


@dataclass
class TextAttribute:
    name: str
    value: str
    source_span: ParseSourceSpan
    value_span: ParseSourceSpan | None = None


@dataclass
class BoundAttribute:
    name: str
    kind: BindingKind
    value: ASTWithSource
    source_span: ParseSourceSpan
    key_span: ParseSourceSpan | None = None


@dataclass
class BoundEvent:
    name: str
    kind: EventKind
    handler: ASTWithSource
    source_span: ParseSourceSpan
    key_span: ParseSourceSpan | None = None


@dataclass
class Reference:
    """``#name`` or ``ref-name`` on an element."""

    name: str
    value: str
    source_span: ParseSourceSpan


@dataclass
class Variable:
    """``let-name="value"`` on an ``<ng-template>``."""

    name: str
    value: str
    source_span: ParseSourceSpan


@dataclass
class Element:
    name: str
    source_span: ParseSourceSpan
    start_source_span: ParseSourceSpan
    end_source_span: ParseSourceSpan | None = None
    attributes: list[TextAttribute] = field(default_factory=list)
    inputs: list[BoundAttribute] = field(default_factory=list)
    outputs: list[BoundEvent] = field(default_factory=list)
    children: list = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)


@dataclass
class Template:
    """An ``<ng-template>``, or the wrapper created by a ``*directive``."""

    tag_name: str
    source_span: ParseSourceSpan
    start_source_span: ParseSourceSpan
    end_source_span: ParseSourceSpan | None = None
    attributes: list[TextAttribute] = field(default_factory=list)
    inputs: list[BoundAttribute] = field(default_factory=list)
    outputs: list[BoundEvent] = field(default_factory=list)
    template_attrs: list = field(default_factory=list)
    children: list = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
