"""Template parser: markup scanner plus binding classification.

Scans the template with a single markup regex (comments, end tags, start
tags), builds elements on a stack and turns binding attributes into
``BoundAttribute``/``BoundEvent`` nodes whose values are parsed by the Lark
expression grammar. Problems are collected and raised together as a
``TemplateParseError`` once the whole template has been scanned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from tplast.errors import ParseIssue, TemplateParseError
from tplast.template.expression import (
    ASTWithSource,
    BindingParseError,
    parse_binding,
    parse_interpolation,
)
from tplast.template.nodes import (
    BindingKind,
    BoundAttribute,
    BoundEvent,
    BoundText,
    Comment,
    Element,
    EventKind,
    Reference,
    Template,
    Text,
    TextAttribute,
    Variable,
)
from tplast.template.source import ParseSourceFile, ParseSourceSpan

logger = logging.getLogger(__name__)

_MARKUP = re.compile(
    r"<!--(?P<comment>.*?)-->"
    r"|</(?P<end>[A-Za-z][\w:.-]*)\s*>"
    r"|<(?P<start>[A-Za-z][\w:.-]*)"
    r"(?P<attrs>(?:\s+[^\s\"'>/=]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s\"'=<>`]+))?)*)"
    r"\s*(?P<self_closing>/?)>",
    re.DOTALL,
)

_ATTRIBUTE = re.compile(
    r"(?P<name>[^\s\"'>/=]+)"
    r"(?:\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'=<>`]+)))?"
)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

_BINDING_PREFIXES = {
    "attr.": BindingKind.ATTRIBUTE,
    "class.": BindingKind.CLASS,
    "style.": BindingKind.STYLE,
}

_LET_ASSIGN = re.compile(r"let\s+(?P<name>[\w$]+)\s*=\s*(?P<value>[\w$]+)$")
_LET_KEYED = re.compile(r"let\s+(?P<name>[\w$]+)\s+(?P<key>[\w$]+)\s+(?P<expr>.+)$", re.DOTALL)
_AS_ALIAS = re.compile(r"(?P<key>[\w$]+)\s+as\s+(?P<name>[\w$]+)$")
_KEYED_EXPR = re.compile(r"(?P<key>[\w$]+)(?:\s*:\s*|\s+)(?P<expr>.+)$", re.DOTALL)


@dataclass
class ParsedTemplate:
    """Output of ``parse_template``.

    ``comment_nodes`` is ``None`` unless comment collection was requested.
    """

    nodes: list
    comment_nodes: list[Comment] | None
    source_file: ParseSourceFile


@dataclass
class _OpenElement:
    name: str
    start_span: ParseSourceSpan
    attributes: list[TextAttribute] = field(default_factory=list)
    inputs: list[BoundAttribute] = field(default_factory=list)
    outputs: list[BoundEvent] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    template_attrs: list[BoundAttribute] = field(default_factory=list)
    template_variables: list[Variable] = field(default_factory=list)
    children: list = field(default_factory=list)


def parse_template(
    code: str,
    url: str,
    preserve_whitespaces: bool = True,
    preserve_line_endings: bool = True,
    collect_comment_nodes: bool = True,
) -> ParsedTemplate:
    """Parse template markup into template nodes.

    Raises:
        TemplateParseError: unbalanced tags, unterminated comments or invalid
            binding expressions.
    """
    builder = _TreeBuilder(
        ParseSourceFile(code, url),
        preserve_whitespaces=preserve_whitespaces,
        preserve_line_endings=preserve_line_endings,
    )
    nodes, comments = builder.build()
    if builder.issues:
        raise TemplateParseError(builder.issues)

    logger.debug("Parsed %s: %d top-level node(s), %d comment(s)", url, len(nodes), len(comments))
    return ParsedTemplate(
        nodes=nodes,
        comment_nodes=comments if collect_comment_nodes else None,
        source_file=builder.file,
    )


class _TreeBuilder:
    def __init__(self, file: ParseSourceFile, preserve_whitespaces: bool, preserve_line_endings: bool):
        self.file = file
        self.code = file.content
        self.preserve_whitespaces = preserve_whitespaces
        self.preserve_line_endings = preserve_line_endings
        self.stack: list[_OpenElement] = []
        self.roots: list = []
        self.comments: list[Comment] = []
        self.issues: list[ParseIssue] = []

    def build(self) -> tuple[list, list[Comment]]:
        pos = 0
        for m in _MARKUP.finditer(self.code):
            self._add_text(pos, m.start())
            pos = m.end()
            if m.group("comment") is not None:
                self._add_comment(m)
            elif m.group("end") is not None:
                self._close_element(m)
            else:
                self._open_element(m)
        self._add_text(pos, len(self.code))

        for open_el in reversed(self.stack):
            self.issues.append(ParseIssue(f"Unclosed element <{open_el.name}>", open_el.start_span))
        return self.roots, self.comments

    def _append(self, node) -> None:
        if self.stack:
            self.stack[-1].children.append(node)
        else:
            self.roots.append(node)

    # ── Text and comments ───────────────────────────────────────────

    def _add_text(self, start: int, end: int) -> None:
        if start >= end:
            return
        value = self.code[start:end]
        span = self.file.span(start, end)
        if "<!--" in value:
            self.issues.append(ParseIssue("Unterminated comment", span))
            return
        if not self.preserve_whitespaces and not value.strip():
            return
        if not self.preserve_line_endings:
            value = value.replace("\r\n", "\n")

        ast = self._interpolation(self.code[start:end], start)
        if ast is not None:
            self._append(BoundText(value=ast, source_span=span))
        else:
            self._append(Text(value=value, source_span=span))

    def _add_comment(self, m: re.Match) -> None:
        comment = Comment(value=m.group("comment"), source_span=self.file.span(m.start(), m.end()))
        self.comments.append(comment)

    # ── Elements ────────────────────────────────────────────────────

    def _open_element(self, m: re.Match) -> None:
        name = m.group("start")
        open_el = _OpenElement(name=name, start_span=self.file.span(m.start(), m.end()))
        self._parse_attributes(open_el, m.group("attrs"), m.start("attrs"))

        if m.group("self_closing") or name.lower() in VOID_ELEMENTS:
            self._append(self._make_node(open_el, None))
        else:
            self.stack.append(open_el)

    def _close_element(self, m: re.Match) -> None:
        name = m.group("end")
        end_span = self.file.span(m.start(), m.end())
        if not self.stack or self.stack[-1].name.lower() != name.lower():
            self.issues.append(ParseIssue(f"Unexpected closing tag </{name}>", end_span))
            return
        open_el = self.stack.pop()
        self._append(self._make_node(open_el, end_span))

    def _make_node(self, open_el: _OpenElement, end_span: ParseSourceSpan | None):
        start_span = open_el.start_span
        end_offset = end_span.end.offset if end_span else start_span.end.offset
        source_span = self.file.span(start_span.start.offset, end_offset)

        if open_el.name == "ng-template":
            node = Template(
                tag_name=open_el.name,
                source_span=source_span,
                start_source_span=start_span,
                end_source_span=end_span,
                attributes=open_el.attributes,
                inputs=open_el.inputs,
                outputs=open_el.outputs,
                template_attrs=open_el.template_attrs,
                children=open_el.children,
                references=open_el.references,
                variables=open_el.variables + open_el.template_variables,
            )
            return node

        if open_el.variables:
            self.issues.append(
                ParseIssue('"let-" is only supported on ng-template elements', start_span)
            )
        node = Element(
            name=open_el.name,
            source_span=source_span,
            start_source_span=start_span,
            end_source_span=end_span,
            attributes=open_el.attributes,
            inputs=open_el.inputs,
            outputs=open_el.outputs,
            children=open_el.children,
            references=open_el.references,
        )
        if not open_el.template_attrs and not open_el.template_variables:
            return node

        return Template(
            tag_name=open_el.name,
            source_span=source_span,
            start_source_span=start_span,
            end_source_span=end_span,
            template_attrs=open_el.template_attrs,
            children=[node],
            variables=open_el.template_variables,
        )

    # ── Attributes ──────────────────────────────────────────────────

    def _parse_attributes(self, open_el: _OpenElement, text: str, base: int) -> None:
        for m in _ATTRIBUTE.finditer(text):
            name = m.group("name")
            value_group = next((g for g in ("dq", "sq", "bare") if m.group(g) is not None), None)
            if value_group:
                value = m.group(value_group)
                value_start = base + m.start(value_group)
            else:
                value = ""
                value_start = base + m.end("name")
            span = self.file.span(base + m.start(), base + m.end())
            key_span = self.file.span(base + m.start("name"), base + m.end("name"))
            self._classify_attribute(open_el, name, value, value_start, span, key_span)

    def _classify_attribute(self, open_el, name, value, value_start, span, key_span) -> None:
        if name.startswith("[(") and name.endswith(")]"):
            prop = name[2:-2]
            open_el.inputs.append(
                BoundAttribute(prop, BindingKind.TWO_WAY, self._binding(value, value_start), span, key_span)
            )
            open_el.outputs.append(
                BoundEvent(
                    f"{prop}Change", EventKind.TWO_WAY, self._binding(value, value_start), span, key_span
                )
            )
        elif name.startswith("[") and name.endswith("]"):
            self._add_property(open_el, name[1:-1], value, value_start, span, key_span)
        elif name.startswith("bind-"):
            self._add_property(open_el, name[5:], value, value_start, span, key_span)
        elif name.startswith("(") and name.endswith(")"):
            self._add_event(open_el, name[1:-1], value, value_start, span, key_span)
        elif name.startswith("on-"):
            self._add_event(open_el, name[3:], value, value_start, span, key_span)
        elif name.startswith("*"):
            self._add_structural(open_el, name[1:], value, value_start, span)
        elif name.startswith("#"):
            open_el.references.append(Reference(name[1:], value, span))
        elif name.startswith("ref-"):
            open_el.references.append(Reference(name[4:], value, span))
        elif name.startswith("let-"):
            open_el.variables.append(Variable(name[4:], value or "$implicit", span))
        else:
            ast = self._interpolation(value, value_start)
            if ast is not None:
                open_el.inputs.append(BoundAttribute(name, BindingKind.PROPERTY, ast, span, key_span))
            else:
                value_span = self.file.span(value_start, value_start + len(value))
                open_el.attributes.append(TextAttribute(name, value, span, value_span))

    def _add_property(self, open_el, prop, value, value_start, span, key_span) -> None:
        kind = BindingKind.PROPERTY
        for prefix, prefixed_kind in _BINDING_PREFIXES.items():
            if prop.startswith(prefix):
                kind = prefixed_kind
                prop = prop[len(prefix) :]
                break
        open_el.inputs.append(BoundAttribute(prop, kind, self._binding(value, value_start), span, key_span))

    def _add_event(self, open_el, event, value, value_start, span, key_span) -> None:
        open_el.outputs.append(
            BoundEvent(event, EventKind.REGULAR, self._binding(value, value_start), span, key_span)
        )

    def _add_structural(self, open_el, directive, value, value_start, span) -> None:
        """Expand ``*directive="..."`` into template attributes and variables.

        Supports the common clause forms: a bare expression, ``let x of expr``,
        ``let i = index``, ``index as i`` and ``key: expr``.
        """
        for i, clause in enumerate(re.finditer(r"[^;]+", value)):
            text = clause.group().strip()
            if not text:
                continue
            offset = value_start + clause.start() + (len(clause.group()) - len(clause.group().lstrip()))

            let_assign = _LET_ASSIGN.match(text)
            let_keyed = _LET_KEYED.match(text)
            alias = _AS_ALIAS.match(text)
            keyed = _KEYED_EXPR.match(text) if i > 0 else None

            if let_assign:
                open_el.template_variables.append(
                    Variable(let_assign.group("name"), let_assign.group("value"), span)
                )
            elif let_keyed:
                open_el.template_variables.append(Variable(let_keyed.group("name"), "$implicit", span))
                open_el.template_attrs.append(
                    BoundAttribute(
                        _directive_input(directive, let_keyed.group("key")),
                        BindingKind.PROPERTY,
                        self._binding(let_keyed.group("expr"), offset + let_keyed.start("expr")),
                        span,
                    )
                )
            elif alias:
                open_el.template_variables.append(Variable(alias.group("name"), alias.group("key"), span))
            elif keyed:
                open_el.template_attrs.append(
                    BoundAttribute(
                        _directive_input(directive, keyed.group("key")),
                        BindingKind.PROPERTY,
                        self._binding(keyed.group("expr"), offset + keyed.start("expr")),
                        span,
                    )
                )
            else:
                open_el.template_attrs.append(
                    BoundAttribute(directive, BindingKind.PROPERTY, self._binding(text, offset), span)
                )
        if not value.strip():
            open_el.template_attrs.append(
                BoundAttribute(directive, BindingKind.PROPERTY, self._binding("", value_start), span)
            )

    # ── Expressions ─────────────────────────────────────────────────

    def _location(self, offset: int) -> str:
        loc = self.file.location_at(offset)
        return f"{self.file.url}@{loc.line}:{loc.col}"

    def _binding(self, source: str, offset: int) -> ASTWithSource:
        try:
            return parse_binding(source, self._location(offset), offset)
        except BindingParseError as e:
            self.issues.append(ParseIssue(str(e), self.file.span(offset, offset + len(source))))
            return parse_binding("", self._location(offset), offset)

    def _interpolation(self, text: str, offset: int) -> ASTWithSource | None:
        try:
            return parse_interpolation(text, self._location(offset), offset)
        except BindingParseError as e:
            self.issues.append(ParseIssue(str(e), self.file.span(e.offset, e.offset + len(e.source))))
            return None


def _directive_input(directive: str, key: str) -> str:
    """``ngFor`` + ``of`` -> ``ngForOf``."""
    return directive + key[:1].upper() + key[1:]
