"""Binding expression nodes and the Lark grammar that builds them.

Covers the subset of the template expression language used in bindings and
interpolations: property reads, keyed reads, calls, pipes, the ternary
operator, ``!`` and the usual binary operators. Expression nodes carry only
absolute offsets; the markup parser attaches them to template nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from tplast.errors import TplastError
from tplast.template.source import AbsoluteSourceSpan


class BindingParseError(TplastError):
    """A binding expression could not be parsed."""

    def __init__(self, message: str, source: str, offset: int):
        self.source = source
        self.offset = offset
        super().__init__(message)


# --- Expression nodes ---


@dataclass
class ExpressionNode:
    source_span: AbsoluteSourceSpan


@dataclass
class EmptyExpr(ExpressionNode):
    pass


@dataclass
class ImplicitReceiver(ExpressionNode):
    pass


@dataclass
class ThisReceiver(ImplicitReceiver):
    pass


@dataclass
class LiteralPrimitive(ExpressionNode):
    value: Any


@dataclass
class PropertyRead(ExpressionNode):
    receiver: ExpressionNode
    name: str


@dataclass
class KeyedRead(ExpressionNode):
    receiver: ExpressionNode
    key: ExpressionNode


@dataclass
class Call(ExpressionNode):
    receiver: ExpressionNode
    args: list[ExpressionNode] = field(default_factory=list)


@dataclass
class Binary(ExpressionNode):
    operation: str
    left: ExpressionNode
    right: ExpressionNode


@dataclass
class Conditional(ExpressionNode):
    condition: ExpressionNode
    true_exp: ExpressionNode
    false_exp: ExpressionNode


@dataclass
class PrefixNot(ExpressionNode):
    expression: ExpressionNode


@dataclass
class BindingPipe(ExpressionNode):
    exp: ExpressionNode
    name: str
    args: list[ExpressionNode] = field(default_factory=list)


@dataclass
class Interpolation(ExpressionNode):
    strings: list[str]
    expressions: list[ExpressionNode]


@dataclass
class ASTWithSource(ExpressionNode):
    """Root of every parsed binding: the expression plus its raw source."""

    ast: ExpressionNode
    source: str
    location: str
    absolute_offset: int


# --- Grammar ---


_GRAMMAR = r"""
?start: pipe

?pipe: conditional
     | pipe "|" NAME (":" conditional)*               -> binding_pipe

?conditional: or_expr
            | or_expr "?" conditional ":" conditional -> ternary

?or_expr: and_expr
        | or_expr OR and_expr                          -> binary

?and_expr: eq_expr
         | and_expr AND eq_expr                        -> binary

?eq_expr: rel_expr
        | eq_expr EQ_OP rel_expr                       -> binary

?rel_expr: add_expr
         | rel_expr REL_OP add_expr                    -> binary

?add_expr: mul_expr
         | add_expr ADD_OP mul_expr                    -> binary

?mul_expr: prefix
         | mul_expr MUL_OP prefix                      -> binary

?prefix: postfix
       | "!" prefix                                    -> prefix_not

?postfix: primary
        | postfix "." NAME                             -> property_read
        | postfix "[" pipe "]"                         -> keyed_read
        | postfix "(" [arg_list] ")"                   -> call

arg_list: pipe ("," pipe)*

?primary: NAME                                         -> implicit_read
        | NUMBER                                       -> number
        | STRING                                       -> string
        | "(" pipe ")"

OR: "||"
AND: "&&"
EQ_OP: /===|!==|==|!=/
REL_OP: /<=|>=|<|>/
ADD_OP: /[+\-]/
MUL_OP: /[*\/%]/
NAME: /[A-Za-z_$][A-Za-z0-9_$]*/
NUMBER: /\d+(?:\.\d+)?/
STRING: /'[^']*'|"[^"]*"/

%import common.WS
%ignore WS
"""

_EXPR_PARSER = Lark(
    _GRAMMAR,
    parser="lalr",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)

_LITERAL_NAMES = {"true": True, "false": False, "null": None, "undefined": None}


@v_args(meta=True)
class _ExpressionBuilder(Transformer):
    """Turns the Lark parse tree into expression nodes with absolute spans."""

    def __init__(self, offset: int):
        super().__init__()
        self.offset = offset

    def _span(self, meta) -> AbsoluteSourceSpan:
        return AbsoluteSourceSpan(self.offset + meta.start_pos, self.offset + meta.end_pos)

    def binding_pipe(self, meta, children):
        exp, name, *args = children
        return BindingPipe(self._span(meta), exp, str(name), list(args))

    def ternary(self, meta, children):
        condition, true_exp, false_exp = children
        return Conditional(self._span(meta), condition, true_exp, false_exp)

    def binary(self, meta, children):
        left, op, right = children
        return Binary(self._span(meta), str(op), left, right)

    def prefix_not(self, meta, children):
        (expression,) = children
        return PrefixNot(self._span(meta), expression)

    def property_read(self, meta, children):
        receiver, name = children
        return PropertyRead(self._span(meta), receiver, str(name))

    def keyed_read(self, meta, children):
        receiver, key = children
        return KeyedRead(self._span(meta), receiver, key)

    def call(self, meta, children):
        receiver = children[0]
        args = children[1] if len(children) > 1 else []
        return Call(self._span(meta), receiver, args)

    def arg_list(self, meta, children):
        return list(children)

    def implicit_read(self, meta, children):
        name = str(children[0])
        span = self._span(meta)
        if name in _LITERAL_NAMES:
            return LiteralPrimitive(span, _LITERAL_NAMES[name])
        if name == "this":
            return ThisReceiver(span)
        receiver = ImplicitReceiver(AbsoluteSourceSpan(span.start, span.start))
        return PropertyRead(span, receiver, name)

    def number(self, meta, children):
        text = str(children[0])
        value = float(text) if "." in text else int(text)
        return LiteralPrimitive(self._span(meta), value)

    def string(self, meta, children):
        return LiteralPrimitive(self._span(meta), str(children[0])[1:-1])


def parse_expression(source: str, absolute_offset: int = 0) -> ExpressionNode:
    """Parse a single expression; blank input yields an ``EmptyExpr``."""
    if not source.strip():
        end = absolute_offset + len(source)
        return EmptyExpr(AbsoluteSourceSpan(end, end))
    try:
        tree = _EXPR_PARSER.parse(source)
    except LarkError as e:
        raise BindingParseError(
            f"Invalid expression '{source.strip()}': {type(e).__name__}",
            source,
            absolute_offset,
        ) from e
    return _ExpressionBuilder(absolute_offset).transform(tree)


def parse_binding(source: str, location: str, absolute_offset: int) -> ASTWithSource:
    """Parse the value of a property binding or event handler."""
    ast = parse_expression(source, absolute_offset)
    span = AbsoluteSourceSpan(absolute_offset, absolute_offset + len(source))
    return ASTWithSource(span, ast, source, location, absolute_offset)


def split_interpolation(text: str) -> tuple[list[str], list[tuple[str, int]]]:
    """Split text on ``{{ }}`` markers.

    Returns the literal strings around the markers and, for each marker, the
    expression source with its offset inside ``text``. An unterminated
    ``{{`` is left in the literal text.
    """
    strings: list[str] = []
    expressions: list[tuple[str, int]] = []
    pos = 0
    while True:
        start = text.find("{{", pos)
        if start == -1:
            break
        end = text.find("}}", start + 2)
        if end == -1:
            break
        strings.append(text[pos:start])
        expressions.append((text[start + 2 : end], start + 2))
        pos = end + 2
    strings.append(text[pos:])
    return strings, expressions


def parse_interpolation(text: str, location: str, absolute_offset: int) -> ASTWithSource | None:
    """Parse text containing ``{{ }}`` markers; ``None`` when there are none."""
    strings, sources = split_interpolation(text)
    if not sources:
        return None

    expressions = []
    for source, rel in sources:
        if not source.strip():
            raise BindingParseError(
                "Blank expressions are not allowed in interpolated strings",
                source,
                absolute_offset + rel,
            )
        expressions.append(parse_expression(source, absolute_offset + rel))

    span = AbsoluteSourceSpan(absolute_offset, absolute_offset + len(text))
    ast = Interpolation(span, strings, expressions)
    return ASTWithSource(span, ast, text, location, absolute_offset)
