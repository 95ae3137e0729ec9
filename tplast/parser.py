"""Parse a template into a normalized tree for generic analysis consumers.

``parse_for_analysis`` is the entry point linters call: it runs the template
parser, wraps the top-level nodes in a ``Program`` root, stamps every node
with a string kind and measures the document range.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tplast.comments import comments_to_tokens
from tplast.config import NormalizerConfig
from tplast.models import ParseResult, ParserServices, Program, SourceLoc
from tplast.normalize import normalize
from tplast.scope import Scope, ScopeManager
from tplast.source_loc import (
    convert_element_source_span_to_loc,
    convert_node_source_span_to_loc,
)
from tplast.spans import aggregate_span
from tplast.template import parse_template
from tplast.visitor_keys import VISITOR_KEYS

logger = logging.getLogger(__name__)


def parse_for_analysis(code: str, file_path: str, config: NormalizerConfig | None = None) -> ParseResult:
    """Parse and normalize a template.

    Template parse errors propagate unchanged.

    Args:
        code: Template source text.
        file_path: Path of the template, used in locations and error messages.
        config: Parser and normalizer options.
    """
    config = config or NormalizerConfig()
    parsed = parse_template(
        code,
        file_path,
        preserve_whitespaces=config.preserve_whitespaces,
        preserve_line_endings=config.preserve_line_endings,
        collect_comment_nodes=config.collect_comment_nodes,
    )

    ast = Program(
        text=code,
        template_nodes=parsed.nodes,
        comments=comments_to_tokens(parsed.comment_nodes),
        tokens=[],
    )

    # Freshly parsed tree, no copy needed.
    normalize(ast, replace(config, copy_tree=False))

    scope_manager = ScopeManager()
    Scope(scope_manager, "module", None, ast, False)

    span = aggregate_span(ast.template_nodes)
    if span is not None:
        ast.range = span.range
        ast.loc = span.loc
    else:
        ast.range = (0, 0)
        ast.loc = SourceLoc()

    logger.debug(
        "Normalized %s: %d top-level node(s), %d comment(s), range %s",
        file_path,
        len(ast.template_nodes),
        len(ast.comments),
        ast.range,
    )
    return ParseResult(
        ast=ast,
        scope_manager=scope_manager,
        visitor_keys=VISITOR_KEYS,
        services=ParserServices(
            convert_node_source_span_to_loc=convert_node_source_span_to_loc,
            convert_element_source_span_to_loc=convert_element_source_span_to_loc,
        ),
    )


def parse(code: str, file_path: str, config: NormalizerConfig | None = None) -> Program:
    """Parse and normalize a template, returning only the ``Program`` root."""
    return parse_for_analysis(code, file_path, config).ast

