"""Convert template source spans to line/column locations.

Template spans use 0-based lines; analysis consumers expect 1-based lines and
0-based columns.
"""

from __future__ import annotations

from tplast.models import Position, SourceLoc


def convert_node_source_span_to_loc(source_span) -> SourceLoc:
    return SourceLoc(
        start=Position(line=source_span.start.line + 1, column=source_span.start.col),
        end=Position(line=source_span.end.line + 1, column=source_span.end.col),
    )


def convert_element_source_span_to_loc(node) -> SourceLoc:
    """Location of an element from the start of its opening tag to the end of
    its closing tag, falling back to ``source_span`` for either side."""
    start_span = getattr(node, "start_source_span", None) or node.source_span
    end_span = getattr(node, "end_source_span", None) or node.source_span
    return SourceLoc(
        start=convert_node_source_span_to_loc(start_span).start,
        end=convert_node_source_span_to_loc(end_span).end,
    )
