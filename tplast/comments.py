"""Turn template comments into comment tokens."""

from __future__ import annotations

from tplast.models import BLOCK_COMMENT_KIND, Token
from tplast.source_loc import convert_node_source_span_to_loc


def comments_to_tokens(comments) -> list[Token]:
    """Convert comment nodes to tokens sorted by start offset.

    Markup has no line comments, so every token is a ``Block``. Comments that
    start at the same offset keep their input order. ``None`` means the
    parser did not collect comments and yields no tokens.
    """
    tokens = [
        Token(
            kind=BLOCK_COMMENT_KIND,
            text=comment.value,
            loc=convert_node_source_span_to_loc(comment.source_span),
            range=(comment.source_span.start.offset, comment.source_span.end.offset),
        )
        for comment in comments or []
    ]
    return sorted(tokens, key=lambda t: t.range[0])
