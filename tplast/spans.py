"""Aggregate top-level node spans into one document span."""

from __future__ import annotations

import logging

from tplast.models import DocumentSpan

logger = logging.getLogger(__name__)


def start_span(nodes):
    """The span with the smallest start offset; the first one wins ties.

    Elements are measured from their opening tag (``start_source_span``),
    everything else from ``source_span``.
    """
    best = None
    for node in nodes:
        span = getattr(node, "start_source_span", None) or getattr(node, "source_span", None)
        if span is not None and (best is None or span.start.offset < best.start.offset):
            best = span
    return best


def end_span(nodes):
    """The span with the largest end offset; the first one wins ties."""
    best = None
    for node in nodes:
        span = getattr(node, "end_source_span", None) or getattr(node, "source_span", None)
        if span is not None and (best is None or span.end.offset > best.end.offset):
            best = span
    return best


def aggregate_span(nodes) -> DocumentSpan | None:
    """Document span of ``nodes``, or ``None`` when they expose no spans."""
    nodes = list(nodes)
    start = start_span(nodes)
    end = end_span(nodes)
    if start is None or end is None:
        logger.debug("No spans among %d top-level node(s)", len(nodes))
        return None
    return DocumentSpan(start=start, end=end)
