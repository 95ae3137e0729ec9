"""Walk and serialize normalized trees."""

from __future__ import annotations

from dataclasses import asdict
from enum import Enum
from typing import Any, Iterator

from tplast.models import Position, SourceLoc
from tplast.normalize import is_node
from tplast.template.source import AbsoluteSourceSpan, ParseSourceSpan
from tplast.visitor_keys import keys_for


def iter_nodes(root) -> Iterator[Any]:
    """Yield ``root`` and every node below it, pre-order, via the visitor keys."""
    yield root
    for key in keys_for(root):
        value = getattr(root, key, None)
        children = value if isinstance(value, (list, tuple)) else [value]
        for child in children:
            if is_node(child):
                yield from iter_nodes(child)


def to_dict(node) -> dict:
    """Plain-data rendition of a node for JSON/YAML output.

    Spans become ``[start, end]`` offset pairs and enums their member names.
    """
    out: dict[str, Any] = {}
    if is_node(node):
        out["kind"] = node.kind
    for key, value in vars(node).items():
        if key == "kind" or key.startswith("_"):
            continue
        out[key] = _plain(value)
    return out


def _plain(value):
    if isinstance(value, Enum):
        return value.name
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, ParseSourceSpan):
        return [value.start.offset, value.end.offset]
    if isinstance(value, AbsoluteSourceSpan):
        return [value.start, value.end]
    if isinstance(value, (Position, SourceLoc)):
        return asdict(value)
    if hasattr(value, "__dict__"):
        return to_dict(value)
    return repr(value)
