"""Visitor keys: which fields of a node hold its children.

Known kinds are looked up in ``VISITOR_KEYS``, whose order is also the
traversal order. Anything else falls back to structural inference over the
node's own fields.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

VISITOR_KEYS: dict[str, list[str]] = {
    "ASTWithSource": ["ast"],
    "Binary": ["left", "right"],
    "BindingPipe": ["exp"],
    "BoundAttribute": ["value"],
    "BoundEvent": ["handler"],
    "BoundText": ["value"],
    "Call": ["receiver", "args"],
    "Conditional": ["condition", "true_exp", "false_exp"],
    "Element": ["children", "inputs", "outputs", "attributes"],
    "Interpolation": ["expressions"],
    "KeyedRead": ["receiver", "key"],
    "PrefixNot": ["expression"],
    "Program": ["template_nodes"],
    "PropertyRead": ["receiver"],
    "Template": ["template_attrs", "children", "inputs"],
}

# Bookkeeping and back-reference fields, never children.
FALLBACK_EXCLUDED_KEYS = frozenset(
    {
        "comments",
        "leading_comments",
        "loc",
        "parent",
        "range",
        "tokens",
        "trailing_comments",
    }
)


def _has_string_kind(value) -> bool:
    return isinstance(getattr(value, "kind", None), str)


def fallback_keys(node) -> list[str]:
    """Infer child fields from the node's own attributes.

    Keeps non-``None`` fields holding a list/tuple or an object that already
    has a string ``kind``. Children that are ``None`` at this point, or that
    are wrapped in anything other than a list/tuple, are not found.
    """
    fields = getattr(node, "__dict__", {})
    return [
        key
        for key, value in fields.items()
        if key not in FALLBACK_EXCLUDED_KEYS
        and value is not None
        and (isinstance(value, (list, tuple)) or _has_string_kind(value))
    ]


def keys_for(node) -> list[str]:
    kind = getattr(node, "kind", None)
    if isinstance(kind, str) and kind in VISITOR_KEYS:
        return list(VISITOR_KEYS[kind])

    keys = fallback_keys(node)
    logger.debug("No visitor keys for %r, inferred %s", kind, keys)
    return keys
