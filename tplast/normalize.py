"""Give every node in a template tree a string ``kind``.

The template parser's nodes carry no discriminator of their own, and a few of
them (``BoundAttribute``, ``BoundEvent``) use ``kind`` for a numeric
classification code. The normalizer walks the tree pre-order through the
visitor keys and stamps each child with its class name, moving any
non-string ``kind`` to ``original_kind`` first so nothing is lost.

Nodes are mutated in place unless ``NormalizerConfig.copy_tree`` is set.
"""

from __future__ import annotations

import copy
import logging

from tplast.config import MissingChildPolicy, NormalizerConfig
from tplast.errors import MalformedNodeError
from tplast.visitor_keys import keys_for

logger = logging.getLogger(__name__)

ORIGINAL_KIND_FIELD = "original_kind"

_SCALARS = (str, bytes, int, float, bool)


def is_node(value) -> bool:
    return isinstance(getattr(value, "kind", None), str)


def kind_name(value) -> str:
    """The canonical kind of a raw node: its class name."""
    return type(value).__name__


def _is_record(value) -> bool:
    return hasattr(value, "__dict__") and not isinstance(value, (type, *_SCALARS))


def _has_usable_kind(value) -> bool:
    kind = getattr(value, "kind", None)
    return isinstance(kind, str) and kind != ""


def assign_kind(value) -> None:
    """Stamp ``value`` with a string kind, shadowing any other existing value."""
    if not _is_record(value) or _has_usable_kind(value):
        return

    current = getattr(value, "kind", None)
    if current is not None:
        setattr(value, ORIGINAL_KIND_FIELD, current)
        logger.debug("Shadowed %s.kind=%r into %s", kind_name(value), current, ORIGINAL_KIND_FIELD)
    value.kind = kind_name(value)


def normalize(node, config: NormalizerConfig | None = None):
    """Normalize the tree rooted at ``node`` and return its root.

    The root itself must already have a string kind. Running this on an
    already-normalized tree changes nothing.

    Raises:
        MalformedNodeError: a child field named by the visitor keys holds
            ``None`` and ``config.missing_child`` is ``ERROR``.
    """
    config = config or NormalizerConfig()
    if config.copy_tree:
        node = copy.deepcopy(node)
    _normalize_node(node, config.missing_child)
    return node


def _normalize_node(node, missing_child: MissingChildPolicy) -> None:
    for key in keys_for(node):
        child = getattr(node, key, None)
        if child is None:
            if missing_child == MissingChildPolicy.SKIP:
                logger.debug("Skipping empty child field %s.%s", node.kind, key)
                continue
            raise MalformedNodeError(node.kind, key)

        if isinstance(child, (list, tuple)):
            for item in child:
                assign_kind(item)
                if is_node(item):
                    _normalize_node(item, missing_child)
        else:
            assign_kind(child)
            if is_node(child):
                _normalize_node(child, missing_child)
