"""Tests for kind normalization and visitor key resolution."""

import pytest

from tplast.config import MissingChildPolicy, NormalizerConfig
from tplast.errors import MalformedNodeError
from tplast.models import Program
from tplast.normalize import assign_kind, is_node, kind_name, normalize
from tplast.template import parse_template
from tplast.template.nodes import BindingKind, BoundText, EventKind
from tplast.traverse import iter_nodes
from tplast.visitor_keys import VISITOR_KEYS, fallback_keys, keys_for


def _program(code: str) -> Program:
    parsed = parse_template(code, "t.html")
    return Program(text=code, template_nodes=parsed.nodes)


def _snapshot(root) -> list:
    return [(n.kind, getattr(n, "original_kind", None)) for n in iter_nodes(root)]


class Leaf:
    def __init__(self, value):
        self.value = value


class Box:
    def __init__(self, **fields):
        self.__dict__.update(fields)


# --- Visitor Key Tests ---


def test_keys_for_known_kind():
    node = Box(kind="Element")
    assert keys_for(node) == ["children", "inputs", "outputs", "attributes"]


def test_keys_for_returns_copy():
    node = Box(kind="Binary")
    keys_for(node).append("extra")
    assert VISITOR_KEYS["Binary"] == ["left", "right"]


def test_fallback_keys_keeps_lists_and_typed_objects():
    child = Box(kind="Thing")
    node = Box(
        kind="Custom",
        items=[1, 2],
        child=child,
        untyped=Leaf(3),
        missing=None,
        name="x",
    )
    assert fallback_keys(node) == ["items", "child"]


def test_fallback_keys_skips_bookkeeping_fields():
    parent = Box(kind="Parent")
    node = Box(
        kind="Custom",
        parent=parent,
        tokens=[],
        comments=[],
        leading_comments=[],
        trailing_comments=[],
        range=(0, 1),
        loc=Box(kind="Loc"),
        body=[],
    )
    assert fallback_keys(node) == ["body"]


def test_keys_for_unknown_kind_uses_fallback():
    assert keys_for(Box(kind="Mystery", parts=[])) == ["parts"]
    assert keys_for(Box(kind="Mystery", value=3)) == []


# --- Kind Assignment Tests ---


def test_kind_name_is_class_name():
    assert kind_name(Leaf(1)) == "Leaf"


def test_assign_kind_sets_missing_kind():
    leaf = Leaf(1)
    assign_kind(leaf)
    assert leaf.kind == "Leaf"
    assert not hasattr(leaf, "original_kind")


def test_assign_kind_shadows_non_string_kind():
    node = Box(kind=7)
    assign_kind(node)
    assert node.kind == "Box"
    assert node.original_kind == 7


def test_assign_kind_keeps_string_kind():
    node = Box(kind="Already")
    assign_kind(node)
    assert node.kind == "Already"
    assert not hasattr(node, "original_kind")


def test_assign_kind_ignores_scalars():
    for value in ("text", 3, 1.5, True, None):
        assign_kind(value)


# --- Normalization Tests ---


def test_every_reachable_node_has_string_kind():
    root = _program(
        '<div [title]="t" (click)="go(a, b[0])">'
        '<p *ngIf="!done">{{ x ? y : z | upper }}</p>'
        "<ng-template><span>{{ user.name }}</span></ng-template>"
        "</div>"
    )
    normalize(root)

    nodes = list(iter_nodes(root))
    assert len(nodes) > 10
    for node in nodes:
        assert isinstance(node.kind, str)
        for key in keys_for(node):
            value = getattr(node, key)
            values = value if isinstance(value, list) else [value]
            for item in values:
                assert isinstance(item.kind, str)


def test_bound_attribute_kind_is_shadowed():
    root = _program('<input [value]="name" (change)="save()">')
    normalize(root)

    el = root.template_nodes[0]
    assert el.kind == "Element"
    attr = el.inputs[0]
    assert attr.kind == "BoundAttribute"
    assert attr.original_kind is BindingKind.PROPERTY
    event = el.outputs[0]
    assert event.kind == "BoundEvent"
    assert event.original_kind is EventKind.REGULAR


def test_single_child_with_numeric_kind_is_shadowed():
    root = _program("<div>{{ a }}</div>")
    bound_text = root.template_nodes[0].children[0]
    bound_text.value.kind = 42

    normalize(root)
    assert bound_text.value.kind == "ASTWithSource"
    assert bound_text.value.original_kind == 42


def test_expression_tree_is_typed():
    root = _program("<div>{{ a + b }}</div>")
    normalize(root)

    ast = root.template_nodes[0].children[0].value
    assert ast.kind == "ASTWithSource"
    assert ast.ast.kind == "Interpolation"
    binary = ast.ast.expressions[0]
    assert binary.kind == "Binary"
    assert binary.left.kind == "PropertyRead"
    assert binary.left.receiver.kind == "ImplicitReceiver"


def test_normalize_is_idempotent():
    root = _program('<div [title]="t" (click)="go()">{{ a }}<!-- c --></div>')
    normalize(root)
    first = _snapshot(root)

    normalize(root)
    assert _snapshot(root) == first
    assert root.template_nodes[0].inputs[0].original_kind is BindingKind.PROPERTY


def test_fallback_inference_reaches_untabled_children():
    root = Program(text="", template_nodes=[Box(kind="Custom", parts=[Leaf(1), Leaf(2)])])
    normalize(root)
    custom = root.template_nodes[0]
    assert [p.kind for p in custom.parts] == ["Leaf", "Leaf"]


def test_parent_back_reference_is_not_followed():
    parent = Box(kind="Custom", items=[])
    child = Box(kind="Custom", parent=parent, items=[])
    parent.items.append(child)
    root = Program(text="", template_nodes=[parent])

    normalize(root)
    assert list(iter_nodes(root)) == [root, parent, child]


def test_scalar_list_elements_are_skipped():
    root = Program(text="", template_nodes=[Box(kind="Custom", names=["a", "b"])])
    normalize(root)
    assert root.template_nodes[0].names == ["a", "b"]


# --- Missing Child Tests ---


def test_missing_child_raises_by_default():
    root = Program(text="", template_nodes=[BoundText(value=None, source_span=None)])
    with pytest.raises(MalformedNodeError) as exc:
        normalize(root)
    assert exc.value.kind == "BoundText"
    assert exc.value.field == "value"


def test_missing_child_skipped_when_configured():
    root = Program(
        text="",
        template_nodes=[BoundText(value=None, source_span=None), Leaf(1)],
    )
    normalize(root, NormalizerConfig(missing_child=MissingChildPolicy.SKIP))
    assert [n.kind for n in root.template_nodes] == ["BoundText", "Leaf"]


# --- Copy Tests ---


def test_copy_tree_leaves_input_untouched():
    root = _program('<input [value]="name">')
    original_input = root.template_nodes[0]

    result = normalize(root, NormalizerConfig(copy_tree=True))

    assert result is not root
    assert result.template_nodes[0].kind == "Element"
    assert not hasattr(original_input, "original_kind")
    assert not is_node(original_input)
    assert original_input.inputs[0].kind is BindingKind.PROPERTY


def test_in_place_returns_same_root():
    root = _program("<div></div>")
    assert normalize(root) is root
    assert is_node(root.template_nodes[0])
