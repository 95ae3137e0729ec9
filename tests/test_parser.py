"""End-to-end tests for parse_for_analysis."""

import json

import pytest

from tplast import parse, parse_for_analysis
from tplast.config import MissingChildPolicy, NormalizerConfig
from tplast.errors import TemplateParseError
from tplast.models import Position, SourceLoc
from tplast.source_loc import convert_node_source_span_to_loc
from tplast.template.nodes import BindingKind
from tplast.traverse import iter_nodes, to_dict
from tplast.visitor_keys import VISITOR_KEYS


def test_interpolation_template():
    code = "<div>{{ a + b }}</div>"
    ast = parse(code, "app.component.html")

    assert ast.kind == "Program"
    assert ast.text == code
    assert ast.range == (0, len(code))
    assert ast.loc.start == Position(line=1, column=0)
    assert ast.loc.end == Position(line=1, column=len(code))
    assert ast.tokens == []

    (div,) = ast.template_nodes
    assert div.kind == "Element"
    (bound_text,) = div.children
    assert bound_text.kind == "BoundText"
    interpolation = bound_text.value.ast
    assert interpolation.kind == "Interpolation"
    (binary,) = interpolation.expressions
    assert binary.kind == "Binary"
    assert binary.left.kind == "PropertyRead"
    assert binary.left.name == "a"
    assert binary.right.kind == "PropertyRead"
    assert binary.right.name == "b"


def test_comment_token():
    ast = parse("<!-- hi -->", "t.html")
    (token,) = ast.comments
    assert token.kind == "Block"
    assert token.text == " hi "
    assert token.range == (0, 11)
    assert ast.template_nodes == []


def test_comments_sorted_and_excluded_from_nodes():
    code = "<!-- one --><div><!-- two --></div>\n<!-- three -->"
    ast = parse(code, "t.html")
    assert [t.text for t in ast.comments] == [" one ", " two ", " three "]
    starts = [t.range[0] for t in ast.comments]
    assert starts == sorted(starts)
    assert all(n.kind != "Comment" for n in iter_nodes(ast))


def test_comments_disabled():
    ast = parse("<!-- hi --><p></p>", "t.html", NormalizerConfig(collect_comment_nodes=False))
    assert ast.comments == []


def test_empty_template():
    ast = parse("", "t.html")
    assert ast.template_nodes == []
    assert ast.range == (0, 0)
    assert ast.loc == SourceLoc()


def test_whitespace_only_template_without_preserved_whitespace():
    ast = parse("  \n  ", "t.html", NormalizerConfig(preserve_whitespaces=False))
    assert ast.template_nodes == []
    assert ast.range == (0, 0)


def test_range_covers_all_top_level_nodes():
    code = "\n<header></header>\n<main>\n  <p>x</p>\n</main>"
    ast = parse(code, "t.html")
    assert ast.range == (0, len(code))
    assert ast.loc.end == Position(line=5, column=7)


def test_range_of_element_only_template():
    code = "<header></header><br>"
    ast = parse(code, "t.html")
    assert ast.range == (0, len(code))


def test_multiline_template_loc():
    code = "<ul>\n  <li *ngFor=\"let item of items\">{{ item }}</li>\n</ul>"
    ast = parse(code, "list.html")
    ul = ast.template_nodes[0]
    tpl = ul.children[1]
    assert tpl.kind == "Template"
    assert tpl.template_attrs[0].kind == "BoundAttribute"
    assert tpl.template_attrs[0].original_kind is BindingKind.PROPERTY
    assert ast.loc.end == Position(line=3, column=5)


def test_parse_result_surface():
    result = parse_for_analysis('<button (click)="save()">Save</button>', "t.html")
    assert result.visitor_keys is VISITOR_KEYS
    assert result.services.convert_node_source_span_to_loc is convert_node_source_span_to_loc

    button = result.ast.template_nodes[0]
    loc = result.services.convert_element_source_span_to_loc(button)
    assert loc.start == Position(line=1, column=0)
    assert loc.end.column == len('<button (click)="save()">Save</button>')


def test_scope_manager_has_one_empty_module_scope():
    result = parse_for_analysis("<div></div>", "t.html")
    manager = result.scope_manager
    assert len(manager.scopes) == 1
    scope = manager.global_scope
    assert scope.type == "module"
    assert scope.block is result.ast
    assert scope.upper is None
    assert scope.variables == []
    assert scope.references == []
    assert manager.acquire(result.ast) is scope


def test_parse_errors_propagate():
    with pytest.raises(TemplateParseError):
        parse("<div>", "t.html")


def test_config_flows_into_normalizer():
    config = NormalizerConfig(missing_child=MissingChildPolicy.SKIP, copy_tree=True)
    ast = parse("<p>{{ a }}</p>", "t.html", config)
    assert ast.template_nodes[0].children[0].value.kind == "ASTWithSource"


def test_to_dict_is_json_serializable():
    ast = parse('<input [value]="v"><!-- c -->', "t.html")
    data = json.loads(json.dumps(to_dict(ast)))
    assert data["kind"] == "Program"
    assert data["range"] == [0, 19]
    attr = data["template_nodes"][0]["inputs"][0]
    assert attr["kind"] == "BoundAttribute"
    assert attr["original_kind"] == "PROPERTY"
    assert attr["value"]["ast"]["kind"] == "PropertyRead"
    assert data["comments"][0]["kind"] == "Block"
