"""Tests for node detachment and rendering of the mutable tree."""
import pytest

from jsclean.analyzer.parser import LanguageParser
from jsclean.reaper.surgery import (
    TreeSurgeryError,
    detach,
    remove_list_member,
    remove_statement,
)


def parse(code):
    return LanguageParser('tsx').parse_source(code)


def find(tree, kind, text=None):
    for node in tree.walk():
        if node.kind == kind and (text is None or node.source() == text):
            return node
    raise AssertionError(f"no {kind} {text!r} in tree")


class TestRendering:

    def test_render_is_lossless_without_comments(self):
        code = "const a = 1;\n\nfunction f(x) {\n  return x * 2;\n}\n"
        assert parse(code).render() == code

    def test_render_drops_comments(self):
        tree = parse("// note\nconst a = 1; // trailing\n")
        assert "note" not in tree.render()
        assert "trailing" not in tree.render()

    def test_block_comment_keeps_tokens_apart(self):
        tree = parse("const a = typeof/* c */x;\n")
        assert tree.render() == "const a = typeof x;\n"

    def test_source_keeps_comments(self):
        tree = parse("f(/* keep */ 1);\n")
        assert find(tree, 'arguments').source() == "(/* keep */ 1)"

    def test_nodes_carry_one_based_positions(self):
        tree = parse("\n  const a = 1;\n")
        declaration = find(tree, 'lexical_declaration')
        assert (declaration.line, declaration.column) == (2, 3)


class TestDetach:

    def test_detach_takes_following_comma(self):
        tree = parse("let a = 1, b = 2, c = 3;\n")
        detach(tree, find(tree, 'variable_declarator', 'b = 2'))
        assert tree.render() == "let a = 1, c = 3;\n"

    def test_detach_last_member_takes_preceding_comma(self):
        tree = parse("let a = 1, b = 2;\n")
        detach(tree, find(tree, 'variable_declarator', 'b = 2'))
        assert tree.render() == "let a = 1;\n"

    def test_first_child_passes_leading_text_on(self):
        tree = parse("import Def, { x } from 'm';\n")
        detach(tree, find(tree, 'identifier', 'Def'))
        assert tree.render() == "import { x } from 'm';\n"

    def test_detach_bumps_version_and_marks_node(self):
        tree = parse("a();\nb();\n")
        statement = find(tree, 'expression_statement', 'a();')
        version = tree.version

        detach(tree, statement)

        assert tree.version == version + 1
        assert statement.removed
        assert statement.parent is None
        assert not tree.contains(statement)

    def test_descendants_of_detached_node_are_not_contained(self):
        tree = parse("function f() { g(); }\n")
        call = find(tree, 'call_expression')
        detach(tree, find(tree, 'function_declaration'))
        assert not tree.contains(call)

    def test_detaching_twice_raises(self):
        tree = parse("a();\n")
        statement = find(tree, 'expression_statement')
        detach(tree, statement)
        with pytest.raises(TreeSurgeryError):
            detach(tree, statement)


class TestRemoveStatement:

    def test_statement_in_list_is_detached(self):
        tree = parse("a();\nb();\nc();\n")
        remove_statement(tree, find(tree, 'expression_statement', 'b();'))
        assert tree.render() == "a();\nc();\n"

    @pytest.mark.parametrize("code, target, expected", [
        ("if (x) y = 1;\n", "y = 1;", "if (x) ;\n"),
        ("if (x) a(); else y = 1;\n", "y = 1;", "if (x) a(); else ;\n"),
        ("while (x) y = 1;\n", "y = 1;", "while (x) ;\n"),
        ("for (;;) y = 1;\n", "y = 1;", "for (;;) ;\n"),
    ])
    def test_single_statement_slot_gets_empty_statement(self, code, target, expected):
        tree = parse(code)
        statement = find(tree, 'expression_statement', target)

        assert remove_statement(tree, statement) is statement
        assert tree.render() == expected
        assert find(tree, 'empty_statement') is not None

    def test_export_wrapper_refuses_removal(self):
        tree = parse("export const a = 1;\n")
        declaration = find(tree, 'lexical_declaration')

        assert remove_statement(tree, declaration) is None
        assert tree.render() == "export const a = 1;\n"


class TestRemoveListMember:

    def test_named_specifier(self):
        tree = parse("import { a, b, c } from 'm';\n")
        remove_list_member(tree, find(tree, 'import_specifier', 'b'))
        assert tree.render() == "import { a, c } from 'm';\n"

    def test_default_import_alone_becomes_side_effect_import(self):
        tree = parse("import Def from 'm';\n")
        remove_list_member(tree, find(tree, 'identifier', 'Def'))
        assert tree.render() == "import 'm';\n"

    def test_default_import_next_to_named_imports(self):
        tree = parse("import Def, { a } from 'm';\n")
        remove_list_member(tree, find(tree, 'identifier', 'Def'))
        assert tree.render() == "import { a } from 'm';\n"
