"""Tests for scope and binding analysis."""
import pytest

from jsclean.analyzer.parser import LanguageParser
from jsclean.analyzer.scope import DeclarationKind, ScopeAnalyzer
from jsclean.reaper.surgery import remove_statement


@pytest.fixture
def parser():
    return LanguageParser('tsx')


def analyze(parser, code):
    tree = parser.parse_source(code)
    analyzer = ScopeAnalyzer(tree)
    analyzer.crawl()
    return tree, analyzer


def find(tree, kind, text=None):
    for node in tree.walk():
        if node.kind == kind and (text is None or node.source() == text):
            return node
    raise AssertionError(f"no {kind} {text!r} in tree")


class TestBindings:

    def test_declaration_kinds(self, parser):
        code = (
            "import Def, { named as alias } from 'm';\n"
            "import * as ns from 'n';\n"
            "const value = 1;\n"
            "function fn() {}\n"
            "class Cls {}\n"
        )
        _, analyzer = analyze(parser, code)
        bindings = analyzer.program.bindings

        assert bindings['Def'].declaration_kind is DeclarationKind.IMPORT_DEFAULT
        assert bindings['alias'].declaration_kind is DeclarationKind.IMPORT_SPECIFIER
        assert 'named' not in bindings
        assert bindings['ns'].declaration_kind is DeclarationKind.OTHER
        assert bindings['value'].declaration_kind is DeclarationKind.DECLARATOR
        assert bindings['fn'].declaration_kind is DeclarationKind.FUNCTION
        assert bindings['Cls'].declaration_kind is DeclarationKind.OTHER

    def test_declarator_binding_points_at_declarator(self, parser):
        _, analyzer = analyze(parser, "let a = 1, b = 2;\n")
        binding = analyzer.program.bindings['a']

        assert binding.path.kind == 'variable_declarator'
        assert binding.identifier.text == 'a'
        assert binding.kind == 'let'

    def test_destructuring_records_co_declared_names(self, parser):
        _, analyzer = analyze(parser, "const { a, b: [c] } = obj;\n")
        bindings = analyzer.program.bindings

        assert bindings['a'].co_declared == ('a', 'c')
        assert bindings['a'].path is bindings['c'].path
        assert 'b' not in bindings

    def test_var_hoists_out_of_blocks(self, parser):
        tree, analyzer = analyze(parser, "function f() { if (x) { var v = 1; let l = 2; } }\n")
        function_scope = analyzer.scope_for(find(tree, 'function_declaration'))
        block_scope = analyzer.scope_for(find(tree, 'lexical_declaration'))

        assert function_scope.has_own_binding('v')
        assert not function_scope.has_own_binding('l')
        assert block_scope.has_own_binding('l')
        assert block_scope.function_parent() is function_scope

    def test_function_name_binds_in_enclosing_scope(self, parser):
        tree, analyzer = analyze(parser, "function outer(p) { function inner() {} }\n")
        outer_scope = analyzer.scope_for(find(tree, 'function_declaration'))

        assert analyzer.program.has_own_binding('outer')
        assert outer_scope.has_own_binding('inner')
        assert outer_scope.has_own_binding('p')
        assert outer_scope.bindings['p'].declaration_kind is DeclarationKind.OTHER

    def test_function_body_shares_function_scope(self, parser):
        tree, analyzer = analyze(parser, "function f() { const a = 1; }\n")
        assert analyzer.scope_for(find(tree, 'lexical_declaration')).node.kind == 'function_declaration'


class TestReferences:

    def test_read_and_write_both_reference(self, parser):
        _, analyzer = analyze(parser, "let a;\nlet b;\na = 1;\nuse(b);\n")
        bindings = analyzer.program.bindings

        assert bindings['a'].referenced
        assert bindings['b'].referenced

    def test_declaring_identifier_is_not_a_reference(self, parser):
        _, analyzer = analyze(parser, "const lonely = 1;\n")
        assert not analyzer.program.bindings['lonely'].referenced
        assert analyzer.program.unreferenced_bindings() == [analyzer.program.bindings['lonely']]

    def test_redeclaration_references_first_binding(self, parser):
        _, analyzer = analyze(parser, "var a = 1;\nvar a = 2;\n")
        assert len(analyzer.program.bindings['a'].references) == 1

    def test_export_statement_references_its_declarations(self, parser):
        _, analyzer = analyze(parser, "export const a = 1, b = 2;\nexport function f() {}\n")
        bindings = analyzer.program.bindings

        assert bindings['a'].referenced
        assert bindings['b'].referenced
        assert bindings['f'].referenced

    def test_export_clause_references_local_name(self, parser):
        _, analyzer = analyze(parser, "const a = 1;\nexport { a as b };\n")
        assert analyzer.program.bindings['a'].referenced

    def test_re_export_does_not_reference_local_binding(self, parser):
        _, analyzer = analyze(parser, "const a = 1;\nexport { a } from 'other';\n")
        assert not analyzer.program.bindings['a'].referenced

    def test_property_names_are_not_references(self, parser):
        _, analyzer = analyze(parser, "const a = 1;\nobj.a = 2;\nconst o = { a: 3 };\n")
        assert not analyzer.program.bindings['a'].referenced

    def test_shorthand_property_is_a_reference(self, parser):
        _, analyzer = analyze(parser, "const a = 1;\nexport default { a };\n")
        assert analyzer.program.bindings['a'].referenced

    def test_type_reference_counts(self, parser):
        _, analyzer = analyze(parser, "import { Shape } from './shape';\nlet s: Shape;\n")
        assert analyzer.program.bindings['Shape'].referenced

    def test_shadowed_name_resolves_to_inner_binding(self, parser):
        _, analyzer = analyze(parser, "const x = 1;\nfunction f() { const x = 2; return x; }\n")
        assert not analyzer.program.bindings['x'].referenced


class TestGlobals:

    def test_builtins_count_as_bound(self, parser):
        _, analyzer = analyze(parser, "x = 1;\n")
        program = analyzer.program

        assert program.has_binding('NaN')
        assert program.has_binding('undefined')
        assert not program.has_binding('NaN', no_globals=True)
        assert not program.has_binding('x')


class TestStaleness:

    def test_detach_updates_analysis_in_place(self, parser):
        tree, analyzer = analyze(parser, "function a() { b(); }\nfunction b() { let c = 1; }\n")
        program = analyzer.program
        b = program.bindings['b']
        assert b.referenced
        revision = program.revision

        remove_statement(tree, program.bindings['a'].path)

        assert not analyzer.stale
        assert analyzer.scope_for(tree.root) is program
        assert analyzer.crawl_count == 1
        assert not b.referenced
        assert 'a' not in program.bindings
        assert program.revision == revision + 1
        assert len(program.children) == 1

    def test_detached_scope_takes_its_bindings_along(self, parser):
        tree, analyzer = analyze(parser, "var x = 1;\nfunction f() { return x; }\nif (ok) { let y = x; }\n")
        x = analyzer.program.bindings['x']
        assert len(x.references) == 2

        remove_statement(tree, find(tree, 'if_statement'))

        assert len(x.references) == 1
        assert analyzer.crawl_count == 1
        assert [scope.node.kind for scope in analyzer.program.children] == ['function_declaration']

    def test_unannounced_mutation_forces_recrawl(self, parser):
        tree, analyzer = analyze(parser, "const a = 1;\n")
        tree.touch()

        assert analyzer.stale
        analyzer.scope_for(tree.root)
        assert analyzer.crawl_count == 2

    def test_closed_analyzer_stops_following_the_tree(self, parser):
        tree, analyzer = analyze(parser, "function a() {}\na();\n")
        analyzer.close()

        remove_statement(tree, find(tree, 'expression_statement'))

        assert analyzer.stale
        assert not analyzer.scope_for(tree.root).bindings['a'].referenced
        assert analyzer.crawl_count == 2

    def test_scope_for_reuses_current_crawl(self, parser):
        tree, analyzer = analyze(parser, "const a = 1;\n")
        analyzer.scope_for(tree.root)
        analyzer.scope_for(find(tree, 'number'))
        assert analyzer.crawl_count == 1
