"""Lexical scope and binding analysis for the mutable JS/TS tree.

A crawl walks the attached tree once, builds one Scope per
scope-creating node, registers every declared name as a Binding in the
scope it belongs to (``var`` hoists to the enclosing function, ``let``,
``const``, ``class`` and function declarations stay in their block),
and then resolves every other identifier occurrence up the scope chain.

Any occurrence that resolves to a binding counts as a reference, writes
included. Exported declarations are referenced by their export
statement. A second declaration of a name already bound in the same
scope is recorded as a reference to the first binding.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from .tree import Node, SyntaxTree


class DeclarationKind(Enum):
    """What sort of construct introduced a binding."""

    DECLARATOR = 'declarator'
    FUNCTION = 'function'
    IMPORT_SPECIFIER = 'import_specifier'
    IMPORT_DEFAULT = 'import_default'
    OTHER = 'other'


FUNCTION_SCOPE_KINDS = {
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'function',
    'generator_function',
    'arrow_function',
    'method_definition',
}

CLASS_SCOPE_KINDS = {'class_declaration', 'abstract_class_declaration', 'class'}

BLOCK_SCOPE_KINDS = {'statement_block', 'for_statement', 'for_in_statement', 'switch_body'}

REFERENCE_KINDS = {'identifier', 'shorthand_property_identifier', 'type_identifier'}

# Identifiers under these parents name something outside the program's scopes
NON_REFERENCE_PARENTS = {
    'import_specifier',
    'import_clause',
    'namespace_import',
    'namespace_export',
    'import_require_clause',
    'meta_property',
    'labeled_statement',
    'break_statement',
    'continue_statement',
}

# ECMAScript built-ins plus the implicit context names, answered as bound
# so that `NaN = 1` or `undefined = 0` is never treated as an undeclared global.
BUILTIN_GLOBALS = frozenset({
    'AggregateError', 'Array', 'ArrayBuffer', 'Atomics', 'BigInt',
    'BigInt64Array', 'BigUint64Array', 'Boolean', 'DataView', 'Date',
    'decodeURI', 'decodeURIComponent', 'encodeURI', 'encodeURIComponent',
    'Error', 'escape', 'eval', 'EvalError', 'FinalizationRegistry',
    'Float32Array', 'Float64Array', 'Function', 'globalThis', 'Infinity',
    'Int16Array', 'Int32Array', 'Int8Array', 'isFinite', 'isNaN', 'JSON',
    'Map', 'Math', 'NaN', 'Number', 'Object', 'parseFloat', 'parseInt',
    'Promise', 'Proxy', 'RangeError', 'ReferenceError', 'Reflect', 'RegExp',
    'Set', 'SharedArrayBuffer', 'String', 'Symbol', 'SyntaxError',
    'TypeError', 'Uint16Array', 'Uint32Array', 'Uint8Array',
    'Uint8ClampedArray', 'undefined', 'unescape', 'URIError', 'WeakMap',
    'WeakRef', 'WeakSet', 'arguments',
})


@dataclass(eq=False)
class Binding:
    """One declared name within a scope."""

    name: str
    kind: str
    identifier: Node
    path: Node
    declaration_kind: DeclarationKind
    scope: 'Scope'
    references: List[Node] = field(default_factory=list)
    # Every name bound by the same declaring node (destructuring)
    co_declared: Tuple[str, ...] = ()

    @property
    def referenced(self) -> bool:
        return bool(self.references)

    def __repr__(self) -> str:
        return f"<Binding {self.kind} {self.name} refs={len(self.references)}>"


class Scope:
    """A lexical region with its own binding table."""

    def __init__(self, node: Node, kind: str, parent: Optional['Scope'] = None):
        self.node = node
        self.kind = kind
        self.parent = parent
        self.children: List['Scope'] = []
        self.bindings: Dict[str, Binding] = {}
        # Bumped whenever one of this scope's bindings loses its last reference
        self.revision = 0
        if parent is not None:
            parent.children.append(self)

    def __repr__(self) -> str:
        return f"<Scope {self.kind} {sorted(self.bindings)}>"

    def function_parent(self) -> 'Scope':
        scope = self
        while scope.kind not in ('function', 'program') and scope.parent is not None:
            scope = scope.parent
        return scope

    def get_binding(self, name: str) -> Optional[Binding]:
        scope = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def has_own_binding(self, name: str) -> bool:
        return name in self.bindings

    def has_binding(self, name: str, no_globals: bool = False) -> bool:
        if self.get_binding(name) is not None:
            return True
        return not no_globals and name in BUILTIN_GLOBALS

    def unreferenced_bindings(self) -> List[Binding]:
        return [binding for binding in self.bindings.values() if not binding.referenced]


class ScopeAnalyzer:
    """Builds scopes for a SyntaxTree and keeps them current.

    Results are memoized against ``tree.version``. Subtrees detached
    through the tree's listener hook are subtracted in place: their
    identifiers stop counting as references, and the bindings and scopes
    they declared disappear. Any other mutation leaves the analysis
    stale, and the next query re-crawls the whole tree. Either way
    reference counts are never stale when a removal decision is made.
    """

    def __init__(self, tree: SyntaxTree):
        self.tree = tree
        self.program: Optional[Scope] = None
        self.crawl_count = 0
        self._scopes: Dict[Node, Scope] = {}
        # Referencing node -> the bindings it counts towards
        self._resolved: Dict[Node, List[Binding]] = {}
        # Declaring identifier -> its binding
        self._declared: Dict[Node, Binding] = {}
        self._version: Optional[int] = None
        tree.subscribe(self._subtract)

    def close(self) -> None:
        """Stop following the tree's mutations."""
        self.tree.unsubscribe(self._subtract)

    @property
    def stale(self) -> bool:
        return self._version != self.tree.version

    def scope_for(self, node: Node) -> Scope:
        """Scope a node belongs to; a scope-creating node owns its own scope."""
        if self.stale:
            self.crawl()
        current = node
        while current is not None:
            scope = self._scopes.get(current)
            if scope is not None:
                return scope
            current = current.parent
        return self.program

    def crawl(self) -> Scope:
        """Rebuild every scope and binding from the current tree.

        Returns:
            The program scope
        """
        root = self.tree.root
        self._scopes = {}
        self._resolved = {}
        self._declared = {}
        self.program = Scope(root, 'program')
        self._scopes[root] = self.program

        declaring: Set[Node] = set()
        references: List[Tuple[Node, Scope]] = []
        exports: List[Tuple[Node, Scope, Node]] = []

        stack = [(root, self.program)]
        while stack:
            node, outer = stack.pop()
            scope = outer
            if node is not root and node.named:
                kind = _scope_kind(node)
                if kind is not None:
                    scope = Scope(node, kind, parent=outer)
                    self._scopes[node] = scope

            self._declare(node, outer, scope, declaring, exports)

            if node.kind in REFERENCE_KINDS and node not in declaring and _is_reference(node):
                references.append((node, scope))

            for child in reversed(node.children):
                stack.append((child, scope))

        for identifier, scope, statement in exports:
            binding = scope.get_binding(identifier.text)
            if binding is not None:
                self._reference(binding, statement)

        for identifier, scope in references:
            binding = scope.get_binding(identifier.text)
            if binding is not None:
                self._reference(binding, identifier)

        self._version = self.tree.version
        self.crawl_count += 1
        return self.program

    def _reference(self, binding: Binding, node: Node) -> None:
        binding.references.append(node)
        self._resolved.setdefault(node, []).append(binding)

    def _subtract(self, removed: Node) -> None:
        """Drop what a detached subtree contributed to the analysis."""
        if self._version != self.tree.version - 1:
            # Already out of date; the next query re-crawls anyway
            return

        for node in removed.walk():
            for binding in self._resolved.pop(node, ()):
                binding.references.remove(node)
                if not binding.references:
                    binding.scope.revision += 1

            binding = self._declared.pop(node, None)
            if binding is not None and binding.scope.bindings.get(binding.name) is binding:
                del binding.scope.bindings[binding.name]

            scope = self._scopes.pop(node, None)
            if scope is not None and scope.parent is not None:
                scope.parent.children.remove(scope)

        self._version = self.tree.version

    def _declare(self, node: Node, outer: Scope, scope: Scope,
                 declaring: Set[Node], exports: list) -> None:
        kind = node.kind

        if kind == 'variable_declarator':
            keyword = _declaration_keyword(node.parent)
            target = scope.function_parent() if keyword == 'var' else scope
            names = _pattern_identifiers(node.child_by_field_name('name'))
            co_declared = tuple(ident.text for ident in names)
            for ident in names:
                self._bind(target, ident, keyword, node, DeclarationKind.DECLARATOR,
                           declaring, co_declared)

        elif kind in ('function_declaration', 'generator_function_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                self._bind(outer, name, 'function', node, DeclarationKind.FUNCTION, declaring)
            self._declare_params(node, scope, declaring)

        elif kind in FUNCTION_SCOPE_KINDS:
            # Function expressions see their own name; arrows and methods have none
            name = node.child_by_field_name('name')
            if name is not None and kind != 'method_definition':
                self._bind(scope, name, 'local', node, DeclarationKind.OTHER, declaring)
            self._declare_params(node, scope, declaring)

        elif kind in ('class_declaration', 'abstract_class_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                self._bind(outer, name, 'class', node, DeclarationKind.OTHER, declaring)

        elif kind == 'class' and node.named:
            name = node.child_by_field_name('name')
            if name is not None:
                self._bind(scope, name, 'class', node, DeclarationKind.OTHER, declaring)

        elif kind == 'catch_clause':
            for ident in _pattern_identifiers(node.child_by_field_name('parameter')):
                self._bind(scope, ident, 'catch', node, DeclarationKind.OTHER, declaring)

        elif kind == 'for_in_statement':
            keyword_node = node.child_by_field_name('kind')
            if keyword_node is not None:
                keyword = keyword_node.text
                target = scope.function_parent() if keyword == 'var' else scope
                for ident in _pattern_identifiers(node.child_by_field_name('left')):
                    self._bind(target, ident, keyword, node, DeclarationKind.OTHER, declaring)

        elif kind == 'import_statement':
            self._declare_imports(node, outer, declaring)

        elif kind == 'export_statement':
            declaration = node.child_by_field_name('declaration')
            if declaration is not None:
                for ident in declared_identifiers(declaration):
                    exports.append((ident, outer, node))

    def _declare_params(self, function: Node, scope: Scope, declaring: Set[Node]) -> None:
        for field_name in ('parameters', 'parameter'):
            for ident in _pattern_identifiers(function.child_by_field_name(field_name)):
                self._bind(scope, ident, 'param', function, DeclarationKind.OTHER, declaring)

    def _declare_imports(self, statement: Node, scope: Scope, declaring: Set[Node]) -> None:
        for child in statement.named_children:
            if child.kind == 'import_require_clause':
                for ident in child.named_children:
                    if ident.kind == 'identifier':
                        self._bind(scope, ident, 'import', child, DeclarationKind.OTHER, declaring)
                        break
                continue
            if child.kind != 'import_clause':
                continue

            for member in child.named_children:
                if member.kind == 'identifier':
                    self._bind(scope, member, 'import', member,
                               DeclarationKind.IMPORT_DEFAULT, declaring)
                elif member.kind == 'namespace_import':
                    for ident in member.named_children:
                        if ident.kind == 'identifier':
                            self._bind(scope, ident, 'import', member,
                                       DeclarationKind.OTHER, declaring)
                elif member.kind == 'named_imports':
                    for specifier in member.named_children:
                        if specifier.kind != 'import_specifier':
                            continue
                        local = (specifier.child_by_field_name('alias')
                                 or specifier.child_by_field_name('name'))
                        if local is not None and local.kind == 'identifier':
                            self._bind(scope, local, 'import', specifier,
                                       DeclarationKind.IMPORT_SPECIFIER, declaring)

    def _bind(self, scope: Scope, identifier: Node, kind: str, path: Node,
              declaration_kind: DeclarationKind, declaring: Set[Node],
              co_declared: Tuple[str, ...] = ()) -> None:
        declaring.add(identifier)
        name = identifier.text
        existing = scope.bindings.get(name)
        if existing is not None:
            self._reference(existing, identifier)
            return
        binding = Binding(
            name=name,
            kind=kind,
            identifier=identifier,
            path=path,
            declaration_kind=declaration_kind,
            scope=scope,
            co_declared=co_declared or (name,),
        )
        scope.bindings[name] = binding
        self._declared[identifier] = binding


def declared_identifiers(declaration: Node) -> List[Node]:
    """Name nodes introduced by a declaration statement."""
    if declaration.kind in ('lexical_declaration', 'variable_declaration'):
        names = []
        for declarator in declaration.named_children:
            if declarator.kind == 'variable_declarator':
                names.extend(_pattern_identifiers(declarator.child_by_field_name('name')))
        return names
    name = declaration.child_by_field_name('name')
    return [name] if name is not None else []


def _scope_kind(node: Node) -> Optional[str]:
    kind = node.kind
    if kind in FUNCTION_SCOPE_KINDS:
        return 'function'
    if kind in CLASS_SCOPE_KINDS:
        return 'class'
    if kind == 'catch_clause':
        return 'catch'
    if kind == 'statement_block':
        # Function and catch bodies share the scope of their owner
        parent = node.parent
        if parent is not None and node.field == 'body' and (
                parent.kind in FUNCTION_SCOPE_KINDS or parent.kind == 'catch_clause'):
            return None
        return 'block'
    if kind in BLOCK_SCOPE_KINDS:
        return 'block'
    return None


def _declaration_keyword(declaration: Optional[Node]) -> str:
    if declaration is None or declaration.kind == 'variable_declaration':
        return 'var'
    keyword = declaration.child_by_field_name('kind')
    if keyword is not None:
        return keyword.text
    for child in declaration.children:
        if not child.named:
            return child.text
    return 'let'


def _pattern_identifiers(pattern: Optional[Node]) -> List[Node]:
    """Identifiers a binding pattern declares, in source order."""
    found: List[Node] = []
    stack = [pattern] if pattern is not None else []
    while stack:
        node = stack.pop()
        kind = node.kind
        if kind in ('identifier', 'shorthand_property_identifier_pattern'):
            found.append(node)
        elif kind in ('object_pattern', 'array_pattern', 'formal_parameters', 'rest_pattern'):
            stack.extend(reversed(node.named_children))
        elif kind == 'pair_pattern':
            value = node.child_by_field_name('value')
            if value is not None:
                stack.append(value)
        elif kind in ('assignment_pattern', 'object_assignment_pattern'):
            left = node.child_by_field_name('left')
            if left is not None:
                stack.append(left)
        elif kind in ('required_parameter', 'optional_parameter'):
            inner = node.child_by_field_name('pattern')
            if inner is not None:
                stack.append(inner)
    return found


def _is_reference(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.kind in NON_REFERENCE_PARENTS:
        return False
    if parent.kind == 'export_specifier':
        if node.field == 'alias':
            return False
        # `export { a } from 'mod'` re-exports a name this file never binds
        clause = parent.parent
        statement = clause.parent if clause is not None else None
        return not (statement is not None and statement.child_by_field_name('source') is not None)
    return True
