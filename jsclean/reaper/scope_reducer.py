"""Removes bindings that nothing in their scope refers to."""
import weakref
from typing import Callable, Dict, Optional

from ..analyzer.scope import Binding, DeclarationKind, Scope
from ..analyzer.tree import SyntaxTree
from .report import EliminationReport
from .surgery import remove_list_member, remove_statement


class ScopeReducer:
    """Takes out the declaring construct of every unreferenced binding.

    The binding table handed to :meth:`reduce` must be current; the
    engine guarantees that by asking the ScopeAnalyzer for the scope on
    every node entry. Within one reduction, decisions are made against
    the unreferenced bindings found when it starts: a removal that
    orphans another binding is only noticed the next time the scope is
    reduced.
    """

    def __init__(self, tree: SyntaxTree, report: Optional[EliminationReport] = None):
        self.tree = tree
        self.report = report if report is not None else EliminationReport()
        # Scope -> the revision at which a reduction found nothing to remove
        self._settled: "weakref.WeakKeyDictionary[Scope, int]" = weakref.WeakKeyDictionary()
        self._removers: Dict[DeclarationKind, Callable[[Binding], bool]] = {
            DeclarationKind.DECLARATOR: self._remove_declarator,
            DeclarationKind.FUNCTION: self._remove_function,
            DeclarationKind.IMPORT_SPECIFIER: self._remove_import,
            DeclarationKind.IMPORT_DEFAULT: self._remove_import,
        }

    def reduce(self, scope: Scope) -> int:
        """Remove the constructs behind unreferenced bindings of ``scope``.

        Returns:
            Number of constructs removed
        """
        # No binding of a settled scope has lost its last reference since
        if self._settled.get(scope) == scope.revision:
            return 0

        removed = 0
        for binding in scope.unreferenced_bindings():
            remover = self._removers.get(binding.declaration_kind)
            if remover is None:
                continue
            if not self.tree.contains(binding.path):
                continue
            if remover(binding):
                removed += 1

        if removed == 0:
            self._settled[scope] = scope.revision
        return removed

    def _remove_declarator(self, binding: Binding) -> bool:
        declarator = binding.path
        scope = binding.scope
        # Destructuring binds several names; keep the declarator if any is used
        for name in binding.co_declared:
            sibling = scope.bindings.get(name)
            if sibling is not None and sibling.path is declarator and sibling.referenced:
                return False

        declaration = declarator.parent
        if declaration is None:
            return False
        declarators = [c for c in declaration.children if c.kind == 'variable_declarator']

        if len(declarators) == 1:
            if remove_statement(self.tree, declaration) is None:
                return False
            self.report.record(binding.name, 'declaration', declaration)
            return True

        remove_list_member(self.tree, declarator)
        self.report.record(binding.name, 'declarator', declarator)
        return True

    def _remove_function(self, binding: Binding) -> bool:
        function = binding.path
        if remove_statement(self.tree, function) is None:
            return False
        self.report.record(binding.name, 'function', function)
        return True

    def _remove_import(self, binding: Binding) -> bool:
        # An emptied `{}` list is left in place
        remove_list_member(self.tree, binding.path)
        self.report.record(binding.name, 'import', binding.path)
        return True
