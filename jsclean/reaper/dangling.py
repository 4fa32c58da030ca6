"""Finds `name = <number>;` statements on undeclared names nobody reads.

Left-over debug counters and flags in bundled code tend to look like
``debugLevel = 3;`` with no declaration and no reader. Only this narrow
shape is touched: the right-hand side must be a numeric literal, so no
expression with side effects is ever dropped.
"""
from typing import Dict, List, Optional, Set

from ..analyzer.scope import Scope
from ..analyzer.tree import Node, SyntaxTree
from .report import EliminationReport
from .surgery import remove_statement

# Every node kind that spells a name, property names included, since
# `window.counter` reads the global `counter` too
NAME_KINDS = {
    'identifier',
    'property_identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
    'type_identifier',
}


class CandidateMap:
    """Name -> the assignment that currently makes it a removal candidate.

    Owned by a single traversal. A later qualifying assignment to the same
    name replaces the earlier one, so only the last write is pruned.
    """

    def __init__(self):
        self._candidates: Dict[str, Node] = {}

    def register(self, name: str, assignment: Node) -> None:
        self._candidates[name] = assignment

    def cancel(self, name: str) -> Optional[Node]:
        return self._candidates.pop(name, None)

    def drain(self) -> List[tuple]:
        items = list(self._candidates.items())
        self._candidates.clear()
        return items


class DanglingAssignmentCollector:
    """Tracks undeclared numeric assignments during one tree walk."""

    def __init__(self):
        self.candidates = CandidateMap()
        self._read: Set[str] = set()

    def visit_assignment(self, assignment: Node, scope: Scope) -> bool:
        """Register ``assignment`` as a candidate if it has the dead shape.

        Returns:
            True if the assignment became the candidate for its name
        """
        name = qualifying_name(assignment, scope)
        if name is None or name in self._read:
            return False
        self.candidates.register(name, assignment)
        return True

    def visit_identifier(self, identifier: Node) -> None:
        """Any occurrence other than a plain `=` target is a read."""
        if is_assignment_target(identifier):
            return
        name = identifier.text
        self._read.add(name)
        self.candidates.cancel(name)

    def finalize(self, tree: SyntaxTree, report: Optional[EliminationReport] = None) -> int:
        """Remove the statements of every candidate still standing.

        Returns:
            Number of statements removed
        """
        removed = 0
        for name, assignment in self.candidates.drain():
            statement = assignment.parent
            # The whole enclosing function may have gone since registration
            if statement is None or not tree.contains(statement):
                continue
            if remove_statement(tree, statement) is None:
                continue
            removed += 1
            if report is not None:
                report.record(name, 'assignment', statement)
        return removed


def qualifying_name(assignment: Node, scope: Scope) -> Optional[str]:
    """Name assigned by a standalone `name = <number>;` to an undeclared global."""
    parent = assignment.parent
    if parent is None or parent.kind != 'expression_statement':
        return None

    operator = next((c for c in assignment.children if not c.named), None)
    if operator is None or operator.text != '=':
        return None

    left = assignment.child_by_field_name('left')
    right = assignment.child_by_field_name('right')
    if left is None or right is None:
        return None
    if left.kind != 'identifier' or right.kind != 'number':
        return None
    if scope.has_binding(left.text):
        return None
    return left.text


def is_assignment_target(identifier: Node) -> bool:
    parent = identifier.parent
    return (
        parent is not None
        and parent.kind == 'assignment_expression'
        and identifier.field == 'left'
    )
