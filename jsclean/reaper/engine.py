"""Elimination engine: one walk driving both dead-code passes.

On entering every node the node's scope is brought up to date and
reduced, then assignments and names are fed to the dangling-assignment
collector. After the walk the surviving dangling assignments are
removed in a second, explicit pass.

A single run is best-effort: a binding orphaned by a removal further
down the tree is only removed if its scope is entered again later in
the same walk. ``until_stable`` repeats whole runs until one removes
nothing.
"""
from typing import Optional

from ..analyzer.scope import ScopeAnalyzer
from ..analyzer.tree import SyntaxTree
from .dangling import NAME_KINDS, DanglingAssignmentCollector
from .report import EliminationReport
from .scope_reducer import ScopeReducer

DEFAULT_MAX_PASSES = 10


class EliminationEngine:
    """Removes unreferenced bindings and dangling numeric assignments."""

    def __init__(self, until_stable: bool = False, max_passes: int = DEFAULT_MAX_PASSES):
        """Initialize engine.

        Args:
            until_stable: Repeat runs until a run removes nothing
            max_passes: Upper bound on runs when until_stable is set
        """
        if max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {max_passes}")
        self.until_stable = until_stable
        self.max_passes = max_passes

    def run(self, tree: SyntaxTree) -> EliminationReport:
        """Mutate ``tree`` in place and report what was removed."""
        report = EliminationReport()
        limit = self.max_passes if self.until_stable else 1

        while report.passes < limit:
            removed = self.run_pass(tree, report)
            if removed == 0:
                break
        return report

    def run_pass(self, tree: SyntaxTree, report: Optional[EliminationReport] = None) -> int:
        """One traversal plus the dangling-assignment finalization.

        Returns:
            Number of constructs removed by this pass
        """
        if report is None:
            report = EliminationReport()
        before = report.total

        analyzer = ScopeAnalyzer(tree)
        reducer = ScopeReducer(tree, report)
        collector = DanglingAssignmentCollector()

        stack = [tree.root]
        try:
            while stack:
                node = stack.pop()
                if not tree.contains(node):
                    continue

                reducer.reduce(analyzer.scope_for(node))
                if not tree.contains(node):
                    continue

                if node.kind == 'assignment_expression':
                    collector.visit_assignment(node, analyzer.scope_for(node))
                elif node.kind in NAME_KINDS:
                    collector.visit_identifier(node)

                # Children removed while a sibling is visited are skipped on pop
                stack.extend(reversed(node.children))
        finally:
            analyzer.close()

        collector.finalize(tree, report)
        report.passes += 1
        return report.total - before
