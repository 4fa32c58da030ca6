"""Bookkeeping of what the elimination engine removed."""
from dataclasses import dataclass, field
from typing import List, Optional

from ..analyzer.tree import Node


@dataclass
class Removal:
    """One construct taken out of the tree."""

    name: str
    what: str  # 'declaration', 'declarator', 'function', 'import', 'assignment'
    line: int


@dataclass
class EliminationReport:
    """What one or more engine passes removed."""

    removals: List[Removal] = field(default_factory=list)
    passes: int = 0

    def record(self, name: str, what: str, node: Node) -> None:
        self.removals.append(Removal(name=name, what=what, line=node.line))

    def count(self, what: str) -> int:
        return sum(1 for removal in self.removals if removal.what == what)

    @property
    def declarations(self) -> int:
        return self.count('declaration')

    @property
    def declarators(self) -> int:
        return self.count('declarator')

    @property
    def functions(self) -> int:
        return self.count('function')

    @property
    def import_specifiers(self) -> int:
        return self.count('import')

    @property
    def dangling_assignments(self) -> int:
        return self.count('assignment')

    @property
    def total(self) -> int:
        return len(self.removals)

    def removed_names(self, what: Optional[str] = None) -> List[str]:
        return [r.name for r in self.removals if what is None or r.what == what]
