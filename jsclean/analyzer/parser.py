"""Tree-sitter parser for JavaScript and TypeScript sources."""
from pathlib import Path
from typing import Optional, Tuple

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from .tree import SyntaxTree, build_tree


class ParseError(ValueError):
    """Raised when the source does not parse cleanly."""

    def __init__(self, message: str, path: Optional[str] = None,
                 line: int = 0, column: int = 0):
        self.path = path
        self.line = line
        self.column = column
        location = f"{path or '<source>'}:{line}:{column}"
        super().__init__(f"{location}: {message}")


class LanguageParser:
    """JS/TS parser using the tree-sitter v0.25+ API.

    Everything except plain ``.ts`` files goes through the TSX grammar,
    which accepts JSX, optional type annotations, and top-level
    ``return``/``await``. Plain TypeScript keeps its own grammar so that
    ``<T>value`` casts are not read as JSX.
    """

    SUPPORTED_LANGUAGES = {
        '.js': 'tsx',
        '.jsx': 'tsx',
        '.mjs': 'tsx',
        '.cjs': 'tsx',
        '.tsx': 'tsx',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
    }

    def __init__(self, language: str = 'tsx'):
        """Initialize parser for the given grammar.

        Args:
            language: One of 'tsx', 'typescript', 'javascript'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        # The binding functions return PyCapsules that must be wrapped in Language()
        if self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'javascript':
            lang = Language(tsjavascript.language())
        else:
            raise ValueError(f"Unsupported language: {self.language}")
        return Parser(lang)

    def parse_source(self, source: str, path: Optional[str] = None) -> SyntaxTree:
        """Parse source text into a mutable SyntaxTree.

        Args:
            source: Program text
            path: Optional file name used in error messages

        Returns:
            SyntaxTree ready for the elimination engine

        Raises:
            ParseError: If tree-sitter reports an ERROR or missing node
        """
        source_bytes = source.encode('utf-8')
        ts_tree = self.parser.parse(source_bytes)

        if ts_tree.root_node.has_error:
            node, reason = _first_error(ts_tree.root_node)
            row, column = node.start_point
            raise ParseError(reason, path=path, line=row + 1, column=column + 1)

        return build_tree(ts_tree, source_bytes, path=path)

    def parse_file(self, file_path: str | Path) -> SyntaxTree:
        """Read a UTF-8 file and parse it.

        Raises:
            OSError: If the file cannot be read
            ParseError: If the file does not parse
        """
        file_path = Path(file_path)
        source = file_path.read_text(encoding='utf-8')
        return self.parse_source(source, path=str(file_path))

    @classmethod
    def from_file_extension(cls, file_path: str | Path, grammar: str = 'auto') -> 'LanguageParser':
        """Create a parser for the file's extension.

        Args:
            file_path: Path to determine the grammar from
            grammar: 'auto' to pick by extension, or a grammar name to force
                one (e.g. 'javascript' for plain JS that trips over the
                TSX grammar's generic/JSX ambiguity)

        Unknown extensions fall back to the TSX grammar, the widest one.
        """
        if grammar != 'auto':
            return cls(grammar)
        extension = Path(file_path).suffix.lower()
        return cls(cls.SUPPORTED_LANGUAGES.get(extension, 'tsx'))


def _first_error(root: Node) -> Tuple[Node, str]:
    """Locate the first ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing:
            return node, f"missing {node.type}"
        if node.is_error:
            snippet = node.text.decode('utf-8', errors='replace').splitlines()
            near = snippet[0][:40] if snippet else ''
            return node, f"syntax error near {near!r}"
        if node.has_error:
            stack.extend(reversed(node.children))
    return root, "syntax error"
