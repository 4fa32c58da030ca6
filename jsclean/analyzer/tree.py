"""Mutable syntax tree built on top of a tree-sitter parse.

tree-sitter trees are read-only, so the cleaner copies them into plain
Python nodes that can be detached and re-rendered. Every node keeps the
source text that sits between it and its previous sibling (its leading
trivia); rendering the remaining children in order reproduces the
original text minus whatever was removed.
"""
from typing import Callable, Iterator, List, Optional

from tree_sitter import Node as TSNode
from tree_sitter import Tree


class Node:
    """One node of the mutable tree."""

    __slots__ = (
        'kind', 'named', 'field', 'text', 'leading', 'trailing',
        'children', 'parent', 'removed', 'line', 'column',
    )

    def __init__(self, kind: str, named: bool = True, text: str = '',
                 leading: str = '', field: Optional[str] = None,
                 line: int = 0, column: int = 0):
        self.kind = kind
        self.named = named
        self.field = field
        self.text = text
        self.leading = leading
        self.trailing = ''
        self.children: List['Node'] = []
        self.parent: Optional['Node'] = None
        self.removed = False
        self.line = line
        self.column = column

    def __repr__(self) -> str:
        if self.children:
            return f"<Node {self.kind} @{self.line}:{self.column}>"
        return f"<Node {self.kind} {self.text!r} @{self.line}:{self.column}>"

    @property
    def named_children(self) -> List['Node']:
        return [child for child in self.children if child.named]

    def child_by_field_name(self, name: str) -> Optional['Node']:
        for child in self.children:
            if child.field == name:
                return child
        return None

    def index_in_parent(self) -> int:
        """Position of this node among its parent's children, or -1."""
        if self.parent is None:
            return -1
        for i, sibling in enumerate(self.parent.children):
            if sibling is self:
                return i
        return -1

    def top(self) -> 'Node':
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator['Node']:
        """Pre-order iteration over this subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def source(self) -> str:
        """Render this subtree without its own leading trivia."""
        return _render(self, include_leading=False, drop_comments=False)


class SyntaxTree:
    """Owns the root node and a version counter bumped on every mutation.

    Listeners registered with :meth:`subscribe` are told about every
    subtree taken out of the tree, so derived data can be updated in
    place instead of rebuilt.
    """

    def __init__(self, root: Node, path: Optional[str] = None):
        self.root = root
        self.path = path
        self.version = 0
        self._listeners: List[Callable[[Node], None]] = []

    def subscribe(self, listener: Callable[[Node], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Node], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def touch(self, removed: Optional[Node] = None) -> None:
        """Record a mutation.

        Args:
            removed: Root of the subtree that left the tree, if any.
                Listeners are only called when this is given.
        """
        self.version += 1
        if removed is not None:
            for listener in list(self._listeners):
                listener(removed)

    def contains(self, node: Node) -> bool:
        """True while ``node`` is still reachable from the root."""
        return not node.removed and node.top() is self.root

    def walk(self) -> Iterator[Node]:
        return self.root.walk()

    def render(self) -> str:
        """Program text of the current tree, comments dropped."""
        return _render(self.root, include_leading=True, drop_comments=True)


def _render(root: Node, include_leading: bool, drop_comments: bool) -> str:
    parts: List[str] = []
    stack: list = [root]
    first = True
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        node = item
        if include_leading or not first:
            parts.append(node.leading)
        first = False

        if drop_comments and node.kind == 'comment':
            # Block comments can separate two tokens
            if node.text.startswith('/*'):
                parts.append(' ')
            continue

        if not node.children:
            parts.append(node.text)
            parts.append(node.trailing)
            continue

        stack.append(node.trailing)
        stack.extend(reversed(node.children))
    return ''.join(parts)


def build_tree(ts_tree: Tree, source: bytes, path: Optional[str] = None) -> SyntaxTree:
    """Copy a tree-sitter tree into mutable nodes.

    Args:
        ts_tree: Parsed tree-sitter tree
        source: The exact bytes that were parsed
        path: Optional file path kept for messages

    Returns:
        SyntaxTree rooted at the program node
    """
    ts_root = ts_tree.root_node
    root = _make_node(ts_root, source, field=None, leading=source[:ts_root.start_byte])

    # Iterative copy; minified bundles nest deeper than the recursion limit
    stack = [(ts_root, root)]
    while stack:
        ts_node, node = stack.pop()
        if ts_node.child_count == 0:
            continue

        cursor = ts_node.walk()
        if not cursor.goto_first_child():
            continue

        previous_end = ts_node.start_byte
        while True:
            ts_child = cursor.node
            child = _make_node(
                ts_child, source,
                field=cursor.field_name,
                leading=source[previous_end:ts_child.start_byte],
            )
            child.parent = node
            node.children.append(child)
            stack.append((ts_child, child))
            previous_end = ts_child.end_byte
            if not cursor.goto_next_sibling():
                break

        node.trailing = source[previous_end:ts_node.end_byte].decode('utf-8')

    root.trailing += source[ts_root.end_byte:].decode('utf-8')

    return SyntaxTree(root, path=path)


def _make_node(ts_node: TSNode, source: bytes, field: Optional[str], leading: bytes) -> Node:
    row, column = ts_node.start_point
    text = ''
    if ts_node.child_count == 0:
        text = source[ts_node.start_byte:ts_node.end_byte].decode('utf-8')
    return Node(
        ts_node.type,
        named=ts_node.is_named,
        text=text,
        leading=leading.decode('utf-8'),
        field=field,
        line=row + 1,
        column=column + 1,
    )
