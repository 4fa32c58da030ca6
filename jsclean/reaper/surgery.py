"""Tree surgery: detaching nodes from the mutable tree without re-parsing."""
from typing import Optional

from ..analyzer.tree import Node, SyntaxTree

# Parents whose children are a plain list of statements
STATEMENT_LIST_KINDS = {'program', 'statement_block', 'switch_case', 'switch_default'}

# Single-statement slots that must keep *some* statement after a removal.
# The else branch is the clause's only statement and carries no field name.
STATEMENT_SLOT_FIELDS = {
    'if_statement': {'consequence'},
    'else_clause': {None},
    'while_statement': {'body'},
    'do_statement': {'body'},
    'for_statement': {'body', 'initializer'},
    'for_in_statement': {'body'},
    'labeled_statement': {'body'},
    'with_statement': {'body'},
}


class TreeSurgeryError(RuntimeError):
    """The tree no longer looks the way a removal expects it to."""


def detach(tree: SyntaxTree, node: Node) -> Node:
    """Remove ``node`` from its parent, with one neighbouring comma.

    The following comma goes if there is one, otherwise the preceding one,
    so list members (declarators, specifiers) leave a well-formed list.
    The node's leading whitespace goes with it, except for a first child,
    whose leading whitespace passes to the sibling that moves up.

    Returns:
        The detached node

    Raises:
        TreeSurgeryError: If the node is already detached or its parent
            does not list it as a child
    """
    parent = node.parent
    if node.removed or parent is None:
        raise TreeSurgeryError(f"{node!r} is not attached to a parent")

    index = node.index_in_parent()
    if index < 0:
        raise TreeSurgeryError(f"stale parent link: {parent!r} does not contain {node!r}")

    siblings = parent.children
    if index + 1 < len(siblings) and siblings[index + 1].kind == ',':
        _drop(siblings, index + 1)
    elif index > 0 and siblings[index - 1].kind == ',':
        _drop(siblings, index - 1)
        index -= 1

    del siblings[index]
    # A new first child takes over the removed one's leading whitespace
    if index == 0 and siblings:
        siblings[0].leading = node.leading
    node.parent = None
    node.removed = True
    tree.touch(node)
    return node


def remove_statement(tree: SyntaxTree, statement: Node) -> Optional[Node]:
    """Remove a statement, keeping the surrounding syntax valid.

    Inside a statement list the statement is detached. In a
    single-statement slot (``if (x) stmt;``, a ``for`` initializer, ...)
    it is replaced by an empty statement.

    Returns:
        The removed statement, or None if it sits somewhere a statement
        cannot safely disappear from (e.g. an export or ``declare``)
    """
    parent = statement.parent
    if parent is None:
        raise TreeSurgeryError(f"{statement!r} is not attached to a parent")

    if parent.kind in STATEMENT_LIST_KINDS:
        return detach(tree, statement)

    if statement.field in STATEMENT_SLOT_FIELDS.get(parent.kind, ()):
        replace(tree, statement, empty_statement(statement))
        return statement

    return None


def remove_list_member(tree: SyntaxTree, member: Node) -> Node:
    """Remove a specifier or declarator from its comma-separated list.

    A default import that leaves its import clause empty takes the
    clause and the ``from`` keyword with it, turning the statement into
    a bare side-effect import.
    """
    container = member.parent
    detach(tree, member)

    if container is not None and container.kind == 'import_clause' and not container.named_children:
        statement = container.parent
        detach(tree, container)
        if statement is not None:
            keyword = next((c for c in statement.children if c.kind == 'from'), None)
            if keyword is not None:
                detach(tree, keyword)
    return member


def replace(tree: SyntaxTree, old: Node, new: Node) -> Node:
    """Put ``new`` where ``old`` was; ``old`` ends up detached."""
    parent = old.parent
    index = old.index_in_parent()
    if parent is None or index < 0:
        raise TreeSurgeryError(f"cannot replace {old!r}: stale parent link")

    new.parent = parent
    new.field = old.field
    parent.children[index] = new
    old.parent = None
    old.removed = True
    tree.touch(old)
    return new


def empty_statement(template: Node) -> Node:
    """A ``;`` statement carrying the template's leading whitespace."""
    return Node(
        'empty_statement',
        text=';',
        leading=template.leading,
        line=template.line,
        column=template.column,
    )


def _drop(siblings: list, index: int) -> None:
    token = siblings.pop(index)
    token.parent = None
    token.removed = True
