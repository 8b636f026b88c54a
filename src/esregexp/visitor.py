"""Depth-first traversal of a parsed regular expression."""

import re
from dataclasses import fields
from typing import Iterator

from .ast_nodes import Node


def _snake_case(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in source order."""
    children = []
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            children.append(value)
        elif isinstance(value, list):
            children.extend(v for v in value if isinstance(v, Node))
    # modifiers precede the alternatives of a group in the source
    children.sort(key=lambda child: child.start)
    return iter(children)


class RegExpVisitor:
    """
    Walk an AST, calling ``on_<type>_enter`` and ``on_<type>_leave`` hooks.

    Hook names use the snake_case node type, so a CharacterClassRange is
    reported to ``on_character_class_range_enter(node)`` and
    ``on_character_class_range_leave(node)``.  Hooks the handler does not
    define are skipped.

    Example:
        class Collector:
            def __init__(self):
                self.names = []

            def on_capturing_group_enter(self, node):
                self.names.append(node.name)

        RegExpVisitor(Collector()).visit(parse_literal("/(?<a>x)/"))
    """

    def __init__(self, handler):
        self.handler = handler

    def visit(self, node: Node) -> None:
        name = _snake_case(type(node).__name__)
        enter = getattr(self.handler, f"on_{name}_enter", None)
        if enter is not None:
            enter(node)
        for child in iter_child_nodes(node):
            self.visit(child)
        leave = getattr(self.handler, f"on_{name}_leave", None)
        if leave is not None:
            leave(node)
