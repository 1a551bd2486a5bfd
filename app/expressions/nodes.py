"""AST nodes for formula expressions."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Node:
    """Base node."""


@dataclass(frozen=True)
class Literal(Node):
    value: Any


@dataclass(frozen=True)
class Name(Node):
    name: str


@dataclass(frozen=True)
class Member(Node):
    target: Node
    name: str


@dataclass(frozen=True)
class Index(Node):
    target: Node
    index: Node


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: tuple[Node, ...]


@dataclass(frozen=True)
class ArrayLiteral(Node):
    items: tuple[Node, ...]


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class Binary(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Logical(Node):
    """Short-circuit ``and`` / ``or``."""

    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Conditional(Node):
    test: Node
    then: Node
    otherwise: Node


def references(node: Node, namespace: str) -> set[str]:
    """Names accessed as ``namespace.<name>`` anywhere in the tree."""
    found: set[str] = set()

    def walk(n: Node) -> None:
        if isinstance(n, Member):
            if isinstance(n.target, Name) and n.target.name == namespace:
                found.add(n.name)
            walk(n.target)
        elif isinstance(n, Index):
            walk(n.target)
            walk(n.index)
        elif isinstance(n, Call):
            for a in n.args:
                walk(a)
        elif isinstance(n, ArrayLiteral):
            for i in n.items:
                walk(i)
        elif isinstance(n, Unary):
            walk(n.operand)
        elif isinstance(n, (Binary, Logical)):
            walk(n.left)
            walk(n.right)
        elif isinstance(n, Conditional):
            walk(n.test)
            walk(n.then)
            walk(n.otherwise)

    walk(node)
    return found
