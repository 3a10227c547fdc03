"""Abstract Syntax Tree (AST) definitions for the Lumen language.

Nodes are built once by the parser. The semantic analyzer fills in the
annotation slots (`FunctionDecl.return_type`, `Call.symbol`); those slots
are left out of equality and repr so that trees compare structurally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class Program(Node):
    body: Block


@dataclass
class VarDecl(Node):
    name: str
    declared_type: Optional[str] = None  # 'INTEGER', 'REAL', 'STRING' or 'BOOLEAN'
    init: Optional[Node] = None


@dataclass
class Param(Node):
    name: str
    type_name: str


@dataclass
class FunctionDecl(Node):
    name: str
    params: List[Param]
    body: Block
    return_type: Any = field(default=None, compare=False, repr=False)


@dataclass
class Assign(Node):
    target: str
    value: Node


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class Print(Node):
    expr: Node


@dataclass
class Return(Node):
    expr: Node


@dataclass
class If(Node):
    test: Node
    consequent: Block
    alternate: Optional[Node] = None  # another If for `else if`, or a Block


@dataclass
class While(Node):
    test: Node
    body: Block


@dataclass
class Until(Node):
    test: Node
    body: Block


@dataclass
class Binary(Node):
    left: Node
    op: str
    right: Node


@dataclass
class Logical(Node):
    left: Node
    op: str  # 'and' or 'or'
    right: Node


@dataclass
class Unary(Node):
    op: str
    operand: Node


@dataclass
class Call(Node):
    callee: str
    args: List[Node]
    symbol: Any = field(default=None, compare=False, repr=False)


@dataclass
class Member(Node):
    object: Node
    index: Node


@dataclass
class ArrayLit(Node):
    elements: List[Node]


@dataclass
class Literal(Node):
    kind: str  # 'int', 'real', 'string' or 'bool'
    value: Any


@dataclass
class Identifier(Node):
    name: str
