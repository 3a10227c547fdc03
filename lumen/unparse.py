"""Render a Lumen AST back to source text.

The output reparses to a structurally equal tree. Parentheses are added
only where the grammar needs them; a few shapes need care:

* `-a[0]` parses as `(-a)[0]`, so a negated member access is written
  `-(a[0])`.
* Only arithmetic can sit inside parentheses. Trees from the parser never
  put a comparison or logical operator where it would need them. A
  hand-built left-nested `or` still comes out as `(a or b) or c`, which the
  grammar rejects, so such trees do not round-trip.
* An `else` whose block is exactly one `if` stays a nested `if` with its own
  `endif`; an `If` in the alternate slot is written as `else if`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from .ast import (
    Program, Block, VarDecl, FunctionDecl, Assign, ExprStmt, Print, Return,
    If, While, Until, Binary, Logical, Unary, Call, Member, ArrayLit, Literal,
    Identifier, Node,
)

INDENT = '    '

BINARY_PRECEDENCE = {
    '==': 3, '<': 3, '<=': 3, '>': 3, '>=': 3,
    '+': 4, '-': 4,
    '*': 5, '/': 5, '%': 5,
}


def precedence(node: Node) -> int:
    if isinstance(node, Logical):
        return 1 if node.op == 'or' else 2
    if isinstance(node, Binary):
        return BINARY_PRECEDENCE[node.op]
    if isinstance(node, Unary):
        return 6
    if isinstance(node, Member):
        return 7
    return 8


def format_real(value: float) -> str:
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    if '.' not in text:
        text += '.0'
    return text


def format_string(value: str) -> str:
    if '"' in value:
        return "'" + value + "'"
    return '"' + value + '"'


def _wrap(node: Node, min_prec: int) -> str:
    text = unparse_expr(node)
    if precedence(node) < min_prec:
        return '(' + text + ')'
    return text


def unparse_expr(node: Node) -> str:
    if isinstance(node, Literal):
        if node.kind == 'bool':
            return 'true' if node.value else 'false'
        if node.kind == 'real':
            return format_real(node.value)
        if node.kind == 'string':
            return format_string(node.value)
        return str(node.value)
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, Call):
        return node.callee + '(' + ', '.join(unparse_expr(a) for a in node.args) + ')'
    if isinstance(node, ArrayLit):
        return '[' + ', '.join(unparse_expr(e) for e in node.elements) + ']'
    if isinstance(node, Member):
        return _wrap(node.object, 6) + '[' + unparse_expr(node.index) + ']'
    if isinstance(node, Unary):
        operand = node.operand
        if isinstance(operand, (Binary, Logical, Member)):
            return node.op + '(' + unparse_expr(operand) + ')'
        return node.op + unparse_expr(operand)
    if isinstance(node, Binary):
        prec = BINARY_PRECEDENCE[node.op]
        if prec == 3:
            # one comparison, both sides at sum level
            return f"{_wrap(node.left, 4)} {node.op} {_wrap(node.right, 4)}"
        return f"{_wrap(node.left, prec)} {node.op} {_wrap(node.right, prec + 1)}"
    if isinstance(node, Logical):
        # right-recursive: the left side binds tighter, the right may repeat
        prec = precedence(node)
        return f"{_wrap(node.left, prec + 1)} {node.op} {_wrap(node.right, prec)}"

    raise TypeError(f"Unsupported expression node: {type(node).__name__}")


def _block(block: Block, depth: int) -> List[str]:
    lines: List[str] = []
    for statement in block.statements:
        lines.extend(_statement(statement, depth))
    return lines


def _if_chain(node: If, depth: int, keyword: str) -> List[str]:
    pad = INDENT * depth
    lines = [f"{pad}{keyword} ({unparse_expr(node.test)}) then"]
    lines.extend(_block(node.consequent, depth + 1))
    if isinstance(node.alternate, If):
        lines.extend(_if_chain(node.alternate, depth, 'else if'))
    elif node.alternate is not None:
        lines.append(f"{pad}else")
        lines.extend(_block(node.alternate, depth + 1))
    return lines


def _statement(node: Node, depth: int) -> List[str]:
    pad = INDENT * depth
    if isinstance(node, VarDecl):
        text = f"let {node.name}"
        if node.declared_type is not None:
            text += f": {node.declared_type.lower()}"
        if node.init is not None:
            text += f" = {unparse_expr(node.init)}"
        return [pad + text]
    if isinstance(node, Assign):
        return [f"{pad}{node.target} = {unparse_expr(node.value)}"]
    if isinstance(node, ExprStmt):
        return [pad + unparse_expr(node.expr)]
    if isinstance(node, Print):
        return [f"{pad}print {unparse_expr(node.expr)}"]
    if isinstance(node, Return):
        return [f"{pad}return {unparse_expr(node.expr)}"]
    if isinstance(node, If):
        return _if_chain(node, depth, 'if') + [pad + 'endif']
    if isinstance(node, While):
        lines = [f"{pad}while ({unparse_expr(node.test)}) repeat"]
        lines.extend(_block(node.body, depth + 1))
        return lines + [pad + 'endwhile']
    if isinstance(node, Until):
        lines = [f"{pad}until ({unparse_expr(node.test)}) repeat"]
        lines.extend(_block(node.body, depth + 1))
        return lines + [pad + 'enduntil']
    if isinstance(node, FunctionDecl):
        params = ', '.join(f"{p.name}: {p.type_name.lower()}" for p in node.params)
        lines = [f"{pad}function {node.name}({params}) {{"]
        lines.extend(_block(node.body, depth + 1))
        return lines + [pad + '}']

    raise TypeError(f"Unsupported statement node: {type(node).__name__}")


def unparse(node: Node) -> str:
    """Return Lumen source for a Program, Block, statement or expression."""
    if isinstance(node, Program):
        return '\n'.join(_block(node.body, 0)) + '\n'
    if isinstance(node, Block):
        return '\n'.join(_block(node, 0)) + '\n'
    if isinstance(node, (Binary, Logical, Unary, Call, Member, ArrayLit, Literal, Identifier)):
        return unparse_expr(node)
    return '\n'.join(_statement(node, 0)) + '\n'
