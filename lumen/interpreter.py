"""Interpreter for the Lumen language.

This module evaluates an analyzed Lumen AST by walking it, and provides
the pipeline entry points that run source text through every phase
(lexing, parsing, semantic analysis, evaluation).

Runtime state is a call stack of activation records. Variable reads look in
the top record first and then walk down the stack by nesting level, so a
function sees the variables of whichever lower-level records are live when
it runs, not those of the place it was defined. Writes always go to the top
record.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .analyzer import SemanticAnalyzer
from .ast import (
    Program, Block, VarDecl, FunctionDecl, Assign, ExprStmt, Print, Return,
    If, While, Until, Binary, Logical, Unary, Call, Member, ArrayLit, Literal,
    Identifier,
)
from .callstack import ActivationRecord, ARType, CallStack
from .errors import LumenError, LumenRuntimeError, ReturnSignal
from .parser import parse_program
from .symbols import ScopedSymbolTable
from .types import is_number, is_truthy, strict_equals, to_string, type_name
from .visitor import NodeVisitor


class Interpreter(NodeVisitor):
    """Evaluates a Lumen AST that has been through semantic analysis."""

    def __init__(self, tree: Program, write: Optional[Callable[[str], Any]] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        super().__init__(debug_level, debug_file)
        self.tree = tree
        self.call_stack = CallStack()
        self.global_memory: Optional[ActivationRecord] = None
        self.write = write if write is not None else print

    def interpret(self) -> Optional[ActivationRecord]:
        try:
            self.visit(self.tree)
        finally:
            self.close_debug()
        return self.global_memory

    # Statements

    def visit_Program(self, node: Program):
        ar = ActivationRecord('program', ARType.PROGRAM, 1)
        self.global_memory = ar
        self.debug('ENTER: PROGRAM')
        self.call_stack.push(ar)
        self.debug(str(self.call_stack))
        try:
            self.visit(node.body)
        finally:
            self.debug('LEAVE: PROGRAM')
            self.debug(str(self.call_stack))
            self.call_stack.pop()

    def visit_Block(self, node: Block) -> Optional[ReturnSignal]:
        for statement in node.statements:
            result = self.visit(statement)
            if isinstance(result, ReturnSignal):
                return result
        return None

    def visit_FunctionDecl(self, node: FunctionDecl):
        # captured into a FunctionSymbol during analysis
        return None

    def visit_VarDecl(self, node: VarDecl):
        value = self.visit(node.init) if node.init is not None else None
        self.call_stack.peek()[node.name] = value
        self.debug(f"declare {node.name} = {value!r}", 2)

    def visit_Assign(self, node: Assign):
        value = self.visit(node.value)
        self.call_stack.peek()[node.target] = value
        self.debug(f"assign {node.target} = {value!r}", 2)

    def visit_ExprStmt(self, node: ExprStmt):
        self.visit(node.expr)

    def visit_Print(self, node: Print):
        self.write(to_string(self.visit(node.expr)))

    def visit_Return(self, node: Return) -> ReturnSignal:
        return ReturnSignal(self.visit(node.expr))

    def visit_If(self, node: If) -> Optional[ReturnSignal]:
        if is_truthy(self.visit(node.test)):
            return self.visit(node.consequent)
        if node.alternate is not None:
            return self.visit(node.alternate)
        return None

    def visit_While(self, node: While) -> Optional[ReturnSignal]:
        while is_truthy(self.visit(node.test)):
            result = self.visit(node.body)
            if isinstance(result, ReturnSignal):
                return result
        return None

    def visit_Until(self, node: Until) -> Optional[ReturnSignal]:
        while not is_truthy(self.visit(node.test)):
            result = self.visit(node.body)
            if isinstance(result, ReturnSignal):
                return result
        return None

    # Expressions

    def visit_Call(self, node: Call) -> Any:
        symbol = node.symbol
        if symbol is None:
            raise LumenRuntimeError(f"call to {node.callee!r} was not resolved; run semantic analysis first")
        ar = ActivationRecord(node.callee, ARType.FUNCTION, symbol.scope_level + 1)
        # arguments are evaluated in the caller's record
        for param, arg in zip(symbol.formal_params, node.args):
            ar[param.name] = self.visit(arg)

        self.call_stack.push(ar)
        self.debug(f"ENTER: FUNCTION {node.callee}")
        self.debug(str(self.call_stack))
        try:
            result = self.visit(symbol.body)
        finally:
            self.debug(f"LEAVE: FUNCTION {node.callee}")
            self.debug(str(self.call_stack))
            self.call_stack.pop()

        if isinstance(result, ReturnSignal):
            return result.value
        return None

    def visit_Identifier(self, node: Identifier) -> Any:
        name = node.name
        ar = self.call_stack.peek()
        self.debug(f"lookup {name} in {ar.name}", 3)
        if name in ar:
            return ar[name]
        level = ar.nesting_level - 1
        while level > 0:
            record = self.call_stack.get_record(level)
            if record is None:
                break
            if name in record:
                return record[name]
            level = record.nesting_level - 1
        raise LumenRuntimeError(f"variable {name!r} is not bound in any live activation record")

    def visit_Logical(self, node: Logical) -> Any:
        # both sides are always evaluated
        left = self.visit(node.left)
        right = self.visit(node.right)
        if node.op == 'and':
            return right if is_truthy(left) else left
        if node.op == 'or':
            return left if is_truthy(left) else right
        raise LumenRuntimeError(f"unknown logical operator {node.op!r}")

    def visit_Unary(self, node: Unary) -> Any:
        operand = self.visit(node.operand)
        if not is_number(operand):
            raise LumenRuntimeError(f"unary {node.op} expects a number, got {type_name(operand)}")
        if node.op == '-':
            return -operand
        if node.op == '+':
            return operand
        raise LumenRuntimeError(f"unknown unary operator {node.op!r}")

    def visit_Binary(self, node: Binary) -> Any:
        left = self.visit(node.left)
        right = self.visit(node.right)
        return apply_binary_op(node.op, left, right)

    def visit_Member(self, node: Member) -> Any:
        target = self.visit(node.object)
        index = self.visit(node.index)
        if not isinstance(target, (list, str)):
            raise LumenRuntimeError(f"cannot index {type_name(target)}")
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if 0 <= index < len(target):
            return target[index]
        return None

    def visit_ArrayLit(self, node: ArrayLit) -> List[Any]:
        return [self.visit(element) for element in node.elements]

    def visit_Literal(self, node: Literal) -> Any:
        return node.value


def _int_divide(a: int, b: int) -> int:
    # quotient truncated toward zero, so `%` takes the dividend's sign
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def apply_binary_op(op: str, a: Any, b: Any) -> Any:
    if op == '==':
        return strict_equals(a, b)
    if op in ('<', '<=', '>', '>='):
        if not ((is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
            raise LumenRuntimeError(f"comparison not supported for {type_name(a)} and {type_name(b)}")
        if op == '<':
            return a < b
        if op == '<=':
            return a <= b
        if op == '>':
            return a > b
        return a >= b
    if op == '+' and isinstance(a, str) and isinstance(b, str):
        return a + b
    if not (is_number(a) and is_number(b)):
        raise LumenRuntimeError(f"unsupported {op} for {type_name(a)} and {type_name(b)}")
    if op == '+':
        return a + b
    if op == '-':
        return a - b
    if op == '*':
        return a * b
    if op == '/':
        if b == 0:
            raise LumenRuntimeError('division by zero')
        return a / b
    if op == '%':
        if b == 0:
            raise LumenRuntimeError('modulo by zero')
        if isinstance(a, int) and isinstance(b, int):
            return a - b * _int_divide(a, b)
        return math.fmod(a, b)
    raise LumenRuntimeError(f"unknown operator {op!r}")


@dataclass
class RunResult:
    """Everything one pass of the pipeline produced.

    `error` holds the first error raised by any phase; later phases did not
    run. `output` has the lines printed before it stopped.
    """
    output: List[str] = field(default_factory=list)
    tree: Optional[Program] = None
    scope: Optional[ScopedSymbolTable] = None
    memory: Optional[ActivationRecord] = None
    error: Optional[LumenError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_program(source: str, write: Optional[Callable[[str], Any]] = None,
                debug_level: int = 0) -> Interpreter:
    """Parse, analyze and run a Lumen program, returning the interpreter.

    Errors from any phase propagate to the caller.
    """
    tree = parse_program(source)
    SemanticAnalyzer(debug_level=debug_level).analyze(tree)
    interpreter = Interpreter(tree, write=write, debug_level=debug_level)
    interpreter.interpret()
    return interpreter


def execute(source: str, write: Optional[Callable[[str], Any]] = None,
            debug_level: int = 0) -> RunResult:
    """Run source through the whole pipeline, stopping at the first error."""
    result = RunResult()

    def sink(text: str):
        result.output.append(text)
        if write is not None:
            write(text)

    try:
        result.tree = parse_program(source)
        analyzer = SemanticAnalyzer(debug_level=debug_level)
        result.scope = analyzer.analyze(result.tree)
        interpreter = Interpreter(result.tree, write=sink, debug_level=debug_level)
        result.memory = interpreter.interpret()
    except LumenError as e:
        result.error = e
    return result


def compile_file(file_path: str, write: Optional[Callable[[str], Any]] = None,
                 debug_level: int = 0) -> RunResult:
    """Read a Lumen source file and run it through the pipeline."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return execute(source, write=write, debug_level=debug_level)
