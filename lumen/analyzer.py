"""Semantic analysis for Lumen.

A single pass over the tree before execution. It builds the chain of
scopes (global, then one per function declaration), registers declarations,
infers expression types and checks them, and resolves every call to its
:class:`FunctionSymbol`, storing the result on the `Call` node so the
interpreter never looks functions up by name.

Names resolve lexically here, through the enclosing scopes of the
*definition*. The interpreter resolves variables through the live call
stack instead, so the two passes can disagree for programs that rely on a
caller's variables.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Program, Block, VarDecl, FunctionDecl, Assign, ExprStmt, Print, Return,
    If, While, Until, Binary, Logical, Unary, Call, Member, ArrayLit, Literal,
    Identifier,
)
from .errors import (
    DuplicateIdentifierError, TypeMismatchError, AssignmentTypeError,
    UndefinedSymbolError, UndefinedFunctionError, ArgumentCountError,
    ReturnOutsideFunctionError,
)
from .symbols import ScopedSymbolTable, VarSymbol, FunctionSymbol, BuiltinTypeSymbol
from .types import TypeSpec, ARRAY, NULL, STRING, LITERAL_TYPES, compatible, same_type
from .visitor import NodeVisitor


class SemanticAnalyzer(NodeVisitor):
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        super().__init__(debug_level, debug_file)
        self.current_scope: Optional[ScopedSymbolTable] = None
        self.global_scope: Optional[ScopedSymbolTable] = None
        self._functions: List[FunctionSymbol] = []

    def analyze(self, tree: Program) -> ScopedSymbolTable:
        try:
            self.visit(tree)
        finally:
            self.close_debug()
        return self.global_scope

    def _open_scope(self, name: str) -> ScopedSymbolTable:
        level = self.current_scope.scope_level + 1 if self.current_scope else 1
        self.debug(f"Enter scope: {name}")
        scope = ScopedSymbolTable(name, level, self.current_scope, trace=self.debug)
        self.current_scope = scope
        return scope

    def _close_scope(self):
        scope = self.current_scope
        self.debug(str(scope), 2)
        self.current_scope = scope.enclosing_scope
        self.debug(f"Leave scope: {scope.scope_name}")

    def _type_of(self, type_name: str) -> TypeSpec:
        symbol = self.current_scope.lookup(type_name)
        if not isinstance(symbol, BuiltinTypeSymbol):
            raise UndefinedSymbolError(type_name, f"unknown type {type_name!r}")
        return symbol.type

    def _declare(self, symbol):
        if self.current_scope.lookup(symbol.name, current_scope_only=True) is not None:
            raise DuplicateIdentifierError(symbol.name, self.current_scope.scope_name)
        self.current_scope.insert(symbol)

    # Statements

    def visit_Program(self, node: Program):
        self.global_scope = self._open_scope('global')
        self.global_scope.init_builtins()
        self.visit(node.body)
        self._close_scope()

    def visit_Block(self, node: Block):
        for statement in node.statements:
            self.visit(statement)

    def visit_FunctionDecl(self, node: FunctionDecl):
        fn_symbol = FunctionSymbol(node.name, body=node.body)
        # registered before the body is visited so the function can call itself
        self._declare(fn_symbol)

        self._open_scope(node.name)
        for param in node.params:
            param_symbol = VarSymbol(param.name, self._type_of(param.type_name))
            self._declare(param_symbol)
            fn_symbol.formal_params.append(param_symbol)

        self._functions.append(fn_symbol)
        try:
            self.visit(node.body)
        finally:
            self._functions.pop()

        if fn_symbol.return_type is None:
            fn_symbol.return_type = NULL
        node.return_type = fn_symbol.return_type
        self._close_scope()

    def visit_VarDecl(self, node: VarDecl):
        if node.declared_type is not None:
            var_type = self._type_of(node.declared_type)
            if node.init is not None:
                init_type = self.visit(node.init)
                if not compatible(var_type, init_type):
                    raise TypeMismatchError(
                        f"cannot initialise {node.name!r} of type {var_type} with {init_type}"
                    )
        elif node.init is not None:
            var_type = self.visit(node.init)
        else:
            var_type = NULL
        self._declare(VarSymbol(node.name, var_type))

    def visit_Assign(self, node: Assign):
        value_type = self.visit(node.value)
        symbol = self.current_scope.lookup(node.target)
        if symbol is None:
            raise UndefinedSymbolError(node.target)
        if not isinstance(symbol, VarSymbol):
            raise UndefinedSymbolError(node.target, f"{node.target!r} is not a variable")
        if symbol.type.is_null:
            # the first assignment fixes the type
            symbol.type = value_type
        elif not compatible(symbol.type, value_type):
            raise AssignmentTypeError(node.target, symbol.type, value_type)
        return value_type

    def visit_ExprStmt(self, node: ExprStmt):
        self.visit(node.expr)

    def visit_Print(self, node: Print):
        self.visit(node.expr)

    def visit_Return(self, node: Return) -> TypeSpec:
        if self.current_scope.scope_level == 1:
            raise ReturnOutsideFunctionError()
        value_type = self.visit(node.expr)
        fn_symbol = self._functions[-1]
        current = fn_symbol.return_type
        if current is None or current.is_null:
            fn_symbol.return_type = value_type
        elif not compatible(current, value_type):
            raise TypeMismatchError(
                f"function {fn_symbol.name!r} returns both {current} and {value_type}"
            )
        return value_type

    def visit_If(self, node: If):
        self.visit(node.test)
        self.visit(node.consequent)
        if node.alternate is not None:
            self.visit(node.alternate)

    def visit_While(self, node: While):
        self.visit(node.test)
        self.visit(node.body)

    def visit_Until(self, node: Until):
        self.visit(node.test)
        self.visit(node.body)

    # Expressions

    def visit_Binary(self, node: Binary) -> TypeSpec:
        left = self.visit(node.left)
        right = self.visit(node.right)
        if not compatible(left, right):
            raise TypeMismatchError(f"cannot operate on different types: {left}, {right}")
        # comparisons take the operand type as well
        return right if left.is_null else left

    def visit_Logical(self, node: Logical) -> TypeSpec:
        self.visit(node.left)
        self.visit(node.right)
        # the value is one of the operands, so its type is not known statically
        return NULL

    def visit_Unary(self, node: Unary) -> TypeSpec:
        return self.visit(node.operand)

    def visit_Call(self, node: Call) -> TypeSpec:
        arg_types = [self.visit(arg) for arg in node.args]

        symbol = self.current_scope.lookup(node.callee)
        if not isinstance(symbol, FunctionSymbol):
            raise UndefinedFunctionError(node.callee)
        if len(arg_types) != len(symbol.formal_params):
            raise ArgumentCountError(node.callee, len(symbol.formal_params), len(arg_types))
        for param, arg_type in zip(symbol.formal_params, arg_types):
            if not compatible(param.type, arg_type):
                raise TypeMismatchError(
                    f"argument {param.name!r} of {node.callee!r} expects {param.type}, got {arg_type}"
                )

        node.symbol = symbol
        return symbol.return_type or NULL

    def visit_Member(self, node: Member) -> TypeSpec:
        object_type = self.visit(node.object)
        self.visit(node.index)
        if same_type(object_type, ARRAY):
            index = node.index
            if isinstance(index, Literal) and index.kind == 'int' and index.value < len(object_type.args):
                return object_type.args[index.value]
            return NULL
        if same_type(object_type, STRING):
            return STRING
        return NULL

    def visit_ArrayLit(self, node: ArrayLit) -> TypeSpec:
        return TypeSpec.array(*(self.visit(element) for element in node.elements))

    def visit_Literal(self, node: Literal) -> TypeSpec:
        return LITERAL_TYPES[node.kind]

    def visit_Identifier(self, node: Identifier) -> TypeSpec:
        symbol = self.current_scope.lookup(node.name)
        if symbol is None:
            raise UndefinedSymbolError(node.name)
        if not isinstance(symbol, VarSymbol):
            raise UndefinedSymbolError(node.name, f"{node.name!r} is not a variable")
        return symbol.type


def analyze(tree: Program, debug_level: int = 0) -> ScopedSymbolTable:
    """Run semantic analysis over a parsed program and return the global scope."""
    return SemanticAnalyzer(debug_level=debug_level).analyze(tree)
