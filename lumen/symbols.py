from collections import OrderedDict
from typing import Callable, Iterator, List, Optional

from .types import TypeSpec, BUILTIN_TYPE_NAMES


class Symbol:
    def __init__(self, name: str, type: Optional[TypeSpec] = None):
        self.name = name
        self.type = type
        self.scope_level = 0


class BuiltinTypeSymbol(Symbol):
    def __init__(self, name: str):
        super().__init__(name, TypeSpec(name))

    def __repr__(self) -> str:
        return f"<BuiltinTypeSymbol(name={self.name!r})>"


class VarSymbol(Symbol):
    def __repr__(self) -> str:
        return f"<VarSymbol(name={self.name!r}, type={self.type!r})>"


class FunctionSymbol(Symbol):
    """A declared function.

    `return_type` stays None until the analyzer has seen a return statement
    (or finished the body, when it becomes NULL). `body` is the function's
    block, which the interpreter runs on every call.
    """

    def __init__(self, name: str, body=None):
        super().__init__(name)
        self.formal_params: List[VarSymbol] = []
        self.body = body

    @property
    def return_type(self) -> Optional[TypeSpec]:
        return self.type

    @return_type.setter
    def return_type(self, value: Optional[TypeSpec]):
        self.type = value

    def __repr__(self) -> str:
        params = ', '.join(f"{p.name}: {p.type!r}" for p in self.formal_params)
        return f"<FunctionSymbol(name={self.name!r}, params=({params}), returns={self.type!r})>"


class ScopedSymbolTable:
    """Symbols declared in one scope, linked to the enclosing scope."""

    def __init__(self, scope_name: str, scope_level: int,
                 enclosing_scope: Optional['ScopedSymbolTable'] = None,
                 trace: Optional[Callable[[str, int], None]] = None):
        self._symbols: 'OrderedDict[str, Symbol]' = OrderedDict()
        self.scope_name = scope_name
        self.scope_level = scope_level
        self.enclosing_scope = enclosing_scope
        self._trace = trace

    def __str__(self) -> str:
        h1 = 'SCOPE (SCOPED SYMBOL TABLE)'
        lines = [h1, '=' * len(h1)]
        for header_name, header_value in (
            ('Scope name', self.scope_name),
            ('Scope level', self.scope_level),
            ('Enclosing scope', self.enclosing_scope.scope_name if self.enclosing_scope else None),
        ):
            lines.append('%-15s: %s' % (header_name, header_value))
        h2 = 'Scope (Scoped symbol table) contents'
        lines.extend([h2, '-' * len(h2)])
        lines.extend('%7s: %r' % (key, value) for key, value in self._symbols.items())
        return '\n'.join(lines)

    __repr__ = __str__

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def init_builtins(self):
        for name in BUILTIN_TYPE_NAMES:
            self.insert(BuiltinTypeSymbol(name))

    def insert(self, symbol: Symbol):
        if self._trace:
            self._trace(f"insert: {symbol.name} (scope name: {self.scope_name})", 2)
        symbol.scope_level = self.scope_level
        self._symbols[symbol.name] = symbol

    def lookup(self, name: str, current_scope_only: bool = False) -> Optional[Symbol]:
        if self._trace:
            self._trace(f"lookup: {name} (scope name: {self.scope_name})", 3)
        symbol = self._symbols.get(name)
        if symbol is not None or current_scope_only:
            return symbol
        if self.enclosing_scope is not None:
            return self.enclosing_scope.lookup(name)
        return None
