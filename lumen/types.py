"""Type definitions and value helpers for Lumen.

Static types are :class:`TypeSpec` values computed by the semantic
analyzer. At run time the interpreter works with plain Python values
(`int`, `float`, `str`, `bool`, `list` and `None`); the helpers here name,
print and test those values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class TypeSpec:
    """A Lumen static type.

    `kind` is one of 'INTEGER', 'REAL', 'STRING', 'BOOLEAN', 'ARRAY' or
    'NULL'. Arrays carry the element types known from their literal in
    `args`, e.g. `[1, "a"]` is `TypeSpec('ARRAY', (INTEGER, STRING))`.
    NULL marks a type that is not known yet.
    """
    kind: str
    args: Tuple['TypeSpec', ...] = ()

    def __repr__(self) -> str:
        if not self.args:
            return self.kind
        inner = ", ".join(repr(a) for a in self.args)
        return f"{self.kind}<{inner}>"

    @property
    def is_null(self) -> bool:
        return self.kind == 'NULL'

    @staticmethod
    def array(*elements: 'TypeSpec') -> 'TypeSpec':
        return TypeSpec('ARRAY', tuple(elements))


INTEGER = TypeSpec('INTEGER')
REAL = TypeSpec('REAL')
STRING = TypeSpec('STRING')
BOOLEAN = TypeSpec('BOOLEAN')
ARRAY = TypeSpec('ARRAY')
NULL = TypeSpec('NULL')

BUILTIN_TYPE_NAMES = ('INTEGER', 'REAL', 'BOOLEAN', 'STRING', 'ARRAY')

LITERAL_TYPES = {
    'int': INTEGER,
    'real': REAL,
    'string': STRING,
    'bool': BOOLEAN,
}


def same_type(a: TypeSpec, b: TypeSpec) -> bool:
    return a.kind == b.kind


def compatible(a: TypeSpec, b: TypeSpec) -> bool:
    """Same kind, or at least one side is not known yet."""
    return a.is_null or b.is_null or same_type(a, b)


def is_number(value: Any) -> bool:
    # bool is a subclass of int but is not a Lumen number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the Lumen type name of a runtime value."""
    if isinstance(value, bool):
        return 'BOOLEAN'
    if isinstance(value, int):
        return 'INTEGER'
    if isinstance(value, float):
        return 'REAL'
    if isinstance(value, str):
        return 'STRING'
    if isinstance(value, list):
        return 'ARRAY'
    if value is None:
        return 'NULL'
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    # arrays are always truthy
    return True


def to_string(value: Any) -> str:
    """Convert a Lumen value to the text `print` emits."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, list):
        return '[' + ', '.join(to_repr(item) for item in value) + ']'
    return str(value)


def to_repr(value: Any) -> str:
    # strings are quoted inside arrays
    if isinstance(value, str):
        return repr(value)
    return to_string(value)


def strict_equals(a: Any, b: Any) -> bool:
    """`==` semantics: equal kinds and equal values, no coercion."""
    if type_name(a) != type_name(b):
        return False
    if isinstance(a, list):
        return len(a) == len(b) and all(strict_equals(x, y) for x, y in zip(a, b))
    return a == b
