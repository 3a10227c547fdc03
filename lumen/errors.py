from typing import Any, Optional


class LumenError(Exception):
    """Base class for every error the Lumen pipeline raises."""
    phase = 'lumen'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LexerError(LumenError):
    """Raised when a character matches no lexical rule."""
    phase = 'lexer'

    def __init__(self, character: str, line: int, column: int):
        super().__init__(f"unexpected character {character!r} at line {line}, column {column}")
        self.character = character
        self.line = line
        self.column = column


class UnexpectedTokenError(LumenError):
    """Raised when the parser expected one token kind and found another."""
    phase = 'parser'

    def __init__(self, token: Any, expected: str):
        self.actual = token.type.name
        self.expected = expected
        self.line = token.line
        self.column = token.column
        shown = token.text if token.text else self.actual
        super().__init__(
            f"unexpected token {shown!r} ({self.actual}) expected {expected} "
            f"at line {self.line}, column {self.column}"
        )


class SemanticError(LumenError):
    phase = 'semantic'


class DuplicateIdentifierError(SemanticError):
    def __init__(self, name: str, scope_name: str):
        super().__init__(f"duplicate identifier {name!r} in scope {scope_name!r}")
        self.name = name


class TypeMismatchError(SemanticError):
    pass


class AssignmentTypeError(TypeMismatchError):
    def __init__(self, name: str, expected: Any, actual: Any):
        super().__init__(f"cannot assign {actual} to {name!r} of type {expected}")
        self.name = name


class UndefinedSymbolError(SemanticError):
    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"symbol not found {name!r}")
        self.name = name


class UndefinedFunctionError(SemanticError):
    def __init__(self, name: str):
        super().__init__(f"function {name!r} is not defined")
        self.name = name


class ArgumentCountError(SemanticError):
    def __init__(self, name: str, expected: int, actual: int):
        super().__init__(f"function {name!r} expects {expected} arguments, got {actual}")
        self.name = name


class ReturnOutsideFunctionError(SemanticError):
    def __init__(self):
        super().__init__("cannot have a return statement outside of a function")


class LumenRuntimeError(LumenError):
    phase = 'runtime'


class ReturnSignal:
    """Value yielded by a return statement.

    Blocks and loops stop as soon as a statement yields one and pass it
    upward unchanged; the enclosing call unwraps it.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
