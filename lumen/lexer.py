"""Lexical analysis for Lumen.

Terminal recognition is delegated to a Lark grammar compiled for the basic
(regex) lexer. Lark only splits the input; this module classifies
identifiers against the keyword table, converts literal values, reports
positions and turns Lark's lexing failures into :class:`LexerError`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError


class TokenType(enum.Enum):
    # keywords
    BEGIN = 'BEGIN'
    PRINT = 'PRINT'
    LET = 'LET'
    IF = 'IF'
    THEN = 'THEN'
    ELSE = 'ELSE'
    ENDIF = 'ENDIF'
    WHILE = 'WHILE'
    ENDWHILE = 'ENDWHILE'
    UNTIL = 'UNTIL'
    ENDUNTIL = 'ENDUNTIL'
    REPEAT = 'REPEAT'
    TRUE = 'TRUE'
    FALSE = 'FALSE'
    NULL = 'NULL'
    STRING = 'STRING'
    INTEGER = 'INTEGER'
    REAL = 'REAL'
    BOOLEAN = 'BOOLEAN'
    AND = 'AND'
    OR = 'OR'
    NOT = 'NOT'
    FUNCTION = 'FUNCTION'
    RETURN = 'RETURN'
    END = 'END'

    # operators and punctuation
    PLUS = '+'
    MINUS = '-'
    MUL = '*'
    DIV = '/'
    MOD = '%'
    NEWLN = '\n'
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    LBRACKET = '['
    RBRACKET = ']'
    COMMA = ','
    COLON = ':'
    EQ = '=='
    LT = '<'
    GT = '>'
    LTEQ = '<='
    GTEQ = '>='
    ASSIGN = '='

    INTEGER_CONST = 'INTEGER_CONST'
    REAL_CONST = 'REAL_CONST'
    STRING_CONST = 'STRING_CONST'
    ID = 'ID'
    EOF = 'EOF'


def _build_reserved_keywords() -> Mapping[str, TokenType]:
    keywords = {}
    for kind in TokenType:
        keywords[kind.value.lower()] = kind
        if kind is TokenType.END:
            break
    return MappingProxyType(keywords)


RESERVED_KEYWORDS = _build_reserved_keywords()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any
    line: int = 0
    column: int = 0
    length: int = 0
    text: str = ''

    def __str__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, position={self.line}:{self.column})"


# Terminal names match TokenType member names. Identifiers and keywords share
# the ID terminal; keywords are told apart through RESERVED_KEYWORDS.
LUMEN_TERMINALS = r"""
    start: _item*
    _item: REAL_CONST | INTEGER_CONST | STRING_CONST | ID
         | EQ | LTEQ | GTEQ | LT | GT | ASSIGN
         | PLUS | MINUS | MUL | DIV | MOD
         | LPAREN | RPAREN | LBRACE | RBRACE | LBRACKET | RBRACKET
         | COMMA | COLON | NEWLN

    REAL_CONST.2: /[0-9]+\.[0-9]*/
    INTEGER_CONST: /[0-9]+/
    STRING_CONST: /"[^"]*"/ | /'[^']*'/
    ID: /[A-Za-z_][A-Za-z0-9_]*/

    EQ: "=="
    LTEQ: "<="
    GTEQ: ">="
    LT: "<"
    GT: ">"
    ASSIGN: "="
    PLUS: "+"
    MINUS: "-"
    MUL: "*"
    DIV: "/"
    MOD: "%"
    LPAREN: "("
    RPAREN: ")"
    LBRACE: "{"
    RBRACE: "}"
    LBRACKET: "["
    RBRACKET: "]"
    COMMA: ","
    COLON: ":"
    NEWLN: /\n/

    WHITESPACE: /[ \t\r]+/
    BLOCK_COMMENT.3: /\/\*[\s\S]*?(\*\/|\Z)/
    LINE_COMMENT.3: /\/\/[^\n]*/
    %ignore WHITESPACE
    %ignore BLOCK_COMMENT
    %ignore LINE_COMMENT
"""


LUMEN_LEXER = Lark(
    LUMEN_TERMINALS,
    parser='lalr',
    lexer='basic',
)


class Lexer:
    """Pulls tokens from source text one at a time."""

    def __init__(self, text: str):
        self.text = text
        self._stream: Optional[Iterator[Any]] = LUMEN_LEXER.lex(text)
        self._eof: Optional[Token] = None

    def next_token(self) -> Token:
        if self._stream is None:
            return self._eof_token()
        try:
            raw = next(self._stream)
        except StopIteration:
            self._stream = None
            return self._eof_token()
        except UnexpectedCharacters as e:
            self._stream = None
            raise LexerError(e.char, e.line, e.column - 1) from None
        return self._convert(raw)

    def tokens(self) -> List[Token]:
        """Lex the remaining input, returning every token including EOF."""
        result = []
        while True:
            token = self.next_token()
            result.append(token)
            if token.type is TokenType.EOF:
                return result

    def _convert(self, raw) -> Token:
        text = str(raw)
        kind = raw.type
        line = raw.line
        column = raw.column - 1
        if kind == 'ID':
            token_type = RESERVED_KEYWORDS.get(text, TokenType.ID)
            if token_type is TokenType.TRUE:
                value: Any = True
            elif token_type is TokenType.FALSE:
                value = False
            else:
                value = text
            return Token(token_type, value, line, column, len(text), text)
        if kind == 'INTEGER_CONST':
            return Token(TokenType.INTEGER_CONST, int(text, 10), line, column, len(text), text)
        if kind == 'REAL_CONST':
            return Token(TokenType.REAL_CONST, float(text), line, column, len(text), text)
        if kind == 'STRING_CONST':
            content = text[1:-1]
            return Token(TokenType.STRING_CONST, content, line, column, len(content), text)
        token_type = TokenType[kind]
        return Token(token_type, text, line, column, len(text), text)

    def _eof_token(self) -> Token:
        if self._eof is None:
            last_newline = self.text.rfind('\n')
            line = self.text.count('\n') + 1
            column = len(self.text) - (last_newline + 1)
            self._eof = Token(TokenType.EOF, None, line, column, 0, '')
        return self._eof


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return Lexer(source).tokens()
