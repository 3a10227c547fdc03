"""Recursive-descent parser for Lumen.

The parser pulls tokens from a :class:`~lumen.lexer.Lexer` with a single
token of lookahead. Newlines are significant: they separate statements, and
anything that cannot start a statement ends the current statement list (so
`endif`, `endwhile`, `}` and friends close the block that precedes them).

Some precedence quirks of the language are deliberate and must be kept:

* `or` and `and` recurse to the right instead of looping, so repeated
  logical operators associate to the right.
* A comparison takes exactly one operator; `a < b < c` does not parse.
* Parentheses re-enter at `sum`, so a comparison or logical operator cannot
  appear directly inside them.
* `else if` is not a keyword pair of its own: an `if` right after `else`
  continues the chain and shares the outer `endif`.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Program, Block, VarDecl, Param, FunctionDecl, Assign, ExprStmt, Print,
    Return, If, While, Until, Binary, Logical, Unary, Call, Member, ArrayLit,
    Literal, Identifier, Node,
)
from .errors import UnexpectedTokenError
from .lexer import Lexer, Token, TokenType

TYPE_TOKENS = (TokenType.INTEGER, TokenType.STRING, TokenType.REAL, TokenType.BOOLEAN)

COMPARISON_TOKENS = (TokenType.EQ, TokenType.LT, TokenType.LTEQ, TokenType.GT, TokenType.GTEQ)


class Parser:
    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current_token = self.lexer.next_token()
        self._lookahead: Optional[Token] = None

    def error(self, expected: str):
        raise UnexpectedTokenError(self.current_token, expected)

    def advance(self) -> Token:
        token = self.current_token
        if self._lookahead is not None:
            self.current_token = self._lookahead
            self._lookahead = None
        else:
            self.current_token = self.lexer.next_token()
        return token

    def peek(self) -> Token:
        if self._lookahead is None:
            self._lookahead = self.lexer.next_token()
        return self._lookahead

    def expect(self, kind: TokenType) -> Token:
        if self.current_token.type is kind:
            return self.advance()
        self.error(kind.name)

    def match(self, *kinds: TokenType) -> bool:
        return self.current_token.type in kinds

    def call_follows(self) -> bool:
        """True when the current ID is immediately followed by '('."""
        following = self.peek()
        return (
            following.type is TokenType.LPAREN
            and following.line == self.current_token.line
            and following.column == self.current_token.column + self.current_token.length
        )

    def parse(self) -> Program:
        program = self.program()
        if not self.match(TokenType.EOF):
            self.error(TokenType.EOF.name)
        return program

    # program: block
    def program(self) -> Program:
        return Program(self.block())

    # block: statement_list
    def block(self) -> Block:
        return Block(self.statement_list())

    # statement_list: statement { NEWLN statement }
    def statement_list(self) -> List[Node]:
        statements: List[Node] = []
        node = self.statement()
        if node is not None:
            statements.append(node)
        while self.match(TokenType.NEWLN):
            self.expect(TokenType.NEWLN)
            node = self.statement()
            if node is not None:
                statements.append(node)
        return statements

    def statement(self) -> Optional[Node]:
        kind = self.current_token.type
        if kind is TokenType.ID:
            return self.expression_statement()
        if kind is TokenType.LET:
            return self.declaration_statement()
        if kind is TokenType.PRINT:
            return self.print_statement()
        if kind is TokenType.WHILE:
            return self.while_statement()
        if kind is TokenType.UNTIL:
            return self.until_statement()
        if kind is TokenType.IF:
            return self.if_statement()
        if kind is TokenType.FUNCTION:
            return self.function_declaration()
        if kind is TokenType.RETURN:
            return self.return_statement()
        return None

    def if_statement(self) -> If:
        node = self.if_clause()
        self.expect(TokenType.ENDIF)
        return node

    def if_clause(self) -> If:
        # shared by `if` and the `else if` links of its chain; only the
        # outermost clause consumes `endif`
        self.expect(TokenType.IF)
        self.expect(TokenType.LPAREN)
        test = self.expression()
        self.expect(TokenType.RPAREN)
        self.expect(TokenType.THEN)
        consequent = self.block()
        alternate: Optional[Node] = None
        if self.match(TokenType.ELSE):
            self.expect(TokenType.ELSE)
            if self.match(TokenType.IF):
                alternate = self.if_clause()
            else:
                alternate = self.block()
        return If(test, consequent, alternate)

    def while_statement(self) -> While:
        self.expect(TokenType.WHILE)
        self.expect(TokenType.LPAREN)
        test = self.expression()
        self.expect(TokenType.RPAREN)
        self.expect(TokenType.REPEAT)
        body = self.block()
        self.expect(TokenType.ENDWHILE)
        return While(test, body)

    def until_statement(self) -> Until:
        self.expect(TokenType.UNTIL)
        self.expect(TokenType.LPAREN)
        test = self.expression()
        self.expect(TokenType.RPAREN)
        self.expect(TokenType.REPEAT)
        body = self.block()
        self.expect(TokenType.ENDUNTIL)
        return Until(test, body)

    def print_statement(self) -> Print:
        self.expect(TokenType.PRINT)
        return Print(self.expression())

    def return_statement(self) -> Return:
        self.expect(TokenType.RETURN)
        return Return(self.expression())

    def function_declaration(self) -> FunctionDecl:
        self.expect(TokenType.FUNCTION)
        name = self.expect(TokenType.ID).value
        params = self.parameter_list()
        self.expect(TokenType.LBRACE)
        body = self.block()
        self.expect(TokenType.RBRACE)
        return FunctionDecl(name, params, body)

    def parameter_list(self) -> List[Param]:
        self.expect(TokenType.LPAREN)
        params: List[Param] = []
        if not self.match(TokenType.RPAREN):
            params.append(self.parameter())
            while self.match(TokenType.COMMA):
                self.expect(TokenType.COMMA)
                params.append(self.parameter())
        self.expect(TokenType.RPAREN)
        return params

    def parameter(self) -> Param:
        name = self.expect(TokenType.ID).value
        self.expect(TokenType.COLON)
        return Param(name, self.type_spec())

    def type_spec(self) -> str:
        if not self.match(*TYPE_TOKENS):
            self.error('a variable type such as string, integer, real or boolean')
        return self.advance().type.name

    def declaration_statement(self) -> VarDecl:
        self.expect(TokenType.LET)
        name = self.expect(TokenType.ID).value
        declared_type: Optional[str] = None
        init: Optional[Node] = None
        if self.match(TokenType.COLON):
            self.expect(TokenType.COLON)
            declared_type = self.type_spec()
        if self.match(TokenType.ASSIGN):
            self.expect(TokenType.ASSIGN)
            init = self.expression()
        return VarDecl(name, declared_type, init)

    def expression_statement(self) -> Node:
        if self.call_follows():
            return ExprStmt(self.call_expression())
        return self.assignment_statement()

    def call_expression(self) -> Call:
        callee = self.expect(TokenType.ID).value
        self.expect(TokenType.LPAREN)
        args: List[Node] = []
        if not self.match(TokenType.RPAREN):
            args.append(self.expression())
            while self.match(TokenType.COMMA):
                self.expect(TokenType.COMMA)
                args.append(self.expression())
        self.expect(TokenType.RPAREN)
        return Call(callee, args)

    def assignment_statement(self) -> Assign:
        target = self.expect(TokenType.ID).value
        self.expect(TokenType.ASSIGN)
        return Assign(target, self.expression())

    # Expressions, loosest first

    def expression(self) -> Node:
        return self.or_expression()

    def or_expression(self) -> Node:
        node = self.and_expression()
        if self.match(TokenType.OR):
            self.expect(TokenType.OR)
            return Logical(node, 'or', self.or_expression())
        return node

    def and_expression(self) -> Node:
        node = self.comparison()
        if self.match(TokenType.AND):
            self.expect(TokenType.AND)
            return Logical(node, 'and', self.and_expression())
        return node

    def comparison(self) -> Node:
        node = self.sum()
        if self.match(*COMPARISON_TOKENS):
            op = self.advance().value
            return Binary(node, op, self.sum())
        return node

    def sum(self) -> Node:
        node = self.term()
        while self.match(TokenType.PLUS, TokenType.MINUS):
            op = self.advance().value
            node = Binary(node, op, self.term())
        return node

    def term(self) -> Node:
        node = self.member_expression()
        while self.match(TokenType.MUL, TokenType.DIV, TokenType.MOD):
            op = self.advance().value
            node = Binary(node, op, self.member_expression())
        return node

    def member_expression(self) -> Node:
        node = self.factor()
        while self.match(TokenType.LBRACKET):
            self.expect(TokenType.LBRACKET)
            index = self.expression()
            self.expect(TokenType.RBRACKET)
            node = Member(node, index)
        return node

    def factor(self) -> Node:
        token = self.current_token
        kind = token.type
        if kind in (TokenType.PLUS, TokenType.MINUS):
            self.advance()
            return Unary(token.value, self.factor())
        if kind is TokenType.INTEGER_CONST:
            self.advance()
            return Literal('int', token.value)
        if kind is TokenType.REAL_CONST:
            self.advance()
            return Literal('real', token.value)
        if kind is TokenType.STRING_CONST:
            self.advance()
            return Literal('string', token.value)
        if kind in (TokenType.TRUE, TokenType.FALSE):
            self.advance()
            return Literal('bool', token.value)
        if kind is TokenType.LPAREN:
            self.expect(TokenType.LPAREN)
            node = self.sum()
            self.expect(TokenType.RPAREN)
            return node
        if kind is TokenType.LBRACKET:
            return self.array_literal()
        if kind is TokenType.ID:
            if self.call_follows():
                return self.call_expression()
            self.advance()
            return Identifier(token.value)
        self.error('an expression')

    def array_literal(self) -> ArrayLit:
        self.expect(TokenType.LBRACKET)
        elements: List[Node] = []
        if not self.match(TokenType.RBRACKET):
            elements.append(self.expression())
            while self.match(TokenType.COMMA):
                self.expect(TokenType.COMMA)
                elements.append(self.expression())
        self.expect(TokenType.RBRACKET)
        return ArrayLit(elements)


def parse_program(source: str) -> Program:
    """Parse Lumen source code into a Program AST."""
    return Parser(Lexer(source)).parse()
