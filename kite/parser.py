"""Kite parser — recursive descent with Pratt precedence climbing.

The parser pulls tokens from a token source with one token of lookahead
(``cur_token`` and ``peek_token``) and builds a ``Program``. It never
raises on bad input. Every failure appends one diagnostic to
``errors`` and returns ``None`` for the subtree being built; a statement
that comes back as ``None`` is dropped and parsing carries on with the
next one.
"""

from __future__ import annotations

import logging
import sys
from enum import IntEnum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from kite.lexer import Lexer, Token, TokenSource, TokenType
from kite.errors import KiteError, ParseError
from kite.ast_nodes import (
    Program,
    Statement,
    Expression,
    LetStatement,
    ReturnStatement,
    ExpressionStatement,
    BlockStatement,
    Identifier,
    IntegerLiteral,
    StringLiteral,
    BooleanLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
)

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

DEFAULT_MAX_DEPTH = 100

# Upper bound on interpreter frames one nesting level can use.
FRAMES_PER_LEVEL = 10


def max_depth_ceiling() -> int:
    """Deepest nesting the current recursion limit can hold."""
    return sys.getrecursionlimit() // FRAMES_PER_LEVEL


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2        # == !=
    LESSGREATER = 3   # < >
    SUM = 4           # + -
    PRODUCT = 5       # * /
    PREFIX = 6        # -x !x
    CALL = 7          # f(x)


PRECEDENCES: Mapping[TokenType, Precedence] = MappingProxyType({
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
})

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class Parser:
    """Pratt parser for the Kite language.

    One instance parses one token stream; it holds mutable cursor and
    diagnostic state and must not be shared between threads.

    Args:
        source: anything with ``next_token()``; usually a ``Lexer``.
        strict_blocks: report a block that runs into end of input
            without its closing ``}`` instead of accepting it.
        max_depth: deepest expression nesting accepted before the
            parser reports an error instead of recursing further.
    """

    def __init__(
        self,
        source: TokenSource,
        *,
        strict_blocks: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.source = source
        self.strict_blocks = strict_blocks
        self.max_depth = max_depth
        self._diagnostics: list[KiteError] = []
        self._depth: int = 0

        self.cur_token: Token = Token(TokenType.EOF, "")
        self.peek_token: Token = Token(TokenType.EOF, "")
        self.next_token()
        self.next_token()

        self.prefix_parse_fns: Mapping[TokenType, PrefixParseFn] = MappingProxyType({
            TokenType.IDENT: self.parse_identifier,
            TokenType.INT: self.parse_integer_literal,
            TokenType.STRING: self.parse_string_literal,
            TokenType.TRUE: self.parse_boolean,
            TokenType.FALSE: self.parse_boolean,
            TokenType.BANG: self.parse_prefix_expression,
            TokenType.MINUS: self.parse_prefix_expression,
            TokenType.LPAREN: self.parse_grouped_expression,
            TokenType.IF: self.parse_if_expression,
            TokenType.FUNCTION: self.parse_function_literal,
        })
        self.infix_parse_fns: Mapping[TokenType, InfixParseFn] = MappingProxyType({
            TokenType.PLUS: self.parse_infix_expression,
            TokenType.MINUS: self.parse_infix_expression,
            TokenType.ASTERISK: self.parse_infix_expression,
            TokenType.SLASH: self.parse_infix_expression,
            TokenType.EQ: self.parse_infix_expression,
            TokenType.NOT_EQ: self.parse_infix_expression,
            TokenType.LT: self.parse_infix_expression,
            TokenType.GT: self.parse_infix_expression,
            TokenType.LPAREN: self.parse_call_expression,
        })

    # -- Diagnostics -------------------------------------------------------

    @property
    def errors(self) -> list[str]:
        """Diagnostics recorded so far, oldest first."""
        return [str(d) for d in self._diagnostics]

    @property
    def diagnostics(self) -> list[KiteError]:
        """Same as ``errors`` but with message and position kept apart."""
        return list(self._diagnostics)

    def _error(self, tok: Token, message: str) -> None:
        diagnostic = KiteError(message, tok.line, tok.column)
        logger.debug("parse error: %s", diagnostic)
        self._diagnostics.append(diagnostic)

    def peek_error(self, token_type: TokenType) -> None:
        self._error(
            self.peek_token,
            f"expected next token to be {token_type.name}; "
            f"got {self.peek_token.type.name} instead",
        )

    def no_prefix_parse_fn_error(self, token_type: TokenType) -> None:
        self._error(self.cur_token, f"no prefix parse function for {token_type.name} found")

    # -- Navigation helpers ------------------------------------------------

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.source.next_token()

    def cur_token_is(self, token_type: TokenType) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> bool:
        """Advance if the next token is *token_type*; otherwise record an error."""
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self.peek_error(token_type)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # -- Top-level ---------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF. Failed statements are skipped.

        If a ``max_depth`` above what the interpreter stack holds lets the
        recursion run out, parsing stops with a diagnostic and the
        statements read so far.
        """
        statements: list[Statement] = []
        while not self.cur_token_is(TokenType.EOF):
            try:
                stmt = self.parse_statement()
            except RecursionError:
                self._depth = 0
                self._error(self.cur_token, "expression nested too deeply for the interpreter stack")
                break
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return Program(statements=tuple(statements))

    # -- Statement parsing -------------------------------------------------

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token.type == TokenType.LET:
            return self.parse_let_statement()
        if self.cur_token.type == TokenType.RETURN:
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        """Parse ``let <ident> = <expression>[;]``."""
        tok = self.cur_token

        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(token=self.cur_token, name=self.cur_token.value)

        if not self.expect_peek(TokenType.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return LetStatement(token=tok, name=name, value=value)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        """Parse ``return <expression>[;]``."""
        tok = self.cur_token
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return ReturnStatement(token=tok, value=value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        tok = self.cur_token
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return ExpressionStatement(token=tok, value=value)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        """Parse statements after ``{`` up to the matching ``}``.

        Running into EOF first ends the block quietly unless
        ``strict_blocks`` is set.
        """
        tok = self.cur_token
        statements: list[Statement] = []
        self.next_token()

        while not self.cur_token_is(TokenType.RBRACE) and not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        if self.cur_token_is(TokenType.EOF) and self.strict_blocks:
            self._error(self.cur_token, "unterminated block: expected RBRACE before end of input")
            return None

        return BlockStatement(token=tok, statements=tuple(statements))

    # -- Expression parsing (precedence climbing) --------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        if self._depth >= self.max_depth:
            self._error(self.cur_token, f"expression nested too deeply (limit {self.max_depth})")
            return None

        self._depth += 1
        try:
            return self._parse_expression(precedence)
        finally:
            self._depth -= 1

    def _parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None

        return self._parse_infix_loop(prefix(), precedence)

    def _parse_infix_loop(self, left: Optional[Expression], precedence: Precedence) -> Optional[Expression]:
        while (
            left is not None
            and not self.peek_token_is(TokenType.SEMICOLON)
            and precedence < self.peek_precedence()
        ):
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)

        return left

    # -- Prefix routines ---------------------------------------------------

    def parse_identifier(self) -> Expression:
        return Identifier(token=self.cur_token, name=self.cur_token.value)

    def parse_integer_literal(self) -> Optional[Expression]:
        tok = self.cur_token
        try:
            value = int(tok.value, 10)
        except ValueError:
            value = None
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self._error(tok, f'could not parse "{tok.value}" as integer')
            return None
        return IntegerLiteral(token=tok, value=value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(token=self.cur_token, value=self.cur_token.value)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(token=self.cur_token, value=self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Optional[Expression]:
        tok = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(token=tok, operator=tok.value, right=right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        """Parse a run of ``(`` groups in one frame.

        ``((a + b) * c)`` parses the innermost group first; every enclosing
        group then resumes the infix loop from it and takes its ``)``.
        Redundant parentheses therefore cost no recursion and do not count
        towards ``max_depth``.
        """
        opened = 0
        while self.cur_token_is(TokenType.LPAREN):
            opened += 1
            self.next_token()

        expression = self._parse_expression(Precedence.LOWEST)
        for level in range(opened):
            if level:
                expression = self._parse_infix_loop(expression, Precedence.LOWEST)
            if expression is None:
                return None
            if not self.expect_peek(TokenType.RPAREN):
                return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        """Parse ``if (<cond>) { ... } [else { ... }]``."""
        tok = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None
        if not self.expect_peek(TokenType.LBRACE):
            return None

        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(
            token=tok,
            condition=condition,
            consequence=consequence,
            alternative=alternative,
        )

    def parse_function_literal(self) -> Optional[Expression]:
        """Parse ``fn(<params>) { ... }``."""
        tok = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(token=tok, parameters=parameters, body=body)

    def parse_function_parameters(self) -> Optional[tuple[Identifier, ...]]:
        identifiers: list[Identifier] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return ()

        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(token=self.cur_token, name=self.cur_token.value))

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(token=self.cur_token, name=self.cur_token.value))

        if not self.expect_peek(TokenType.RPAREN):
            return None

        return tuple(identifiers)

    # -- Infix routines ----------------------------------------------------

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        tok = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(token=tok, left=left, operator=tok.value, right=right)

    def parse_call_expression(self, callee: Expression) -> Optional[Expression]:
        tok = self.cur_token
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(token=tok, callee=callee, arguments=arguments)

    def parse_call_arguments(self) -> Optional[tuple[Expression, ...]]:
        args: list[Expression] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return ()

        self.next_token()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(TokenType.RPAREN):
            return None

        return tuple(args)


def parse(source: str, *, strict_blocks: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> Program:
    """Lex and parse *source*, raising ``ParseError`` if anything was reported."""
    parser = Parser(Lexer(source), strict_blocks=strict_blocks, max_depth=max_depth)
    program = parser.parse_program()
    if parser.errors:
        raise ParseError(parser.diagnostics)
    return program
