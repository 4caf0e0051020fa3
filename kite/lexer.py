"""Kite lexer — scans source text into tokens, one at a time."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Protocol


# ---------------------------------------------------------------------------
# Token types
# ---------------------------------------------------------------------------

class TokenType(Enum):
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literals
    IDENT = auto()
    INT = auto()
    STRING = auto()

    # Operators
    ASSIGN = auto()        # =
    PLUS = auto()          # +
    MINUS = auto()         # -
    BANG = auto()          # !
    ASTERISK = auto()      # *
    SLASH = auto()         # /
    LT = auto()            # <
    GT = auto()            # >
    EQ = auto()            # ==
    NOT_EQ = auto()        # !=

    # Delimiters
    COMMA = auto()         # ,
    SEMICOLON = auto()     # ;
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACE = auto()        # {
    RBRACE = auto()        # }

    # Keywords
    FUNCTION = auto()
    LET = auto()
    TRUE = auto()
    FALSE = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()


# ---------------------------------------------------------------------------
# Keyword and punctuation lookup
# ---------------------------------------------------------------------------

KEYWORDS: dict[str, TokenType] = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
}

# Two-character operators are checked before these.
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "!": TokenType.BANG,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}

DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NOT_EQ,
}


# ---------------------------------------------------------------------------
# Token dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int = 1
    column: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.column})"


class TokenSource(Protocol):
    """Anything the parser can pull tokens from."""

    def next_token(self) -> Token:
        ...


class TokenList:
    """Serve a prepared sequence of tokens through ``next_token()``.

    Once the sequence is exhausted an EOF token is returned forever, so a
    list without a trailing EOF still terminates a parse.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens = list(tokens)
        self.pos: int = 0

    def next_token(self) -> Token:
        if self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            self.pos += 1
            return tok
        last = self.tokens[-1] if self.tokens else Token(TokenType.EOF, "")
        return Token(TokenType.EOF, "", last.line, last.column)


# ---------------------------------------------------------------------------
# Lexer
# ---------------------------------------------------------------------------

class Lexer:
    """Scans Kite source text and hands out tokens on demand.

    The lexer never raises: characters it does not understand come back
    as ``ILLEGAL`` tokens and are reported by the parser.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1

    # -- Character-level helpers -------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at EOF."""
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ""

    def peek(self) -> str:
        """Look ahead one character without consuming it."""
        next_pos = self.pos + 1
        if next_pos < len(self.source):
            return self.source[next_pos]
        return ""

    def advance(self) -> str:
        """Consume and return the current character, advancing position."""
        ch = self._current()
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _skip_whitespace_and_comments(self) -> None:
        while self.pos < len(self.source):
            ch = self._current()
            if ch in (" ", "\t", "\r", "\n"):
                self.advance()
            elif ch == "/" and self.peek() == "/":
                while self.pos < len(self.source) and self._current() != "\n":
                    self.advance()
            else:
                break

    # -- Main entry points -------------------------------------------------

    def next_token(self) -> Token:
        """Scan and return the next token; EOF is returned repeatedly at the end."""
        self._skip_whitespace_and_comments()

        line, col = self.line, self.col
        ch = self._current()

        if ch == "":
            return Token(TokenType.EOF, "", line, col)

        if ch == '"':
            return self._read_string()

        if ch.isdigit():
            return self._read_number()

        if ch.isalpha() or ch == "_":
            return self._read_identifier()

        pair = ch + self.peek()
        if pair in DOUBLE_CHAR_TOKENS:
            self.advance()
            self.advance()
            return Token(DOUBLE_CHAR_TOKENS[pair], pair, line, col)

        self.advance()
        token_type = SINGLE_CHAR_TOKENS.get(ch, TokenType.ILLEGAL)
        return Token(token_type, ch, line, col)

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return a list of tokens ending with EOF."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TokenType.EOF:
                return tokens

    # -- Token readers -----------------------------------------------------

    def _read_string(self) -> Token:
        """Read a double-quoted string. An unterminated string is ILLEGAL."""
        start_line = self.line
        start_col = self.col
        self.advance()  # consume opening "

        value_chars: list[str] = []
        while self.pos < len(self.source):
            ch = self.advance()
            if ch == '"':
                return Token(TokenType.STRING, "".join(value_chars), start_line, start_col)
            value_chars.append(ch)

        return Token(TokenType.ILLEGAL, '"' + "".join(value_chars), start_line, start_col)

    def _read_number(self) -> Token:
        """Read an integer literal: [0-9]+"""
        start_line = self.line
        start_col = self.col
        chars: list[str] = []

        while self.pos < len(self.source) and self._current().isdigit():
            chars.append(self.advance())

        return Token(TokenType.INT, "".join(chars), start_line, start_col)

    def _read_identifier(self) -> Token:
        """Read an identifier or keyword: [a-zA-Z_][a-zA-Z0-9_]*"""
        start_line = self.line
        start_col = self.col
        chars: list[str] = []

        while self.pos < len(self.source) and (self._current().isalnum() or self._current() == "_"):
            chars.append(self.advance())

        word = "".join(chars)
        token_type = KEYWORDS.get(word, TokenType.IDENT)
        return Token(token_type, word, start_line, start_col)
