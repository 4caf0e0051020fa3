"""Kite AST node definitions.

Every node is a frozen dataclass holding the token that introduced it.
The token is left out of equality so two trees built from differently
formatted source compare equal when their structure matches.

``canonical_form()`` rebuilds fully parenthesized source text from a
node. The output reflects how precedence was actually resolved and
parses back into an equal tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from kite.lexer import Token


# ── Base ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Node:
    """Base class for every AST node."""
    token: Token | None = field(default=None, compare=False, repr=False)

    def origin_text(self) -> str:
        """Literal text of the token that introduced this node."""
        return self.token.value if self.token is not None else ""

    def canonical_form(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.canonical_form()


@dataclass(frozen=True)
class Statement(Node):
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


def _join_statements(statements: tuple[Statement, ...]) -> str:
    # An expression statement needs a ';' when another statement follows,
    # otherwise `a (b)` would re-parse as a call.
    parts: list[str] = []
    last = len(statements) - 1
    for i, stmt in enumerate(statements):
        text = stmt.canonical_form()
        if isinstance(stmt, ExpressionStatement) and i < last:
            text += ";"
        parts.append(text)
    return " ".join(parts)


# ── Program ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Program(Node):
    statements: tuple[Statement, ...] = ()

    def origin_text(self) -> str:
        if self.statements:
            return self.statements[0].origin_text()
        return ""

    def canonical_form(self) -> str:
        return _join_statements(self.statements)


# ── Expressions ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Identifier(Expression):
    name: str = ""

    def canonical_form(self) -> str:
        return self.name


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int = 0

    def canonical_form(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str = ""

    def canonical_form(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool = False

    def canonical_form(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str = ""
    right: Expression | None = None

    def canonical_form(self) -> str:
        return f"({self.operator}{self.right.canonical_form()})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Expression | None = None
    operator: str = ""
    right: Expression | None = None

    def canonical_form(self) -> str:
        return _render_left_spine(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return _left_spine_equal(self, other)


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression | None = None
    consequence: BlockStatement | None = None
    alternative: BlockStatement | None = None

    def canonical_form(self) -> str:
        text = f"if ({self.condition.canonical_form()}) {self.consequence.canonical_form()}"
        if self.alternative is not None:
            text += f" else {self.alternative.canonical_form()}"
        return text


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: tuple[Identifier, ...] = ()
    body: BlockStatement | None = None

    def canonical_form(self) -> str:
        params = ", ".join(p.canonical_form() for p in self.parameters)
        return f"fn({params}) {self.body.canonical_form()}"


@dataclass(frozen=True)
class CallExpression(Expression):
    callee: Expression | None = None
    arguments: tuple[Expression, ...] = ()

    def canonical_form(self) -> str:
        return _render_left_spine(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return _left_spine_equal(self, other)


# The parser builds chains like `a + b + c` and `f()()` in a loop, so
# their left spines can be arbitrarily long. Walk them without recursion.

def _left_spine(node: Expression) -> tuple[Expression, list[Expression]]:
    """Split *node* into the leftmost operand and its links, outermost first."""
    links: list[Expression] = []
    while isinstance(node, (InfixExpression, CallExpression)):
        links.append(node)
        node = node.left if isinstance(node, InfixExpression) else node.callee
    return node, links


def _render_left_spine(node: Expression) -> str:
    base, links = _left_spine(node)
    # Every infix group opens before the leftmost operand.
    parts = ["(" * sum(isinstance(link, InfixExpression) for link in links), base.canonical_form()]
    for link in reversed(links):
        if isinstance(link, InfixExpression):
            parts.append(f" {link.operator} {link.right.canonical_form()})")
        else:
            args = ", ".join(a.canonical_form() for a in link.arguments)
            parts.append(f"({args})")
    return "".join(parts)


def _left_spine_equal(a: Expression, b: Expression) -> bool:
    while isinstance(a, (InfixExpression, CallExpression)):
        if type(a) is not type(b):
            return False
        if isinstance(a, InfixExpression):
            if a.operator != b.operator or a.right != b.right:
                return False
            a, b = a.left, b.left
        else:
            if a.arguments != b.arguments:
                return False
            a, b = a.callee, b.callee
    return a == b


# ── Statements ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LetStatement(Statement):
    name: Identifier | None = None
    value: Expression | None = None

    def canonical_form(self) -> str:
        return f"let {self.name.canonical_form()} = {self.value.canonical_form()};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Expression | None = None

    def canonical_form(self) -> str:
        return f"return {self.value.canonical_form()};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    value: Expression | None = None

    def canonical_form(self) -> str:
        return self.value.canonical_form()


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: tuple[Statement, ...] = ()

    def canonical_form(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + _join_statements(self.statements) + " }"


# Closed variant sets, used to annotate the evaluator's dispatch.
StatementNode = Union[LetStatement, ReturnStatement, ExpressionStatement, BlockStatement]
ExpressionNode = Union[
    Identifier,
    IntegerLiteral,
    StringLiteral,
    BooleanLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
]
