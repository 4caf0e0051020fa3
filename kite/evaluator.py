"""Kite evaluator — walks the AST and computes runtime values."""

from __future__ import annotations

import logging

from kite.ast_nodes import (
    Program,
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
    StatementNode,
    ExpressionNode,
)
from kite_runtime.objects import (
    KiteObject,
    Integer,
    String,
    ReturnValue,
    Function,
    Environment,
    TRUE,
    FALSE,
    NULL,
    native_bool,
)
from kite_runtime.exceptions import (
    KiteRuntimeError,
    KiteTypeError,
    KiteNameError,
    KiteZeroDivisionError,
)

logger = logging.getLogger(__name__)

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


def _wrap_int64(value: int) -> int:
    """Wrap *value* into the signed 64-bit range, two's complement style."""
    value &= _INT64_MASK
    return value - (1 << 64) if value & _INT64_SIGN else value


def is_truthy(obj: KiteObject) -> bool:
    """``false`` and ``null`` are falsy; every other value is truthy."""
    return obj is not FALSE and obj is not NULL


class Evaluator:
    """Tree-walking interpreter for a parsed Kite ``Program``."""

    def evaluate(self, program: Program, env: Environment | None = None) -> KiteObject:
        """Run *program* and return the value of its last statement.

        Raises ``KiteRuntimeError`` (or a subclass) when evaluation fails.
        """
        if env is None:
            env = Environment()
        try:
            return self._eval_program(program, env)
        except RecursionError as e:
            logger.debug("evaluation exceeded the interpreter stack")
            raise KiteRuntimeError("maximum recursion depth exceeded") from e
        except KiteRuntimeError as e:
            logger.debug("runtime error: %s", e)
            raise

    # -- Statements --------------------------------------------------------

    def _eval_program(self, program: Program, env: Environment) -> KiteObject:
        result: KiteObject = NULL
        for stmt in program.statements:
            result = self._eval_statement(stmt, env)
            if isinstance(result, ReturnValue):
                return result.value
        return result

    def _eval_block(self, block: BlockStatement, env: Environment) -> KiteObject:
        # A ReturnValue is passed up unchanged so enclosing blocks stop too.
        result: KiteObject = NULL
        for stmt in block.statements:
            result = self._eval_statement(stmt, env)
            if isinstance(result, ReturnValue):
                return result
        return result

    def _eval_statement(self, node: StatementNode, env: Environment) -> KiteObject:
        if isinstance(node, ExpressionStatement):
            return self._eval_expr(node.value, env)
        if isinstance(node, LetStatement):
            value = self._eval_expr(node.value, env)
            env.set(node.name.name, value)
            return NULL
        if isinstance(node, ReturnStatement):
            return ReturnValue(self._eval_expr(node.value, env))
        if isinstance(node, BlockStatement):
            return self._eval_block(node, env)

        raise KiteRuntimeError(f"unsupported statement: {type(node).__name__}")

    # -- Expressions -------------------------------------------------------

    def _eval_expr(self, node: ExpressionNode, env: Environment) -> KiteObject:
        if isinstance(node, IntegerLiteral):
            return Integer(node.value)
        if isinstance(node, StringLiteral):
            return String(node.value)
        if isinstance(node, BooleanLiteral):
            return native_bool(node.value)
        if isinstance(node, Identifier):
            return self._eval_identifier(node, env)
        if isinstance(node, PrefixExpression):
            right = self._eval_expr(node.right, env)
            return self._eval_prefix(node.operator, right)
        if isinstance(node, (InfixExpression, CallExpression)):
            return self._eval_left_spine(node, env)
        if isinstance(node, IfExpression):
            return self._eval_if(node, env)
        if isinstance(node, FunctionLiteral):
            return Function(parameters=node.parameters, body=node.body, env=env)

        raise KiteRuntimeError(f"unsupported expression: {type(node).__name__}")

    def _eval_identifier(self, node: Identifier, env: Environment) -> KiteObject:
        value = env.get(node.name)
        if value is None:
            raise KiteNameError(f"identifier not found: {node.name}")
        return value

    def _eval_left_spine(self, node: ExpressionNode, env: Environment) -> KiteObject:
        # `a + b + c` and `f()()` nest to the left with no depth limit;
        # evaluate the spine innermost first instead of recursing down it.
        links = []
        while isinstance(node, (InfixExpression, CallExpression)):
            links.append(node)
            node = node.left if isinstance(node, InfixExpression) else node.callee

        result = self._eval_expr(node, env)
        for link in reversed(links):
            if isinstance(link, InfixExpression):
                right = self._eval_expr(link.right, env)
                result = self._eval_infix(link.operator, result, right)
            else:
                args = [self._eval_expr(arg, env) for arg in link.arguments]
                result = self._apply_function(result, args)
        return result

    def _eval_prefix(self, operator: str, right: KiteObject) -> KiteObject:
        if operator == "!":
            return native_bool(not is_truthy(right))
        if operator == "-":
            if not isinstance(right, Integer):
                raise KiteTypeError(f"unknown operator: -{right.type_name}")
            return Integer(_wrap_int64(-right.value))
        raise KiteTypeError(f"unknown operator: {operator}{right.type_name}")

    def _eval_infix(self, operator: str, left: KiteObject, right: KiteObject) -> KiteObject:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix(operator, left.value, right.value)
        if isinstance(left, String) and isinstance(right, String):
            return self._eval_string_infix(operator, left.value, right.value)
        if left.type_name != right.type_name:
            raise KiteTypeError(f"type mismatch: {left.type_name} {operator} {right.type_name}")
        # Booleans and null are singletons, so identity is equality.
        if operator == "==":
            return native_bool(left is right)
        if operator == "!=":
            return native_bool(left is not right)
        raise KiteTypeError(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def _eval_integer_infix(self, operator: str, left: int, right: int) -> KiteObject:
        if operator == "+":
            return Integer(_wrap_int64(left + right))
        if operator == "-":
            return Integer(_wrap_int64(left - right))
        if operator == "*":
            return Integer(_wrap_int64(left * right))
        if operator == "/":
            if right == 0:
                raise KiteZeroDivisionError("division by zero")
            quotient = abs(left) // abs(right)
            if (left < 0) != (right < 0):
                quotient = -quotient
            return Integer(_wrap_int64(quotient))
        if operator == "<":
            return native_bool(left < right)
        if operator == ">":
            return native_bool(left > right)
        if operator == "==":
            return native_bool(left == right)
        if operator == "!=":
            return native_bool(left != right)
        raise KiteTypeError(f"unknown operator: INTEGER {operator} INTEGER")

    def _eval_string_infix(self, operator: str, left: str, right: str) -> KiteObject:
        if operator == "+":
            return String(left + right)
        if operator == "==":
            return native_bool(left == right)
        if operator == "!=":
            return native_bool(left != right)
        raise KiteTypeError(f"unknown operator: STRING {operator} STRING")

    def _eval_if(self, node: IfExpression, env: Environment) -> KiteObject:
        condition = self._eval_expr(node.condition, env)
        if is_truthy(condition):
            return self._eval_block(node.consequence, env)
        if node.alternative is not None:
            return self._eval_block(node.alternative, env)
        return NULL

    def _apply_function(self, function: KiteObject, args: list[KiteObject]) -> KiteObject:
        if not isinstance(function, Function):
            raise KiteTypeError(f"not a function: {function.type_name}")
        if len(args) != len(function.parameters):
            raise KiteTypeError(
                f"wrong number of arguments: want={len(function.parameters)}, got={len(args)}"
            )

        call_env = function.env.enclosed()
        for param, arg in zip(function.parameters, args):
            call_env.set(param.name, arg)

        result = self._eval_block(function.body, call_env)
        if isinstance(result, ReturnValue):
            return result.value
        return result


def evaluate(program: Program, env: Environment | None = None) -> KiteObject:
    """Evaluate *program* in *env* (a fresh environment when omitted)."""
    return Evaluator().evaluate(program, env)
