"""Kite runtime exception types.

Raised by the evaluator while running a parsed program; the CLI and
REPL report them as ``Error: <message>``.
"""


class KiteRuntimeError(Exception):
    """Base runtime error."""
    pass


class KiteTypeError(KiteRuntimeError):
    """Operator or call applied to values of the wrong type or arity."""
    pass


class KiteNameError(KiteRuntimeError):
    """Identifier not bound in any enclosing environment."""
    pass


class KiteZeroDivisionError(KiteRuntimeError):
    """Integer division by zero."""
    pass


class KiteConfigError(KiteRuntimeError):
    """Configuration error."""
    pass
