"""Kite MCP Server — exposes Kite parser and evaluator tools via MCP protocol."""

from mcp.server.fastmcp import FastMCP

from kite.parser import parse
from kite.evaluator import evaluate
from kite.ast_nodes import Program
from kite.errors import ParseError
from kite_runtime.config import get_config, parser_options
from kite_runtime.exceptions import KiteConfigError, KiteRuntimeError

mcp = FastMCP("kite")


def _read_source(filepath: str) -> tuple[str | None, str | None]:
    """Return (source, None) or (None, error message)."""
    try:
        with open(filepath) as f:
            return f.read(), None
    except FileNotFoundError:
        return None, f"Error: file not found: {filepath}"
    except OSError as e:
        return None, f"Error reading file: {e}"


def _parse_source(source: str) -> tuple[Program | None, str | None]:
    """Return (program, None) or (None, error message)."""
    try:
        return parse(source, **parser_options(get_config())), None
    except KiteConfigError as e:
        return None, f"Error: {e}"
    except ParseError as e:
        return None, "\n".join(f"Error: {msg}" for msg in e.errors)


@mcp.tool()
def kite_check(filepath: str) -> str:
    """Check Kite syntax without running. Reports every parse error found.

    Args:
        filepath: Path to the .kite file to check
    """
    return check_kite_file(filepath)


def check_kite_file(filepath: str) -> str:
    """Core logic for checking a kite file — testable without MCP."""
    source, error = _read_source(filepath)
    if error:
        return error

    _, error = _parse_source(source)
    if error:
        return error
    return f"OK: {filepath}"


@mcp.tool()
def kite_parse(filepath: str) -> str:
    """Parse a Kite file and return its fully parenthesized canonical form.

    Args:
        filepath: Path to the .kite file to parse
    """
    return parse_kite_file(filepath)


def parse_kite_file(filepath: str) -> str:
    """Core logic for parsing a kite file — testable without MCP."""
    source, error = _read_source(filepath)
    if error:
        return error

    program, error = _parse_source(source)
    if error:
        return error
    return program.canonical_form()


@mcp.tool()
def kite_run(filepath: str) -> str:
    """Run a Kite program and return the value of its last statement.

    Args:
        filepath: Path to the .kite file to run
    """
    return run_kite_file(filepath)


def run_kite_file(filepath: str) -> str:
    """Core logic for running a kite file — testable without MCP."""
    source, error = _read_source(filepath)
    if error:
        return error

    program, error = _parse_source(source)
    if error:
        return error

    try:
        result = evaluate(program)
    except KiteRuntimeError as e:
        return f"Error during execution: {type(e).__name__}: {e}"
    return result.inspect()


KITE_LANGUAGE_GUIDE = """\
# Writing Kite Programs

Kite is a small expression-oriented language with C-like syntax.
Every construct is an expression except `let` and `return`.

## Bindings
```
let price = 450;
let name = "Austin";
```

## Operators (loosest to tightest)
```
== !=        equality
< >          comparison
+ -          addition, string concatenation
* /          multiplication, integer division
-x !x        prefix
f(x)         call
```

## Conditionals
```
if (price > 400) { "expensive" } else { "cheap" }
```

## Functions
```
let add = fn(a, b) { a + b };
add(1, 2);
let fib = fn(n) { if (n < 2) { return n; } fib(n - 1) + fib(n - 2) };
```

## Comments
```
// runs to the end of the line
```

Semicolons are optional after the last statement on a line.
A program's result is the value of its last statement.
"""


@mcp.tool()
def kite_guide() -> str:
    """Complete guide to writing Kite programs. Use this when writing .kite files."""
    return KITE_LANGUAGE_GUIDE


if __name__ == "__main__":
    mcp.run(transport="stdio")
