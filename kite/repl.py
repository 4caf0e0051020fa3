"""Kite REPL — read a line, parse it, evaluate it, print the result.

Each line gets its own lexer and parser; the environment is shared so
``let`` bindings carry over between lines.
"""

from __future__ import annotations

import logging

from kite.lexer import Lexer
from kite.parser import Parser
from kite.evaluator import Evaluator
from kite_runtime.config import get_config, parser_options
from kite_runtime.exceptions import KiteRuntimeError
from kite_runtime.objects import Environment

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")


def eval_line(line: str, env: Environment, options: dict | None = None) -> str:
    """Parse and evaluate one line of input, returning the text to print."""
    parser = Parser(Lexer(line), **(options or {}))
    program = parser.parse_program()
    if parser.errors:
        return "\n".join(f"Error: {msg}" for msg in parser.errors)
    try:
        result = Evaluator().evaluate(program, env)
    except KiteRuntimeError as e:
        return f"Error: {e}"
    return result.inspect()


def start_repl(config: dict | None = None) -> None:
    """Run the interactive loop until ``exit``, ``quit`` or end of input."""
    if config is None:
        config = get_config()
    prompt = config["repl"]["prompt"]
    options = parser_options(config)
    env = Environment()

    print("Kite REPL. Type 'exit' to leave.")
    while True:
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if line.strip() in EXIT_COMMANDS:
            break
        if not line.strip():
            continue

        logger.debug("repl input: %r", line)
        print(eval_line(line, env, options))

    print("Bye.")
