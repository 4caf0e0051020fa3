"""Kite CLI — kite run, kite check, kite parse, kite repl."""
import logging
import sys
import os

from kite.lexer import Lexer
from kite.parser import Parser
from kite.evaluator import Evaluator
from kite.repl import start_repl
from kite_runtime.config import get_config, parser_options
from kite_runtime.exceptions import KiteRuntimeError


def _setup_logging(config: dict) -> None:
    level = str(config["log"]["level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[kite] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    if len(sys.argv) < 2:
        print("Usage: kite <command> [file.kite]", file=sys.stderr)
        print("Commands: run, check, parse, repl", file=sys.stderr)
        sys.exit(1)

    command = sys.argv[1]

    try:
        config = get_config()
        options = parser_options(config)
    except KiteRuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _setup_logging(config)

    if command == "repl":
        start_repl(config)
        sys.exit(0)

    if command in ("run", "check", "parse"):
        if len(sys.argv) < 3:
            print(f"Usage: kite {command} <file.kite>", file=sys.stderr)
            sys.exit(1)
        filepath = sys.argv[2]
        if not os.path.exists(filepath):
            print(f"Error: file not found: {filepath}", file=sys.stderr)
            sys.exit(1)
        with open(filepath) as f:
            source = f.read()

        parser = Parser(Lexer(source), **options)
        program = parser.parse_program()
        if parser.errors:
            for msg in parser.errors:
                print(f"Error: {msg}", file=sys.stderr)
            sys.exit(1)

        if command == "check":
            print(f"OK: {filepath}")
            sys.exit(0)

        if command == "parse":
            print(program.canonical_form())
            sys.exit(0)

        try:
            result = Evaluator().evaluate(program)
        except KiteRuntimeError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(result.inspect())
        sys.exit(0)
    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
