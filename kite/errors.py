"""Kite error types with source location info."""


class KiteError(Exception):
    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, Col {column}: {message}")


class ParseError(KiteError):
    """Raised by ``kite.parser.parse`` when the parser recorded diagnostics.

    ``diagnostics`` holds every one in the order it was recorded and
    ``errors`` their formatted text; message and position are the first's.
    """

    def __init__(self, diagnostics: list[KiteError]):
        self.diagnostics = list(diagnostics)
        self.errors = [str(d) for d in self.diagnostics]
        if self.diagnostics:
            first = self.diagnostics[0]
            super().__init__(first.message, first.line, first.column)
        else:
            super().__init__("parse failed")
