from __future__ import annotations


class VCardError(Exception):
    """Base class for every error raised by vcard3."""


class EndOfInput(VCardError):
    """Raised by the lexer when a read is attempted past the end of the stream."""


class ParseError(VCardError, ValueError):
    """A grammar violation at a known position in the input.

    Parsing stops at the first one of these; there is no recovery mode.
    """

    def __init__(self, message: str, filename: str = "input", line: int = 0, column: int = 0) -> None:
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(f"{filename}({line}, {column}) Error: {message}")
