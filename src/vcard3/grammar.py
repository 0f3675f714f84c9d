"""Grammar primitives for RFC 2425 content lines.

Every reader works at the current lexer position. Lookahead is done with the
lexer bookmark, so a reader either consumes what it recognises or leaves the
position untouched.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import BinaryIO, NoReturn

from .errors import ParseError
from .lexer import DEFAULT_BUFFER_SIZE, Lexer

# ── Character classes ──────────────────────────────────────────────────────────
#
# Sets hold one-character strings as returned by Lexer.peek/read. Bytes above
# 0x7F show up as "\x80".."\xff" and are always allowed in values.


def _chars(*ranges: tuple[int, int]) -> frozenset[str]:
    return frozenset(chr(c) for lo, hi in ranges for c in range(lo, hi + 1))


WSP = frozenset(" \t")
ALPHA_NUM = _chars((0x30, 0x39), (0x41, 0x5A), (0x61, 0x7A))
NAME_CHARS = ALPHA_NUM | {"-"}
NON_ASCII = _chars((0x80, 0xFF))
SAFE_CHARS = WSP | _chars((0x21, 0x21), (0x23, 0x2B), (0x2D, 0x39), (0x3C, 0x7E)) | NON_ASCII
QSAFE_CHARS = WSP | _chars((0x21, 0x21), (0x23, 0x7E)) | NON_ASCII
VALUE_CHARS = WSP | _chars((0x21, 0x7E)) | NON_ASCII
TEXT_CHARS = SAFE_CHARS | {'"', ":", "\\"}

_ESCAPES = {"\\": b"\\", ";": b";", ",": b",", "n": b"\n", "N": b"\n"}


@dataclass
class Param:
    """One ``;NAME=value,value`` group read from a content line."""

    name: str
    values: list[str] = field(default_factory=list)


class Parser:
    def __init__(
        self,
        source: BinaryIO,
        filename: str = "input",
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        self.filename = filename
        self.lexer = Lexer(source, buffer_size)

    def error(self, message: str) -> NoReturn:
        raise ParseError(
            message,
            filename=self.filename,
            line=self.lexer.line_number,
            column=self.lexer.column,
        )

    # ── Single characters ──────────────────────────────────────────────────────

    def at_end(self) -> bool:
        return self.lexer.at_end()

    def peek(self) -> str | None:
        """Next byte as a character, or ``None`` at the end of input."""
        if self.lexer.at_end():
            return None
        return self.lexer.peek()

    def read(self) -> str:
        if self.lexer.at_end():
            self.error("unexpected end of input")
        return self.lexer.read()

    def _peek_in(self, chars: frozenset[str]) -> bool:
        ch = self.peek()
        return ch is not None and ch in chars

    # ── Literals ───────────────────────────────────────────────────────────────

    def _match(self, expected: str, case_sensitive: bool) -> bool:
        for want in expected:
            if self.lexer.at_end():
                return False
            got = self.lexer.read_rune()
            if case_sensitive and got != want:
                return False
            if not case_sensitive and got.lower() != want.lower():
                return False
        return True

    def skip(self, expected: str, case_sensitive: bool = False) -> bool:
        """Consume ``expected`` if it is next; otherwise consume nothing."""
        self.lexer.set_bookmark()
        if self._match(expected, case_sensitive):
            self.lexer.unset_bookmark()
            return True
        self.lexer.return_to_bookmark()
        return False

    def expect(self, expected: str, case_sensitive: bool = False) -> None:
        """Like ``skip`` but a mismatch is a ``ParseError``."""
        self.lexer.set_bookmark()
        if self._match(expected, case_sensitive):
            self.lexer.unset_bookmark()
            return
        found = self.lexer.read_since_bookmark() or "end of input"
        self.lexer.return_to_bookmark()
        self.error(f"expected {expected!r} but found {found!r}")

    # ── Names and groups ───────────────────────────────────────────────────────

    def read_group(self) -> str | None:
        """Read an optional ``group.`` prefix.

        On success the position is left just after the dot. Without a group
        nothing is consumed.
        """
        self.lexer.set_bookmark()
        while self._peek_in(NAME_CHARS):
            self.lexer.read()
        if self.peek() == "." and self.lexer.read_since_bookmark():
            self.lexer.read()
            group = self.lexer.read_since_bookmark()[:-1]
            self.lexer.unset_bookmark()
            return group
        self.lexer.return_to_bookmark()
        return None

    def read_name(self) -> str:
        """Read a content type or parameter name, upper-cased."""
        self.lexer.set_bookmark()
        while self._peek_in(NAME_CHARS):
            self.lexer.read()
        name = self.lexer.read_since_bookmark().upper()
        self.lexer.unset_bookmark()
        if not name:
            self.error(f"expected to read a name but found {self.peek() or 'end of input'!r}")
        return name

    # ── Parameters ─────────────────────────────────────────────────────────────

    def read_param_value(self) -> str:
        if self.peek() == '"':
            self.lexer.read()
            self.lexer.set_bookmark()
            while self._peek_in(QSAFE_CHARS):
                self.lexer.read()
            value = self.lexer.read_since_bookmark()
            self.lexer.unset_bookmark()
            if self.peek() != '"':
                self.error('quoted parameter value expected to end with a double quote (")')
            self.lexer.read()
        else:
            self.lexer.set_bookmark()
            while self._peek_in(SAFE_CHARS):
                self.lexer.read()
            value = self.lexer.read_since_bookmark()
            self.lexer.unset_bookmark()

        if not value:
            self.error("expected to read a parameter value")
        return value

    def read_params(self) -> list[Param]:
        """Read every ``;NAME=value`` group up to the ``:`` of the content line.

        Repeated names are kept as separate entries; see ``get_multiple_values``.
        """
        params: list[Param] = []
        while self.peek() == ";":
            self.lexer.read()
            param = Param(name=self.read_name())
            self.expect("=", case_sensitive=True)
            param.values.append(self.read_param_value())
            while self.peek() == ",":
                self.lexer.read()
                param.values.append(self.read_param_value())
            params.append(param)
        return params

    # ── Values ─────────────────────────────────────────────────────────────────

    def read_value(self) -> str:
        """Read the raw remainder of the content line, without the CRLF."""
        self.lexer.set_bookmark()
        while self._peek_in(VALUE_CHARS):
            self.lexer.read()
        value = self.lexer.read_since_bookmark()
        self.lexer.unset_bookmark()
        return value

    def read_text_value(self, ignore_prefix: Iterable[str] = ()) -> str:
        """Read one text-value, decoding backslash escapes.

        Characters in ``ignore_prefix`` are skipped first, which is how list
        readers step over the separator before the next item.
        """
        skip = frozenset(ignore_prefix)
        while self._peek_in(skip):
            self.lexer.read()

        out = bytearray()
        while self._peek_in(TEXT_CHARS):
            ch = self.lexer.read()
            if ch != "\\":
                out.append(ord(ch))
                continue
            nxt = self.peek()
            if nxt not in _ESCAPES:
                self.error(f"invalid character escape: '\\{nxt or ''}'")
            self.lexer.read()
            out.extend(_ESCAPES[nxt])
        return out.decode("utf-8", errors="replace")

    def read_text_value_list(
        self,
        separators: Iterable[str] = ",",
        only_if_prefix: str | None = None,
    ) -> list[str]:
        """Read ``separators``-delimited text-values.

        With ``only_if_prefix`` nothing is read (and ``[]`` returned) unless
        that character comes next; it is consumed otherwise.
        """
        seps = frozenset(separators)
        if only_if_prefix is not None:
            if self.peek() != only_if_prefix:
                return []
            self.lexer.read()

        values = [self.read_text_value()]
        while self._peek_in(seps):
            values.append(self.read_text_value(ignore_prefix=seps))
        return values

    # ── Parameter validation ───────────────────────────────────────────────────

    def validate_no_parameters(self, params: list[Param], name: str) -> None:
        if params:
            self.error(f"no parameters allowed on the {name} content type")

    def validate_required_parameters(
        self,
        params: list[Param],
        expectations: Iterable[tuple[str, str]],
    ) -> None:
        """Parameters that are present must carry exactly the expected value."""
        for name, value in expectations:
            found = get_single_value(params, name)
            if found is not None and found != value:
                self.error(f"parameter '{name}' must have the value '{value}'")


# ── Parameter lookups ──────────────────────────────────────────────────────────

def exists_with_value(params: list[Param], name: str, value: str, case_sensitive: bool = False) -> bool:
    for p in params:
        if p.name != name or len(p.values) != 1:
            continue
        if case_sensitive and p.values[0] == value:
            return True
        if not case_sensitive and p.values[0].lower() == value.lower():
            return True
    return False


def get_multiple_values(params: list[Param], name: str) -> list[str]:
    """Merge ``TYPE=a,b`` and ``TYPE=a;TYPE=b`` into one list, in order."""
    return [v for p in params if p.name == name for v in p.values]


def get_single_value(params: list[Param], name: str) -> str | None:
    for p in params:
        if p.name == name and p.values:
            return p.values[0]
    return None


def is_x_name(name: str) -> bool:
    return name.upper().startswith("X-")


def get_x_params(params: list[Param]) -> list[tuple[str, str]]:
    return [(p.name, ",".join(p.values)) for p in params if is_x_name(p.name)]
