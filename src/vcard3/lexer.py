"""Buffered, rewindable reader over a binary stream.

The lexer keeps a circular byte buffer in front of the underlying stream and
hands out one byte (``read``/``peek``) or one UTF-8 code point
(``read_rune``/``peek_rune``) at a time. A single bookmark lets callers look
ahead and rewind. Folded lines (CR LF SPACE) are skipped before any unit is
returned, so nothing above this layer ever sees them.
"""
from __future__ import annotations

import logging
from typing import BinaryIO

from .errors import EndOfInput

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 16384

_UTF8_BOM = b"\xef\xbb\xbf"
_CR, _LF, _SP = 0x0D, 0x0A, 0x20


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC0 <= lead < 0xE0:
        return 2
    if 0xE0 <= lead < 0xF0:
        return 3
    if 0xF0 <= lead < 0xF8:
        return 4
    return 1


class Lexer:
    """Character reader with a single-slot bookmark.

    Bytes are returned as one-character strings (``chr(byte)``), so ASCII
    compares naturally and bytes above 0x7F map to ``\\x80``-``\\xff``. Text
    collected through ``read_since_bookmark`` is decoded as UTF-8.
    """

    def __init__(self, source: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        if buffer_size < 2:
            raise ValueError("buffer_size must be at least 2")
        self._source = source
        self._buffer = bytearray(buffer_size)
        self._pos = 0
        self._end = 0
        self._eof = False
        self._bookmark: tuple[int, int, int] | None = None
        self._since_bookmark = bytearray()
        self.line_number = 1
        self._column = 0

        self._fill(len(_UTF8_BOM))
        if self._available() >= 3 and bytes(self._byte_at(i) for i in range(3)) == _UTF8_BOM:
            self._advance(3)

    # ── Buffer management ──────────────────────────────────────────────────────

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    def _retained(self) -> int:
        return self._bookmark[0] if self._bookmark is not None else self._pos

    def _available(self) -> int:
        return (self._end - self._pos) % len(self._buffer)

    def _is_full(self) -> bool:
        return (self._end + 1) % len(self._buffer) == self._retained()

    def _byte_at(self, offset: int) -> int:
        return self._buffer[(self._pos + offset) % len(self._buffer)]

    def _advance(self, count: int) -> None:
        self._pos = (self._pos + count) % len(self._buffer)

    def _grow(self) -> None:
        old_size = len(self._buffer)
        start = self._retained()
        if start <= self._end:
            live = self._buffer[start:self._end]
        else:
            live = self._buffer[start:] + self._buffer[:self._end]

        logger.debug("growing lexer buffer from %d to %d bytes", old_size, old_size * 2)
        buffer = bytearray(old_size * 2)
        buffer[:len(live)] = live

        self._pos = (self._pos - start) % old_size
        if self._bookmark is not None:
            _, line, column = self._bookmark
            self._bookmark = (0, line, column)
        self._end = len(live)
        self._buffer = buffer

    def _fill(self, need: int) -> None:
        """Read from the source until ``need`` bytes are buffered or input ends."""
        while self._available() < need and not self._eof:
            if self._is_full():
                self._grow()

            size = len(self._buffer)
            start = self._retained()
            if self._end >= start:
                limit = size if start > 0 else size - 1
            else:
                limit = start - 1

            chunk = self._source.read(limit - self._end)
            if not chunk:
                self._eof = True
                break
            self._buffer[self._end:self._end + len(chunk)] = chunk
            self._end = (self._end + len(chunk)) % size

    def _skip_folds(self) -> None:
        while True:
            self._fill(1)
            if not self._available() or self._byte_at(0) != _CR:
                return
            self._fill(3)
            if self._available() < 3 or self._byte_at(1) != _LF or self._byte_at(2) != _SP:
                return
            self._advance(3)
            self.line_number += 1
            self._column = 0

    # ── Reading ────────────────────────────────────────────────────────────────

    def at_end(self) -> bool:
        self._skip_folds()
        return self._available() == 0

    def _check_not_at_end(self) -> None:
        if self.at_end():
            raise EndOfInput(f"read past end of input at line {self.line_number}")

    def peek(self) -> str:
        self._check_not_at_end()
        return chr(self._buffer[self._pos])

    def read(self) -> str:
        self._check_not_at_end()
        byte = self._buffer[self._pos]
        self._advance(1)
        self._track(byte)
        if self._bookmark is not None:
            self._since_bookmark.append(byte)
        return chr(byte)

    def _rune_bytes(self) -> bytes:
        self._check_not_at_end()
        length = _utf8_length(self._buffer[self._pos])
        if length > 1:
            self._fill(length)
        length = min(length, self._available())
        return bytes(self._byte_at(i) for i in range(length))

    def peek_rune(self) -> str:
        return self._rune_bytes().decode("utf-8", errors="replace")

    def read_rune(self) -> str:
        raw = self._rune_bytes()
        self._advance(len(raw))
        self._track(raw[0])
        if self._bookmark is not None:
            self._since_bookmark.extend(raw)
        return raw.decode("utf-8", errors="replace")

    def _track(self, byte: int) -> None:
        if byte == _LF:
            self.line_number += 1
            self._column = 0
        else:
            self._column += 1

    @property
    def column(self) -> int:
        """1-based column of the next unread unit on the current line."""
        return self._column + 1

    # ── Bookmarks ──────────────────────────────────────────────────────────────

    def set_bookmark(self) -> None:
        self._bookmark = (self._pos, self.line_number, self._column)
        self._since_bookmark = bytearray()

    def read_since_bookmark(self) -> str:
        return self._since_bookmark.decode("utf-8", errors="replace")

    def return_to_bookmark(self) -> None:
        if self._bookmark is None:
            raise RuntimeError("no bookmark is set")
        self._pos, self.line_number, self._column = self._bookmark
        self._bookmark = None

    def unset_bookmark(self) -> None:
        self._bookmark = None
