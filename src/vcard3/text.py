"""Text helpers shared by the parser and the serializer.

Folding, text-value escaping and the date / date-time formats accepted by
BDAY and REV live here so both directions use the same tables.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

CRLF = "\r\n"
FOLD = "\r\n "

# Physical lines, continuation marker included, never exceed this many
# characters. Counted in code points, not octets or display cells.
FOLD_WIDTH = 75


# ── Folding ────────────────────────────────────────────────────────────────────

def fold_content_line(line: str, width: int = FOLD_WIDTH) -> str:
    if width < 2:
        raise ValueError("fold width must be at least 2")
    if len(line) <= width:
        return line
    parts = [line[:width]]
    rest = line[width:]
    while rest:
        parts.append(" " + rest[:width - 1])
        rest = rest[width - 1:]
    return CRLF.join(parts)


def unfold_content_line(text: str) -> str:
    return text.replace(FOLD, "")


# ── Escaping ───────────────────────────────────────────────────────────────────

def escape_text(value: str) -> str:
    """Escape a text-value component: backslash, semicolon, comma and newline."""
    chars = []
    for char in value.replace("\r\n", "\n").replace("\r", "\n"):
        if char == "\\":
            chars.append("\\\\")
        elif char == ";":
            chars.append("\\;")
        elif char == ",":
            chars.append("\\,")
        elif char == "\n":
            chars.append("\\n")
        else:
            chars.append(char)
    return "".join(chars)


def escape_newlines(value: str) -> str:
    """Escape line breaks only, for values that are otherwise written verbatim."""
    return value.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "\\n")


# ── Dates ──────────────────────────────────────────────────────────────────────

DATE_FORMATS = ("%Y-%m-%d", "%Y%m%d")

DATE_TIME_FORMATS = (
    "%Y%m%dT%H%M%S",
    "%Y%m%dT%H%M%S%z",
    "%Y%m%dT%H%M%S.%f",
    "%Y%m%dT%H%M%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


def _parse_with(value: str, date_formats: tuple[str, ...], date_time_formats: tuple[str, ...]) -> date:
    # Every format is tried; when several accept the value the last one wins.
    result: date | None = None
    for fmt in date_time_formats:
        try:
            result = datetime.strptime(value, fmt)
        except ValueError:
            continue
    for fmt in date_formats:
        try:
            result = datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    if result is None:
        raise ValueError(f"cannot parse date: {value}")
    return result


def parse_date(value: str) -> date:
    return _parse_with(value, DATE_FORMATS, ())


def parse_date_time(value: str) -> datetime:
    return _parse_with(value, (), DATE_TIME_FORMATS)  # type: ignore[return-value]


def parse_date_or_date_time(value: str) -> date:
    """Parse either form; returns a ``datetime`` for date-times, else a ``date``."""
    return _parse_with(value, DATE_FORMATS, DATE_TIME_FORMATS)


def format_date(value: date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%Y-%m-%d")


def format_date_time(value: date) -> str:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    out = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        out += f".{value.microsecond:06d}"
    offset = value.utcoffset()
    if offset is None:
        return out
    if offset == timedelta(0):
        return out + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{out}{sign}{minutes // 60:02d}:{minutes % 60:02d}"
