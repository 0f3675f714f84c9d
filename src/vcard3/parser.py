"""Card assembler: drives content-line parsing over a whole stream.

    document     = *(blank-line) card *(blank-line / card)
    card         = "BEGIN:VCARD" CRLF *content-line "END:VCARD" CRLF
    content-line = [group "."] name *(";" param) ":" value CRLF
"""
from __future__ import annotations

import io
import logging
from os import PathLike
from typing import BinaryIO

from .grammar import Parser
from .lexer import DEFAULT_BUFFER_SIZE
from .model import Card, Property
from .properties import parse_content
from .text import CRLF

logger = logging.getLogger(__name__)


def _skip_blank_lines(p: Parser) -> None:
    while p.skip(CRLF, case_sensitive=True):
        pass


def parse_content_lines(p: Parser) -> list[Property]:
    """Read content lines up to and including ``END:VCARD``."""
    props: list[Property] = []
    while True:
        group = p.read_group()
        name = p.read_name()
        if name == "END":
            p.expect(":VCARD")
            p.expect(CRLF, case_sensitive=True)
            return props

        params = p.read_params()
        p.expect(":", case_sensitive=True)
        props.append(parse_content(p, name, group, params))
        p.expect(CRLF, case_sensitive=True)


def parse_stream(
    source: BinaryIO,
    filename: str = "input",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> list[Card]:
    """Parse every card in a binary stream.

    The first grammar violation raises ``ParseError``; no partial result is
    returned.
    """
    p = Parser(source, filename=filename, buffer_size=buffer_size)
    cards: list[Card] = []

    _skip_blank_lines(p)
    while not p.at_end():
        p.read_group()
        p.expect("begin:vcard")
        p.expect(CRLF, case_sensitive=True)
        _skip_blank_lines(p)

        card = Card()
        for prop in parse_content_lines(p):
            card.add(prop)
        cards.append(card)
        logger.debug("%s: card %d has %d content line(s)", filename, len(cards), len(card.properties))

        _skip_blank_lines(p)

    logger.debug("%s: parsed %d card(s)", filename, len(cards))
    return cards


def parse_text(text: str, filename: str = "input", buffer_size: int = DEFAULT_BUFFER_SIZE) -> list[Card]:
    return parse_stream(io.BytesIO(text.encode("utf-8")), filename=filename, buffer_size=buffer_size)


def parse_file(path: str | PathLike[str], buffer_size: int = DEFAULT_BUFFER_SIZE) -> list[Card]:
    with open(path, "rb") as fh:
        return parse_stream(fh, filename=str(path), buffer_size=buffer_size)
