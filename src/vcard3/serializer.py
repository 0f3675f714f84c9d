from __future__ import annotations

from collections.abc import Iterable

from .model import Card, Version
from .properties import serialize_property
from .text import CRLF, FOLD_WIDTH, fold_content_line


def serialize_card(card: Card, fold_width: int = FOLD_WIDTH) -> str:
    """Render a card as folded, CRLF-terminated content lines.

    VERSION is always written as the second line, so any VERSION property on
    the card is skipped in the main loop.
    """
    lines = ["BEGIN:vCard", "VERSION:3.0"]
    for prop in card.properties:
        if isinstance(prop, Version):
            continue
        lines.append(fold_content_line(serialize_property(prop), fold_width))
    lines.append("END:vCard")
    return CRLF.join(lines) + CRLF


def serialize_cards(cards: Iterable[Card], fold_width: int = FOLD_WIDTH) -> str:
    return "".join(serialize_card(c, fold_width) for c in cards)
