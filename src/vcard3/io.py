from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .lexer import DEFAULT_BUFFER_SIZE
from .model import Card
from .parser import parse_file
from .serializer import serialize_cards
from .text import FOLD_WIDTH

logger = logging.getLogger(__name__)


def read_cards_from_files(
    paths: Iterable[Path],
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> list[tuple[Card, str]]:
    """Parse every file and return (card, source_label) pairs, label = file stem."""
    results: list[tuple[Card, str]] = []
    for p in paths:
        cards = parse_file(p, buffer_size=buffer_size)
        logger.debug("%s: read %d card(s)", p, len(cards))
        results.extend((card, p.stem) for card in cards)
    return results


def write_cards(cards: list[Card], path: Path, fold_width: int = FOLD_WIDTH) -> int:
    """Serialize cards to ``path`` as UTF-8, CRLF line endings kept. Returns the count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(serialize_cards(cards, fold_width).encode("utf-8"))
    logger.debug("%s: wrote %d card(s)", path, len(cards))
    return len(cards)


def collect_vcf_files(directory: Path) -> list[Path]:
    """Return all .vcf files found directly inside ``directory``, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix.lower() == ".vcf")
