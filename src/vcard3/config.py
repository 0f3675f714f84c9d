from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .lexer import DEFAULT_BUFFER_SIZE
from .text import FOLD_WIDTH

DEFAULT_CONF = """# vcard3 configuration (TOML)
buffer_size = 16384
default_filename = "input"
fold_width = 75
"""


@dataclass
class Settings:
    buffer_size: int = DEFAULT_BUFFER_SIZE
    default_filename: str = "input"
    fold_width: int = FOLD_WIDTH


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from a TOML file. A missing file yields the defaults.

    Unknown keys are ignored; a file that is not valid TOML raises
    ``tomllib.TOMLDecodeError``.
    """
    settings = Settings()
    if path is None or not path.exists():
        return settings

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    settings.buffer_size = int(data.get("buffer_size", settings.buffer_size))
    settings.default_filename = str(data.get("default_filename", settings.default_filename))
    settings.fold_width = int(data.get("fold_width", settings.fold_width))
    if settings.buffer_size < 2:
        raise ValueError("buffer_size must be at least 2")
    if settings.fold_width < 2:
        raise ValueError("fold_width must be at least 2")
    return settings


def write_default_config(path: Path) -> None:
    """Create ``path`` with the default settings unless it already exists."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_text(DEFAULT_CONF, encoding="utf-8")
