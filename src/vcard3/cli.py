from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import Settings, load_settings
from .errors import ParseError
from .io import write_cards
from .model import Card
from .parser import parse_file, parse_stream
from .serializer import serialize_cards

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="vcard3: parse, check and reformat vCard 3.0 files.",
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log parser activity"),
    config: Path | None = typer.Option(None, "--config", "-c", help="TOML settings file"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    ctx.obj = load_settings(config)


# ── Shared loading ─────────────────────────────────────────────────────────────

def _load(path: Path, settings: Settings) -> list[Card]:
    """Parse ``path`` ('-' reads stdin), turning failures into a red panel and exit code."""
    try:
        if str(path) == "-":
            return parse_stream(
                sys.stdin.buffer,
                filename=settings.default_filename,
                buffer_size=settings.buffer_size,
            )
        return parse_file(path, buffer_size=settings.buffer_size)
    except ParseError as exc:
        console.print(Panel(
            f"[bold red]{escape(exc.message)}[/bold red]\n\n"
            f"  File  : [dim]{escape(exc.filename)}[/dim]\n"
            f"  Line  : [bold]{exc.line}[/bold]\n"
            f"  Column: [bold]{exc.column}[/bold]",
            title="Parse error",
            border_style="red",
        ))
        raise typer.Exit(code=1)
    except OSError as exc:
        console.print(f"[bold red]Cannot read {escape(str(path))}: {escape(exc.strerror or str(exc))}[/bold red]")
        raise typer.Exit(code=2)


# ── `check` command ────────────────────────────────────────────────────────────

@app.command()
def check(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help=".vcf files to parse ('-' for stdin)"),
) -> None:
    """Parse each file and list the cards found in it."""
    settings: Settings = ctx.obj

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("File")
    table.add_column("Cards", justify="right")
    table.add_column("Names")

    for f in files:
        cards = _load(f, settings)
        names = ", ".join(c.fn.value if c.fn else "(no FN)" for c in cards)
        table.add_row(escape(str(f)), str(len(cards)), escape(names))

    console.print(table)


# ── `format` command ───────────────────────────────────────────────────────────

@app.command("format")
def format_cards(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help=".vcf file to reformat ('-' for stdin)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of stdout"),
) -> None:
    """Re-serialize a file in canonical vCard 3.0 form."""
    settings: Settings = ctx.obj
    cards = _load(file, settings)

    if output is None:
        typer.echo(serialize_cards(cards, settings.fold_width), nl=False)
        return

    count = write_cards(cards, output, settings.fold_width)
    console.print(f"[bold green]✓ Wrote {count} card(s) → {escape(str(output))}[/bold green]")


if __name__ == "__main__":
    app()
