from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import DEFAULT_IGNORE_FILE, CopySettings, default_copy_settings
from .excludes import build_filter
from .sync_engine import DirectorySyncEngine
from .walker import walk

app = typer.Typer(
    help="Mirror directory trees using hard links where possible",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(debug: bool) -> None:
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _require_dir(path: Path, label: str) -> Path:
    resolved = path.expanduser()
    if not resolved.is_dir():
        console.print(f"[red]{label} not found:[/red] {escape(str(resolved))}")
        raise typer.Exit(1)
    return resolved


def _format_seconds(seconds: float) -> str:
    return f"{seconds:.2f}s"


@app.command("walk")
def walk_command(
    source: Path = typer.Argument(..., help="Directory to list"),
    exclude: list[str] = typer.Option(
        [],
        "--exclude",
        "-x",
        help="gitignore-like pattern to skip (repeatable)",
    ),
    ignore_file: str = typer.Option(
        DEFAULT_IGNORE_FILE,
        help="Per-directory file with extra ignore patterns",
    ),
) -> None:
    """Print the files and symlinks under SOURCE in mirroring order."""
    root = _require_dir(source, "Source")
    root_text = str(root)
    try:
        entries = asyncio.run(walk(root_text, build_filter(root_text, exclude, ignore_file)))
    except OSError as exc:
        console.print(f"[red]Walk failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    for entry in entries:
        console.print(os.path.relpath(entry, root_text), highlight=False, markup=False)


@app.command("sync")
def sync_command(
    source: Path = typer.Argument(..., help="Directory to mirror"),
    destination: Path = typer.Argument(..., help="Directory to mirror into"),
    exclude: list[str] = typer.Option(
        [],
        "--exclude",
        "-x",
        help="gitignore-like pattern to skip (repeatable)",
    ),
    ignore_file: str = typer.Option(
        DEFAULT_IGNORE_FILE,
        help="Per-directory file with extra ignore patterns",
    ),
    hard_links: bool | None = typer.Option(
        None,
        "--hard-links/--no-hard-links",
        help="Prefer hard links over copies (default: from USE_HARD_LINKS and CI detection)",
    ),
    debug: bool = typer.Option(False, help="Log every permission fix and link fallback"),
) -> None:
    """Mirror SOURCE into DESTINATION."""
    _configure_logging(debug)
    root = _require_dir(source, "Source")
    root_text = str(root)

    settings = default_copy_settings()
    if hard_links is not None:
        settings = CopySettings(use_hard_links=hard_links)

    engine = DirectorySyncEngine(
        build_filter(root_text, exclude, ignore_file), settings=settings
    )

    started = time.perf_counter()
    try:
        result = asyncio.run(engine.sync(root_text, str(destination.expanduser())))
    except OSError as exc:
        console.print(f"[red]Sync failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    elapsed = time.perf_counter() - started

    console.print(f"Entries: {len(result.entries)}")
    console.print(f"Hard-linked: {result.linked}")
    console.print(f"Copied: {result.copied}")
    console.print(f"Symlinks: {result.symlinks}")
    console.print(f"Time: {_format_seconds(elapsed)}")


if __name__ == "__main__":
    app()
