"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from podthread.config import Settings, load_config
from podthread.core.converter import ThreadConverter
from podthread.core.errors import ConversionError
from podthread.core.parse import parse_file
from podthread.core.pipeline import prescan_anchors, run_convert
from podthread.core.sections import anchor_key, scan_headings


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _setup_logging(settings: Settings, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def convert_cmd(
    source: Annotated[Optional[str], typer.Argument(help="POD file to read (default: stdin)")] = None,
    output: Annotated[Optional[str], typer.Argument(help="Thread file to write (default: stdout)")] = None,
    contents: Annotated[Optional[bool], typer.Option("--contents/--no-contents", help="Add a table of contents")] = None,
    navbar: Annotated[Optional[bool], typer.Option("--navbar/--no-navbar", help="Add a navigation bar")] = None,
    style: Annotated[Optional[str], typer.Option("--style", "-s", help="Style sheet for the page header")] = None,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Page title instead of the NAME section")] = None,
    doc_id: Annotated[Optional[str], typer.Option("--id", help="Identifier to embed as \\id[]")] = None,
    prescan: Annotated[Optional[bool], typer.Option("--prescan/--no-prescan", help="Resolve links to later sections")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    """Convert one POD document to thread."""
    settings = _settings(overrides={
        "contents": contents, "navbar": navbar, "style": style,
        "title": title, "id": doc_id, "prescan": prescan,
    })
    _setup_logging(settings, verbose)
    options = settings.thread_options()
    targets = tuple(settings.accept_targets)

    anchors = None
    if settings.prescan:
        if source is None:
            _fail("--prescan needs an input file")
        try:
            anchors = prescan_anchors(Path(source), options, targets)
        except OSError as e:
            _fail(f"Cannot read {source}", e)

    try:
        ThreadConverter(options, anchors=anchors, targets=targets).convert(source, output)
    except ConversionError as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"Cannot read {source}", e)


def build_cmd(
    path: Annotated[str, typer.Argument(help="POD file or directory to convert")],
    out: Annotated[str, typer.Option("--out-dir", help="Output directory")] = "thread",
    contents: Annotated[Optional[bool], typer.Option("--contents/--no-contents", help="Add a table of contents")] = None,
    navbar: Annotated[Optional[bool], typer.Option("--navbar/--no-navbar", help="Add a navigation bar")] = None,
    style: Annotated[Optional[str], typer.Option("--style", "-s", help="Style sheet for the page header")] = None,
    prescan: Annotated[Optional[bool], typer.Option("--prescan/--no-prescan", help="Resolve links to later sections")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    """Convert every .pod/.pm/.pl file under path, mirroring the tree in the output directory."""
    settings = _settings(overrides={"contents": contents, "navbar": navbar, "style": style, "prescan": prescan})
    _setup_logging(settings, verbose)
    output_dir = Path(out)
    try:
        results = run_convert(
            path, output_dir, settings.thread_options(),
            tuple(settings.accept_targets), settings.prescan,
        )
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No POD files found under {path}.")
        raise typer.Exit(1)
    for src, dest in results:
        typer.echo(f"  {src} -> {dest}")
    typer.echo(f"Converted {len(results)} document(s) to {output_dir}/")


def headings_cmd(
    path: Annotated[str, typer.Argument(help="POD file to scan")],
    ):
    """List the anchors top-level headings will receive."""
    settings = _settings()
    _setup_logging(settings)
    try:
        tokens = parse_file(Path(path), tuple(settings.accept_targets))
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    anchors = scan_headings(tokens, skip_name=not settings.title)
    if not anchors:
        typer.echo("No top-level headings found.")
        raise typer.Exit(1)
    pairs = [(anchor, heading) for heading, found in anchors.items() for anchor in found]
    for anchor, heading in sorted(pairs, key=lambda p: anchor_key(p[0])):
        typer.echo(f"{anchor}\t{heading}")
