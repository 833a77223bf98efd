"""
Highlights a markdown file and prints the generated markup.
With --output, the markup is written to a file instead.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click
from .config import ConfigError, build_config
from .engine import SyntaxHighlighter
from .filesystem import read_markdown, resolve_markdown_path, resolve_max_file_size, write_markup
from .models import BufferTarget, ViewportInfo

__all__ = ["cli"]


@click.command()
@click.version_option(package_name="md-highlight")
@click.option("--first-line", type=int, help="First visible line (zero-based)")
@click.option("--last-line", type=int, help="Last visible line (zero-based)")
@click.option("--buffer", "visible_lines_buffer", type=int, help="Lines kept around the viewport")
@click.option(
    "--max-lines",
    "max_lines_for_full_highlight",
    type=int,
    help="Documents longer than this are narrowed to the viewport",
)
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False), help="Write the markup to this file"
)
@click.option("--stats", is_flag=True, help="Print performance statistics to stderr")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    first_line: int | None = None,
    last_line: int | None = None,
    visible_lines_buffer: int | None = None,
    max_lines_for_full_highlight: int | None = None,
    output: str | None = None,
    stats: bool = False,
    verbose: bool = False,
):
    """
    Render a Markdown file into highlight markup.

    Args:
        filepath: Path to the Markdown file to process.
        first_line: First visible line of the viewport.
        last_line: Last visible line of the viewport.
        visible_lines_buffer: Override for the viewport buffer.
        max_lines_for_full_highlight: Override for the full-highlight threshold.
        output: Destination file for the markup; stdout when omitted.
        stats: Whether to print performance statistics.
        verbose: Whether to log at DEBUG level.

    Raises:
        click.BadParameter: If the path or viewport is invalid, or the
            configuration contains unsupported values.
        click.ClickException: If the file cannot be read or written, or the
            highlighting pass fails.

    Examples:
        md-highlight notes.md --first-line 100 --last-line 140 -o notes.html
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    base_dir = Path.cwd().resolve()
    try:
        filepath = resolve_markdown_path(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    viewport = _build_viewport(first_line, last_line)

    try:
        config = build_config(
            filepath.parent,
            visible_lines_buffer=visible_lines_buffer,
            max_lines_for_full_highlight=max_lines_for_full_highlight,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = resolve_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        content = read_markdown(filepath, max_file_size)
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except IOError as error:
        raise click.ClickException(str(error)) from error

    engine = SyntaxHighlighter(config)
    target = BufferTarget()
    asyncio.run(engine.highlight(content, target, viewport))

    if not target.visible:
        raise click.ClickException(f"Highlighting failed for {filepath}")

    if stats:
        click.echo(json.dumps(engine.get_performance_stats().as_dict()), err=True)
    engine.destroy()

    if output is None:
        click.echo(target.markup, nl=False)
        return

    try:
        write_markup(Path(output), target.markup)
    except IOError as error:
        raise click.ClickException(str(error)) from error


def _build_viewport(first_line: int | None, last_line: int | None) -> ViewportInfo | None:
    if first_line is None and last_line is None:
        return None
    if first_line is None or last_line is None:
        raise click.BadParameter("--first-line and --last-line must be given together")
    if first_line < 0 or last_line < first_line:
        raise click.BadParameter("Viewport must satisfy 0 <= --first-line <= --last-line")
    return ViewportInfo(first_visible_line=first_line, last_visible_line=last_line)


if __name__ == "__main__":
    cli()
