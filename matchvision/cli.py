#!/usr/bin/env python3
"""
Command line front end: capture a frame, analyze it, render the summary.
"""

import base64
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from matchvision.config import Settings, get_settings
from matchvision.core.errors import MatchVisionError
from matchvision.core.models import ParsedPresentation
from matchvision.middleware_logging import configure_logging
from matchvision.services.analysis_formatter import parse, render_markdown
from matchvision.services.frame_extractor import extract_frame
from matchvision.services.vision_providers import first_text, get_vision

console = Console()


def render_presentation(presentation: ParsedPresentation, out: Console = console) -> None:
    """Score panel first, then each section in source order."""
    panel = presentation.score_panel
    if panel is not None:
        table = Table.grid(expand=True, padding=(0, 2))
        table.add_column(justify="right", ratio=2)
        table.add_column(justify="center", ratio=1)
        table.add_column(justify="left", ratio=2)
        home_style = "bold green" if panel.winner == "home" else ""
        away_style = "bold green" if panel.winner == "away" else ""
        table.add_row(
            Text(panel.home_label, style=home_style),
            Text(panel.score_label, style="bold"),
            Text(panel.away_label, style=away_style),
        )
        out.print(Panel(table, title="Score"))

    for section in presentation.sections:
        if section.title:
            out.print(Text(section.title, style="bold cyan" if section.is_major else "cyan"))
        bulleted = section.bulleted
        for line in section.lines:
            if bulleted and line.bullet:
                out.print(f"  • {line.text}", highlight=False, markup=False)
            else:
                out.print(f"  {line.text}" if bulleted else line.text, highlight=False, markup=False)
        out.print()


def _fail(err: MatchVisionError) -> None:
    console.print(f"[red]❌ {err.message}[/red]")
    sys.exit(1)


@click.group()
@click.option('--log-level', default=None, help='Logging level (defaults to LOG_LEVEL)')
def cli(log_level):
    """Football match frame analysis."""
    configure_logging(log_level or get_settings().LOG_LEVEL)


@cli.command()
@click.argument('video', type=click.Path(exists=True, dir_okay=False))
@click.option('--offset', '-t', type=float, default=None, help='Capture offset in seconds')
@click.option('--provider', '-p', type=click.Choice(['anthropic', 'openai', 'stub']), default=None,
              help='Vision provider (defaults to VISION_PROVIDER)')
@click.option('--plain', is_flag=True, help='Print markdown instead of rich output')
@click.option('--json', 'as_json', is_flag=True, help='Print the structured presentation as JSON')
def analyze(video, offset, provider, plain, as_json):
    """Capture a frame from VIDEO and analyze it."""
    settings = get_settings()
    if provider:
        settings = Settings()
        settings.VISION_PROVIDER = provider
    offset = settings.FRAME_OFFSET_S if offset is None else offset

    try:
        with console.status("Analyzing the football match... This may take a moment."):
            frame = extract_frame(video, offset_s=offset, quality=settings.FRAME_JPEG_QUALITY)
            text = first_text(get_vision(settings).analyze(frame))
    except MatchVisionError as e:
        _fail(e)
        return

    presentation = parse(text)
    if as_json:
        click.echo(json.dumps(presentation.to_api(), indent=2))
    elif plain:
        click.echo(render_markdown(presentation))
    else:
        console.print(f"\n[bold cyan]📊 Match Analysis: {Path(video).name}[/bold cyan]\n")
        render_presentation(presentation)


@cli.command(name='format')
@click.argument('source', type=click.File('r'), default='-')
@click.option('--plain', is_flag=True, help='Print markdown instead of rich output')
@click.option('--json', 'as_json', is_flag=True, help='Print the structured presentation as JSON')
def format_cmd(source, plain, as_json):
    """Render an existing analysis text (file or stdin)."""
    presentation = parse(source.read())
    if as_json:
        click.echo(json.dumps(presentation.to_api(), indent=2))
    elif plain:
        click.echo(render_markdown(presentation))
    else:
        render_presentation(presentation)


@cli.command()
@click.argument('video', type=click.Path(exists=True, dir_okay=False))
@click.option('--offset', '-t', type=float, default=None, help='Capture offset in seconds')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the JPEG here instead of printing base64')
def frame(video, offset, output):
    """Capture the analysis frame from VIDEO."""
    settings = get_settings()
    offset = settings.FRAME_OFFSET_S if offset is None else offset
    try:
        payload = extract_frame(video, offset_s=offset, quality=settings.FRAME_JPEG_QUALITY)
    except MatchVisionError as e:
        _fail(e)
        return

    if output:
        Path(output).write_bytes(base64.b64decode(payload))
        console.print(f"[green]✅ Frame written to {output}[/green]")
    else:
        click.echo(payload)


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', type=int, default=None, help='Port (defaults to PORT)')
@click.option('--reload', is_flag=True, help='Auto-reload on code changes')
def serve(host, port, reload):
    """Run the HTTP API."""
    import uvicorn
    uvicorn.run("matchvision.main:app", host=host, port=port or get_settings().PORT, reload=reload)


if __name__ == '__main__':
    cli()
