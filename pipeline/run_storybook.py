"""
Journal Storybook - CLI

Command-line interface for turning journal photos into storybooks and for
inspecting how instructions are parsed into illustration prompts.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from core.config import ensure_directories, get_output_path, load_config
from core.constants import ConfirmationTypeEnum, MessageTypeEnum
from core.logging import configure_logging, console, get_logger
from core.models import ChatMessage, Storybook
from pipeline.export_storybook import save_storybook
from pipeline.preferences import (
    describe_style,
    empty_preferences,
    extract_character_hints,
    parse_preferences,
)
from pipeline.prompt_builder import build_prompt
from pipeline.storybook import StorybookError, StorybookPipeline
from pipeline.transcribe import guess_mime_type

# Initialize Typer app
app = typer.Typer(
    name="journal-storybook",
    help="Journal Storybook: turn handwritten journal entries into illustrated stories",
    add_completion=False,
)

logger = get_logger(__name__)


@app.callback()
def cli(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Journal Storybook command-line tools."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)


def print_message(message: ChatMessage) -> None:
    """Print a pipeline chat message to the console."""
    if message.type == MessageTypeEnum.CONFIRMATION:
        data = message.confirmation_data
        if message.confirmation_type == ConfirmationTypeEnum.CHARACTER:
            console.print(f"[bold blue]Character:[/bold blue] {escape(data.get('character_description', ''))}")
        else:
            parts = [f"style={data.get('art_style')}"]
            if data.get("mood"):
                parts.append(f"mood={data['mood']}")
            if data.get("colors"):
                parts.append(f"colors={', '.join(data['colors'])}")
            console.print(f"[bold magenta]Style:[/bold magenta] {escape('; '.join(parts))}")
    elif message.type == MessageTypeEnum.STORY:
        console.print(f"\n[bold]Story[/bold]\n{escape(message.text)}\n")
    elif message.type != MessageTypeEnum.STORYBOOK:
        console.print(escape(message.text))


async def _generate(
    image_path: Path,
    instructions: Optional[str],
    output_dir: Path,
    embed_images: bool,
) -> tuple[Storybook, Path]:
    pipeline = StorybookPipeline.from_config(
        load_config(),
        on_message=print_message,
        on_status=lambda status: console.print(f"[dim]{escape(status)}...[/dim]"),
    )
    try:
        storybook = await pipeline.create_storybook(
            image_path.read_bytes(),
            guess_mime_type(image_path.name),
            instructions,
        )
    finally:
        await pipeline.close()

    html_path = await save_storybook(storybook, output_dir, embed_images=embed_images)
    return storybook, html_path


# ============================================================================
# Commands
# ============================================================================


@app.command()
def generate(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Photo of the journal entry"),
    instructions: Optional[str] = typer.Option(
        None,
        "--instructions",
        "-i",
        help="Style or character instructions, e.g. 'watercolor, a girl with red boots'",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Output directory (default: outputs/storybooks)",
    ),
    embed_images: bool = typer.Option(
        False,
        "--embed-images",
        help="Download illustrations into the HTML file",
    ),
) -> None:
    """
    Turn a journal photo into an illustrated storybook.

    Writes storybook-<timestamp>.html and .json to the output directory.
    """
    ensure_directories()
    out_path = Path(output_dir) if output_dir else get_output_path()

    try:
        storybook, html_path = asyncio.run(_generate(image, instructions, out_path, embed_images))
    except StorybookError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title="Storybook Pages")
    table.add_column("Page", style="cyan", justify="right")
    table.add_column("Sentence")
    table.add_column("Image", style="green")

    for page in storybook.pages:
        status = "OK" if page.has_image else f"[red]{escape(page.error or 'missing')}[/red]"
        table.add_row(str(page.index + 1), escape(page.sentence), status)

    console.print(table)
    console.print(f"[green]OK[/green] Storybook saved to: {html_path}")


@app.command()
def parse(
    text: str = typer.Argument(..., help="Instruction text to analyze"),
) -> None:
    """
    Show which styles, characters, moods, colors and lighting terms are recognized.
    """
    parsed = parse_preferences(text)

    table = Table(title="Parsed Preferences")
    table.add_column("Category", style="cyan")
    table.add_column("Matches", style="green")

    table.add_row("Art styles", ", ".join(parsed.art_styles) or "-")
    table.add_row("Characters", ", ".join(parsed.characters) or "-")
    table.add_row("Moods", ", ".join(parsed.moods) or "-")
    table.add_row("Colors", ", ".join(parsed.colors) or "-")
    table.add_row("Lighting", ", ".join(parsed.lighting) or "-")

    console.print(table)
    console.print(f"Style: {escape(describe_style(parsed))}")
    console.print(f"Character hints: {escape(extract_character_hints(text) or '-')}")


@app.command()
def prompt(
    sentence: str = typer.Argument(..., help="Story sentence to illustrate"),
    instructions: Optional[str] = typer.Option(
        None,
        "--instructions",
        "-i",
        help="Style instructions",
    ),
    character: Optional[str] = typer.Option(
        None,
        "--character",
        "-c",
        help="Character description",
    ),
) -> None:
    """
    Print the illustration prompt that would be sent for a sentence.
    """
    parsed = parse_preferences(instructions) if instructions else empty_preferences()
    console.print(escape(build_prompt(sentence, parsed, character)))


# ============================================================================
# Entry Point
# ============================================================================


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
