"""Command-line interface for Roster Scanner."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .capture.decode import encode_png, load_image, to_data_url
from .capture.slicer import roster_slicer
from .core.types import CardRecognitionResult, Character, ImageBuffer, PerceptualHash
from .match.phash import fast_similarity, hamming_distance, perceptual_hash
from .ocr.engine import TesseractTextRecognizer
from .pipeline.orchestrator import RecognitionOrchestrator
from .reference.library import AssetSource, DirectoryAssetSource, HttpAssetSource, template_cache
from .reference.roster import load_roster, roster_by_id
from .utils.config import settings
from .utils.error_handler import RosterScannerError
from .utils.log import configure_logging, get_logger
from .utils.validation import validate_directory_path

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Rich console
console = Console()

app = typer.Typer(
    name="roster-scanner",
    help="Roster Scanner - Recognize characters, rank and badge level from roster screenshots",
    add_completion=False
)


def _asset_source(templates: Optional[str], base_url: Optional[str]) -> AssetSource:
    if base_url:
        return HttpAssetSource(base_url)
    return DirectoryAssetSource(templates or settings.TEMPLATE_DIR)


async def _load_templates(roster: Sequence[Character], source: AssetSource) -> None:
    try:
        await template_cache.rebuild([c.id for c in roster], source)
    finally:
        if isinstance(source, HttpAssetSource):
            await source.close()


async def _scan(
    screenshot: ImageBuffer,
    orchestrator: RecognitionOrchestrator,
    source: AssetSource,
    text: Optional[str],
    use_ocr: bool,
) -> List[CardRecognitionResult]:
    text_task = None
    if use_ocr:
        recognizer = TesseractTextRecognizer()
        text_task = orchestrator.start_text_recognition(
            screenshot,
            recognizer,
            progress=lambda pct: logger.debug("Text recognition progress", percent=pct),
        )

    await _load_templates(orchestrator.roster, source)

    if text_task is None:
        return orchestrator.recognize_screenshot(screenshot, template_cache.get(), text)
    return await orchestrator.recognize_screenshot_async(screenshot, template_cache.get(), text_task)


def _results_table(results: Sequence[CardRecognitionResult], roster: Sequence[Character]) -> Table:
    names = {cid: c.name for cid, c in roster_by_id(roster).items()}

    table = Table(title="Roster Recognition Results")
    table.add_column("Card", style="cyan", justify="right")
    table.add_column("Character", style="white")
    table.add_column("Rarity")
    table.add_column("Rank", justify="right")
    table.add_column("Badge", justify="right")
    table.add_column("Similarity", justify="right")
    table.add_column("Source", style="dim")

    for result in results:
        if result.is_unknown:
            character = "[red]Unknown[/red]"
        else:
            character = names.get(result.character_id, result.character_id)
        table.add_row(
            str(result.index),
            character,
            result.metadata.rarity.value,
            str(result.metadata.rank),
            str(result.metadata.badge_level),
            f"{result.similarity:.3f}",
            result.source.value,
        )
    return table


@app.command()
def scan(
    screenshot_path: Path = typer.Argument(..., help="Roster screenshot to recognize"),
    templates: Optional[str] = typer.Option(None, "--templates", "-t", help="Template asset directory"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Fetch templates over HTTP instead"),
    roster_path: Optional[str] = typer.Option(None, "--roster", "-r", help="Roster JSON file"),
    text_path: Optional[Path] = typer.Option(None, "--text", help="Pre-recognized screenshot text"),
    use_ocr: bool = typer.Option(False, "--ocr", help="Run Tesseract on the screenshot"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write results as JSON"),
):
    """Slice a roster screenshot and recognize every card."""
    if use_ocr and text_path:
        console.print("[red]❌ --text and --ocr are mutually exclusive[/red]")
        raise typer.Exit(1)

    console.print(Panel.fit(
        "[bold blue]Roster Scanner - SCAN[/bold blue]\n"
        "[dim]slice → templates + metadata → text merge[/dim]",
        border_style="blue"
    ))

    try:
        screenshot = load_image(screenshot_path)
        roster = load_roster(roster_path or settings.ROSTER_PATH)
        text = text_path.read_text(encoding="utf-8") if text_path else None
        source = _asset_source(templates, base_url or settings.TEMPLATE_BASE_URL)
        orchestrator = RecognitionOrchestrator(roster=roster)

        with console.status("[bold green]Recognizing cards...", spinner="dots"):
            results = asyncio.run(_scan(screenshot, orchestrator, source, text, use_ocr))
    except (RosterScannerError, OSError) as e:
        console.print(f"[red]❌ Scan failed: {e}[/red]")
        logger.error("Scan error", error=str(e))
        raise typer.Exit(1)

    console.print(_results_table(results, roster))

    recognized = sum(1 for r in results if not r.is_unknown)
    console.print(f"\n[bold]Recognized:[/bold] {recognized}/{len(results)} cards")

    if output:
        output.write_text(json.dumps([r.to_dict() for r in results], indent=2), encoding="utf-8")
        console.print(f"[green]✓ Results written to {output}[/green]")


@app.command(name="slice")
def slice_screenshot(
    screenshot_path: Path = typer.Argument(..., help="Roster screenshot to slice"),
    out_dir: Path = typer.Option(Path("cards"), "--out", "-o", help="Directory for card images"),
    data_urls: bool = typer.Option(False, "--data-urls", help="Also write cards.json with data URLs"),
):
    """Cut a screenshot into card images."""
    try:
        screenshot = load_image(screenshot_path)
        cards = roster_slicer.slice(screenshot, settings.slicer_config())
        out_dir = validate_directory_path(out_dir, create_if_missing=True)
    except RosterScannerError as e:
        console.print(f"[red]❌ Slice failed: {e}[/red]")
        raise typer.Exit(1)

    for index, card in enumerate(cards):
        (out_dir / f"card_{index:02d}.png").write_bytes(encode_png(card))

    if data_urls:
        payload = [to_data_url(card) for card in cards]
        (out_dir / "cards.json").write_text(json.dumps(payload), encoding="utf-8")

    console.print(f"[green]✓ {len(cards)} cards written to {out_dir}[/green]")


@app.command(name="hash")
def hash_image(
    image_path: Path = typer.Argument(..., help="Image to hash"),
    against: Optional[str] = typer.Option(None, "--against", help="Hex hash to compare with"),
):
    """Print the perceptual hash of an image, optionally compared with a known hash."""
    try:
        image = load_image(image_path)
        other = PerceptualHash.from_hex(against) if against else None
    except (RosterScannerError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    image_hash = perceptual_hash(image)
    console.print(image_hash.hex())

    if other is not None:
        console.print(
            f"distance={hamming_distance(image_hash, other)} "
            f"similarity={fast_similarity(image_hash, other):.3f}"
        )


if __name__ == "__main__":
    app()
