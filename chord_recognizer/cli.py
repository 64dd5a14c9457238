"""Command-line interface for Chord Recognizer.

Provides commands for:
- chord: Parse chord notation and show its notes
- analyze: Recognize chords in an audio file, window by window
- notes: Show notes detected in an audio file
- catalog: List every chord the recognizer knows
- info: Show audio file information
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import soundfile as sf
import typer
from rich.console import Console
from rich.table import Table

from .config import RecognizerConfig
from .core.errors import ChordParseError, ChordRecognizerError
from .core.logging import setup_logging
from .core.pitch import Interval, Note

app = typer.Typer(
    name="chord-recognizer",
    help="Audio to Chord Name Recognition Engine",
    rich_markup_mode="markdown",
)
console = Console()


def _check_file(input_file: Path) -> None:
    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)


def _build_config(
    config_file: Optional[Path],
    window_size: Optional[int],
    hop: Optional[int],
    top_k: Optional[int],
    model: Optional[Path],
) -> RecognizerConfig:
    """Config file (or defaults) with command-line overrides applied."""
    data: Dict[str, Any] = {}
    if config_file is not None:
        data = RecognizerConfig.from_file(config_file).to_dict()

    if window_size is not None:
        data["window_size"] = window_size
    if hop is not None:
        data["hop_length"] = hop
    if top_k is not None:
        data.setdefault("combiner", {})["top_k"] = top_k
    if model is not None:
        data["model_path"] = str(model)

    return RecognizerConfig.from_dict(data)


@app.command()
def chord(
    name: str = typer.Argument(..., help="Chord notation, e.g. 'C#m7' or 'Bbmaj7'"),
    flats: bool = typer.Option(False, "--flats", help="Spell roots with flats"),
):
    """Parse chord notation and show its notes and intervals.

    **Examples:**

        chord-recognizer chord Cmaj7

        chord-recognizer chord "Bbø" --flats
    """
    from .inference import default_catalog

    try:
        template = default_catalog().parse(name)
    except ChordParseError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    tones = template.notes()
    root = tones[0]

    console.print(f"\n[bold]{template.spelled(flats)}[/bold] ({template.quality.name})")

    table = Table(title="Chord Tones")
    table.add_column("Note", style="cyan")
    table.add_column("Interval", style="green")
    table.add_column("Frequency (Hz)", style="yellow")

    for note in tones:
        interval = Interval.between(root, note)
        table.add_row(
            note.pitch_class.spell(flats) + str(note.octave),
            f"{interval.short_name} ({interval.quality})",
            f"{note.frequency():.2f}",
        )

    console.print(table)


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    window_size: Optional[int] = typer.Option(
        None, "-w", "--window-size", help="Samples per analysis window (power of two)"
    ),
    hop: Optional[int] = typer.Option(
        None, "--hop", help="Samples between windows (default: window size)"
    ),
    top_k: Optional[int] = typer.Option(
        None, "-k", "--top-k", help="Number of ranked chords per window"
    ),
    model: Optional[Path] = typer.Option(
        None, "-m", "--model", help="Learned model artifact (.npz)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "-c", "--config", help="JSON configuration file"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Recognize chords in an audio file.

    **Examples:**

        chord-recognizer analyze song.wav

        chord-recognizer analyze song.wav -w 4096 --hop 2048 --json
    """
    from .input import AudioLoader
    from .pipeline import ChordRecognizer

    if verbose:
        setup_logging("DEBUG")

    _check_file(input_file)

    try:
        config = _build_config(config_file, window_size, hop, top_k, model)
        recognizer = ChordRecognizer.from_config(config)

        loader = AudioLoader()
        audio, sr = loader.load(str(input_file))
        duration = loader.get_duration(audio, sr)

        if not json_output:
            console.print(f"[blue]Analyzing:[/blue] {input_file}")
            console.print(f"  Duration: {duration:.2f}s, Sample rate: {sr}Hz")
            mode = "heuristic + learned" if recognizer.uses_model else "heuristic"
            console.print(f"  Window: {config.window_size} samples, hop {config.effective_hop}, {mode}")

        recognitions = list(recognizer.recognize_samples(audio, sr))
    except (FileNotFoundError, ValueError, ChordRecognizerError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        result = {
            "input": str(input_file),
            "duration": duration,
            "sample_rate": sr,
            "window_size": config.window_size,
            "hop_length": config.effective_hop,
            "model": recognizer.uses_model,
            "windows": [
                {
                    "start": r.start,
                    "end": r.end,
                    "source": r.decision.source,
                    "chords": [{"name": n, "confidence": c} for n, c in r.ranked()],
                }
                for r in recognitions
            ],
        }
        console.print_json(data=result)
        return

    _show_recognitions_table(recognitions)


@app.command()
def notes(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    window_size: Optional[int] = typer.Option(
        None, "-w", "--window-size", help="Samples per analysis window (power of two)"
    ),
):
    """Show the notes detected over an audio clip."""
    from .input import AudioLoader, iter_windows
    from .pipeline import ChordRecognizer

    _check_file(input_file)

    try:
        config = _build_config(None, window_size, None, None, None)
        recognizer = ChordRecognizer(config=config)
        audio, sr = AudioLoader().load(str(input_file))

        first_heard: Dict[Note, float] = {}
        for window in iter_windows(audio, sr, config.window_size, config.hop_length):
            for note in recognizer.detect_notes(window):
                first_heard.setdefault(note, window.start)
    except (FileNotFoundError, ValueError, ChordRecognizerError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not first_heard:
        console.print("[yellow]No notes detected![/yellow]")
        return

    table = Table(title="Detected Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("First heard (s)", style="yellow")

    for note in sorted(first_heard):
        table.add_row(note.name, f"{note.frequency():.2f}", f"{first_heard[note]:.2f}")

    console.print(table)


@app.command()
def catalog(
    quality: Optional[str] = typer.Option(
        None, "-q", "--quality", help="Only list one quality (e.g. 'minor7')"
    ),
):
    """List every chord in the catalog, in model output order."""
    from .inference import default_catalog

    chords = default_catalog()
    names = {q.name for q in chords.qualities}
    if quality is not None and quality not in names:
        console.print(f"[red]Error: Unknown quality '{quality}'. Known: {', '.join(sorted(names))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Chord Catalog")
    table.add_column("Index", style="dim")
    table.add_column("Chord", style="cyan")
    table.add_column("Quality", style="green")
    table.add_column("Notes", style="yellow")

    for template in chords:
        if quality is not None and template.quality.name != quality:
            continue
        table.add_row(
            str(template.index),
            template.name,
            template.quality.name,
            " ".join(pc.name for pc in template.pitch_classes),
        )

    console.print(table)
    console.print(f"  {len(chords)} chords, {len(chords.qualities)} qualities")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    _check_file(input_file)

    try:
        meta = sf.info(str(input_file))
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {meta.duration:.2f} seconds")
    console.print(f"  Sample rate: {meta.samplerate} Hz")
    console.print(f"  Channels: {meta.channels}")
    console.print(f"  Frames: {meta.frames:,}")
    console.print(f"  Format: {meta.format} ({meta.subtype})")


def _show_recognitions_table(recognitions: List) -> None:
    """Display per-window chords in a table."""
    table = Table(title="Detected Chords")
    table.add_column("Time", style="yellow")
    table.add_column("Chord", style="cyan")
    table.add_column("Confidence", style="magenta")
    table.add_column("Runners-up", style="dim")

    for r in recognitions:
        best = r.decision.best
        runners_up = ", ".join(f"{c.name} ({c.score:.2f})" for c in r.decision.runners_up)
        table.add_row(
            f"{r.start:.2f}-{r.end:.2f}s",
            best.name if best else "-",
            f"{best.score:.2f}" if best else "-",
            runners_up,
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
