import json
import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from wavv.errors import RiffError
from wavv.info import INFO_FIELDS
from wavv.io import load_wav, read_wav_bytes, save_wav
from wavv.riff import ChunkTag, parse_top_level

app = App(name="wavv", help="A utility for inspecting and rewriting PCM WAVE files")
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(message, style="bold yellow")


def describe_chunk_id(chunk_id: bytes) -> str:
    """Printable form of a FourCC, escaping non-ASCII bytes."""
    text = chunk_id.decode("latin-1")
    if text.isprintable() and chunk_id.isascii():
        return text
    return chunk_id.hex()


@app.command
def info(
    file: Path,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
) -> int:
    """
    Display the format, length and metadata of a WAVE file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    output_json: bool
        Output results as JSON (default: False)
    """
    try:
        wav = load_wav(file)
    except RiffError as e:
        print_error(f"Error: {e}")
        return 1

    fmt = wav.format
    ancillary = [
        {"id": describe_chunk_id(chunk.id), "size": chunk.size} for chunk in wav.ancillary
    ]

    metadata_error = None
    try:
        metadata = wav.info
    except RiffError as e:
        metadata = {}
        metadata_error = str(e)

    if output_json:
        results = {
            "file": str(file),
            "sample_rate": fmt.sample_rate,
            "num_channels": fmt.num_channels,
            "bit_depth": fmt.bit_depth,
            "num_samples": len(wav.samples),
            "num_frames": wav.num_frames,
            "duration_seconds": wav.duration,
            "info": metadata,
            "ancillary": ancillary,
        }
        if metadata_error is not None:
            results["info_error"] = metadata_error
        console.print(json.dumps(results, indent=2))
        return 0

    console.print(f"WAVE file: {file}")
    console.print(f"  Sample rate: {fmt.sample_rate} Hz")
    console.print(f"  Channels: {fmt.num_channels}")
    console.print(f"  Bit depth: {fmt.bit_depth}-bit")
    console.print(f"  Samples: {len(wav.samples):,}")
    console.print(f"  Frames: {wav.num_frames:,}")
    console.print(f"  Duration: {wav.duration:.3f}s")

    if fmt.num_channels and len(wav.samples) % fmt.num_channels:
        print_warning(
            f"  [WARN] {len(wav.samples)} samples do not divide into "
            f"{fmt.num_channels} channels; the last frame is incomplete"
        )

    if metadata_error is not None:
        print_warning(f"  [WARN] Metadata unreadable: {metadata_error}")
    elif metadata:
        console.print("  Metadata:")
        for key, value in metadata.items():
            console.print(f"    {INFO_FIELDS.get(key, key)}: {value}")

    if ancillary:
        console.print("  Other chunks:")
        for entry in ancillary:
            console.print(f"    {entry['id']}: {entry['size']:,} bytes")

    return 0


@app.command
def chunks(file: Path) -> int:
    """
    List the top-level chunks of a WAVE file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    """
    try:
        top_level = parse_top_level(read_wav_bytes(file))
    except RiffError as e:
        print_error(f"Error: {e}")
        return 1

    table = Table(title=f"Chunks in {file.name}")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Kind")
    table.add_column("Size", justify="right")

    for i, chunk in enumerate(top_level):
        tag = chunk.tag
        kind = "unknown" if tag == ChunkTag.UNKNOWN else tag.name
        table.add_row(str(i), describe_chunk_id(chunk.id), kind, f"{chunk.size:,}")

    console.print(table)
    return 0


@app.command
def strip(source: Path, output: Path) -> int:
    """
    Rewrite a WAVE file keeping only its fmt and data chunks.

    Parameters
    ----------
    source: Path
        The .wav file to read
    output: Path
        Where to write the stripped .wav file
    """
    try:
        wav = load_wav(source)
    except RiffError as e:
        print_error(f"Error: {e}")
        return 1

    removed = len(wav.ancillary)

    try:
        save_wav(output, wav.without_ancillary())
    except RiffError as e:
        print_error(f"Error writing output: {e}")
        return 1

    print_success(f"Stripped {source} -> {output}")
    console.print(f"  Removed chunks: {removed}")
    return 0


if __name__ == "__main__":
    sys.exit(app())
