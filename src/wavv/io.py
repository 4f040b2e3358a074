"""Reading and writing WAVE files on disk.

The codec itself works on byte buffers; these helpers do the file I/O
around :class:`~wavv.document.WaveDocument`.
"""

from pathlib import Path

from wavv.document import WaveDocument
from wavv.errors import RiffError

# Files are read whole, so refuse anything larger than this (2 GiB)
MAX_FILE_SIZE_BYTES = 2 * 1024 * 1024 * 1024


def read_wav_bytes(path: Path | str, *, max_size: int = MAX_FILE_SIZE_BYTES) -> bytes:
    """Read the raw bytes of a WAV file.

    Raises:
        RiffError: If the file is missing, unreadable or larger than ``max_size``.
    """
    path = Path(path)

    try:
        file_size = path.stat().st_size
    except FileNotFoundError as e:
        raise RiffError(f"File not found: {path}") from e
    except OSError as e:
        raise RiffError(f"Cannot open file: {path}") from e

    if file_size > max_size:
        raise RiffError(
            f"File size ({file_size / (1024 * 1024):.1f} MB) exceeds maximum "
            f"allowed size of {max_size / (1024 * 1024):.1f} MB"
        )

    try:
        return path.read_bytes()
    except OSError as e:
        raise RiffError(f"Cannot read file: {path}") from e


def load_wav(path: Path | str, *, max_size: int = MAX_FILE_SIZE_BYTES) -> WaveDocument:
    """Load a WAV file into a WaveDocument.

    Args:
        path: Path to the WAV file.
        max_size: Largest file size in bytes that will be read.

    Returns:
        The parsed document, including ancillary chunks.

    Raises:
        RiffError: If the file cannot be read or is not a valid PCM WAVE file.
    """
    return WaveDocument.from_bytes(read_wav_bytes(path, max_size=max_size))


def save_wav(path: Path | str, document: WaveDocument) -> None:
    """Write a WaveDocument to disk, replacing any existing file.

    Raises:
        RiffError: If the file cannot be written.
    """
    path = Path(path)
    data = document.to_bytes()

    try:
        path.write_bytes(data)
    except OSError as e:
        raise RiffError(f"Cannot write file: {path}") from e
