"""RIFF chunk framing.

This module splits a RIFF/WAVE buffer into its top-level chunks and frames
chunks back into bytes. Every read is bounds-checked, so malformed input
raises :class:`~wavv.errors.TruncatedChunkError` instead of indexing past
the end of the buffer.

Chunk layout
------------
Each chunk is a 4-byte FourCC, a 4-byte little-endian payload length and
the payload itself. Odd-length payloads are followed by a single pad byte
that is not counted in the length field.
"""

import struct
from dataclasses import dataclass, field
from enum import Enum

from wavv.errors import (
    NestingDepthError,
    NoRiffChunkFoundError,
    NoWaveTagFoundError,
    TruncatedChunkError,
    UnknownChunkIDError,
)

# FourCC identifiers
RIFF_ID = b"RIFF"
WAVE_ID = b"WAVE"
FMT_ID = b"fmt "
DATA_ID = b"data"
LIST_ID = b"LIST"
INFO_ID = b"INFO"
JUNK_ID = b"JUNK"

CHUNK_HEADER_SIZE = 8
MAX_CHUNK_SIZE = 0xFFFFFFFF

# Deepest LIST nesting accepted by parse_list
MAX_LIST_DEPTH = 8


class ChunkTag(bytes, Enum):
    """Known RIFF chunk identifiers.

    Identifiers that are not listed here map to UNKNOWN; the raw four bytes
    stay available on :attr:`Chunk.id`. UNKNOWN is a single member, so
    ``Chunk(b"rndm").tag == Chunk(b"8bad").tag``. Compare chunk identity
    through :attr:`Chunk.id`, not :attr:`Chunk.tag`.
    """

    RIFF = RIFF_ID
    FMT = FMT_ID
    DATA = DATA_ID
    WAVE = WAVE_ID
    LIST = LIST_ID
    INFO = INFO_ID
    JUNK = JUNK_ID
    UNKNOWN = b""

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ChunkTag":
        """Convert a FourCC to its tag, treating unknown ids as UNKNOWN."""
        try:
            return cls(bytes(raw))
        except ValueError:
            return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        """Printable FourCC for this tag."""
        return self.value.decode("ascii") if self.value else "????"


@dataclass(frozen=True)
class Chunk:
    """A single RIFF chunk: identifier and payload, without the 8-byte header."""

    id: bytes
    """The raw 4-byte chunk identifier."""

    payload: bytes = b""
    """The chunk body, excluding any pad byte."""

    def __post_init__(self) -> None:
        # Copy so the chunk never aliases a caller's mutable buffer
        object.__setattr__(self, "id", bytes(self.id))
        object.__setattr__(self, "payload", bytes(self.payload))
        if len(self.id) != 4:
            raise ValueError(f"Chunk id must be 4 bytes, got {self.id!r}")
        if len(self.payload) > MAX_CHUNK_SIZE:
            raise ValueError(
                f"Chunk payload of {len(self.payload)} bytes does not fit a 32-bit size field"
            )

    @property
    def tag(self) -> ChunkTag:
        """The known tag for this chunk, or UNKNOWN."""
        return ChunkTag.from_bytes(self.id)

    @property
    def size(self) -> int:
        """Payload size as written to the length field."""
        return len(self.payload)

    def to_bytes(self) -> bytes:
        """Frame this chunk, including its header and pad byte."""
        return frame(self.id, self.payload)


@dataclass
class ListChunk:
    """A parsed LIST chunk: its list type and the chunks it contains.

    Nested LIST chunks appear as ListChunk entries in ``subchunks``.
    """

    list_type: bytes
    subchunks: list["Chunk | ListChunk"] = field(default_factory=list)

    @property
    def id(self) -> bytes:
        return LIST_ID


def read_chunk_header(buffer: bytes, offset: int, end: int | None = None) -> tuple[bytes, int]:
    """Read a RIFF chunk header (FourCC + size).

    Args:
        buffer: Bytes containing the chunk.
        offset: Position of the chunk header in ``buffer``.
        end: Position past which nothing may be read (default: end of buffer).

    Returns:
        Tuple of (chunk_id, chunk_size).

    Raises:
        TruncatedChunkError: If fewer than 8 bytes remain.
    """
    if end is None:
        end = len(buffer)
    if offset + CHUNK_HEADER_SIZE > end:
        raise TruncatedChunkError(offset, CHUNK_HEADER_SIZE, max(end - offset, 0))

    chunk_id = bytes(buffer[offset : offset + 4])
    chunk_size = struct.unpack_from("<I", buffer, offset + 4)[0]
    return chunk_id, chunk_size


def read_chunk(buffer: bytes, offset: int, end: int | None = None) -> tuple[Chunk, int]:
    """Read one chunk and return it with the offset of the next sibling.

    Raises:
        TruncatedChunkError: If the header or payload extends past ``end``.
    """
    if end is None:
        end = len(buffer)

    chunk_id, chunk_size = read_chunk_header(buffer, offset, end)
    start = offset + CHUNK_HEADER_SIZE
    stop = start + chunk_size
    if stop > end:
        raise TruncatedChunkError(start, chunk_size, end - start)

    chunk = Chunk(chunk_id, buffer[start:stop])

    # Skip the word alignment pad byte; a missing final pad is tolerated
    next_offset = min(stop + (chunk_size % 2), end)
    return chunk, next_offset


def parse_chunks(buffer: bytes, start: int = 0, end: int | None = None) -> list[Chunk]:
    """Tokenize a run of sibling chunks.

    Args:
        buffer: Bytes containing the chunks.
        start: Offset of the first chunk header.
        end: Offset one past the last byte belonging to the run.

    Returns:
        The chunks in file order.

    Raises:
        TruncatedChunkError: If any chunk runs past ``end``.
    """
    if end is None:
        end = len(buffer)

    chunks: list[Chunk] = []
    offset = start
    while offset < end:
        chunk, offset = read_chunk(buffer, offset, end)
        chunks.append(chunk)
    return chunks


def parse_top_level(buffer: bytes) -> list[Chunk]:
    """Split a RIFF/WAVE buffer into the chunks inside its RIFF chunk.

    Bytes after the end of the RIFF chunk are ignored.

    Args:
        buffer: A complete RIFF/WAVE file image.

    Returns:
        The top-level chunks (fmt, data and any others) in file order.

    Raises:
        NoRiffChunkFoundError: If the first chunk is not RIFF.
        NoWaveTagFoundError: If the RIFF form type is not WAVE.
        TruncatedChunkError: If any read runs past the end of the buffer.
    """
    chunk_id, riff_size = read_chunk_header(buffer, 0)
    if chunk_id != RIFF_ID:
        raise NoRiffChunkFoundError(chunk_id)

    riff_end = CHUNK_HEADER_SIZE + riff_size
    if riff_end > len(buffer):
        raise TruncatedChunkError(CHUNK_HEADER_SIZE, riff_size, len(buffer) - CHUNK_HEADER_SIZE)
    if riff_size < 4:
        raise TruncatedChunkError(CHUNK_HEADER_SIZE, 4, riff_size)

    form_type = bytes(buffer[8:12])
    if form_type != WAVE_ID:
        raise NoWaveTagFoundError(form_type)

    return parse_chunks(buffer, 12, riff_end)


def frame(chunk_id: bytes, payload: bytes) -> bytes:
    """Frame a chunk as FourCC, little-endian size and payload.

    A zero pad byte follows odd-length payloads; it is not counted in the
    size field.

    Raises:
        ValueError: If the id is not 4 bytes or the payload exceeds 32 bits.
    """
    chunk_id = bytes(chunk_id)
    if len(chunk_id) != 4:
        raise ValueError(f"Chunk id must be 4 bytes, got {chunk_id!r}")

    size = len(payload)
    if size > MAX_CHUNK_SIZE:
        raise ValueError(f"Chunk payload of {size} bytes does not fit a 32-bit size field")

    framed = bytearray(chunk_id)
    framed.extend(struct.pack("<I", size))
    framed.extend(payload)

    # Pad for word alignment
    if size % 2:
        framed.extend(b"\x00")

    return bytes(framed)


def parse_list(chunk: Chunk, max_depth: int = MAX_LIST_DEPTH) -> ListChunk:
    """Parse a LIST chunk into its list type and nested chunks.

    Args:
        chunk: A chunk whose id is LIST.
        max_depth: Maximum number of nested LIST levels, counting this one.

    Returns:
        The parsed ListChunk. Nested LIST chunks are parsed recursively.

    Raises:
        UnknownChunkIDError: If ``chunk`` is not a LIST chunk.
        NestingDepthError: If LIST chunks nest deeper than ``max_depth``.
        TruncatedChunkError: If the LIST body is malformed.
    """
    return _parse_list(chunk, max_depth, depth=1)


def _parse_list(chunk: Chunk, max_depth: int, depth: int) -> ListChunk:
    if chunk.id != LIST_ID:
        raise UnknownChunkIDError(chunk.id)
    if depth > max_depth:
        raise NestingDepthError(max_depth)

    payload = chunk.payload
    if len(payload) < 4:
        raise TruncatedChunkError(0, 4, len(payload))

    subchunks: list[Chunk | ListChunk] = []
    for sub in parse_chunks(payload, 4):
        if sub.id == LIST_ID:
            subchunks.append(_parse_list(sub, max_depth, depth + 1))
        else:
            subchunks.append(sub)

    return ListChunk(list_type=payload[:4], subchunks=subchunks)


def frame_list(list_chunk: ListChunk) -> Chunk:
    """Serialize a ListChunk back into a plain LIST chunk."""
    if len(list_chunk.list_type) != 4:
        raise ValueError(f"List type must be 4 bytes, got {list_chunk.list_type!r}")

    body = bytearray(list_chunk.list_type)
    for sub in list_chunk.subchunks:
        if isinstance(sub, ListChunk):
            sub = frame_list(sub)
        body.extend(frame(sub.id, sub.payload))
    return Chunk(LIST_ID, bytes(body))
