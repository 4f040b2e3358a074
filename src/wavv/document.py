"""WAVE document reading and writing.

A :class:`WaveDocument` ties the chunk framing and the fmt/data codecs
together: it parses a complete RIFF/WAVE buffer into its format, samples
and ancillary chunks, and serializes them back.

Ancillary chunks (LIST, JUNK, vendor chunks, ...) are kept verbatim and
written back at their original position relative to fmt and data.
"""

import struct
from collections.abc import Mapping
from dataclasses import dataclass, field

from wavv.errors import NoDataChunkFoundError, NoFmtChunkFoundError
from wavv.fmt import FormatDescriptor, decode_fmt, encode_fmt
from wavv.info import decode_info, encode_info, is_info_chunk
from wavv.riff import (
    CHUNK_HEADER_SIZE,
    DATA_ID,
    FMT_ID,
    MAX_CHUNK_SIZE,
    RIFF_ID,
    WAVE_ID,
    Chunk,
    parse_top_level,
)
from wavv.samples import SampleBuffer, decode_data, encode_data


@dataclass
class WaveDocument:
    """A decoded WAVE file."""

    format: FormatDescriptor
    """Sample rate, channel count and bit depth from the fmt chunk."""

    samples: SampleBuffer
    """Interleaved samples from the data chunk."""

    ancillary: list[Chunk] = field(default_factory=list)
    """Every other top-level chunk, in file order."""

    fmt_index: int = 0
    """Position of the fmt chunk among all top-level chunks."""

    data_index: int = 1
    """Position of the data chunk among all top-level chunks."""

    @classmethod
    def from_bytes(cls, buffer: bytes) -> "WaveDocument":
        """Parse a complete RIFF/WAVE buffer.

        The fmt chunk is decoded first and its bit depth drives the decoding
        of the data chunk. When fmt or data appear more than once the first
        occurrence is used and later ones are kept as ancillary chunks.
        Those are written back by :meth:`to_bytes`, so the output of a file
        with two data (or fmt) chunks still holds two.

        Args:
            buffer: A complete RIFF/WAVE file image. It is not retained.

        Returns:
            The parsed WaveDocument.

        Raises:
            NoRiffChunkFoundError: If the buffer is not a RIFF file.
            NoWaveTagFoundError: If the RIFF form type is not WAVE.
            TruncatedChunkError: If a chunk runs past the end of the buffer.
            NoFmtChunkFoundError: If there is no fmt chunk.
            NoDataChunkFoundError: If there is no data chunk.
            UnsupportedFormatError: If the fmt chunk is not linear PCM.
            UnsupportedBitDepthError: If the bit depth is not 8, 16 or 24.
        """
        chunks = parse_top_level(buffer)

        fmt_index = _find_chunk(chunks, FMT_ID)
        if fmt_index is None:
            raise NoFmtChunkFoundError()

        data_index = _find_chunk(chunks, DATA_ID)
        if data_index is None:
            raise NoDataChunkFoundError()

        descriptor = decode_fmt(chunks[fmt_index].payload)
        samples = decode_data(descriptor, chunks[data_index].payload)

        ancillary = [
            chunk for i, chunk in enumerate(chunks) if i not in (fmt_index, data_index)
        ]

        return cls(
            format=descriptor,
            samples=samples,
            ancillary=ancillary,
            fmt_index=fmt_index,
            data_index=data_index,
        )

    @classmethod
    def from_samples(
        cls,
        samples: SampleBuffer,
        sample_rate: int,
        num_channels: int,
    ) -> "WaveDocument":
        """Create a document for writing from samples.

        The bit depth is taken from the sample buffer.

        Example:
            >>> doc = WaveDocument.from_samples(SampleBuffer.pcm16([1, 2, 3, -1]), 48000, 2)
            >>> doc.format.bit_depth
            16
        """
        descriptor = FormatDescriptor(
            sample_rate=sample_rate,
            num_channels=num_channels,
            bit_depth=int(samples.bit_depth),
        )
        return cls(format=descriptor, samples=samples)

    def to_bytes(self) -> bytes:
        """Serialize the document as a RIFF/WAVE buffer.

        Writes the RIFF header, then fmt, data and ancillary chunks in their
        recorded order, and back-patches the RIFF size once the total length
        is known.

        Raises:
            ValueError: If the file would exceed the 32-bit RIFF size limit.
        """
        wav = bytearray()

        # RIFF header, size filled in below
        wav.extend(RIFF_ID)
        wav.extend(b"\x00\x00\x00\x00")
        wav.extend(WAVE_ID)

        for chunk in self.chunks():
            wav.extend(chunk.to_bytes())

        # Subtract 8 for the RIFF id and size fields
        riff_size = len(wav) - CHUNK_HEADER_SIZE
        if riff_size > MAX_CHUNK_SIZE:
            raise ValueError(f"RIFF size {riff_size} does not fit a 32-bit size field")
        struct.pack_into("<I", wav, 4, riff_size)

        return bytes(wav)

    def chunks(self) -> list[Chunk]:
        """All top-level chunks in the order they are written."""
        ordered = list(self.ancillary)
        placed = sorted(
            [
                (self.fmt_index, Chunk(FMT_ID, encode_fmt(self.format))),
                (self.data_index, Chunk(DATA_ID, encode_data(self.samples))),
            ],
            key=lambda entry: entry[0],
        )
        for index, chunk in placed:
            ordered.insert(min(max(index, 0), len(ordered)), chunk)
        return ordered

    @property
    def num_frames(self) -> int:
        """Number of complete sample frames (one sample per channel)."""
        if self.format.num_channels == 0:
            return 0
        return len(self.samples) // self.format.num_channels

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.format.sample_rate == 0:
            return 0.0
        return self.num_frames / self.format.sample_rate

    @property
    def info(self) -> dict[str, str]:
        """Text fields from the first LIST/INFO chunk, or an empty dict.

        The chunk is decoded on each access, so a malformed one raises here
        rather than in :meth:`from_bytes`.

        Raises:
            TruncatedChunkError: If an INFO subchunk runs past the LIST body.
            NestingDepthError: If the LIST nests deeper than MAX_LIST_DEPTH.
        """
        for chunk in self.ancillary:
            if is_info_chunk(chunk):
                return decode_info(chunk)
        return {}

    def set_info(self, fields: Mapping[str, str]) -> None:
        """Replace the first LIST/INFO chunk, or append one if there is none."""
        info_chunk = encode_info(fields)
        for i, chunk in enumerate(self.ancillary):
            if is_info_chunk(chunk):
                self.ancillary[i] = info_chunk
                return
        self.ancillary.append(info_chunk)

    def without_ancillary(self) -> "WaveDocument":
        """Copy of this document holding only the fmt and data chunks."""
        samples = SampleBuffer(self.samples.bit_depth, self.samples.samples)
        return WaveDocument(format=self.format, samples=samples)


def _find_chunk(chunks: list[Chunk], chunk_id: bytes) -> int | None:
    """Index of the first chunk with the given id."""
    for i, chunk in enumerate(chunks):
        if chunk.id == chunk_id:
            return i
    return None
