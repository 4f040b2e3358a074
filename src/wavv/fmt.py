"""Codec for the ``fmt `` chunk of a WAVE file.

Only the canonical 16-byte linear PCM layout is supported:

    offset  width  field
    0       2      audio format (always 1)
    2       2      num channels
    4       4      sample rate
    8       4      byte rate       (derived, ignored on read)
    12      2      block align     (derived, ignored on read)
    14      2      bits per sample
"""

import struct
from dataclasses import dataclass

from wavv.errors import TruncatedChunkError, UnsupportedFormatError

# Audio format codes
WAVE_FORMAT_PCM = 1

FMT_CHUNK_SIZE = 16

_FMT_STRUCT = struct.Struct("<HHIIHH")


@dataclass(frozen=True)
class FormatDescriptor:
    """Sample rate, channel count and bit depth of a PCM stream."""

    sample_rate: int
    """Sample rate in Hz, typically 44100, 48000 or 96000."""

    num_channels: int
    """Number of interleaved channels."""

    bit_depth: int
    """Bits per sample, 8, 16 or 24 for decodable sample data."""

    def __post_init__(self) -> None:
        if not 0 <= self.sample_rate <= 0xFFFFFFFF:
            raise ValueError(f"sample_rate must fit in 32 bits, got {self.sample_rate}")
        if not 0 <= self.num_channels <= 0xFFFF:
            raise ValueError(f"num_channels must fit in 16 bits, got {self.num_channels}")
        if not 0 <= self.bit_depth <= 0xFFFF:
            raise ValueError(f"bit_depth must fit in 16 bits, got {self.bit_depth}")

    @property
    def bytes_per_sample(self) -> int:
        return self.bit_depth // 8

    @property
    def block_align(self) -> int:
        """Bytes per frame (one sample for every channel)."""
        return self.num_channels * self.bit_depth // 8

    @property
    def byte_rate(self) -> int:
        """Bytes per second of audio."""
        return self.sample_rate * self.bit_depth * self.num_channels // 8


def decode_fmt(payload: bytes) -> FormatDescriptor:
    """Decode a fmt chunk payload.

    Byte rate and block align are derived values and are not checked.
    Payloads longer than 16 bytes are accepted and the extra bytes ignored.

    Args:
        payload: The fmt chunk body.

    Returns:
        The decoded FormatDescriptor.

    Raises:
        TruncatedChunkError: If the payload is shorter than 16 bytes.
        UnsupportedFormatError: If the audio format is not linear PCM.
    """
    if len(payload) < FMT_CHUNK_SIZE:
        raise TruncatedChunkError(0, FMT_CHUNK_SIZE, len(payload))

    audio_format, num_channels, sample_rate, _byte_rate, _block_align, bit_depth = (
        _FMT_STRUCT.unpack_from(payload)
    )

    if audio_format != WAVE_FORMAT_PCM:
        raise UnsupportedFormatError(audio_format)

    return FormatDescriptor(
        sample_rate=sample_rate,
        num_channels=num_channels,
        bit_depth=bit_depth,
    )


def encode_fmt(descriptor: FormatDescriptor) -> bytes:
    """Encode a FormatDescriptor as a 16-byte fmt chunk payload.

    Byte rate and block align are recomputed from the descriptor, so the
    output is consistent even for hand-built descriptors.

    Raises:
        ValueError: If the derived byte rate or block align overflow their fields.
    """
    byte_rate = descriptor.byte_rate
    block_align = descriptor.block_align
    if byte_rate > 0xFFFFFFFF:
        raise ValueError(f"Byte rate {byte_rate} does not fit in 32 bits")
    if block_align > 0xFFFF:
        raise ValueError(f"Block align {block_align} does not fit in 16 bits")

    return _FMT_STRUCT.pack(
        WAVE_FORMAT_PCM,
        descriptor.num_channels,
        descriptor.sample_rate,
        byte_rate,
        block_align,
        descriptor.bit_depth,
    )
