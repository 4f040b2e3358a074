"""Codec for the ``data`` chunk of a PCM WAVE file.

Samples are kept interleaved in storage order (channel 0, channel 1, ...,
channel 0, ...). The codec does not look at the channel count; use
:meth:`SampleBuffer.frames` to view the samples one frame per row.

Supported bit depths: 8 (unsigned), 16 and 24 (signed, little-endian).
24-bit samples are held sign-extended in 32-bit integers.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from wavv.errors import SampleRangeError, UnsupportedBitDepthError
from wavv.fmt import FormatDescriptor


class BitDepth(IntEnum):
    """PCM bit depths the sample codec can decode."""

    PCM8 = 8
    """Unsigned 8-bit samples."""

    PCM16 = 16
    """Signed 16-bit samples."""

    PCM24 = 24
    """Signed 24-bit samples, stored sign-extended in 32 bits."""

    @classmethod
    def from_value(cls, value: int) -> "BitDepth":
        """Convert a bit depth from a fmt chunk.

        Raises:
            UnsupportedBitDepthError: If the value is not 8, 16 or 24.
        """
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedBitDepthError(value) from None

    @property
    def width(self) -> int:
        """Bytes per sample in the data chunk."""
        return self.value // 8

    @property
    def dtype(self) -> np.dtype[Any]:
        """In-memory numpy dtype for samples of this depth."""
        dtypes = {
            BitDepth.PCM8: np.dtype(np.uint8),
            BitDepth.PCM16: np.dtype(np.int16),
            BitDepth.PCM24: np.dtype(np.int32),
        }
        return dtypes[self]

    @property
    def limits(self) -> tuple[int, int]:
        """Inclusive (min, max) sample values."""
        if self == BitDepth.PCM8:
            return 0, 0xFF
        half = 1 << (self.value - 1)
        return -half, half - 1


@dataclass(eq=False)
class SampleBuffer:
    """Interleaved PCM samples of a single bit depth."""

    bit_depth: BitDepth
    """Bit depth of every sample in the buffer."""

    samples: NDArray[np.integer[Any]]
    """Flat array of samples (uint8, int16 or int32 depending on bit depth)."""

    def __post_init__(self) -> None:
        self.bit_depth = BitDepth.from_value(self.bit_depth)
        dtype = self.bit_depth.dtype

        # Multi-dimensional input is flattened row-major, i.e. interleaved
        values = np.asarray(self.samples).reshape(-1)
        if values.size == 0:
            self.samples = np.zeros(0, dtype=dtype)
            return

        if not np.issubdtype(values.dtype, np.integer):
            raise TypeError(f"Samples must be integers, got dtype {values.dtype}")

        low, high = self.bit_depth.limits
        minimum, maximum = int(values.min()), int(values.max())
        if minimum < low or maximum > high:
            raise SampleRangeError(self.bit_depth.value, minimum, maximum)

        self.samples = values.astype(dtype)

    @classmethod
    def pcm8(cls, values: ArrayLike) -> "SampleBuffer":
        """Create a buffer of unsigned 8-bit samples."""
        return cls(BitDepth.PCM8, np.asarray(values))

    @classmethod
    def pcm16(cls, values: ArrayLike) -> "SampleBuffer":
        """Create a buffer of signed 16-bit samples."""
        return cls(BitDepth.PCM16, np.asarray(values))

    @classmethod
    def pcm24(cls, values: ArrayLike) -> "SampleBuffer":
        """Create a buffer of signed 24-bit samples."""
        return cls(BitDepth.PCM24, np.asarray(values))

    def __len__(self) -> int:
        return len(self.samples)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampleBuffer):
            return NotImplemented
        return self.bit_depth == other.bit_depth and np.array_equal(self.samples, other.samples)

    def tolist(self) -> list[int]:
        return [int(s) for s in self.samples]

    def frames(self, num_channels: int) -> NDArray[np.integer[Any]]:
        """View the samples as an array of shape (num_frames, num_channels).

        A trailing partial frame is dropped.
        """
        if num_channels < 1:
            raise ValueError(f"num_channels must be >= 1, got {num_channels}")
        usable = len(self.samples) - len(self.samples) % num_channels
        return self.samples[:usable].reshape(-1, num_channels)


def decode_data(descriptor: FormatDescriptor, payload: bytes) -> SampleBuffer:
    """Decode a data chunk payload into samples.

    Trailing bytes that do not form a whole sample are dropped.

    Args:
        descriptor: Format of the stream, only the bit depth is used.
        payload: The data chunk body.

    Returns:
        SampleBuffer with one entry per complete sample.

    Raises:
        UnsupportedBitDepthError: If the bit depth is not 8, 16 or 24.
    """
    bit_depth = BitDepth.from_value(descriptor.bit_depth)
    usable = len(payload) - len(payload) % bit_depth.width
    raw = np.frombuffer(bytes(payload[:usable]), dtype=np.uint8)

    if bit_depth == BitDepth.PCM8:
        samples = _decode_8bit(raw)
    elif bit_depth == BitDepth.PCM16:
        samples = _decode_16bit(raw)
    else:
        samples = _decode_24bit(raw)

    return SampleBuffer(bit_depth, samples)


def _decode_8bit(raw: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Decode unsigned 8-bit PCM samples (stored as-is)."""
    return raw.copy()


def _decode_16bit(raw: NDArray[np.uint8]) -> NDArray[np.int16]:
    """Decode signed 16-bit little-endian PCM samples."""
    return raw.view("<i2").astype(np.int16)


def _decode_24bit(raw: NDArray[np.uint8]) -> NDArray[np.int32]:
    """Decode signed 24-bit little-endian PCM samples.

    Each 3-byte group gets a fourth, most significant byte of 0xFF when the
    sign bit of its third byte is set and 0x00 otherwise; the four bytes are
    then read as a little-endian int32.
    """
    triples = raw.reshape(-1, 3)
    extension = np.where(triples[:, 2] & 0x80, 0xFF, 0x00).astype(np.uint8)
    widened = np.concatenate([triples, extension[:, np.newaxis]], axis=1)
    return np.ascontiguousarray(widened).view("<i4").reshape(-1).astype(np.int32)


def encode_data(buffer: SampleBuffer) -> bytes:
    """Encode samples as a data chunk payload.

    24-bit samples are written as the low three bytes of each int32, which
    is exact because SampleBuffer rejects values outside the 24-bit range.
    """
    samples = buffer.samples

    if buffer.bit_depth == BitDepth.PCM8:
        return samples.astype(np.uint8).tobytes()
    if buffer.bit_depth == BitDepth.PCM16:
        return samples.astype("<i2").tobytes()

    widened = samples.astype("<i4")
    return widened.view(np.uint8).reshape(-1, 4)[:, :3].tobytes()

