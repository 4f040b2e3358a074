"""wavv - Read and write PCM WAVE files as byte buffers.

This package parses RIFF/WAVE buffers into a structured document and
serializes documents back into byte-exact buffers, without pulling in a
general multimedia framework.

File Structure
--------------
    +----------------------------------------+
    | RIFF header ("WAVE")                   |
    +----------------------------------------+
    | fmt  chunk (rate, channels, bit depth) |
    +----------------------------------------+
    | data chunk (interleaved PCM samples)   |
    |   - 8-bit unsigned                     |
    |   - 16/24-bit signed little-endian     |
    +----------------------------------------+
    | ancillary chunks (LIST, JUNK, ...)     |
    |   - kept verbatim, written back        |
    +----------------------------------------+

Example Usage
-------------
>>> from wavv import SampleBuffer, WaveDocument
>>> wav = WaveDocument.from_samples(SampleBuffer.pcm16([1, 2, 3, -1]), 48000, 2)
>>> data = wav.to_bytes()
>>> WaveDocument.from_bytes(data).samples.tolist()
[1, 2, 3, -1]
"""

from wavv.document import WaveDocument
from wavv.errors import (
    NestingDepthError,
    NoDataChunkFoundError,
    NoFmtChunkFoundError,
    NoRiffChunkFoundError,
    NoWaveTagFoundError,
    RiffError,
    SampleRangeError,
    TruncatedChunkError,
    UnknownChunkIDError,
    UnsupportedBitDepthError,
    UnsupportedFormatError,
)
from wavv.fmt import FormatDescriptor, decode_fmt, encode_fmt
from wavv.info import decode_info, encode_info
from wavv.io import load_wav, save_wav
from wavv.riff import Chunk, ChunkTag, ListChunk, frame, parse_list, parse_top_level
from wavv.samples import BitDepth, SampleBuffer, decode_data, encode_data

__all__ = [
    # Document
    "WaveDocument",
    "load_wav",
    "save_wav",
    # Chunks
    "Chunk",
    "ChunkTag",
    "ListChunk",
    "parse_top_level",
    "parse_list",
    "frame",
    # Format
    "FormatDescriptor",
    "decode_fmt",
    "encode_fmt",
    # Samples
    "BitDepth",
    "SampleBuffer",
    "decode_data",
    "encode_data",
    # Metadata
    "decode_info",
    "encode_info",
    # Errors
    "RiffError",
    "TruncatedChunkError",
    "NoRiffChunkFoundError",
    "NoWaveTagFoundError",
    "NoFmtChunkFoundError",
    "NoDataChunkFoundError",
    "UnsupportedFormatError",
    "UnsupportedBitDepthError",
    "UnknownChunkIDError",
    "NestingDepthError",
    "SampleRangeError",
]
