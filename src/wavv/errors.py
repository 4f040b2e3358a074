"""Error types raised while reading or writing RIFF/WAVE buffers.

Every failure derives from :class:`RiffError`, so callers that only care
whether a buffer is usable can catch a single type, while callers that
want partial recovery can catch the specific kinds below.
"""


class RiffError(Exception):
    """Error reading or writing RIFF files."""


class TruncatedChunkError(RiffError):
    """A chunk tag, length field or payload runs past the end of the buffer."""

    def __init__(self, offset: int, needed: int, available: int) -> None:
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"Unexpected end of buffer at offset {offset}: "
            f"needed {needed} bytes, {available} available"
        )


class NoRiffChunkFoundError(RiffError):
    """The buffer does not start with a RIFF chunk."""

    def __init__(self, found: bytes) -> None:
        self.found = found
        super().__init__(f"Not a RIFF file (found {found!r})")


class NoWaveTagFoundError(RiffError):
    """The RIFF chunk does not carry the WAVE form type."""

    def __init__(self, found: bytes) -> None:
        self.found = found
        super().__init__(f"Not a WAVE file (found {found!r})")


class NoFmtChunkFoundError(RiffError):
    """fmt chunk not found in WAV buffer."""

    def __init__(self) -> None:
        super().__init__("fmt chunk not found in WAV buffer")


class NoDataChunkFoundError(RiffError):
    """data chunk not found in WAV buffer."""

    def __init__(self) -> None:
        super().__init__("data chunk not found in WAV buffer")


class UnsupportedFormatError(RiffError):
    """The fmt chunk describes something other than linear PCM."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Unsupported audio format: {value} (only PCM=1 is supported)")


class UnsupportedBitDepthError(RiffError):
    """Bit depth outside of 8, 16 and 24."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Unsupported bit depth: {value}")


class UnknownChunkIDError(RiffError):
    """A specific chunk identity was required but another one was found."""

    def __init__(self, raw: bytes) -> None:
        self.raw = raw
        super().__init__(f"Unknown chunk id: {raw!r}")


class NestingDepthError(RiffError):
    """LIST chunks are nested deeper than the configured limit."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"LIST chunks nested deeper than {max_depth} levels")


class SampleRangeError(RiffError, ValueError):
    """Sample values do not fit in the bit depth of their buffer."""

    def __init__(self, bit_depth: int, minimum: int, maximum: int) -> None:
        self.bit_depth = bit_depth
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Samples out of range for {bit_depth}-bit PCM: "
            f"got [{minimum}, {maximum}]"
        )
