"""Unit tests for WaveDocument parsing and serialization."""

import struct

import pytest

from wavv.document import WaveDocument
from wavv.errors import (
    NoDataChunkFoundError,
    NoFmtChunkFoundError,
    NoRiffChunkFoundError,
    NoWaveTagFoundError,
    TruncatedChunkError,
    UnsupportedBitDepthError,
    UnsupportedFormatError,
)
from wavv.fmt import FormatDescriptor
from wavv.info import encode_info
from wavv.riff import Chunk, parse_top_level
from wavv.samples import SampleBuffer

STEREO_16_BIT = bytes.fromhex(
    "52494646 34000000 57415645"
    "666d7420 10000000"
    "0100 0200 22560000 88580100 0400 1000"  # PCM, 2ch, 22050 Hz, 16-bit
    "64617461 10000000"
    "00000000 24171ef3 3c133c14 16f918f9"
)

MONO_24_BIT = bytes.fromhex(
    "52494646 30000000 57415645"
    "666d7420 10000000"
    "0100 0100 44ac0000 88580100 0400 1800"  # PCM, 1ch, 44100 Hz, 24-bit
    "64617461 0c000000"
    "000000 002417 1ef33c 133c14"
)

MONO_24_BIT_PADDED = bytes.fromhex(
    "52494646 28000000 57415645"
    "666d7420 10000000"
    "0100 0100 44ac0000 88580100 0400 1800"
    "64617461 03000000"
    "ffffff 00"  # one sample and a pad byte
)

STEREO_16_BIT_48K = bytes.fromhex(
    "52494646 34000000 57415645"
    "666d7420 10000000"
    "0100 0200 80bb0000 00ee0200 0400 1000"
    "64617461 10000000"
    "00000000 24171ef3 3c133c14 16f918f9"
)

MONO_24_BIT_48K_SILENCE = bytes.fromhex(
    "52494646 30000000 57415645"
    "666d7420 10000000"
    "0100 0100 80bb0000 80320200 0300 1800"
    "64617461 0c000000"
    "000000 000000 000000 000000"
)

WITH_VENDOR_CHUNKS = bytes.fromhex(
    "52494646 50000000 57415645"
    "666d7420 10000000"
    "0100 0200 80bb0000 00ee0200 0400 1000"
    "726e646d 04000000 aaaaaaaa"  # rndm
    "8badf00d 08000000 aaffaaff ffaaffaa"  # non-ASCII id
    "64617461 10000000"
    "00000000 24171ef3 3c133c14 16f918f9"
)


def raw_chunk(chunk_id: bytes, payload: bytes) -> bytes:
    data = chunk_id + struct.pack("<I", len(payload)) + payload
    if len(payload) % 2:
        data += b"\x00"
    return data


def riff_wave(*chunks: bytes) -> bytes:
    body = b"WAVE" + b"".join(chunks)
    return b"RIFF" + struct.pack("<I", len(body)) + body


def fmt_payload(channels: int = 1, rate: int = 8000, bits: int = 8) -> bytes:
    block_align = channels * bits // 8
    return struct.pack("<HHIIHH", 1, channels, rate, rate * block_align, block_align, bits)


class TestFromBytes:
    """Tests for WaveDocument.from_bytes."""

    def test_stereo_16_bit(self) -> None:
        """Test parsing a canonical stereo 16-bit file."""
        wav = WaveDocument.from_bytes(STEREO_16_BIT)

        assert wav.format == FormatDescriptor(22050, 2, 16)
        assert wav.samples.tolist() == [0, 0, 5924, -3298, 4924, 5180, -1770, -1768]
        assert wav.ancillary == []

    def test_mono_24_bit(self) -> None:
        """Test parsing a mono 24-bit file."""
        wav = WaveDocument.from_bytes(MONO_24_BIT)

        assert wav.format == FormatDescriptor(44100, 1, 24)
        assert wav.samples.tolist() == [0, 0x172400, 0x3CF31E, 0x143C13]

    def test_24_bit_with_pad_byte(self) -> None:
        """Test an odd-sized data chunk followed by its pad byte."""
        wav = WaveDocument.from_bytes(MONO_24_BIT_PADDED)

        assert wav.samples == SampleBuffer.pcm24([-1])

    def test_8_bit_odd_length(self) -> None:
        """Test an odd-length 8-bit data chunk."""
        buffer = riff_wave(raw_chunk(b"fmt ", fmt_payload()), raw_chunk(b"data", b"\x80\x81\x82"))

        wav = WaveDocument.from_bytes(buffer)

        assert wav.samples == SampleBuffer.pcm8([128, 129, 130])

    def test_data_before_fmt(self) -> None:
        """Test data before fmt."""
        buffer = riff_wave(
            raw_chunk(b"data", b"\x01\x00\x02\x00"),
            raw_chunk(b"fmt ", fmt_payload(bits=16)),
        )

        wav = WaveDocument.from_bytes(buffer)

        assert wav.samples.tolist() == [1, 2]
        assert (wav.fmt_index, wav.data_index) == (1, 0)

    def test_ancillary_chunks_are_kept(self) -> None:
        """Test ancillary chunks are kept."""
        wav = WaveDocument.from_bytes(WITH_VENDOR_CHUNKS)

        assert wav.ancillary == [
            Chunk(b"rndm", b"\xaa" * 4),
            Chunk(bytes.fromhex("8badf00d"), bytes.fromhex("aaffaaffffaaffaa")),
        ]
        assert (wav.fmt_index, wav.data_index) == (0, 3)

    def test_duplicate_chunks_first_wins(self) -> None:
        """Test duplicate chunks first wins."""
        buffer = riff_wave(
            raw_chunk(b"fmt ", fmt_payload(bits=16)),
            raw_chunk(b"data", b"\x01\x00"),
            raw_chunk(b"data", b"\x02\x00"),
        )

        wav = WaveDocument.from_bytes(buffer)

        assert wav.samples.tolist() == [1]
        assert wav.ancillary == [Chunk(b"data", b"\x02\x00")]

    def test_duplicate_chunks_are_written_back(self) -> None:
        """Test a second data chunk survives a read and write."""
        buffer = riff_wave(
            raw_chunk(b"fmt ", fmt_payload(bits=16)),
            raw_chunk(b"data", b"\x01\x00"),
            raw_chunk(b"data", b"\x02\x00"),
        )

        output = WaveDocument.from_bytes(buffer).to_bytes()

        assert [c.id for c in parse_top_level(output)] == [b"fmt ", b"data", b"data"]
        assert output == buffer

    def test_missing_fmt(self) -> None:
        """Test missing fmt."""
        with pytest.raises(NoFmtChunkFoundError):
            WaveDocument.from_bytes(riff_wave(raw_chunk(b"data", b"\x00\x00")))

    def test_missing_data(self) -> None:
        """Test missing data."""
        with pytest.raises(NoDataChunkFoundError):
            WaveDocument.from_bytes(riff_wave(raw_chunk(b"fmt ", fmt_payload())))

    def test_missing_fmt_is_reported_before_data(self) -> None:
        """Test missing fmt is reported before data."""
        with pytest.raises(NoFmtChunkFoundError):
            WaveDocument.from_bytes(riff_wave(raw_chunk(b"JUNK", b"")))

    def test_not_a_riff_file(self) -> None:
        """Test not a riff file."""
        with pytest.raises(NoRiffChunkFoundError):
            WaveDocument.from_bytes(b"OggS" + bytes(40))

    def test_not_a_wave_file(self) -> None:
        """Test not a wave file."""
        with pytest.raises(NoWaveTagFoundError):
            WaveDocument.from_bytes(STEREO_16_BIT[:8] + b"AVI " + STEREO_16_BIT[12:])

    def test_truncated_file(self) -> None:
        """Test truncated file."""
        with pytest.raises(TruncatedChunkError):
            WaveDocument.from_bytes(STEREO_16_BIT[:50])

    def test_float_format_is_rejected(self) -> None:
        """Test float format is rejected."""
        fmt = struct.pack("<HHIIHH", 3, 1, 48000, 192000, 4, 32)
        buffer = riff_wave(raw_chunk(b"fmt ", fmt), raw_chunk(b"data", bytes(8)))

        with pytest.raises(UnsupportedFormatError):
            WaveDocument.from_bytes(buffer)

    def test_32_bit_pcm_is_rejected(self) -> None:
        """Test 32-bit PCM is rejected with the offending bit depth."""
        buffer = riff_wave(raw_chunk(b"fmt ", fmt_payload(bits=32)), raw_chunk(b"data", bytes(8)))

        with pytest.raises(UnsupportedBitDepthError) as exc_info:
            WaveDocument.from_bytes(buffer)
        assert exc_info.value.value == 32

    def test_buffer_is_not_retained(self) -> None:
        """Test buffer is not retained."""
        buffer = bytearray(STEREO_16_BIT)
        wav = WaveDocument.from_bytes(buffer)

        buffer[44:] = b"\xff" * 16

        assert wav.samples.tolist()[:2] == [0, 0]


class TestToBytes:
    """Tests for WaveDocument.to_bytes."""

    @pytest.mark.parametrize(
        "buffer",
        [STEREO_16_BIT, STEREO_16_BIT_48K, MONO_24_BIT_48K_SILENCE, WITH_VENDOR_CHUNKS],
        ids=["stereo-22k", "stereo-48k", "mono-24-bit", "vendor-chunks"],
    )
    def test_roundtrip_is_byte_exact(self, buffer: bytes) -> None:
        """Test roundtrip is byte exact."""
        assert WaveDocument.from_bytes(buffer).to_bytes() == buffer

    def test_from_samples(self) -> None:
        """Test serializing a document built from samples."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm16([1, 2, 3, -1]), 48000, 2)

        expected = bytes.fromhex(
            "52494646 2c000000 57415645"
            "666d7420 10000000"
            "0100 0200 80bb0000 00ee0200 0400 1000"
            "64617461 08000000"
            "01000200 0300ffff"
        )
        assert wav.to_bytes() == expected

    def test_derived_fmt_fields_are_rewritten(self) -> None:
        """Test derived fmt fields are rewritten."""
        # Stored byte rate and block align are inconsistent with 24-bit mono
        rewritten = WaveDocument.from_bytes(MONO_24_BIT).to_bytes()

        assert len(rewritten) == len(MONO_24_BIT)
        assert struct.unpack_from("<IH", rewritten, 28) == (44100 * 3, 3)
        assert rewritten[44:] == MONO_24_BIT[44:]

    def test_padded_data_is_reemitted_with_pad(self) -> None:
        """Test padded data is reemitted with pad."""
        rewritten = WaveDocument.from_bytes(MONO_24_BIT_PADDED).to_bytes()

        assert len(rewritten) == 48
        assert rewritten[36:] == bytes.fromhex("64617461 03000000 ffffff00")
        assert WaveDocument.from_bytes(rewritten).samples.tolist() == [-1]

    def test_odd_8_bit_data(self) -> None:
        """Test odd 8 bit data."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm8([1, 2, 3]), 8000, 1)

        data = wav.to_bytes()

        assert len(data) == 44 + 3 + 1
        assert struct.unpack_from("<I", data, 4)[0] == len(data) - 8
        assert struct.unpack_from("<I", data, 40)[0] == 3

    def test_data_before_fmt_order_is_preserved(self) -> None:
        """Test data before fmt order is preserved."""
        buffer = riff_wave(
            raw_chunk(b"data", b"\x01\x00\x02\x00"),
            raw_chunk(b"fmt ", fmt_payload(bits=16)),
        )

        assert WaveDocument.from_bytes(buffer).to_bytes() == buffer

    def test_edited_samples_are_written(self) -> None:
        """Test edited samples are written."""
        wav = WaveDocument.from_bytes(STEREO_16_BIT)
        wav.samples = SampleBuffer.pcm16([7, 8])

        reparsed = WaveDocument.from_bytes(wav.to_bytes())

        assert reparsed.samples.tolist() == [7, 8]
        assert reparsed.format == wav.format


class TestChunks:
    """Tests for WaveDocument.chunks ordering."""

    def test_default_order(self) -> None:
        """Test fmt and data are written before appended chunks."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm16([0]), 8000, 1)
        wav.ancillary.append(Chunk(b"JUNK", b""))

        assert [c.id for c in wav.chunks()] == [b"fmt ", b"data", b"JUNK"]

    def test_indices_past_end_are_clamped(self) -> None:
        """Test indices past end are clamped."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm16([0]), 8000, 1)
        wav.fmt_index, wav.data_index = 10, 11

        assert [c.id for c in wav.chunks()] == [b"fmt ", b"data"]


class TestProperties:
    """Tests for derived document properties."""

    def test_num_frames_and_duration(self) -> None:
        """Test num frames and duration."""
        wav = WaveDocument.from_bytes(STEREO_16_BIT)

        assert wav.num_frames == 4
        assert wav.duration == pytest.approx(4 / 22050)

    def test_partial_frame_is_not_counted(self) -> None:
        """Test partial frame is not counted."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm16([1, 2, 3]), 8000, 2)

        assert wav.num_frames == 1

    def test_zero_rate_and_channels(self) -> None:
        """Test zero rate and channels."""
        wav = WaveDocument.from_samples(SampleBuffer.pcm16([1, 2]), 0, 0)

        assert wav.num_frames == 0
        assert wav.duration == 0.0


class TestInfo:
    """Tests for LIST/INFO access on a document."""

    def test_no_info(self) -> None:
        """Test a file without LIST/INFO has empty metadata."""
        assert WaveDocument.from_bytes(STEREO_16_BIT).info == {}

    def test_set_info_appends_chunk(self) -> None:
        """Test set info appends chunk."""
        wav = WaveDocument.from_bytes(STEREO_16_BIT)

        wav.set_info({"INAM": "Test tone", "IART": "wavv"})
        reparsed = WaveDocument.from_bytes(wav.to_bytes())

        assert reparsed.info == {"INAM": "Test tone", "IART": "wavv"}
        assert reparsed.samples == wav.samples
        assert [c.id for c in reparsed.chunks()] == [b"fmt ", b"data", b"LIST"]

    def test_set_info_replaces_existing_chunk(self) -> None:
        """Test set info replaces existing chunk."""
        buffer = riff_wave(
            raw_chunk(b"fmt ", fmt_payload()),
            encode_info({"INAM": "Old"}).to_bytes(),
            raw_chunk(b"data", b"\x80\x80"),
        )
        wav = WaveDocument.from_bytes(buffer)
        assert wav.info == {"INAM": "Old"}

        wav.set_info({"INAM": "New"})

        assert wav.info == {"INAM": "New"}
        assert len(wav.ancillary) == 1
        # INFO stays between fmt and data
        assert [c.id for c in wav.chunks()] == [b"fmt ", b"LIST", b"data"]

    def test_other_list_types_are_ignored(self) -> None:
        """Test other list types are ignored."""
        adtl = raw_chunk(b"LIST", b"adtl" + raw_chunk(b"labl", bytes(4)))
        buffer = riff_wave(
            raw_chunk(b"fmt ", fmt_payload()), adtl, raw_chunk(b"data", b"\x80\x80")
        )

        assert WaveDocument.from_bytes(buffer).info == {}

    def test_malformed_info_raises_on_access(self) -> None:
        """Test a field running past the LIST body raises when info is read."""
        bad_info = raw_chunk(b"LIST", b"INFO" + b"INAM" + struct.pack("<I", 100) + b"abcd")
        buffer = riff_wave(
            raw_chunk(b"fmt ", fmt_payload()), raw_chunk(b"data", b"\x80\x80"), bad_info
        )
        wav = WaveDocument.from_bytes(buffer)

        with pytest.raises(TruncatedChunkError):
            wav.info


class TestWithoutAncillary:
    """Tests for WaveDocument.without_ancillary."""

    def test_drops_ancillary_chunks(self) -> None:
        """Test drops ancillary chunks."""
        wav = WaveDocument.from_bytes(WITH_VENDOR_CHUNKS)

        stripped = wav.without_ancillary()

        assert stripped.ancillary == []
        assert stripped.format == wav.format
        assert stripped.samples == wav.samples
        assert len(stripped.to_bytes()) == 60

    def test_samples_are_copied(self) -> None:
        """Test samples are copied."""
        wav = WaveDocument.from_bytes(STEREO_16_BIT)

        stripped = wav.without_ancillary()
        stripped.samples.samples[0] = 99

        assert wav.samples.tolist()[0] == 0
