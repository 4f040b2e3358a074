"""LIST/INFO metadata chunks.

An INFO list is a LIST chunk with list type ``INFO`` whose subchunks hold
NUL-terminated text fields keyed by FourCC, for example ``INAM`` (title)
or ``IART`` (artist).
"""

from collections.abc import Mapping

from wavv.errors import UnknownChunkIDError
from wavv.riff import INFO_ID, LIST_ID, MAX_LIST_DEPTH, Chunk, ListChunk, frame_list, parse_list

# Common INFO field ids and their meaning
INFO_FIELDS = {
    "IARL": "Archival location",
    "IART": "Artist",
    "ICMT": "Comment",
    "ICOP": "Copyright",
    "ICRD": "Creation date",
    "IENG": "Engineer",
    "IGNR": "Genre",
    "IKEY": "Keywords",
    "INAM": "Title",
    "IPRD": "Product",
    "ISFT": "Software",
    "ISRC": "Source",
    "ITRK": "Track number",
}


def is_info_chunk(chunk: Chunk) -> bool:
    """Check whether a chunk is a LIST chunk of list type INFO."""
    return chunk.id == LIST_ID and chunk.payload[:4] == INFO_ID


def decode_info(chunk: Chunk, max_depth: int = MAX_LIST_DEPTH) -> dict[str, str]:
    """Decode a LIST/INFO chunk into a mapping of field id to text.

    Fields keep their order in the chunk. Text is decoded as latin-1 with
    trailing NULs removed. Nested LIST chunks are skipped.

    Args:
        chunk: A LIST chunk of list type INFO.
        max_depth: Maximum LIST nesting accepted while parsing.

    Returns:
        Ordered mapping such as ``{"INAM": "Title", "IART": "Artist"}``.

    Raises:
        UnknownChunkIDError: If the chunk is not a LIST or not of type INFO.
        TruncatedChunkError: If the LIST body is malformed.
    """
    parsed = parse_list(chunk, max_depth)
    if parsed.list_type != INFO_ID:
        raise UnknownChunkIDError(parsed.list_type)

    info: dict[str, str] = {}
    for sub in parsed.subchunks:
        if isinstance(sub, ListChunk):
            continue
        info[sub.id.decode("latin-1")] = sub.payload.rstrip(b"\x00").decode("latin-1")
    return info


def encode_info(fields: Mapping[str, str]) -> Chunk:
    """Build a LIST/INFO chunk from a mapping of field id to text.

    Raises:
        ValueError: If a field id is not 4 ASCII characters or a value
            cannot be encoded as latin-1.
    """
    subchunks: list[Chunk | ListChunk] = []
    for key, value in fields.items():
        field_id = key.encode("ascii")
        if len(field_id) != 4:
            raise ValueError(f"INFO field id must be 4 characters, got {key!r}")
        subchunks.append(Chunk(field_id, value.encode("latin-1") + b"\x00"))

    return frame_list(ListChunk(INFO_ID, subchunks))
