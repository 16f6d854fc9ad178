"""Tag header bitfield decoding.

A tag is a little-endian u16: name length in bits 15..8, index count in
bits 7..6 and the value-size code in bits 5..0.
"""
from __future__ import annotations

from typing import NamedTuple

from vmss_core.protocol import (
    TAG_NAMELEN_MASK,
    TAG_NAMELEN_SHIFT,
    TAG_NINDX_MASK,
    TAG_NINDX_SHIFT,
    TAG_NULL,
    TAG_VALSIZE_BLOCK,
    TAG_VALSIZE_BLOCK_COMPRESSED,
    TAG_VALSIZE_MASK,
    TAG_VALSIZE_SHIFT,
)


class TagHeader(NamedTuple):
    name_len: int
    index_count: int
    value_size: int

    @property
    def is_block(self) -> bool:
        return self.value_size in (TAG_VALSIZE_BLOCK, TAG_VALSIZE_BLOCK_COMPRESSED)

    @property
    def is_compressed(self) -> bool:
        return self.value_size == TAG_VALSIZE_BLOCK_COMPRESSED


def is_terminator(raw: int) -> bool:
    return raw == TAG_NULL


def decode_tag(raw: int) -> TagHeader:
    """Split a raw u16 tag into its three fields."""
    return TagHeader(
        (raw >> TAG_NAMELEN_SHIFT) & TAG_NAMELEN_MASK,
        (raw >> TAG_NINDX_SHIFT) & TAG_NINDX_MASK,
        (raw >> TAG_VALSIZE_SHIFT) & TAG_VALSIZE_MASK,
    )


def encode_tag(name_len: int, index_count: int, value_size: int) -> int:
    """Pack the three fields into a raw u16 tag; out-of-range fields are rejected."""
    if not 0 <= name_len <= TAG_NAMELEN_MASK:
        raise ValueError(f"name length {name_len} out of range")
    if not 0 <= index_count <= TAG_NINDX_MASK:
        raise ValueError(f"index count {index_count} out of range")
    if not 0 <= value_size <= TAG_VALSIZE_MASK:
        raise ValueError(f"value size {value_size} out of range")
    return (
        (name_len << TAG_NAMELEN_SHIFT)
        | (index_count << TAG_NINDX_SHIFT)
        | (value_size << TAG_VALSIZE_SHIFT)
    )
