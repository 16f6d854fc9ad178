"""Forward-only decoding of a VMSS container: header, group table, tag streams."""
from __future__ import annotations

import os
import struct
from typing import BinaryIO, Iterator, NamedTuple

from vmss_core.errors import (
    GroupCountExceeded,
    SeekFailure,
    TruncatedBlockHeader,
    TruncatedGroupTable,
    TruncatedHeader,
    TruncatedIndices,
    TruncatedName,
    TruncatedTag,
    TruncatedValue,
    UnrecognizedFormat,
    UnsupportedLegacyFormat,
    VmssError,
)
from vmss_core.protocol import (
    ACCEPTED_MAGICS,
    BLOCK_FMT,
    BLOCK_LEN,
    BLOCK_PAD_FMT,
    BLOCK_PAD_LEN,
    GROUP_FMT,
    GROUP_LEN,
    HEADER_FMT,
    HEADER_LEN,
    INDEX_LEN,
    MAGIC_LEGACY,
    MAX_GROUPS,
    MAX_INDICES,
    TAG_FMT,
    TAG_LEN,
)
from vmss_core.tags import TagHeader, decode_tag, is_terminator


class ContainerHeader(NamedTuple):
    format_id: int
    version: int
    group_count: int


class GroupDescriptor(NamedTuple):
    index: int
    name: str
    offset: int
    size: int


class BlockHeader(NamedTuple):
    block_size: int
    mem_size: int
    pad_size: int


class TagRecord(NamedTuple):
    """One decoded record. Only valid until the walker is resumed."""

    tag: TagHeader
    name: str
    indices: tuple[int, int, int]
    offset: int
    value_offset: int
    value_size: int
    block: BlockHeader | None = None

    @property
    def is_block(self) -> bool:
        return self.block is not None

    @property
    def end(self) -> int:
        return self.value_offset + self.value_size


def read_exact(
    fp: BinaryIO, n: int, error: type[VmssError], offset: int, detail: str | None = None
) -> bytes:
    """Read exactly n bytes or raise error(offset)."""
    data = fp.read(n)
    if len(data) != n:
        raise error(offset, detail)
    return data


def _seek(fp: BinaryIO, offset: int, detail: str) -> None:
    try:
        fp.seek(offset)
    except (OSError, OverflowError) as e:
        raise SeekFailure(offset, detail) from e


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def read_header(fp: BinaryIO) -> ContainerHeader:
    """Read and validate the 12-byte container header at offset 0."""
    raw = read_exact(fp, HEADER_LEN, TruncatedHeader, 0)
    header = ContainerHeader(*struct.unpack(HEADER_FMT, raw))

    if header.format_id == MAGIC_LEGACY:
        raise UnsupportedLegacyFormat(0)
    if header.format_id not in ACCEPTED_MAGICS:
        raise UnrecognizedFormat(0, f"magic 0x{header.format_id:08x}")
    return header


def read_groups(fp: BinaryIO, header: ContainerHeader) -> list[GroupDescriptor]:
    """Read the group table that immediately follows the header.

    The count comes straight from the file, so it is capped before the
    table is read in one piece.
    """
    count = header.group_count
    if count > MAX_GROUPS:
        raise GroupCountExceeded(HEADER_LEN, f"{count} groups (limit {MAX_GROUPS})")

    table = read_exact(fp, count * GROUP_LEN, TruncatedGroupTable, HEADER_LEN, f"{count} groups")
    return [
        GroupDescriptor(i, _decode_name(name), offs, size)
        for i, (name, offs, size) in enumerate(struct.iter_unpack(GROUP_FMT, table))
    ]


def iter_tags(fp: BinaryIO, group: GroupDescriptor) -> Iterator[TagRecord]:
    """Yield the records of one group in file order until the NULL tag.

    Scalar values and block payloads are not read. When resumed, the walker
    seeks to the end of the record it last yielded, so the consumer is free
    to read (or rewrite) the value in between.
    """
    try:
        file_end = fp.seek(0, os.SEEK_END)
    except OSError as e:
        raise SeekFailure(None, "couldn't find end of file") from e
    _seek(fp, group.offset, f"couldn't read group {group.name}")

    while True:
        start = fp.tell()
        (raw,) = struct.unpack(TAG_FMT, read_exact(fp, TAG_LEN, TruncatedTag, start))
        if is_terminator(raw):
            return

        tag = decode_tag(raw)

        name_bytes = read_exact(fp, tag.name_len, TruncatedName, start + TAG_LEN)
        name = name_bytes.decode("utf-8", errors="replace")

        idx_offset = start + TAG_LEN + tag.name_len
        idx_raw = read_exact(fp, tag.index_count * INDEX_LEN, TruncatedIndices, idx_offset)
        idx = struct.unpack(f"<{tag.index_count}I", idx_raw) + (0,) * (MAX_INDICES - tag.index_count)

        value_offset = idx_offset + len(idx_raw)
        if tag.is_block:
            blk_raw = read_exact(fp, BLOCK_LEN, TruncatedBlockHeader, value_offset)
            # The pad is a bare u16 after the two u64s; it is read on its own.
            pad_raw = read_exact(fp, BLOCK_PAD_LEN, TruncatedBlockHeader, value_offset)
            block_size, mem_size = struct.unpack(BLOCK_FMT, blk_raw)
            (pad_size,) = struct.unpack(BLOCK_PAD_FMT, pad_raw)

            rec = TagRecord(
                tag,
                name,
                idx,
                start,
                value_offset + BLOCK_LEN + BLOCK_PAD_LEN,
                block_size + pad_size,
                BlockHeader(block_size, mem_size, pad_size),
            )
            if rec.end > file_end:
                raise SeekFailure(value_offset, f"unable to skip block {name}")
        else:
            rec = TagRecord(tag, name, idx, start, value_offset, tag.value_size)
            if rec.end > file_end:
                raise TruncatedValue(value_offset, name)

        yield rec
        _seek(fp, rec.end, f"couldn't skip {name}")
