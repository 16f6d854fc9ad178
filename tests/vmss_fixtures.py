"""Synthetic VMSS snapshots for the test suite."""
from __future__ import annotations

import struct

from vmss_core.protocol import (
    BLOCK_FMT,
    BLOCK_PAD_FMT,
    GROUP_FMT,
    GROUP_LEN,
    HEADER_FMT,
    HEADER_LEN,
    MAGIC,
    TAG_FMT,
    TAG_NULL,
    TAG_VALSIZE_BLOCK,
    TAG_VALSIZE_BLOCK_COMPRESSED,
)
from vmss_core.tags import encode_tag

TERMINATOR = struct.pack(TAG_FMT, TAG_NULL)


def _head(name: str, indices, size_code: int) -> bytes:
    nb = name.encode("ascii")
    tag = encode_tag(len(nb), len(indices), size_code)
    return struct.pack(TAG_FMT, tag) + nb + struct.pack(f"<{len(indices)}I", *indices)


def scalar(name: str, value: bytes, indices=()) -> bytes:
    return _head(name, indices, len(value)) + value


def block(name: str, payload: bytes, indices=(), pad: int = 0, compressed: bool = False, mem_size=None) -> bytes:
    code = TAG_VALSIZE_BLOCK_COMPRESSED if compressed else TAG_VALSIZE_BLOCK
    return (
        _head(name, indices, code)
        + struct.pack(BLOCK_FMT, len(payload), len(payload) if mem_size is None else mem_size)
        + struct.pack(BLOCK_PAD_FMT, pad)
        + payload
        + b"\xaa" * pad
    )


def nmi(cpu: int, value: int = 0) -> bytes:
    return scalar("pendingNMI", bytes([value]), (cpu,))


def build_vmss(groups, magic: int = MAGIC, version: int = 8):
    """Build a snapshot from [(group_name, [record_bytes, ...]), ...].

    Returns (data, layout) where layout[i] lists (start, end) of every record
    of group i, followed by the terminator offset.
    """
    body = b""
    table = b""
    layout = []
    base = HEADER_LEN + GROUP_LEN * len(groups)

    for name, records in groups:
        offset = base + len(body)
        spans = []
        cur = offset
        for rec in records:
            spans.append((cur, cur + len(rec)))
            cur += len(rec)
        stream = b"".join(records) + TERMINATOR
        layout.append({"offset": offset, "records": spans, "terminator": cur})
        table += struct.pack(GROUP_FMT, name.encode("ascii"), offset, len(stream))
        body += stream

    header = struct.pack(HEADER_FMT, magic, version, len(groups))
    return header + table + body, layout


def sample_vmss():
    """A three-CPU snapshot with blocks and decoy records around the NMI flags."""
    return build_vmss(
        [
            ("Checkpoint", [scalar("ProductVersion", b"\x08\x00\x00\x00"), nmi(1)]),
            (
                "cpu",
                [
                    scalar("ID", b"\x00\x00\x00\x00", (0,)),
                    nmi(0),
                    block("FPU", b"\x00\x00" * 20, (0,), pad=3),
                    scalar("ID", b"\x01\x00\x00\x00", (1,)),
                    scalar("pendingNMIx", b"\x00", (1,)),
                    nmi(1),
                    block("XSAVE", b"\x3f\x0a" * 17, (1, 2), compressed=True, mem_size=4096),
                    nmi(2),
                    scalar("S", b"\x11" * 8, (2, 0, 5)),
                ],
            ),
            ("memory", [block("Memory", b"\xde\xad\xbe\xef" * 8, (0, 0))]),
        ]
    )
