"""Locate pendingNMI records and rewrite them in place."""
from __future__ import annotations

from typing import BinaryIO

import click

from vmss_core.errors import SeekFailure, TruncatedValue, UnexpectedFieldSize, WriteFailure
from vmss_core.protocol import DEFAULT_CPU, NMI_SET, TARGET_FIELD
from vmss_core.reader import GroupDescriptor, TagRecord, read_exact

CMD = "vmss-nmi"

# Target CPU meaning "report every CPU, never write".
REPORT_ONLY = None


def warn(msg: str) -> None:
    click.echo(f"{CMD}: {msg}", err=True)


def patch_byte(fp: BinaryIO, offset: int, value: int) -> None:
    """Overwrite the byte at offset with value; the cursor ends at offset + 1."""
    try:
        fp.seek(offset)
    except (OSError, OverflowError) as e:
        raise SeekFailure(offset, "couldn't reset offset") from e

    try:
        written = fp.write(bytes([value]))
        fp.flush()
    except OSError as e:
        raise WriteFailure(offset, str(e)) from e
    if written != 1:
        raise WriteFailure(offset)


def locate_nmi(
    fp: BinaryIO,
    group: GroupDescriptor,
    rec: TagRecord,
    cpu: int | None = DEFAULT_CPU,
    value: int = NMI_SET,
) -> dict | None:
    """Apply the NMI policy to one record.

    Returns None for records that are not pendingNMI, otherwise a row
    describing what was seen and done. The stream must be positioned at
    rec.value_offset, as the walker leaves it.
    """
    if rec.is_block or rec.name != TARGET_FIELD:
        return None

    if rec.value_size != 1:
        raise UnexpectedFieldSize(
            rec.value_offset,
            f"found {TARGET_FIELD} size to be unexpected value of {rec.value_size} (expected 1)",
        )

    current = read_exact(fp, 1, TruncatedValue, rec.value_offset, TARGET_FIELD)[0]
    target = rec.indices[0]

    row = {
        "group": group.name,
        "cpu": target,
        "offset": rec.value_offset,
        "previous": current,
        "new": None,
    }

    if cpu is REPORT_ONLY:
        warn(f"{TARGET_FIELD} for CPU {target} is {current}")
        row["action"] = "reported"
    elif target != cpu:
        warn(f"{TARGET_FIELD} for CPU {target} is {current}; skipping (target CPU is {cpu})")
        row["action"] = "skipped"
    else:
        warn(f"{TARGET_FIELD} for CPU {target} is {current}; setting to {value}")
        patch_byte(fp, rec.value_offset, value)
        row["new"] = value
        row["action"] = "patched"

    return row
