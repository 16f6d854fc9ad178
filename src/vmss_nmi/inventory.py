from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from vmss_core.reader import GroupDescriptor, TagRecord

INVENTORY_SCHEMA = pa.schema(
    [
        ("group", pa.string()),
        ("name", pa.string()),
        ("index0", pa.uint32()),
        ("index1", pa.uint32()),
        ("index2", pa.uint32()),
        ("value_size", pa.uint8()),
        ("block", pa.bool_()),
        ("compressed", pa.bool_()),
        ("block_size", pa.uint64()),
        ("mem_size", pa.uint64()),
        ("pad_size", pa.uint16()),
        ("offset", pa.int64()),
    ]
)


def inventory_row(group: GroupDescriptor, rec: TagRecord) -> dict:
    blk = rec.block
    return {
        "group": group.name,
        "name": rec.name,
        "index0": int(rec.indices[0]),
        "index1": int(rec.indices[1]),
        "index2": int(rec.indices[2]),
        "value_size": int(rec.tag.value_size),
        "block": rec.is_block,
        "compressed": rec.tag.is_compressed,
        "block_size": int(blk.block_size) if blk else 0,
        "mem_size": int(blk.mem_size) if blk else 0,
        "pad_size": int(blk.pad_size) if blk else 0,
        "offset": int(rec.offset),
    }


def write_inventory(rows: list[dict], out_path: Path) -> None:
    """Write walked tag records to a Parquet file, in walk order."""
    df = pd.DataFrame(rows)
    if df.empty:
        return

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pandas(df, schema=INVENTORY_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path))
