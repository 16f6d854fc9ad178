"""VMSS NMI - post (or clear) a pending NMI in a suspended VM's state file."""
from __future__ import annotations

from pathlib import Path

import click

from vmss_core.errors import VmssError
from vmss_core.protocol import DEFAULT_CPU, NMI_CLEAR, NMI_SET, TARGET_GROUP
from vmss_core.reader import iter_tags, read_groups, read_header
from vmss_nmi.inventory import inventory_row, write_inventory
from vmss_nmi.patch import CMD, REPORT_ONLY, locate_nmi


def process(
    path: Path,
    cpu: int | None = DEFAULT_CPU,
    value: int = NMI_SET,
    verbose: bool = False,
    inventory: Path | None = None,
) -> dict:
    """Walk every cpu group of a VMSS file and apply the NMI policy."""

    def say(msg: str) -> None:
        if verbose:
            click.echo(f"{CMD}: {msg}")

    stats = {"groups": 0, "cpu_groups": 0, "tags": 0, "blocks": 0, "reports": []}
    rows: list[dict] = []

    with open(path, "r+b") as fp:
        header = read_header(fp)
        say(f"VMSS version {header.version}, {header.group_count} groups")

        groups = read_groups(fp, header)
        stats["groups"] = len(groups)

        for grp in groups:
            say(f"group {grp.index:3d}: {grp.name:<28s} offs=0x{grp.offset:x} size=0x{grp.size:x}")
            if grp.name != TARGET_GROUP:
                continue
            stats["cpu_groups"] += 1

            for rec in iter_tags(fp, grp):
                stats["tags"] += 1
                i0, i1, i2 = rec.indices
                say(
                    f"tag {rec.name:<30s} size {rec.tag.value_size:3d} "
                    f"nindx {rec.tag.index_count} ([{i0}][{i1}][{i2}])"
                )
                if rec.is_block:
                    stats["blocks"] += 1
                    blk = rec.block
                    say(f"  block size {blk.block_size}, memsize {blk.mem_size}, pad {blk.pad_size}")

                if inventory is not None:
                    rows.append(inventory_row(grp, rec))

                report = locate_nmi(fp, grp, rec, cpu=cpu, value=value)
                if report is not None:
                    stats["reports"].append(report)

    if inventory is not None:
        write_inventory(rows, inventory)

    patched = sum(1 for r in stats["reports"] if r["action"] == "patched")
    say(
        f"scanned {stats['cpu_groups']} {TARGET_GROUP} group(s), {stats['tags']} tags "
        f"({stats['blocks']} blocks), {len(stats['reports'])} pendingNMI, {patched} patched"
    )
    return stats


@click.command()
@click.argument("vmss_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--cpu", type=click.IntRange(min=0), default=DEFAULT_CPU, show_default=True,
              help="Set pendingNMI only on specified CPU")
@click.option("-n", "--dry-run", is_flag=True, help="Display but don't alter pendingNMI")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.option("-z", "--zero", is_flag=True, help="Zero out pendingNMI rather than set it")
@click.option("--inventory", type=click.Path(dir_okay=False, path_type=Path),
              help="Write the walked tag records to a Parquet file")
def main(vmss_file: Path, cpu: int, dry_run: bool, verbose: bool, zero: bool, inventory: Path | None) -> None:
    """Post a non-maskable interrupt onto a VMware suspended state file."""
    try:
        process(
            vmss_file,
            cpu=REPORT_ONLY if dry_run else cpu,
            value=NMI_CLEAR if zero else NMI_SET,
            verbose=verbose,
            inventory=inventory,
        )
    except (VmssError, OSError) as e:
        # Fail closed with a single-line reason.
        click.echo(f"{CMD}: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
