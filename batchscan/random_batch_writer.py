"""
Random Batch Writer - Populates a Table for the Batch Scan Verifier

Writes one row per id in [min, max) with the deterministic value for that
row, stored as a Parquet file the simulated store serves lookups from.

Usage:
    batchscan-random-write <tables dir> <table> <min> <max> <value size> [--visibility LABEL]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from batchscan.utils.row_keys import encode_row
from batchscan.utils.value_generator import create_value

TABLE_SCHEMA = pa.schema([
    pa.field('row', pa.string()),
    pa.field('value', pa.binary()),
    pa.field('visibility', pa.string()),
])


def build_table(
    min_row: int,
    max_row: int,
    value_size: int,
    visibility: str = ""
) -> pa.Table:
    """
    Build the table contents for rows [min_row, max_row)

    Args:
        min_row: First row id (inclusive)
        max_row: Last row id (exclusive)
        value_size: Size of every value in bytes
        visibility: Visibility label applied to every row

    Returns:
        PyArrow table with row, value and visibility columns
    """
    if min_row < 0 or min_row > max_row:
        raise ValueError(f"Invalid row range [{min_row}, {max_row})")

    rowids = range(min_row, max_row)
    data = {
        'row': [encode_row(i) for i in rowids],
        'value': [create_value(i, value_size) for i in rowids],
        'visibility': [visibility] * len(rowids),
    }

    return pa.table(data, schema=TABLE_SCHEMA)


def write_table(
    tables_dir: Path,
    table: str,
    min_row: int,
    max_row: int,
    value_size: int,
    visibility: str = ""
) -> Path:
    """Write <tables_dir>/<table>.parquet and return its path"""
    tables_dir = Path(tables_dir)
    tables_dir.mkdir(parents=True, exist_ok=True)
    file_path = tables_dir / f"{table}.parquet"

    print(f"Writing {max_row - min_row:,} rows to {file_path}...")

    start = time.perf_counter()
    pq.write_table(
        build_table(min_row, max_row, value_size, visibility),
        file_path,
        compression='snappy'
    )
    elapsed = time.perf_counter() - start

    print(f"Write time: {elapsed:.2f} s")
    return file_path


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        prog="batchscan-random-write",
        description="Populate a table with deterministic values for rows [min, max)"
    )
    parser.add_argument("tables_dir", type=Path)
    parser.add_argument("table")
    parser.add_argument("min", type=int)
    parser.add_argument("max", type=int)
    parser.add_argument("value_size", type=int)
    parser.add_argument("--visibility", default="")
    args = parser.parse_args(argv)

    if args.min < 0 or args.min >= args.max:
        parser.error(f"min ({args.min}) must be non-negative and less than max ({args.max})")
    if args.value_size < 0:
        parser.error("value size must be non-negative")

    write_table(args.tables_dir, args.table, args.min, args.max, args.value_size, args.visibility)
    return 0


if __name__ == "__main__":
    sys.exit(main())
