"""Shared fixtures for the batch scan verifier tests."""

from pathlib import Path
from typing import Iterable, List, Optional, Set

import pytest

from batchscan.random_batch_writer import write_table
from batchscan.utils.kv_simulator import KVLatencyProfile, SimulatedBatchScanner, load_table_rows
from batchscan.utils.row_keys import Key, QueryRange, decode_row
from batchscan.utils.value_generator import create_value

TABLE = "test_table"
TABLE_MIN = 0
TABLE_MAX = 500
VALUE_SIZE = 20


class FakeScanner:
    """Scanner double that serves every requested row from the value generator.

    Args:
        value_size: Size of the generated values.
        drop: Number of requested rows to silently leave out.
        corrupt: Number of returned values to flip a byte in.
        extra_rows: Row texts to append that were never requested.
    """

    def __init__(
        self,
        value_size: int,
        drop: int = 0,
        corrupt: int = 0,
        extra_rows: Iterable[str] = (),
    ):
        self.value_size = value_size
        self.drop = drop
        self.corrupt = corrupt
        self.extra_rows = list(extra_rows)
        self.ranges: Optional[Set[QueryRange]] = None
        self.range_history: List[Set[QueryRange]] = []
        self.closed = False

    def set_ranges(self, ranges):
        self.ranges = set(ranges)
        self.range_history.append(set(ranges))

    def __iter__(self):
        rows = sorted(r.row for r in self.ranges)[self.drop:]
        for i, row in enumerate(rows):
            value = create_value(decode_row(row), self.value_size)
            if i < self.corrupt:
                value = flip_byte(value)
            yield Key(row), value

        for row in self.extra_rows:
            yield Key(row), create_value(decode_row(row), self.value_size)

    def close(self):
        self.closed = True


def flip_byte(value: bytes, index: int = 0) -> bytes:
    """Return value with one byte changed."""
    changed = bytearray(value)
    changed[index] ^= 0x01
    return bytes(changed)


@pytest.fixture
def tables_dir(tmp_path: Path) -> Path:
    """Directory holding a populated test table."""
    directory = tmp_path / "tables"
    write_table(directory, TABLE, TABLE_MIN, TABLE_MAX, VALUE_SIZE)
    return directory


@pytest.fixture
def table_rows(tables_dir: Path):
    return load_table_rows(tables_dir / f"{TABLE}.parquet")


@pytest.fixture
def scanner(table_rows) -> SimulatedBatchScanner:
    """Zero-latency scanner over the test table."""
    with SimulatedBatchScanner(
        table_rows, num_threads=4, profile=KVLatencyProfile.instant()
    ) as s:
        yield s
