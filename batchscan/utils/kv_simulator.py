#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Copyright 2026 Vaquar Khan

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.

================================================================================
Key-Value Store Simulator
================================================================================
Purpose: Simulate a tablet-based store serving batched point lookups, with
per-lookup latency and a cold tablet-location cache
"""

import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple

import pyarrow.parquet as pq

from batchscan.utils.row_keys import Key, QueryRange, decode_row

COLUMN_FAMILY = "foo"
COLUMN_QUALIFIER = "1"

# row text -> (value, visibility label)
TableRows = Dict[str, Tuple[bytes, str]]


class StoreError(Exception):
    """Base class for simulated store failures"""


class AuthenticationError(StoreError):
    """Bad credentials"""


class TableNotFoundError(StoreError):
    """Requested table does not exist"""


class ScannerClosedError(StoreError):
    """Scanner used after close()"""


@dataclass
class KVLatencyProfile:
    """Store latency characteristics"""
    lookup_min_ms: float = 0.2       # Fastest point lookup
    lookup_avg_ms: float = 1.0       # Average point lookup
    lookup_max_ms: float = 5.0       # Slowest point lookup (p99)
    metadata_lookup_ms: float = 20.0  # Locating a tablet on a cold cache
    rows_per_tablet: int = 100_000

    @classmethod
    def instant(cls) -> "KVLatencyProfile":
        """Zero-latency profile"""
        return cls(
            lookup_min_ms=0.0,
            lookup_avg_ms=0.0,
            lookup_max_ms=0.0,
            metadata_lookup_ms=0.0
        )

    def sample_lookup_ms(self, rng: random.Random) -> float:
        """Sample point lookup latency from a clamped normal distribution"""
        if self.lookup_avg_ms <= 0:
            return 0.0

        std = (self.lookup_max_ms - self.lookup_min_ms) / 4
        latency = rng.gauss(self.lookup_avg_ms, std)
        return max(self.lookup_min_ms, min(self.lookup_max_ms, latency))


def load_table_rows(path: Path) -> TableRows:
    """Load a table written by the random batch writer"""
    columns = pq.read_table(path, columns=['row', 'value', 'visibility']).to_pydict()
    return {
        row: (value, visibility or "")
        for row, value, visibility in zip(
            columns['row'], columns['value'], columns['visibility']
        )
    }


class SimulatedBatchScanner:
    """
    Batch scanner over an in-memory table

    Point lookups for the configured ranges fan out over a thread pool and
    results are yielded in completion order. Tablet locations are cached
    after the first lookup that touches them, so a second pass over the
    same scanner runs warm.
    """

    def __init__(
        self,
        table_rows: TableRows,
        authorizations: Iterable[str] = (),
        num_threads: int = 1,
        profile: KVLatencyProfile = None,
        seed: Optional[int] = None
    ):
        if num_threads < 1:
            raise ValueError(f"num_threads must be at least 1, got {num_threads}")

        self.table_rows = table_rows
        self.authorizations = frozenset(a for a in authorizations if a)
        self.num_threads = num_threads
        self.profile = profile or KVLatencyProfile()
        self.ranges: Optional[Set[QueryRange]] = None
        self.closed = False

        self._rng = random.Random(seed)
        self._lock = threading.Lock()
        self._tablet_cache: Set[int] = set()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict:
        return {
            'total_lookups': 0,
            'rows_returned': 0,
            'metadata_lookups': 0,
            'total_time_ms': 0.0
        }

    def set_ranges(self, ranges: Iterable[QueryRange]):
        if self.closed:
            raise ScannerClosedError("Scanner is closed")
        self.ranges = set(ranges)

    def _tablet_for(self, row: str) -> int:
        return decode_row(row) // self.profile.rows_per_tablet

    def _is_visible(self, visibility: str) -> bool:
        return not visibility or visibility in self.authorizations

    def _lookup(self, query: QueryRange) -> Optional[Tuple[Key, bytes]]:
        """Serve one point lookup, sleeping for the simulated latency"""
        tablet = self._tablet_for(query.row)

        with self._lock:
            cold = tablet not in self._tablet_cache
            self._tablet_cache.add(tablet)
            latency_ms = self.profile.sample_lookup_ms(self._rng)

        if cold:
            latency_ms += self.profile.metadata_lookup_ms

        if latency_ms > 0:
            time.sleep(latency_ms / 1000)

        entry = self.table_rows.get(query.row)
        visible = entry is not None and self._is_visible(entry[1])

        with self._lock:
            self.stats['total_lookups'] += 1
            self.stats['metadata_lookups'] += int(cold)
            self.stats['total_time_ms'] += latency_ms
            self.stats['rows_returned'] += int(visible)

        if not visible:
            return None

        key = Key(query.row, COLUMN_FAMILY, COLUMN_QUALIFIER)
        return key, entry[0]

    def __iter__(self) -> Iterator[Tuple[Key, bytes]]:
        if self.closed:
            raise ScannerClosedError("Scanner is closed")
        if self.ranges is None:
            raise ValueError("No ranges set on scanner")

        queries = sorted(self.ranges, key=lambda r: r.row)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            futures = [executor.submit(self._lookup, q) for q in queries]

            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    yield result

    def get_stats(self) -> Dict:
        """Get cumulative statistics"""
        with self._lock:
            stats = dict(self.stats)

        if stats['total_lookups'] == 0:
            return stats

        return {
            **stats,
            'avg_time_per_lookup_ms': stats['total_time_ms'] / stats['total_lookups'],
            'cached_tablets': len(self._tablet_cache)
        }

    def reset_stats(self):
        """Reset statistics"""
        with self._lock:
            self.stats = self._empty_stats()

    def close(self):
        self.closed = True
        self.ranges = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class Connector:
    """Authenticated handle on a simulated instance"""

    def __init__(self, instance: "Instance", user: str):
        self.instance = instance
        self.user = user

    def table_path(self, table: str) -> Path:
        return self.instance.tables_dir / f"{table}.parquet"

    def create_batch_scanner(
        self,
        table: str,
        authorizations: Iterable[str],
        num_threads: int,
        profile: KVLatencyProfile = None
    ) -> SimulatedBatchScanner:
        """
        Open a batch scanner on a table

        Raises:
            TableNotFoundError: If the table has not been written
        """
        path = self.table_path(table)
        if not path.exists():
            raise TableNotFoundError(
                f"Table {table!r} not found in instance {self.instance.instance_name!r}"
            )

        return SimulatedBatchScanner(
            load_table_rows(path),
            authorizations=authorizations,
            num_threads=num_threads,
            profile=profile
        )


class Instance:
    """Simulated store instance whose tables live in a directory"""

    def __init__(
        self,
        instance_name: str,
        zookeepers: str,
        tables_dir: Path = Path("tables"),
        users: Optional[Dict[str, str]] = None
    ):
        self.instance_name = instance_name
        self.zookeepers = zookeepers.split(",") if zookeepers else []
        self.tables_dir = Path(tables_dir)
        self.users = users

    def get_connector(self, user: str, password: str) -> Connector:
        """
        Authenticate and return a connector

        Raises:
            AuthenticationError: On an empty user or a password mismatch
        """
        if not user:
            raise AuthenticationError("User name must not be empty")

        if self.users is not None and self.users.get(user) != password:
            raise AuthenticationError(f"Bad credentials for user {user!r}")

        return Connector(self, user)
