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
Counting Verifying Receiver
================================================================================
Purpose: Check scan results against recomputed values and track found rows
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List

from batchscan.utils.row_keys import Key, decode_row
from batchscan.utils.value_generator import create_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValueMismatch:
    """A returned value that differs from the generated one"""
    row: str
    expected: bytes
    actual: bytes


@dataclass(frozen=True)
class UnexpectedKey:
    """A returned row that was never requested"""
    row: str


class CountingVerifyingReceiver:
    """
    Consumes (key, value) results for one scan cycle

    The receiver owns the expectation map for the duration of the cycle and
    flips entries to True as rows arrive. Bad records are recorded and
    logged, never raised, so the whole result stream is always drained.
    """

    def __init__(
        self,
        expected_rows: Dict[str, bool],
        expected_value_size: int,
        value_fn: Callable[[int, int], bytes] = create_value
    ):
        self.expected_rows = expected_rows
        self.expected_value_size = expected_value_size
        self.value_fn = value_fn
        self.count = 0
        self.mismatches: List[ValueMismatch] = []
        self.unexpected_keys: List[UnexpectedKey] = []

    def receive(self, key: Key, value: bytes):
        row = key.row

        try:
            rowid = decode_row(row)
        except ValueError:
            # Not a row text this harness could ever have requested
            self._unexpected(key)
            self.count += 1
            return

        expected_value = self.value_fn(rowid, self.expected_value_size)

        if expected_value != value:
            self.mismatches.append(ValueMismatch(row, expected_value, bytes(value)))
            logger.error(
                f"Got unexpected value for {key} expected : "
                f"{expected_value.decode('latin-1')} got : {bytes(value).decode('latin-1')}"
            )

        if row not in self.expected_rows:
            self._unexpected(key)
        else:
            self.expected_rows[row] = True

        self.count += 1

    def _unexpected(self, key: Key):
        self.unexpected_keys.append(UnexpectedKey(key.row))
        logger.error(f"Got unexpected key {key}")

    @property
    def error_count(self) -> int:
        return len(self.mismatches) + len(self.unexpected_keys)

    def rows_not_found(self) -> int:
        """Number of expected rows no result has arrived for"""
        return sum(1 for found in self.expected_rows.values() if not found)
