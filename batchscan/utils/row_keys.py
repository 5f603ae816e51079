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
Row Keys
================================================================================
Purpose: Encode row ids as fixed-width row text and model point scan ranges
"""

from dataclasses import dataclass

ROW_PREFIX = "row_"
ROW_ID_DIGITS = 10


def encode_row(rowid: int) -> str:
    """
    Render a row id as row text, e.g. 42 -> 'row_0000000042'

    Args:
        rowid: Non-negative row id

    Returns:
        Row text
    """
    if rowid < 0:
        raise ValueError(f"Row id must be non-negative, got {rowid}")
    return f"{ROW_PREFIX}{rowid:0{ROW_ID_DIGITS}d}"


def decode_row(row: str) -> int:
    """
    Recover the row id from row text

    Raises:
        ValueError: If the text is not prefix + at least ROW_ID_DIGITS ASCII digits
    """
    if not row.startswith(ROW_PREFIX):
        raise ValueError(f"Row {row!r} does not start with {ROW_PREFIX!r}")

    digits = row[len(ROW_PREFIX):]
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"Row {row!r} has a non-numeric id")
    if len(digits) < ROW_ID_DIGITS:
        raise ValueError(f"Row {row!r} id is not padded to {ROW_ID_DIGITS} digits")

    return int(digits)


@dataclass(frozen=True)
class QueryRange:
    """Single-point scan range covering exactly one row"""
    row: str

    @classmethod
    def for_rowid(cls, rowid: int) -> "QueryRange":
        return cls(encode_row(rowid))

    def contains(self, row: str) -> bool:
        return row == self.row


@dataclass(frozen=True)
class Key:
    """Cell key returned by a scan"""
    row: str
    column_family: str = ""
    column_qualifier: str = ""
    timestamp: int = 0

    def __str__(self):
        return f"{self.row} {self.column_family}:{self.column_qualifier} [{self.timestamp}]"
