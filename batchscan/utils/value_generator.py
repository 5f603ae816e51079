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
Value Generator
================================================================================
Purpose: Deterministic cell values shared by the writer and the verifier
"""

import random

# Printable ASCII window: ' ' (32) .. '{' (123)
PRINTABLE_BASE = 32
PRINTABLE_SPAN = 92


def create_value(rowid: int, size: int) -> bytes:
    """
    Generate the value stored for a row

    The value is a pure function of (rowid, size): a private RNG seeded with
    the row id produces `size` bytes which are folded into printable ASCII.

    Args:
        rowid: Row id the value belongs to
        size: Value length in bytes

    Returns:
        Value bytes of exactly `size` length
    """
    if size < 0:
        raise ValueError(f"Value size must be non-negative, got {size}")

    raw = random.Random(rowid).randbytes(size)
    return bytes((b % PRINTABLE_SPAN) + PRINTABLE_BASE for b in raw)


if __name__ == "__main__":
    print("Testing value generator...")

    for rowid in [0, 1, 42]:
        value = create_value(rowid, 16)
        print(f"  row {rowid}: {value.decode('ascii')}")

    print(f"\nDeterministic: {create_value(7, 64) == create_value(7, 64)}")
