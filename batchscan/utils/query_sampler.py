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
Query Sampler
================================================================================
Purpose: Draw a set of distinct random point queries over a row id range
"""

import logging
import random
from typing import Dict, Optional, Set, Tuple

from batchscan.utils.row_keys import QueryRange, encode_row

logger = logging.getLogger(__name__)

_SIGN_BIT = 1 << 63


class SampleSizeError(ValueError):
    """Raised when the requested sample cannot be drawn from the row range"""


def make_random(seed: Optional[int] = None) -> random.Random:
    """Seeded RNG when a seed is given, OS-seeded otherwise"""
    if seed is None:
        return random.Random()
    return random.Random(seed)


def next_long(rng: random.Random) -> int:
    """Draw a signed 64-bit integer"""
    draw = rng.getrandbits(64)
    return draw - (1 << 64) if draw & _SIGN_BIT else draw


def check_sample_bounds(num: int, min_row: int, max_row: int):
    """
    Reject samples that can never complete

    Raises:
        SampleSizeError: If the range is empty/negative or num exceeds the span
    """
    if min_row < 0:
        raise SampleSizeError(f"min must be non-negative, got {min_row}")
    if min_row >= max_row:
        raise SampleSizeError(f"min ({min_row}) must be less than max ({max_row})")
    if num < 0:
        raise SampleSizeError(f"num must be non-negative, got {num}")

    span = max_row - min_row
    if num > span:
        raise SampleSizeError(
            f"Cannot draw {num:,} distinct rows from a span of {span:,} ids"
        )


def generate_random_queries(
    num: int,
    min_row: int,
    max_row: int,
    rng: random.Random
) -> Tuple[Set[QueryRange], Dict[str, bool]]:
    """
    Generate `num` distinct point queries in [min_row, max_row)

    Each draw is |signed 64-bit| mod span, so ids near the top of the span
    are very slightly under-represented when the span does not divide 2**63.
    Duplicate draws are absorbed by the set and the loop keeps drawing.

    Args:
        num: Number of distinct rows to sample
        min_row: Lowest row id (inclusive)
        max_row: Highest row id (exclusive)
        rng: Random source; same seed gives the same sample

    Returns:
        (ranges, expected_rows) where expected_rows maps row text -> found flag
    """
    check_sample_bounds(num, min_row, max_row)

    logger.info(f"Generating {num:,} random queries...")

    span = max_row - min_row
    ranges: Set[QueryRange] = set()
    expected_rows: Dict[str, bool] = {}

    while len(ranges) < num:
        rowid = (abs(next_long(rng)) % span) + min_row
        row = encode_row(rowid)

        ranges.add(QueryRange(row))
        expected_rows[row] = False

    logger.info("finished")

    return ranges, expected_rows
