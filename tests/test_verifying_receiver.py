"""Tests for CountingVerifyingReceiver."""

import logging

import pytest

from batchscan.utils.row_keys import Key, encode_row
from batchscan.utils.value_generator import create_value
from batchscan.utils.verifying_receiver import (
    CountingVerifyingReceiver,
    UnexpectedKey,
)

from conftest import flip_byte

SIZE = 5


@pytest.fixture
def expected_rows():
    return {encode_row(i): False for i in [1, 4, 7]}


@pytest.fixture
def receiver(expected_rows):
    return CountingVerifyingReceiver(expected_rows, SIZE)


def deliver(receiver, rowid, value=None):
    row = encode_row(rowid)
    receiver.receive(Key(row), create_value(rowid, SIZE) if value is None else value)


class TestMatchingResults:
    def test_correct_value_marks_found(self, receiver, expected_rows):
        deliver(receiver, 4)

        assert expected_rows[encode_row(4)] is True
        assert receiver.count == 1
        assert receiver.error_count == 0

    def test_all_delivered_nothing_missing(self, receiver):
        for rowid in [1, 4, 7]:
            deliver(receiver, rowid)

        assert receiver.count == 3
        assert receiver.rows_not_found() == 0

    def test_duplicate_delivery_is_counted_not_reported(self, receiver, expected_rows, caplog):
        with caplog.at_level(logging.ERROR):
            deliver(receiver, 1)
            deliver(receiver, 1)

        assert receiver.count == 2
        assert expected_rows[encode_row(1)] is True
        assert receiver.error_count == 0
        assert not caplog.records


class TestValueMismatch:
    def test_one_flipped_byte_reported_once(self, receiver, caplog):
        bad = flip_byte(create_value(7, SIZE), index=SIZE - 1)

        with caplog.at_level(logging.ERROR):
            deliver(receiver, 7, bad)

        assert len(receiver.mismatches) == 1
        mismatch = receiver.mismatches[0]
        assert mismatch.row == encode_row(7)
        assert mismatch.expected == create_value(7, SIZE)
        assert mismatch.actual == bad
        assert receiver.count == 1
        assert "unexpected value" in caplog.text

    def test_wrong_length_is_mismatch(self, receiver):
        deliver(receiver, 4, create_value(4, SIZE + 1))
        assert len(receiver.mismatches) == 1

    def test_mismatched_row_still_marked_found(self, receiver, expected_rows):
        deliver(receiver, 4, b"xxxxx")
        assert expected_rows[encode_row(4)] is True
        assert receiver.unexpected_keys == []


class TestUnexpectedKeys:
    def test_unrequested_row_reported_once(self, receiver, expected_rows, caplog):
        with caplog.at_level(logging.ERROR):
            deliver(receiver, 2)

        assert receiver.unexpected_keys == [UnexpectedKey(encode_row(2))]
        assert receiver.mismatches == []
        assert receiver.count == 1
        assert encode_row(2) not in expected_rows
        assert "unexpected key" in caplog.text

    def test_undecodable_row_is_unexpected(self, receiver):
        receiver.receive(Key("garbage"), b"abcde")

        assert receiver.unexpected_keys == [UnexpectedKey("garbage")]
        assert receiver.count == 1

    def test_bad_records_do_not_stop_counting(self, receiver):
        deliver(receiver, 2)
        deliver(receiver, 1, b"00000")
        deliver(receiver, 4)
        deliver(receiver, 7)

        assert receiver.count == 4
        assert receiver.error_count == 2
        assert receiver.rows_not_found() == 0


def test_missing_rows_counted_exactly(receiver):
    deliver(receiver, 1)
    assert receiver.rows_not_found() == 2


def test_custom_value_fn(expected_rows):
    receiver = CountingVerifyingReceiver(expected_rows, 3, value_fn=lambda rowid, size: b"v" * size)
    receiver.receive(Key(encode_row(1)), b"vvv")

    assert receiver.error_count == 0
    assert expected_rows[encode_row(1)] is True
