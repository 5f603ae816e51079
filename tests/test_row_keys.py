"""Tests for row key encoding and point ranges."""

import pytest

from batchscan.utils.row_keys import Key, QueryRange, decode_row, encode_row


class TestRowEncoding:
    def test_encode_is_zero_padded(self):
        assert encode_row(42) == "row_0000000042"
        assert encode_row(0) == "row_0000000000"

    @pytest.mark.parametrize("rowid", [0, 1, 9, 10, 123456, 9_999_999_999])
    def test_roundtrip(self, rowid):
        assert decode_row(encode_row(rowid)) == rowid

    def test_encode_rejects_negative(self):
        with pytest.raises(ValueError, match="non-negative"):
            encode_row(-1)

    def test_decode_rejects_missing_prefix(self):
        with pytest.raises(ValueError, match="does not start with"):
            decode_row("col_0000000001")

    def test_decode_rejects_non_numeric(self):
        with pytest.raises(ValueError, match="non-numeric"):
            decode_row("row_00000000x1")
        with pytest.raises(ValueError):
            decode_row("row_")

    def test_decode_rejects_unpadded_id(self):
        with pytest.raises(ValueError, match="not padded"):
            decode_row("row_42")

    def test_decode_rejects_non_ascii_digits(self):
        with pytest.raises(ValueError, match="non-numeric"):
            decode_row("row_" + "٤٢".rjust(10, "٠"))

    def test_encoded_rows_sort_numerically(self):
        rows = [encode_row(i) for i in [100, 2, 30]]
        assert sorted(rows) == [encode_row(2), encode_row(30), encode_row(100)]


class TestQueryRange:
    def test_set_dedups_by_row(self):
        ranges = {QueryRange.for_rowid(5), QueryRange("row_0000000005"), QueryRange.for_rowid(6)}
        assert len(ranges) == 2

    def test_contains_only_its_row(self):
        query = QueryRange.for_rowid(7)
        assert query.contains("row_0000000007")
        assert not query.contains("row_0000000008")


def test_key_str_includes_row():
    key = Key("row_0000000001", "foo", "1", 5)
    assert str(key).startswith("row_0000000001")
