import pytest

from minidb.config import INVALID_PAGE_ID
from minidb.rowid import INVALID_ROWID, RowId


def test_default_is_invalid():
    assert RowId() == INVALID_ROWID
    assert RowId().page_id == INVALID_PAGE_ID


@pytest.mark.parametrize(
    "rid",
    [RowId(0, 0), RowId(7, 3), RowId(123456, 0xFFFFFFFF), INVALID_ROWID, RowId(-5, 9)],
)
def test_packed_round_trip(rid):
    assert RowId.from_int(rid.as_int()) == rid


def test_packed_layout_puts_page_in_high_bits():
    rid = RowId(3, 4)
    assert rid.as_int() >> 32 == 3
    assert rid.as_int() & 0xFFFFFFFF == 4


def test_equality_and_hash():
    assert RowId(1, 2) == RowId(1, 2)
    assert RowId(1, 2) != RowId(1, 3)
    assert len({RowId(1, 2), RowId(1, 2), RowId(2, 1)}) == 2