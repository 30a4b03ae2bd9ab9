import pytest

from minidb.config import INVALID_PAGE_ID, PAGE_SIZE
from minidb.page import Page
from minidb.row import Row
from minidb.rowid import RowId
from minidb.schema import Column, Schema
from minidb.table_page import TablePage
from minidb.types import Field, TypeId

SCHEMA = Schema(
    [
        Column("id", TypeId.INT, table_ind=0),
        Column("name", TypeId.CHAR, length=2000, table_ind=1, nullable=True),
    ]
)


def make_row(ident, name):
    return Row([Field(TypeId.INT, ident), Field(TypeId.CHAR, name)])


def make_page(page_id=5):
    page = TablePage(Page())
    page.init(page_id, INVALID_PAGE_ID)
    return page


def test_init_sets_header():
    page = make_page(7)
    assert page.page_id == 7
    assert page.prev_page_id == INVALID_PAGE_ID
    assert page.next_page_id == INVALID_PAGE_ID
    assert page.tuple_count == 0
    assert page.free_space_pointer == PAGE_SIZE
    assert page.free_space_remaining == PAGE_SIZE - TablePage.SIZE_TABLE_PAGE_HEADER


def test_insert_and_get_round_trip():
    page = make_page()
    row = make_row(1, "alice")
    rid = page.insert_tuple(row, SCHEMA)
    assert rid == RowId(page.page_id, 0)
    assert row.row_id == rid
    assert page.get_tuple(rid, SCHEMA) == row


def test_insert_consumes_space():
    page = make_page()
    row = make_row(2, "bob")
    before = page.free_space_remaining
    page.insert_tuple(row, SCHEMA)
    assert before - page.free_space_remaining == row.serialized_size(SCHEMA) + TablePage.SIZE_TUPLE


def test_insert_until_full():
    page = make_page()
    rows = []
    while True:
        row = make_row(len(rows), "x" * 1000)
        if page.insert_tuple(row, SCHEMA) is None:
            break
        rows.append(row)
    assert rows
    assert page.free_space_remaining < rows[0].serialized_size(SCHEMA) + TablePage.SIZE_TUPLE
    assert [page.get_tuple(r.row_id, SCHEMA) for r in rows] == rows


def test_empty_row_rejected():
    with pytest.raises(ValueError):
        make_page().insert_tuple(Row([]), SCHEMA)


def test_mark_delete_and_rollback():
    page = make_page()
    rid = page.insert_tuple(make_row(1, "a"), SCHEMA)
    assert page.mark_delete(rid) is True
    assert page.get_tuple(rid, SCHEMA) is None
    assert page.mark_delete(rid) is False
    page.rollback_delete(rid)
    assert page.get_tuple(rid, SCHEMA) == make_row(1, "a").__class__(
        [Field(TypeId.INT, 1), Field(TypeId.CHAR, "a")], rid
    )


def test_mark_delete_out_of_range():
    page = make_page()
    assert page.mark_delete(RowId(page.page_id, 3)) is False


def test_apply_delete_compacts_and_reuses_slot():
    page = make_page()
    rows = [make_row(i, "name" * (i + 1)) for i in range(3)]
    rids = [page.insert_tuple(row, SCHEMA) for row in rows]
    before = page.free_space_remaining
    page.mark_delete(rids[1])
    page.apply_delete(rids[1])
    assert page.free_space_remaining - before == rows[1].serialized_size(SCHEMA)
    assert page.get_tuple(rids[1], SCHEMA) is None
    assert page.get_tuple(rids[0], SCHEMA) == rows[0]
    assert page.get_tuple(rids[2], SCHEMA) == rows[2]
    fresh = make_row(9, "fresh")
    rid = page.insert_tuple(fresh, SCHEMA)
    assert rid.slot_num == rids[1].slot_num
    assert page.get_tuple(rid, SCHEMA) == fresh
    assert page.get_tuple(rids[2], SCHEMA) == rows[2]


def test_apply_delete_invalid_slot():
    page = make_page()
    with pytest.raises(IndexError):
        page.apply_delete(RowId(page.page_id, 0))


def test_update_grows_and_keeps_neighbours():
    page = make_page()
    rows = [make_row(i, "v%d" % i) for i in range(3)]
    rids = [page.insert_tuple(row, SCHEMA) for row in rows]
    before = page.free_space_remaining
    new = make_row(42, "a much longer value than before")
    old = page.update_tuple(new, rids[1], SCHEMA)
    assert old == rows[1]
    assert new.row_id == rids[1]
    assert page.get_tuple(rids[1], SCHEMA) == new
    assert page.get_tuple(rids[0], SCHEMA) == rows[0]
    assert page.get_tuple(rids[2], SCHEMA) == rows[2]
    assert before - page.free_space_remaining == (
        new.serialized_size(SCHEMA) - rows[1].serialized_size(SCHEMA)
    )


def test_update_shrinks():
    page = make_page()
    rows = [make_row(i, "long value %d" % i) for i in range(2)]
    rids = [page.insert_tuple(row, SCHEMA) for row in rows]
    new = make_row(0, "s")
    assert page.update_tuple(new, rids[0], SCHEMA) == rows[0]
    assert page.get_tuple(rids[0], SCHEMA) == new
    assert page.get_tuple(rids[1], SCHEMA) == rows[1]


def test_first_and_next_skip_deleted():
    page = make_page()
    rids = [page.insert_tuple(make_row(i, "r"), SCHEMA) for i in range(4)]
    page.mark_delete(rids[0])
    page.mark_delete(rids[2])
    assert page.first_tuple_rid() == rids[1]
    assert page.next_tuple_rid(rids[1]) == rids[3]
    assert page.next_tuple_rid(rids[3]) is None


def test_first_tuple_rid_empty():
    assert make_page().first_tuple_rid() is None