"""A table stored as a doubly linked list of table pages."""

from __future__ import annotations

from contextlib import contextmanager

from minidb.config import INVALID_PAGE_ID, DatabaseError, ErrorCode
from minidb.rowid import INVALID_ROWID
from minidb.table_page import TablePage


class TableHeap:
    """Rows of one table, spread over a chain of pages in the buffer pool."""

    def __init__(self, buffer_pool, first_page_id, schema):
        self.buffer_pool = buffer_pool
        self.first_page_id = first_page_id
        self.schema = schema

    @classmethod
    def create(cls, buffer_pool, schema):
        """Allocate the first page of a new, empty table."""
        page = buffer_pool.new_page()
        try:
            with page.write_latch():
                TablePage(page).init(page.page_id, INVALID_PAGE_ID)
        finally:
            buffer_pool.unpin_page(page.page_id, True)
        return cls(buffer_pool, page.page_id, schema)

    @classmethod
    def open(cls, buffer_pool, first_page_id, schema):
        """Attach to a table whose first page already exists."""
        return cls(buffer_pool, first_page_id, schema)

    @contextmanager
    def _page(self, page_id, dirty=False):
        page = self.buffer_pool.fetch_page(page_id)
        try:
            yield TablePage(page)
        finally:
            self.buffer_pool.unpin_page(page_id, dirty)

    def insert_tuple(self, row):
        """Insert the row, appending a page if needed; return its RowId."""
        size = row.serialized_size(self.schema)
        if size > TablePage.SIZE_MAX_ROW:
            raise ValueError(f"row of {size} bytes does not fit in a page")
        page_id = self.first_page_id
        while True:
            with self._page(page_id, dirty=True) as page:
                with page.page.write_latch():
                    rid = page.insert_tuple(row, self.schema)
                    if rid is not None:
                        return rid
                    next_id = page.next_page_id
                    if next_id == INVALID_PAGE_ID:
                        return self._append_and_insert(page, row)
            page_id = next_id

    def _append_and_insert(self, last, row):
        new = self.buffer_pool.new_page()
        try:
            fresh = TablePage(new)
            with new.write_latch():
                fresh.init(new.page_id, last.page_id)
                last.next_page_id = new.page_id
                rid = fresh.insert_tuple(row, self.schema)
        finally:
            self.buffer_pool.unpin_page(new.page_id, True)
        if rid is None:
            raise DatabaseError(ErrorCode.FAILED, "row does not fit in an empty page")
        return rid

    def mark_delete(self, rid):
        """Flag a tuple as deleted; the delete happens in apply_delete."""
        with self._page(rid.page_id, dirty=True) as page:
            with page.page.write_latch():
                return page.mark_delete(rid)

    def update_tuple(self, row, rid):
        """Replace the tuple at rid in place; False if it is gone or no longer fits."""
        with self._page(rid.page_id, dirty=True) as page:
            with page.page.write_latch():
                return page.update_tuple(row, rid, self.schema) is not None

    def apply_delete(self, rid):
        """Physically remove a tuple."""
        with self._page(rid.page_id, dirty=True) as page:
            with page.page.write_latch():
                page.apply_delete(rid)

    def rollback_delete(self, rid):
        """Undo a mark_delete."""
        with self._page(rid.page_id, dirty=True) as page:
            with page.page.write_latch():
                page.rollback_delete(rid)

    def get_tuple(self, rid):
        """Return the row at rid, or None if it does not exist."""
        if rid.page_id < 0:
            return None
        with self._page(rid.page_id) as page:
            with page.page.read_latch():
                return page.get_tuple(rid, self.schema)

    def next_row_id(self, rid):
        """RowId of the live tuple after rid, or INVALID_ROWID at the end."""
        if rid.page_id < 0:
            return INVALID_ROWID
        with self._page(rid.page_id) as page:
            with page.page.read_latch():
                following = page.next_tuple_rid(rid)
                next_page = page.next_page_id
        if following is not None:
            return following
        return self._first_rid_from(next_page)

    def _first_rid_from(self, page_id):
        while page_id != INVALID_PAGE_ID:
            with self._page(page_id) as page:
                with page.page.read_latch():
                    rid = page.first_tuple_rid()
                    page_id = page.next_page_id
            if rid is not None:
                return rid
        return INVALID_ROWID

    def _page_ids(self):
        page_id = self.first_page_id
        while page_id != INVALID_PAGE_ID:
            yield page_id
            with self._page(page_id) as page:
                page_id = page.next_page_id

    def delete_table(self):
        """Free every page of the table, last page first."""
        for page_id in reversed(list(self._page_ids())):
            self.buffer_pool.delete_page(page_id)

    def free_table_heap(self):
        """Free every page of the table, first page first."""
        page_id = self.first_page_id
        while page_id != INVALID_PAGE_ID:
            with self._page(page_id) as page:
                next_id = page.next_page_id
            self.buffer_pool.delete_page(page_id)
            page_id = next_id

    def begin(self):
        return TableIterator(self, self._first_rid_from(self.first_page_id))

    def end(self):
        return TableIterator(self, INVALID_ROWID)

    def __iter__(self):
        return self.begin()


class TableIterator:
    """Walks the live rows of a TableHeap in storage order."""

    def __init__(self, heap, row_id):
        self.heap = heap
        self.row_id = row_id

    def __iter__(self):
        return self

    def __next__(self):
        while self.row_id != INVALID_ROWID:
            row = self.heap.get_tuple(self.row_id)
            self.advance()
            if row is not None:
                return row
        raise StopIteration

    def __eq__(self, other):
        if not isinstance(other, TableIterator):
            return NotImplemented
        return self.heap is other.heap and self.row_id == other.row_id

    def advance(self):
        """Move to the next live row; returns self."""
        self.row_id = self.heap.next_row_id(self.row_id)
        return self

    def row(self):
        """The row the iterator currently points at."""
        if self.row_id == INVALID_ROWID:
            raise IndexError("iterator is past the end of the table")
        return self.heap.get_tuple(self.row_id)