"""Slotted page holding the tuples of a table.

Layout:
| PageId (4) | LSN (4) | PrevPageId (4) | NextPageId (4) | FreeSpacePointer (4) |
| TupleCount (4) | Tuple_1 offset (4) | Tuple_1 size (4) | ... | free space | tuples |

Tuples grow down from the end of the page; the slot array grows up after the header.
"""

from __future__ import annotations

import struct

from minidb.config import INVALID_PAGE_ID, PAGE_SIZE
from minidb.row import Row
from minidb.rowid import RowId

_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")

DELETE_MASK = 1 << 31


def _is_deleted(tuple_size):
    return bool(tuple_size & DELETE_MASK) or tuple_size == 0


class TablePage:
    """View over a buffer-pool Page that stores table tuples in slots."""

    SIZE_TABLE_PAGE_HEADER = 24
    SIZE_TUPLE = 8
    OFFSET_PAGE_ID = 0
    OFFSET_PREV_PAGE_ID = 8
    OFFSET_NEXT_PAGE_ID = 12
    OFFSET_FREE_SPACE = 16
    OFFSET_TUPLE_COUNT = 20
    OFFSET_TUPLE_OFFSET = 24
    OFFSET_TUPLE_SIZE = 28
    SIZE_MAX_ROW = PAGE_SIZE - SIZE_TABLE_PAGE_HEADER - SIZE_TUPLE

    def __init__(self, page):
        self.page = page

    @property
    def data(self):
        return self.page.data

    def init(self, page_id, prev_page_id):
        """Format the page as an empty table page."""
        self.page_id = page_id
        self.prev_page_id = prev_page_id
        self.next_page_id = INVALID_PAGE_ID
        self.free_space_pointer = PAGE_SIZE
        self.tuple_count = 0

    def _get_i32(self, offset):
        return _I32.unpack_from(self.data, offset)[0]

    def _set_i32(self, offset, value):
        _I32.pack_into(self.data, offset, value)

    def _get_u32(self, offset):
        return _U32.unpack_from(self.data, offset)[0]

    def _set_u32(self, offset, value):
        _U32.pack_into(self.data, offset, value)

    @property
    def page_id(self):
        return self._get_i32(self.OFFSET_PAGE_ID)

    @page_id.setter
    def page_id(self, value):
        self._set_i32(self.OFFSET_PAGE_ID, value)

    @property
    def prev_page_id(self):
        return self._get_i32(self.OFFSET_PREV_PAGE_ID)

    @prev_page_id.setter
    def prev_page_id(self, value):
        self._set_i32(self.OFFSET_PREV_PAGE_ID, value)

    @property
    def next_page_id(self):
        return self._get_i32(self.OFFSET_NEXT_PAGE_ID)

    @next_page_id.setter
    def next_page_id(self, value):
        self._set_i32(self.OFFSET_NEXT_PAGE_ID, value)

    @property
    def free_space_pointer(self):
        return self._get_u32(self.OFFSET_FREE_SPACE)

    @free_space_pointer.setter
    def free_space_pointer(self, value):
        self._set_u32(self.OFFSET_FREE_SPACE, value)

    @property
    def tuple_count(self):
        return self._get_u32(self.OFFSET_TUPLE_COUNT)

    @tuple_count.setter
    def tuple_count(self, value):
        self._set_u32(self.OFFSET_TUPLE_COUNT, value)

    @property
    def free_space_remaining(self):
        return (
            self.free_space_pointer
            - self.SIZE_TABLE_PAGE_HEADER
            - self.SIZE_TUPLE * self.tuple_count
        )

    def _tuple_offset(self, slot):
        return self._get_u32(self.OFFSET_TUPLE_OFFSET + self.SIZE_TUPLE * slot)

    def _set_tuple_offset(self, slot, offset):
        self._set_u32(self.OFFSET_TUPLE_OFFSET + self.SIZE_TUPLE * slot, offset)

    def _tuple_size(self, slot):
        return self._get_u32(self.OFFSET_TUPLE_SIZE + self.SIZE_TUPLE * slot)

    def _set_tuple_size(self, slot, size):
        self._set_u32(self.OFFSET_TUPLE_SIZE + self.SIZE_TUPLE * slot, size)

    def _check_slot(self, rid):
        if not 0 <= rid.slot_num < self.tuple_count:
            raise IndexError(f"slot {rid.slot_num} does not exist on page {self.page_id}")
        return rid.slot_num

    def insert_tuple(self, row, schema):
        """Store the row; return its RowId, or None when the page lacks space."""
        raw = row.serialize(schema)
        if not raw:
            raise ValueError("cannot store an empty row")
        count = self.tuple_count
        slot = next((i for i in range(count) if self._tuple_size(i) == 0), count)
        needed = len(raw) + (self.SIZE_TUPLE if slot == count else 0)
        if self.free_space_remaining < needed:
            return None
        start = self.free_space_pointer - len(raw)
        self.free_space_pointer = start
        self.data[start:start + len(raw)] = raw
        self._set_tuple_offset(slot, start)
        self._set_tuple_size(slot, len(raw))
        if slot == count:
            self.tuple_count = count + 1
        rid = RowId(self.page_id, slot)
        row.row_id = rid
        return rid

    def mark_delete(self, rid):
        """Flag a tuple as deleted; return False if absent or already flagged."""
        slot = rid.slot_num
        if not 0 <= slot < self.tuple_count:
            return False
        size = self._tuple_size(slot)
        if _is_deleted(size):
            return False
        self._set_tuple_size(slot, size | DELETE_MASK)
        return True

    def update_tuple(self, new_row, rid, schema):
        """Replace a tuple in place; return the old row, or None if that is impossible."""
        slot = rid.slot_num
        if not 0 <= slot < self.tuple_count:
            return None
        size = self._tuple_size(slot)
        if _is_deleted(size):
            return None
        raw = new_row.serialize(schema)
        if not raw:
            raise ValueError("cannot store an empty row")
        new_size = len(raw)
        if self.free_space_remaining + size < new_size:
            return None
        offset = self._tuple_offset(slot)
        old_row, _ = Row.deserialize(bytes(self.data[offset:offset + size]), schema, rid)
        free = self.free_space_pointer
        delta = size - new_size
        self.data[free + delta:offset + delta] = self.data[free:offset]
        self.free_space_pointer = free + delta
        self.data[offset + delta:offset + delta + new_size] = raw
        self._set_tuple_size(slot, new_size)
        for i in range(self.tuple_count):
            other_offset = self._tuple_offset(i)
            if self._tuple_size(i) > 0 and other_offset < offset + size:
                self._set_tuple_offset(i, other_offset + delta)
        new_row.row_id = rid
        return old_row

    def apply_delete(self, rid):
        """Physically remove a tuple and compact the page."""
        slot = self._check_slot(rid)
        size = self._tuple_size(slot) & ~DELETE_MASK
        if size == 0:
            raise ValueError(f"slot {slot} holds no tuple")
        offset = self._tuple_offset(slot)
        free = self.free_space_pointer
        self.data[free + size:offset + size] = self.data[free:offset]
        self.data[free:free + size] = bytes(size)
        self.free_space_pointer = free + size
        self._set_tuple_size(slot, 0)
        self._set_tuple_offset(slot, 0)
        for i in range(self.tuple_count):
            other_offset = self._tuple_offset(i)
            if self._tuple_size(i) != 0 and other_offset < offset:
                self._set_tuple_offset(i, other_offset + size)

    def rollback_delete(self, rid):
        """Clear the delete flag set by mark_delete."""
        slot = self._check_slot(rid)
        size = self._tuple_size(slot)
        if size & DELETE_MASK:
            self._set_tuple_size(slot, size & ~DELETE_MASK)

    def get_tuple(self, rid, schema):
        """Return the row stored at rid, or None if it is absent or deleted."""
        slot = rid.slot_num
        if not 0 <= slot < self.tuple_count:
            return None
        size = self._tuple_size(slot)
        if _is_deleted(size):
            return None
        offset = self._tuple_offset(slot)
        row, _ = Row.deserialize(bytes(self.data[offset:offset + size]), schema, rid)
        return row

    def _live_rid_from(self, start):
        for slot in range(start, self.tuple_count):
            if not _is_deleted(self._tuple_size(slot)):
                return RowId(self.page_id, slot)
        return None

    def first_tuple_rid(self):
        """RowId of the first live tuple, or None."""
        return self._live_rid_from(0)

    def next_tuple_rid(self, rid):
        """RowId of the live tuple after rid on this page, or None."""
        return self._live_rid_from(rid.slot_num + 1)