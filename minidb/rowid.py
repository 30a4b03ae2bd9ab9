"""Row identifiers: a page id paired with a slot number."""

from __future__ import annotations

from dataclasses import dataclass

from minidb.config import INVALID_PAGE_ID

_MASK32 = 0xFFFFFFFF


@dataclass(frozen=True)
class RowId:
    """Location of a tuple: | page_id (32 bit) | slot_num (32 bit) |."""

    page_id: int = INVALID_PAGE_ID
    slot_num: int = 0

    @classmethod
    def from_int(cls, value):
        """Build a RowId from its packed 64-bit form."""
        page_id = (value >> 32) & _MASK32
        if page_id & 0x80000000:
            page_id -= 1 << 32
        return cls(page_id, value & _MASK32)

    def as_int(self):
        """Return the packed 64-bit form of this RowId."""
        return (self.page_id << 32) | (self.slot_num & _MASK32)


INVALID_ROWID = RowId(INVALID_PAGE_ID, 0)