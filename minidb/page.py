"""In-memory page frame with bookkeeping used by the buffer pool."""

from __future__ import annotations

import struct

from minidb.config import INVALID_PAGE_ID, PAGE_SIZE
from minidb.rwlatch import ReaderWriterLatch

_LSN = struct.Struct("<i")


class Page:
    """A PAGE_SIZE byte buffer plus id, pin count, dirty flag and latch."""

    SIZE_PAGE_HEADER = 8
    OFFSET_PAGE_START = 0
    OFFSET_LSN = 4

    def __init__(self):
        self.data = bytearray(PAGE_SIZE)
        self.page_id = INVALID_PAGE_ID
        self.pin_count = 0
        self.is_dirty = False
        self._latch = ReaderWriterLatch()

    @property
    def lsn(self):
        return _LSN.unpack_from(self.data, self.OFFSET_LSN)[0]

    @lsn.setter
    def lsn(self, value):
        _LSN.pack_into(self.data, self.OFFSET_LSN, value)

    def reset_memory(self):
        """Zero the page contents in place."""
        self.data[:] = bytes(PAGE_SIZE)

    def write_latch(self):
        """Context manager holding the page write latch."""
        return self._latch.write_locked()

    def read_latch(self):
        """Context manager holding a page read latch."""
        return self._latch.read_locked()