"""Free-page bitmap that tracks allocation within one extent."""

from __future__ import annotations

import struct

from minidb.config import PAGE_SIZE

_HEADER = struct.Struct("<II")
MAX_CHARS = PAGE_SIZE - _HEADER.size


class BitmapPage:
    """Page layout: | page_allocated (4) | next_free_page (4) | bitmap bytes |."""

    def __init__(self):
        self.page_allocated = 0
        self.next_free_page = 0
        self._bytes = bytearray(MAX_CHARS)

    @classmethod
    def max_supported_size(cls):
        """Number of pages one bitmap page can track."""
        return 8 * MAX_CHARS

    @classmethod
    def from_bytes(cls, data):
        if len(data) != PAGE_SIZE:
            raise ValueError(f"bitmap page must be {PAGE_SIZE} bytes, got {len(data)}")
        page = cls()
        page.page_allocated, page.next_free_page = _HEADER.unpack_from(data)
        page._bytes[:] = data[_HEADER.size:]
        return page

    def to_bytes(self):
        return _HEADER.pack(self.page_allocated, self.next_free_page) + bytes(self._bytes)

    def allocate_page(self):
        """Mark the lowest free page used and return its offset, or None when full."""
        size = self.max_supported_size()
        if self.page_allocated >= size:
            return None
        offset = self.next_free_page
        if offset >= size or not self._is_free(offset):
            offset = self._find_free(0)
            if offset is None:
                return None
        byte_index, bit = divmod(offset, 8)
        self._bytes[byte_index] |= 1 << bit
        self.page_allocated += 1
        following = self._find_free(offset + 1)
        self.next_free_page = size if following is None else following
        return offset

    def deallocate_page(self, page_offset):
        """Free a page; return False if it was already free."""
        self._check_range(page_offset)
        if self._is_free(page_offset):
            return False
        byte_index, bit = divmod(page_offset, 8)
        self._bytes[byte_index] &= ~(1 << bit) & 0xFF
        self.page_allocated -= 1
        self.next_free_page = min(self.next_free_page, page_offset)
        return True

    def is_page_free(self, page_offset):
        self._check_range(page_offset)
        return self._is_free(page_offset)

    def _check_range(self, page_offset):
        if not 0 <= page_offset < self.max_supported_size():
            raise IndexError(f"page offset {page_offset} out of range")

    def _is_free(self, page_offset):
        byte_index, bit = divmod(page_offset, 8)
        return not (self._bytes[byte_index] >> bit) & 1

    def _find_free(self, start):
        byte_index, bit = divmod(start, 8)
        while byte_index < MAX_CHARS:
            value = self._bytes[byte_index]
            if value != 0xFF:
                for candidate in range(bit, 8):
                    if not (value >> candidate) & 1:
                        return byte_index * 8 + candidate
            byte_index += 1
            bit = 0
        return None