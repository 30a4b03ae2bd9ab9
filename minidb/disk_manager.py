"""Page-level access to the database file with extent bitmaps for allocation.

File layout (N = pages per bitmap):
| Meta Page | Bitmap 1 | Page 1 ... Page N | Bitmap 2 | Page N+1 ... Page 2N | ...
"""

from __future__ import annotations

import os
import struct
import threading
from dataclasses import dataclass, field

from minidb.bitmap_page import BitmapPage
from minidb.config import META_PAGE_ID, PAGE_SIZE, DatabaseError, ErrorCode

BITMAP_SIZE = BitmapPage.max_supported_size()
_META_HEADER = struct.Struct("<II")
_EXTENT_SLOTS = (PAGE_SIZE - _META_HEADER.size) // 4
_EXTENT_ARRAY = struct.Struct(f"<{_EXTENT_SLOTS}I")
MAX_VALID_PAGE_ID = _EXTENT_SLOTS * BITMAP_SIZE


@dataclass
class DiskFileMetaPage:
    """Allocation summary kept in physical page 0."""

    num_allocated_pages: int = 0
    num_extents: int = 0
    extent_used_pages: list = field(default_factory=lambda: [0] * _EXTENT_SLOTS)

    @classmethod
    def from_bytes(cls, data):
        if len(data) != PAGE_SIZE:
            raise ValueError(f"meta page must be {PAGE_SIZE} bytes, got {len(data)}")
        allocated, extents = _META_HEADER.unpack_from(data)
        used = list(_EXTENT_ARRAY.unpack_from(data, _META_HEADER.size))
        return cls(allocated, extents, used)

    def to_bytes(self):
        body = _META_HEADER.pack(self.num_allocated_pages, self.num_extents)
        body += _EXTENT_ARRAY.pack(*self.extent_used_pages)
        return body + bytes(PAGE_SIZE - len(body))

    def extent_used_page(self, extent_id):
        """Pages in use in an extent; 0 for extents not yet created."""
        if extent_id >= self.num_extents:
            return 0
        return self.extent_used_pages[extent_id]


def _bitmap_physical_id(extent):
    return extent * (BITMAP_SIZE + 1) + 1


def _map_page_id(logical_page_id):
    return logical_page_id + logical_page_id // BITMAP_SIZE + 2


class DiskManager:
    """Reads, writes, allocates and frees pages of one database file."""

    BITMAP_SIZE = BITMAP_SIZE

    def __init__(self, db_file):
        self.file_name = os.fspath(db_file)
        self._latch = threading.RLock()
        self.closed = False
        try:
            self._io = open(self.file_name, "r+b")
        except FileNotFoundError:
            parent = os.path.dirname(self.file_name)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.file_name, "wb"):
                pass
            self._io = open(self.file_name, "r+b")
        self.meta = DiskFileMetaPage.from_bytes(self._read_physical_page(META_PAGE_ID))

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        """Persist the meta page and close the file."""
        with self._latch:
            if not self.closed:
                self._write_physical_page(META_PAGE_ID, self.meta.to_bytes())
                self._io.close()
                self.closed = True

    def read_page(self, logical_page_id):
        self._check_logical(logical_page_id)
        with self._latch:
            return self._read_physical_page(_map_page_id(logical_page_id))

    def write_page(self, logical_page_id, data):
        self._check_logical(logical_page_id)
        if len(data) != PAGE_SIZE:
            raise ValueError(f"page data must be {PAGE_SIZE} bytes, got {len(data)}")
        with self._latch:
            self._write_physical_page(_map_page_id(logical_page_id), data)

    def allocate_page(self):
        """Allocate the first free page and return its logical id."""
        with self._latch:
            meta = self.meta
            if meta.num_allocated_pages >= MAX_VALID_PAGE_ID:
                raise DatabaseError(ErrorCode.FAILED, "no free page left in the database file")
            extent = next(
                (
                    index
                    for index, used in enumerate(meta.extent_used_pages[: meta.num_extents])
                    if used < BITMAP_SIZE
                ),
                meta.num_extents,
            )
            physical = _bitmap_physical_id(extent)
            bitmap = BitmapPage.from_bytes(self._read_physical_page(physical))
            offset = bitmap.allocate_page()
            if offset is None:
                raise DatabaseError(ErrorCode.FAILED, f"extent {extent} has no free page")
            self._write_physical_page(physical, bitmap.to_bytes())
            meta.num_allocated_pages += 1
            meta.extent_used_pages[extent] += 1
            meta.num_extents = max(meta.num_extents, extent + 1)
            return extent * BITMAP_SIZE + offset

    def deallocate_page(self, logical_page_id):
        """Free a page; freeing a page that is already free does nothing."""
        self._check_logical(logical_page_id)
        with self._latch:
            extent, offset = divmod(logical_page_id, BITMAP_SIZE)
            physical = _bitmap_physical_id(extent)
            bitmap = BitmapPage.from_bytes(self._read_physical_page(physical))
            if not bitmap.deallocate_page(offset):
                return
            self._write_physical_page(physical, bitmap.to_bytes())
            self.meta.num_allocated_pages -= 1
            self.meta.extent_used_pages[extent] -= 1

    def is_page_free(self, logical_page_id):
        if not 0 <= logical_page_id < MAX_VALID_PAGE_ID:
            return False
        with self._latch:
            extent, offset = divmod(logical_page_id, BITMAP_SIZE)
            bitmap = BitmapPage.from_bytes(self._read_physical_page(_bitmap_physical_id(extent)))
            return bitmap.is_page_free(offset)

    def _check_logical(self, logical_page_id):
        if not 0 <= logical_page_id < MAX_VALID_PAGE_ID:
            raise ValueError(f"invalid page id {logical_page_id}")

    def _check_open(self):
        if self.closed:
            raise ValueError("disk manager is closed")

    def _read_physical_page(self, physical_page_id):
        self._check_open()
        offset = physical_page_id * PAGE_SIZE
        if offset >= os.fstat(self._io.fileno()).st_size:
            return bytes(PAGE_SIZE)
        self._io.seek(offset)
        data = self._io.read(PAGE_SIZE)
        if len(data) < PAGE_SIZE:
            data += bytes(PAGE_SIZE - len(data))
        return data

    def _write_physical_page(self, physical_page_id, data):
        self._check_open()
        self._io.seek(physical_page_id * PAGE_SIZE)
        self._io.write(bytes(data))
        self._io.flush()