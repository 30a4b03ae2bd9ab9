"""Buffer pool caching disk pages in a fixed number of frames."""

from __future__ import annotations

import threading
from collections import deque

from minidb.config import INVALID_PAGE_ID, DatabaseError, ErrorCode
from minidb.page import Page
from minidb.replacer import LRUReplacer


class BufferPoolManager:
    """Maps page ids to in-memory frames, evicting with an LRU policy."""

    def __init__(self, pool_size, disk_manager):
        self.pool_size = pool_size
        self.disk_manager = disk_manager
        self._pages = [Page() for _ in range(pool_size)]
        self._page_table = {}
        self._replacer = LRUReplacer(pool_size)
        self._free_list = deque(range(pool_size))
        self._latch = threading.RLock()

    def fetch_page(self, page_id):
        """Return the pinned page, reading it from disk when not cached."""
        if page_id < 0:
            raise ValueError(f"invalid page id {page_id}")
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is not None:
                page = self._pages[frame]
                page.pin_count += 1
                self._replacer.pin(frame)
                return page
            frame = self._find_frame()
            page = self._pages[frame]
            page.data[:] = self.disk_manager.read_page(page_id)
            page.page_id = page_id
            page.pin_count = 1
            page.is_dirty = False
            self._page_table[page_id] = frame
            self._replacer.pin(frame)
            return page

    def unpin_page(self, page_id, is_dirty):
        """Drop one pin; return False if the page is not cached or not pinned."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is None:
                return False
            page = self._pages[frame]
            if page.pin_count <= 0:
                return False
            page.pin_count -= 1
            page.is_dirty = page.is_dirty or is_dirty
            if page.pin_count == 0:
                self._replacer.unpin(frame)
            return True

    def flush_page(self, page_id):
        """Write a cached page to disk; return False if it is not cached."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is None:
                return False
            page = self._pages[frame]
            self.disk_manager.write_page(page_id, page.data)
            page.is_dirty = False
            return True

    def flush_all(self):
        """Write every cached page to disk."""
        with self._latch:
            for page_id in list(self._page_table):
                self.flush_page(page_id)

    def new_page(self):
        """Allocate a page on disk and return it pinned and zeroed."""
        with self._latch:
            frame = self._find_frame()
            try:
                page_id = self.disk_manager.allocate_page()
            except DatabaseError:
                self._free_list.append(frame)
                raise
            page = self._pages[frame]
            page.reset_memory()
            page.page_id = page_id
            page.pin_count = 1
            page.is_dirty = True
            self._page_table[page_id] = frame
            self._replacer.pin(frame)
            return page

    def delete_page(self, page_id):
        """Free a page; return False if it is still pinned."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is not None:
                page = self._pages[frame]
                if page.pin_count > 0:
                    return False
                del self._page_table[page_id]
                self._replacer.pin(frame)
                page.reset_memory()
                page.page_id = INVALID_PAGE_ID
                page.is_dirty = False
                self._free_list.append(frame)
            self.disk_manager.deallocate_page(page_id)
            return True

    def is_page_free(self, page_id):
        return self.disk_manager.is_page_free(page_id)

    def check_all_unpinned(self):
        """True when no cached page holds a pin."""
        with self._latch:
            return all(self._pages[frame].pin_count == 0 for frame in self._page_table.values())

    def _find_frame(self):
        if self._free_list:
            return self._free_list.popleft()
        frame = self._replacer.victim()
        if frame is None:
            raise DatabaseError(ErrorCode.FAILED, "all frames in the buffer pool are pinned")
        page = self._pages[frame]
        if page.is_dirty:
            self.disk_manager.write_page(page.page_id, page.data)
        del self._page_table[page.page_id]
        page.page_id = INVALID_PAGE_ID
        page.pin_count = 0
        page.is_dirty = False
        return frame