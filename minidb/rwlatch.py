"""A reader-writer latch that favours waiting writers."""

from __future__ import annotations

import threading
from contextlib import contextmanager


class ReaderWriterLatch:
    """Many readers or a single writer; a waiting writer blocks new readers."""

    MAX_READERS = 0xFFFFFFFF

    def __init__(self):
        self._mutex = threading.Lock()
        self._reader = threading.Condition(self._mutex)
        self._writer = threading.Condition(self._mutex)
        self._reader_count = 0
        self._writer_entered = False

    def acquire_write(self):
        with self._mutex:
            while self._writer_entered:
                self._reader.wait()
            self._writer_entered = True
            while self._reader_count > 0:
                self._writer.wait()

    def release_write(self):
        with self._mutex:
            if not self._writer_entered:
                raise RuntimeError("release_write called without a write latch held")
            self._writer_entered = False
            self._reader.notify_all()

    def acquire_read(self):
        with self._mutex:
            while self._writer_entered or self._reader_count == self.MAX_READERS:
                self._reader.wait()
            self._reader_count += 1

    def release_read(self):
        with self._mutex:
            if self._reader_count == 0:
                raise RuntimeError("release_read called without a read latch held")
            self._reader_count -= 1
            if self._writer_entered:
                if self._reader_count == 0:
                    self._writer.notify()
            elif self._reader_count == self.MAX_READERS - 1:
                self._reader.notify()

    @contextmanager
    def write_locked(self):
        """Hold the write latch for the duration of a with-block."""
        self.acquire_write()
        try:
            yield self
        finally:
            self.release_write()

    @contextmanager
    def read_locked(self):
        """Hold a read latch for the duration of a with-block."""
        self.acquire_read()
        try:
            yield self
        finally:
            self.release_read()