"""Frame replacement policies used by the buffer pool."""

from __future__ import annotations

import abc
import threading
from collections import OrderedDict


class Replacer(abc.ABC):
    """Tracks unpinned frames and picks one to evict."""

    @abc.abstractmethod
    def victim(self):
        """Remove and return the frame to evict, or None if there is none."""

    @abc.abstractmethod
    def pin(self, frame_id):
        """Make a frame ineligible for eviction."""

    @abc.abstractmethod
    def unpin(self, frame_id):
        """Make a frame eligible for eviction."""

    @abc.abstractmethod
    def __len__(self):
        """Number of frames that can currently be evicted."""


class LRUReplacer(Replacer):
    """Evicts the frame that was unpinned least recently."""

    def __init__(self, num_pages):
        self.capacity = num_pages
        self._frames = OrderedDict()
        self._lock = threading.Lock()

    def victim(self):
        with self._lock:
            if not self._frames:
                return None
            frame_id, _ = self._frames.popitem(last=False)
            return frame_id

    def pin(self, frame_id):
        with self._lock:
            self._frames.pop(frame_id, None)

    def unpin(self, frame_id):
        with self._lock:
            if frame_id in self._frames or len(self._frames) >= self.capacity:
                return
            self._frames[frame_id] = None

    def __len__(self):
        with self._lock:
            return len(self._frames)


class ClockReplacer(Replacer):
    """Second-chance replacement: a set reference bit buys one more sweep."""

    def __init__(self, num_pages):
        self.capacity = num_pages
        self._frames = OrderedDict()
        self._lock = threading.Lock()

    def victim(self):
        with self._lock:
            while self._frames:
                frame_id, referenced = next(iter(self._frames.items()))
                if referenced:
                    self._frames[frame_id] = False
                    self._frames.move_to_end(frame_id)
                else:
                    del self._frames[frame_id]
                    return frame_id
            return None

    def pin(self, frame_id):
        with self._lock:
            self._frames.pop(frame_id, None)

    def unpin(self, frame_id):
        with self._lock:
            if frame_id in self._frames:
                self._frames[frame_id] = True
            elif len(self._frames) < self.capacity:
                self._frames[frame_id] = True

    def __len__(self):
        with self._lock:
            return len(self._frames)