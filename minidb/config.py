"""Engine-wide constants and the error type raised by storage components."""

from __future__ import annotations

import enum

INVALID_PAGE_ID = -1
INVALID_FRAME_ID = -1
INVALID_TXN_ID = -1
INVALID_LSN = -1

META_PAGE_ID = 0
CATALOG_META_PAGE_ID = 0
INDEX_ROOTS_PAGE_ID = 1

PAGE_SIZE = 4096
DEFAULT_BUFFER_POOL_SIZE = 20480

FIELD_NULL_LEN = 0xFFFFFFFF
VARCHAR_MAX_LEN = PAGE_SIZE // 2


class ErrorCode(enum.IntEnum):
    """Outcome codes reported by database operations."""

    SUCCESS = 0
    FAILED = 1
    ALREADY_EXIST = 2
    NOT_EXIST = 3
    TABLE_ALREADY_EXIST = 4
    TABLE_NOT_EXIST = 5
    INDEX_ALREADY_EXIST = 6
    INDEX_NOT_FOUND = 7
    COLUMN_NAME_NOT_EXIST = 8
    KEY_NOT_FOUND = 9
    QUIT = 10


class DatabaseError(Exception):
    """An error raised by the engine, carrying an ErrorCode."""

    def __init__(self, code, message=None):
        self.code = ErrorCode(code)
        if message is None:
            message = self.code.name.lower().replace("_", " ")
        self.message = message
        super().__init__(message)