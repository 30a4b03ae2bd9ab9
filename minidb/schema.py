"""Column definitions and table schemas with their binary encoding."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace

from minidb.config import DatabaseError, ErrorCode
from minidb.types import TypeId, type_size

COLUMN_MAGIC_NUM = 210928
SCHEMA_MAGIC_NUM = 200715

_U32 = struct.Struct("<I")
_COLUMN_TAIL = struct.Struct("<III??")


def _read_u32(data, offset):
    try:
        return _U32.unpack_from(data, offset)[0]
    except struct.error as exc:
        raise ValueError("truncated data") from exc


@dataclass
class Column:
    """One column: name, type, byte length, position in the table and constraints."""

    name: str
    type_id: TypeId
    length: int = None
    table_ind: int = 0
    nullable: bool = False
    unique: bool = False

    def __post_init__(self):
        self.type_id = TypeId(self.type_id)
        if self.type_id is TypeId.CHAR:
            if self.length is None:
                raise ValueError("a CHAR column needs a length")
        else:
            size = type_size(self.type_id)
            if self.length not in (None, size):
                raise ValueError("only CHAR columns take a length")
            self.length = size

    def serialize(self):
        name = self.name.encode()
        return b"".join(
            [
                _U32.pack(COLUMN_MAGIC_NUM),
                _U32.pack(len(name)),
                name,
                _COLUMN_TAIL.pack(
                    int(self.type_id), self.length, self.table_ind, self.nullable, self.unique
                ),
            ]
        )

    def serialized_size(self):
        return 2 * _U32.size + len(self.name.encode()) + _COLUMN_TAIL.size

    @classmethod
    def deserialize(cls, data, offset=0):
        """Decode a column at offset; return (column, bytes consumed)."""
        if _read_u32(data, offset) != COLUMN_MAGIC_NUM:
            raise ValueError("column magic number mismatch")
        name_len = _read_u32(data, offset + 4)
        start = offset + 8
        raw_name = bytes(data[start:start + name_len])
        if len(raw_name) < name_len:
            raise ValueError("truncated column name")
        try:
            type_id, length, table_ind, nullable, unique = _COLUMN_TAIL.unpack_from(
                data, start + name_len
            )
        except struct.error as exc:
            raise ValueError("truncated column") from exc
        column = cls(
            raw_name.decode(),
            TypeId(type_id),
            length=length,
            table_ind=table_ind,
            nullable=nullable,
            unique=unique,
        )
        return column, 8 + name_len + _COLUMN_TAIL.size


@dataclass
class Schema:
    """The ordered columns of a table or an index key."""

    columns: list = field(default_factory=list)

    def __post_init__(self):
        self.columns = list(self.columns)

    @property
    def column_count(self):
        return len(self.columns)

    def column_index(self, name):
        """Position of the named column; raises DatabaseError if absent."""
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        raise DatabaseError(ErrorCode.COLUMN_NAME_NOT_EXIST, f"column {name!r} does not exist")

    def shallow_copy(self, attrs):
        """Schema sharing the columns picked by attrs, e.g. (3, 0) for index (D, A)."""
        return Schema([self.columns[i] for i in attrs])

    def deep_copy(self):
        return Schema([replace(column) for column in self.columns])

    def serialize(self):
        parts = [_U32.pack(SCHEMA_MAGIC_NUM), _U32.pack(len(self.columns))]
        parts.extend(column.serialize() for column in self.columns)
        return b"".join(parts)

    def serialized_size(self):
        return 2 * _U32.size + sum(column.serialized_size() for column in self.columns)

    @classmethod
    def deserialize(cls, data, offset=0):
        """Decode a schema at offset; return (schema, bytes consumed)."""
        if _read_u32(data, offset) != SCHEMA_MAGIC_NUM:
            raise ValueError("schema magic number mismatch")
        count = _read_u32(data, offset + 4)
        position = offset + 8
        columns = []
        for _ in range(count):
            column, used = Column.deserialize(data, position)
            columns.append(column)
            position += used
        return cls(columns), position - offset