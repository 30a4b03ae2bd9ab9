"""Rows of fields and their binary encoding.

Layout: | field count (4) | null bitmap | field 1 | ... | field N |
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from minidb.rowid import INVALID_ROWID, RowId
from minidb.types import Field

_U32 = struct.Struct("<I")


@dataclass
class Row:
    """An ordered list of fields plus the RowId where the row is stored."""

    fields: list = field(default_factory=list)
    row_id: RowId = INVALID_ROWID

    def __post_init__(self):
        self.fields = list(self.fields)

    def _check(self, schema):
        if len(self.fields) != len(schema.columns):
            raise ValueError(
                f"row has {len(self.fields)} fields but schema has {len(schema.columns)} columns"
            )
        for value, column in zip(self.fields, schema.columns):
            if value.type_id != column.type_id:
                raise TypeError(
                    f"column {column.name!r} is {column.type_id.name}, field is {value.type_id.name}"
                )

    def serialize(self, schema):
        """Encode the row; an empty row encodes to no bytes."""
        if not self.fields:
            return b""
        self._check(schema)
        count = len(self.fields)
        bitmap = bytearray((count + 7) // 8)
        for index, value in enumerate(self.fields):
            if value.is_null:
                bitmap[index // 8] |= 1 << (index % 8)
        return _U32.pack(count) + bytes(bitmap) + b"".join(v.serialize() for v in self.fields)

    def serialized_size(self, schema):
        if not self.fields:
            return 0
        self._check(schema)
        count = len(self.fields)
        return _U32.size + (count + 7) // 8 + sum(v.serialized_size() for v in self.fields)

    @classmethod
    def deserialize(cls, data, schema, row_id=INVALID_ROWID):
        """Decode a row from the start of data; return (row, bytes consumed)."""
        if len(data) == 0:
            return cls([], row_id), 0
        try:
            (count,) = _U32.unpack_from(data, 0)
        except struct.error as exc:
            raise ValueError("truncated row header") from exc
        if count != len(schema.columns):
            raise ValueError(f"row holds {count} fields but schema has {len(schema.columns)}")
        bitmap_len = (count + 7) // 8
        bitmap = bytes(data[_U32.size:_U32.size + bitmap_len])
        if len(bitmap) < bitmap_len:
            raise ValueError("truncated null bitmap")
        offset = _U32.size + bitmap_len
        fields = []
        for index, column in enumerate(schema.columns):
            is_null = bool((bitmap[index // 8] >> (index % 8)) & 1)
            value, used = Field.deserialize(data, offset, column.type_id, is_null)
            fields.append(value)
            offset += used
        return cls(fields, row_id), offset

    def key_from_row(self, schema, key_schema):
        """Project the columns of key_schema out of this row."""
        return Row([self.fields[schema.column_index(column.name)] for column in key_schema.columns])