"""Column value types, three-valued comparison results and typed field values."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from minidb.config import VARCHAR_MAX_LEN

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")
_U32 = struct.Struct("<I")


class TypeId(enum.IntEnum):
    INVALID = 0
    INT = 1
    FLOAT = 2
    CHAR = 3


class CmpBool(enum.IntEnum):
    """Result of a comparison that may involve NULL."""

    FALSE = 0
    TRUE = 1
    NULL = 2


def cmp_bool(value):
    return CmpBool.TRUE if value else CmpBool.FALSE


def type_size(type_id):
    """Fixed storage size of a type; 0 for variable-length CHAR."""
    type_id = TypeId(type_id)
    if type_id in (TypeId.INT, TypeId.FLOAT):
        return 4
    if type_id is TypeId.CHAR:
        return 0
    raise ValueError(f"unknown field type {type_id!r}")


@dataclass(frozen=True)
class Field:
    """A typed value; a value of None means SQL NULL."""

    type_id: TypeId
    value: object = None

    def __post_init__(self):
        type_id = TypeId(self.type_id)
        object.__setattr__(self, "type_id", type_id)
        value = self.value
        if value is None:
            return
        if type_id is TypeId.INT:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"INT field needs an int, got {value!r}")
            if not -(1 << 31) <= value < (1 << 31):
                raise ValueError(f"INT value {value} out of range")
        elif type_id is TypeId.FLOAT:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"FLOAT field needs a number, got {value!r}")
            try:
                value = _FLOAT.unpack(_FLOAT.pack(float(value)))[0]
            except OverflowError as exc:
                raise ValueError(f"FLOAT value {value} out of range") from exc
        elif type_id is TypeId.CHAR:
            if isinstance(value, (bytes, bytearray)):
                value = bytes(value).decode()
            if not isinstance(value, str):
                raise TypeError(f"CHAR field needs a string, got {value!r}")
            if len(value.encode()) >= VARCHAR_MAX_LEN:
                raise ValueError("field length exceeds max varchar length")
        else:
            raise ValueError("a field of invalid type can only be NULL")
        object.__setattr__(self, "value", value)

    @classmethod
    def null(cls, type_id):
        return cls(type_id, None)

    @property
    def is_null(self):
        return self.value is None

    @property
    def length(self):
        """Byte length of CHAR data, or the fixed size of other types."""
        if self.type_id is TypeId.CHAR:
            return 0 if self.is_null else len(self.value.encode())
        return type_size(self.type_id)

    def _key(self):
        return self.value.encode() if self.type_id is TypeId.CHAR else self.value

    def _compare(self, other, op):
        if self.type_id != other.type_id:
            raise TypeError(f"cannot compare {self.type_id.name} with {other.type_id.name}")
        if self.is_null or other.is_null:
            return CmpBool.NULL
        return cmp_bool(op(self._key(), other._key()))

    def compare_equals(self, other):
        return self._compare(other, lambda a, b: a == b)

    def compare_not_equals(self, other):
        return self._compare(other, lambda a, b: a != b)

    def compare_less_than(self, other):
        return self._compare(other, lambda a, b: a < b)

    def compare_less_than_equals(self, other):
        return self._compare(other, lambda a, b: a <= b)

    def compare_greater_than(self, other):
        return self._compare(other, lambda a, b: a > b)

    def compare_greater_than_equals(self, other):
        return self._compare(other, lambda a, b: a >= b)

    def serialize(self):
        """Encode the value; NULL encodes to no bytes at all."""
        if self.is_null:
            return b""
        if self.type_id is TypeId.INT:
            return _INT.pack(self.value)
        if self.type_id is TypeId.FLOAT:
            return _FLOAT.pack(self.value)
        raw = self.value.encode()
        return _U32.pack(len(raw)) + raw

    def serialized_size(self):
        if self.is_null:
            return 0
        if self.type_id is TypeId.CHAR:
            return _U32.size + len(self.value.encode())
        return type_size(self.type_id)

    @classmethod
    def deserialize(cls, data, offset, type_id, is_null):
        """Decode a field at offset; return (field, bytes consumed)."""
        type_id = TypeId(type_id)
        if is_null:
            return cls(type_id), 0
        try:
            if type_id is TypeId.INT:
                return cls(type_id, _INT.unpack_from(data, offset)[0]), _INT.size
            if type_id is TypeId.FLOAT:
                return cls(type_id, _FLOAT.unpack_from(data, offset)[0]), _FLOAT.size
            if type_id is TypeId.CHAR:
                (length,) = _U32.unpack_from(data, offset)
                start = offset + _U32.size
                raw = bytes(data[start:start + length])
                if len(raw) < length:
                    raise ValueError("truncated CHAR field")
                return cls(type_id, raw.decode()), _U32.size + length
        except struct.error as exc:
            raise ValueError(f"truncated {type_id.name} field") from exc
        raise ValueError("cannot deserialize a field of invalid type")

    def __str__(self):
        if self.is_null:
            return "NULL"
        if self.type_id is TypeId.FLOAT:
            return f"{self.value:.6f}"
        return str(self.value)