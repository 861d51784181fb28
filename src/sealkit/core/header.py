"""
Typed binary header entries and the fixed-layout header built from them.

A header is a plain concatenation of fixed-width fields in declaration order.
Nothing about names or types is written to the wire, so the reader has to
supply the same ordered schema the writer used.

Multi-byte fields are little-endian.
"""

from __future__ import annotations

import struct
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional

from .exceptions import EntryNotFoundError, FormatError, InvalidArgumentError


# Layout of a 128-bit decimal: 96-bit coefficient (lo, mid, hi) then flags
_DECIMAL_MAX_SCALE = 28
_DECIMAL_MAX_COEFFICIENT = (1 << 96) - 1
_DECIMAL_SIGN_MASK = 0x80000000
_DECIMAL_SCALE_MASK = 0x00FF0000
_DECIMAL_STRUCT = struct.Struct("<4I")


class EntryType(Enum):
    # Primitive types a header entry may declare
    BYTE = "byte"
    SBYTE = "sbyte"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    CHAR = "char"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL128 = "decimal128"
    BOOL = "bool"

    @property
    def size(self) -> int:
        """Width in bytes of the encoded value."""
        if self is EntryType.DECIMAL128:
            return _DECIMAL_STRUCT.size
        if self is EntryType.BOOL:
            return 1
        return _STRUCTS[self].size

    @property
    def default(self) -> Any:
        """Zero value used for schema placeholders."""
        if self is EntryType.DECIMAL128:
            return Decimal(0)
        if self is EntryType.BOOL:
            return False
        if self is EntryType.CHAR:
            return "\x00"
        if self in (EntryType.FLOAT32, EntryType.FLOAT64):
            return 0.0
        return 0

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` into exactly ``self.size`` bytes.

        Raises:
            InvalidArgumentError: if the value cannot be represented by this type.
        """
        if self is EntryType.DECIMAL128:
            return _encode_decimal(value)
        if self is EntryType.BOOL:
            if not isinstance(value, bool):
                raise InvalidArgumentError(f"bool entry requires a bool, got {type(value).__name__}")
            return b"\x01" if value else b"\x00"
        if self is EntryType.CHAR:
            if not isinstance(value, str) or len(value) != 1 or ord(value) > 0xFFFF:
                raise InvalidArgumentError("char entry requires a single BMP character")
            return _STRUCTS[self].pack(ord(value))
        if self in (EntryType.FLOAT32, EntryType.FLOAT64):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgumentError(f"{self.value} entry requires a number, got {type(value).__name__}")
        elif isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(f"{self.value} entry requires an int, got {type(value).__name__}")
        try:
            return _STRUCTS[self].pack(value)
        except (struct.error, OverflowError) as e:
            raise InvalidArgumentError(f"value {value!r} does not fit in {self.value}: {e}") from e

    def decode(self, data: bytes) -> Any:
        """Decode a value from exactly ``self.size`` bytes.

        Raises:
            FormatError: if ``data`` is not exactly ``self.size`` bytes long or
                does not hold a valid value.
        """
        data = bytes(data)
        if len(data) != self.size:
            raise FormatError(
                f"{self.value} entry must be decoded from exactly {self.size} bytes, got {len(data)}"
            )
        if self is EntryType.DECIMAL128:
            return _decode_decimal(data)
        if self is EntryType.BOOL:
            return data[0] != 0
        (value,) = _STRUCTS[self].unpack(data)
        if self is EntryType.CHAR:
            return chr(value)
        return value


_STRUCTS = {
    EntryType.BYTE: struct.Struct("<B"),
    EntryType.SBYTE: struct.Struct("<b"),
    EntryType.INT16: struct.Struct("<h"),
    EntryType.UINT16: struct.Struct("<H"),
    EntryType.INT32: struct.Struct("<i"),
    EntryType.UINT32: struct.Struct("<I"),
    EntryType.INT64: struct.Struct("<q"),
    EntryType.UINT64: struct.Struct("<Q"),
    EntryType.CHAR: struct.Struct("<H"),
    EntryType.FLOAT32: struct.Struct("<f"),
    EntryType.FLOAT64: struct.Struct("<d"),
}


def _encode_decimal(value: Any) -> bytes:
    if isinstance(value, bool):
        raise InvalidArgumentError("decimal128 entry does not accept bool")
    if isinstance(value, float):
        value = Decimal(repr(value))
    elif isinstance(value, (int, str)):
        try:
            value = Decimal(value)
        except InvalidOperation as e:
            raise InvalidArgumentError(f"not a decimal value: {value!r}") from e
    elif not isinstance(value, Decimal):
        raise InvalidArgumentError(f"decimal128 entry requires a Decimal, got {type(value).__name__}")

    if not value.is_finite():
        raise InvalidArgumentError("decimal128 entry cannot hold NaN or infinity")

    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(str(d) for d in digits))
    if exponent >= 0:
        coefficient *= 10 ** exponent
        scale = 0
    else:
        scale = -exponent
    # drop trailing zeros until the scale fits; only exact reductions are allowed
    while scale > _DECIMAL_MAX_SCALE and coefficient % 10 == 0:
        coefficient //= 10
        scale -= 1
    if scale > _DECIMAL_MAX_SCALE:
        raise InvalidArgumentError(f"decimal scale {scale} exceeds {_DECIMAL_MAX_SCALE}")
    if coefficient > _DECIMAL_MAX_COEFFICIENT:
        raise InvalidArgumentError(f"decimal {value} does not fit in 96 bits")

    flags = (scale << 16) | (_DECIMAL_SIGN_MASK if sign else 0)
    return _DECIMAL_STRUCT.pack(
        coefficient & 0xFFFFFFFF,
        (coefficient >> 32) & 0xFFFFFFFF,
        (coefficient >> 64) & 0xFFFFFFFF,
        flags,
    )


def _decode_decimal(data: bytes) -> Decimal:
    lo, mid, hi, flags = _DECIMAL_STRUCT.unpack(data)
    if flags & ~(_DECIMAL_SIGN_MASK | _DECIMAL_SCALE_MASK):
        raise FormatError("decimal flags have reserved bits set")
    scale = (flags & _DECIMAL_SCALE_MASK) >> 16
    if scale > _DECIMAL_MAX_SCALE:
        raise FormatError(f"decimal scale {scale} exceeds {_DECIMAL_MAX_SCALE}")
    coefficient = lo | (mid << 32) | (hi << 64)
    sign = 1 if flags & _DECIMAL_SIGN_MASK else 0
    # tuple construction keeps all 29 digits without context rounding
    return Decimal((sign, tuple(int(d) for d in str(coefficient)), -scale))


def infer_entry_type(value: Any) -> EntryType:
    """Pick the entry type for a bare Python value."""
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return EntryType.BOOL
    if isinstance(value, int):
        return EntryType.INT32
    if isinstance(value, float):
        return EntryType.FLOAT64
    if isinstance(value, Decimal):
        return EntryType.DECIMAL128
    if isinstance(value, str) and len(value) == 1:
        return EntryType.CHAR
    raise InvalidArgumentError(f"cannot infer a header entry type for {type(value).__name__}")


class HeaderEntry:
    """A named, typed scalar with a fixed-width binary encoding."""

    __slots__ = ("_name", "_entry_type", "_value")

    def __init__(self, name: str, value: Any, entry_type: Optional[EntryType] = None):
        if not name:
            raise InvalidArgumentError("header entry name must not be empty")
        self._name = name
        self._entry_type = entry_type if entry_type is not None else infer_entry_type(value)
        self._value = self._checked(value)

    @classmethod
    def placeholder(cls, name: str, entry_type: EntryType) -> "HeaderEntry":
        """Schema entry: the right name and type, holding the type's zero value."""
        return cls(name, entry_type.default, entry_type)

    def _checked(self, value: Any) -> Any:
        # Round trip through the codec so the stored value is exactly what decodes back.
        return self._entry_type.decode(self._entry_type.encode(value))

    @property
    def name(self) -> str:
        return self._name

    @property
    def entry_type(self) -> EntryType:
        return self._entry_type

    @property
    def size(self) -> int:
        return self._entry_type.size

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._value = self._checked(value)

    @property
    def entry_bytes(self) -> bytes:
        return self._entry_type.encode(self._value)

    @entry_bytes.setter
    def entry_bytes(self, data: bytes) -> None:
        self._value = self._entry_type.decode(data)

    def clone(self) -> "HeaderEntry":
        return HeaderEntry(self._name, self._value, self._entry_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderEntry):
            return NotImplemented
        return (
            self._name == other._name
            and self._entry_type is other._entry_type
            and self.entry_bytes == other.entry_bytes
        )

    def __repr__(self) -> str:
        return f"HeaderEntry({self._name!r}, {self._value!r}, EntryType.{self._entry_type.name})"


class BinaryHeader:
    """
    Ordered collection of header entries.

    Insertion order defines the byte layout. Entry names are unique within a
    header; adding a second entry with an existing name raises
    InvalidArgumentError.
    """

    def __init__(self, entries: Optional[Iterable[HeaderEntry]] = None):
        self._entries: List[HeaderEntry] = []
        for entry in entries or ():
            self.add_entry(entry)

    @classmethod
    def from_bytes(cls, data: bytes, schema: Iterable[HeaderEntry]) -> "BinaryHeader":
        """
        Parse the prefix of ``data`` against ``schema``.

        Each schema entry is cloned and hydrated from the next ``entry.size``
        bytes. The schema itself is left untouched. Bytes past the end of the
        header are ignored.

        Raises:
            FormatError: if ``data`` is shorter than the schema's total width.
        """
        data = bytes(data)
        header = cls(entry.clone() for entry in schema)
        if len(data) < header.size:
            raise FormatError(
                f"header needs {header.size} bytes but only {len(data)} are available"
            )
        offset = 0
        for entry in header._entries:
            entry.entry_bytes = data[offset:offset + entry.size]
            offset += entry.size
        return header

    def add_entry(self, entry: HeaderEntry) -> None:
        if entry.name in self:
            raise InvalidArgumentError(f"header already has an entry named {entry.name!r}")
        self._entries.append(entry)

    def add(self, name: str, value: Any, entry_type: Optional[EntryType] = None) -> HeaderEntry:
        entry = HeaderEntry(name, value, entry_type)
        self.add_entry(entry)
        return entry

    def get(self, name: str) -> HeaderEntry:
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise EntryNotFoundError(f"no header entry named {name!r}")

    def __getitem__(self, name: str) -> HeaderEntry:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self._entries)

    def __iter__(self) -> Iterator[HeaderEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return sum(entry.size for entry in self._entries)

    def schema(self) -> List[HeaderEntry]:
        """Placeholders with this header's names and types, for parsing."""
        return [HeaderEntry.placeholder(entry.name, entry.entry_type) for entry in self._entries]

    def to_bytes(self) -> bytes:
        return b"".join(entry.entry_bytes for entry in self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryHeader):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"BinaryHeader({self._entries!r})"
