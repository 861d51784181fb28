"""Header + opaque payload, serialized as ``header_bytes || payload``."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .header import BinaryHeader, HeaderEntry


class DataContainer:
    def __init__(self, header: Optional[BinaryHeader] = None, data: bytes = b""):
        self.header = header if header is not None else BinaryHeader()
        self.data = data

    @property
    def data(self) -> bytes:
        return self._data

    @data.setter
    def data(self, value: bytes) -> None:
        self._data = bytes(value)

    @classmethod
    def from_bytes(cls, data: bytes, schema: Iterable[HeaderEntry]) -> "DataContainer":
        """
        Rebuild a container from its serialized form.

        The header is parsed from the first ``size`` bytes using ``schema``
        (names and types only, values are ignored); whatever follows is the
        payload.

        Raises:
            FormatError: if ``data`` is shorter than the header described by ``schema``.
        """
        data = bytes(data)
        header = BinaryHeader.from_bytes(data, schema)
        return cls(header, data[header.size:])

    @property
    def size(self) -> int:
        return self.header.size + len(self._data)

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataContainer):
            return NotImplemented
        return self.header == other.header and self._data == other._data

    def __repr__(self) -> str:
        return f"DataContainer(header={self.header!r}, data=<{len(self._data)} bytes>)"


def pack(header: BinaryHeader, payload: bytes) -> bytes:
    return DataContainer(header, payload).to_bytes()


def unpack(data: bytes, schema: Iterable[HeaderEntry]) -> Tuple[BinaryHeader, bytes]:
    container = DataContainer.from_bytes(data, schema)
    return container.header, container.data
