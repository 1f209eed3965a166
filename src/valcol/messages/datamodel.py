# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from enum import Enum
from typing import ClassVar, Protocol, Self, runtime_checkable

__all__ = (  # noqa: RUF022
    # Types and protocols

    'WireData',
    'WireReader',
    'WireAdapter',

    # Adapters

    'UnsignedIntegerAdapter',
    'UInt32Adapter',
    'UInt64Adapter',

    'HashAdapter',
    'Hash256Adapter',

    'BlobAdapter',
    'Vector256Adapter',

    # Helpers

    'read_variable_length',

    # Enums

    'KeyType',
)


type WireData = bytes | bytearray | memoryview


class WireReader:
    """
    A forward-only reader over a bounded bytes buffer.

    Reads are checked against the end of the buffer and fail with ValueError
    instead of returning short data. The reader never moves backwards.
    """

    def __init__(self, data: WireData, /) -> None:
        self._data = bytes(data)
        self._position = 0

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(position={self._position}, length={len(self._data)})'

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def peek(self, size: int = 1, /) -> bytes:
        """Return up to size bytes from the current position without consuming them"""
        return self._data[self._position:self._position + size]

    def startswith(self, prefix: bytes, /) -> bool:
        return self._data.startswith(prefix, self._position)

    def read(self, size: int, /) -> bytes:
        if size < 0:
            raise ValueError(f'Cannot read a negative number of bytes: {size!r}')
        if size > self.remaining:
            raise ValueError(f'Insufficient data in buffer to read {size} bytes ({self.remaining} left)')
        data = self._data[self._position:self._position + size]
        self._position += size
        return data

    def read_byte(self) -> int:
        return self.read(1)[0]


@runtime_checkable
class WireAdapter[T](Protocol):
    """Wire protocol adapter for a validation message field payload of type T"""

    _abstract_: ClassVar[bool] = True

    @staticmethod
    def from_wire(reader: WireReader) -> T: ...


# Helpers

def read_variable_length(reader: WireReader) -> int:
    """
    Read a variable length prefix.

    The first byte selects the encoding: up to 192 it is the length itself,
    193 to 240 use one extra byte and 241 to 254 use two extra bytes.
    """
    marker = reader.read_byte()
    if marker <= 192:
        return marker
    if marker <= 240:
        low = reader.read_byte()
        return 193 + (marker - 193) * 256 + low
    if marker <= 254:
        high, low = reader.read(2)
        return 12481 + (marker - 241) * 65536 + high * 256 + low
    raise ValueError(f'Invalid variable length marker: {marker:#04x}')


# Adapters

class UnsignedIntegerAdapter:
    _abstract_: ClassVar[bool] = True
    _bits_: ClassVar[int] = NotImplemented
    _size_: ClassVar[int] = NotImplemented

    def __init_subclass__(cls, *, bits: int = NotImplemented, **kw: object) -> None:
        if bits is not NotImplemented:
            cls._bits_ = bits
            cls._size_ = bits // 8
            cls._abstract_ = False
        super().__init_subclass__(**kw)

    @classmethod
    def from_wire(cls, reader: WireReader) -> int:
        if reader.remaining < cls._size_:
            raise ValueError(f'Insufficient data in buffer to extract an unsigned {cls._bits_}-bit integer')
        return int.from_bytes(reader.read(cls._size_), byteorder='big')


class UInt32Adapter(UnsignedIntegerAdapter, bits=32):
    pass


class UInt64Adapter(UnsignedIntegerAdapter, bits=64):
    pass


class HashAdapter:
    """Adapter for a fixed size hash, represented as an uppercase hex string"""

    _abstract_: ClassVar[bool] = True
    _bits_: ClassVar[int] = NotImplemented
    _size_: ClassVar[int] = NotImplemented

    def __init_subclass__(cls, *, bits: int = NotImplemented, **kw: object) -> None:
        if bits is not NotImplemented:
            cls._bits_ = bits
            cls._size_ = bits // 8
            cls._abstract_ = False
        super().__init_subclass__(**kw)

    @classmethod
    def from_wire(cls, reader: WireReader) -> str:
        if reader.remaining < cls._size_:
            raise ValueError(f'Insufficient data in buffer to extract a {cls._bits_}-bit hash')
        return reader.read(cls._size_).hex().upper()


class Hash256Adapter(HashAdapter, bits=256):
    pass


class BlobAdapter:
    """Adapter for a bytes buffer of up to 255 bytes, prefixed with a one byte length"""

    _abstract_: ClassVar[bool] = False

    @staticmethod
    def from_wire(reader: WireReader) -> bytes:
        if reader.remaining < 1:
            raise ValueError('Insufficient data in buffer to extract the blob length')
        length = reader.read_byte()
        if reader.remaining < length:
            raise ValueError(f'Insufficient data in buffer to extract the blob ({length} bytes needed, {reader.remaining} left)')
        return reader.read(length)


class Vector256Adapter:
    """Adapter for a variable length list of 256-bit hashes"""

    _abstract_: ClassVar[bool] = False
    _item_size_: ClassVar[int] = 32

    @classmethod
    def from_wire(cls, reader: WireReader) -> tuple[str, ...]:
        length = read_variable_length(reader)
        if length % cls._item_size_:
            raise ValueError(f'Data length is not a multiple of {cls._item_size_} ({length})')
        if reader.remaining < length:
            raise ValueError(f'Insufficient data in buffer to extract the hash list ({length} bytes needed, {reader.remaining} left)')
        data = reader.read(length)
        return tuple(data[offset:offset + cls._item_size_].hex().upper() for offset in range(0, length, cls._item_size_))


# Enums

class KeyType(Enum):
    ED25519 = 'ed25519'
    SECP256K1 = 'secp256k1'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'

    @classmethod
    def for_public_key(cls, data: bytes, /) -> Self:
        """Classify a public key by its leading type marker byte"""
        return cls.ED25519 if data[:1] == b'\xed' else cls.SECP256K1
