# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Validation messages

   A validation is a signed statement by a validator that it considers a
   given ledger to be the result of consensus. On the wire it is a sequence
   of canonically ordered fields. Each field starts with a tag that encodes
   its type code and field code:

     +--------+--------+
     |  type  | field  |    both codes < 16: one byte
     +--------+--------+

     +--------+--------+-----------------+
     |  type  |   0    |   field code    |    field code >= 16: two bytes
     +--------+--------+-----------------+

     +--------+--------+-----------------+
     |   0    | field  |    type code    |    type code >= 16: two bytes
     +--------+--------+-----------------+

   Fixed width payloads (32/64-bit integers and 256-bit hashes) follow the
   tag directly in network byte order. Blobs are prefixed by a one byte
   length and the amendments list by a variable length prefix.

   The signature covers the whole message except the Signature field
   itself, prefixed with the 4 bytes b'VAL\\0'.

"""

from functools import cached_property

from .datamodel import BlobAdapter, Hash256Adapter, KeyType, UInt32Adapter, UInt64Adapter, Vector256Adapter
from .elements import Field, OptionalField, Structure
from .exceptions import DecodeError

__all__ = 'ValidationMessage', 'DecodeError', 'KeyType'


class ValidationMessage(Structure):
    flags:              Field[int] = Field(UInt32Adapter, tag=b'\x22')
    ledger_sequence:    Field[int] = Field(UInt32Adapter, tag=b'\x26')
    close_time:         OptionalField[int] = OptionalField(UInt32Adapter, tag=b'\x27')
    signing_time:       Field[int] = Field(UInt32Adapter, tag=b'\x29')
    load_fee:           OptionalField[int] = OptionalField(UInt32Adapter, tag=b'\x20\x18')
    reserve_base:       OptionalField[int] = OptionalField(UInt32Adapter, tag=b'\x20\x1f')
    reserve_increment:  OptionalField[int] = OptionalField(UInt32Adapter, tag=b'\x20\x20')
    base_fee:           OptionalField[int] = OptionalField(UInt64Adapter, tag=b'\x35')
    cookie:             OptionalField[int] = OptionalField(UInt64Adapter, tag=b'\x3a')
    server_version:     OptionalField[int] = OptionalField(UInt64Adapter, tag=b'\x3b')
    ledger_hash:        Field[str] = Field(Hash256Adapter, tag=b'\x51')
    consensus_hash:     OptionalField[str] = OptionalField(Hash256Adapter, tag=b'\x50\x17')
    validated_hash:     OptionalField[str] = OptionalField(Hash256Adapter, tag=b'\x50\x19')
    signing_pub_key:    Field[bytes] = Field(BlobAdapter, tag=b'\x73')
    signature:          Field[bytes] = Field(BlobAdapter, tag=b'\x76')
    amendments:         OptionalField[tuple[str, ...]] = OptionalField(Vector256Adapter, tag=b'\x03\x13')

    @property
    def signature_span(self) -> slice:
        """The wire span of the Signature field (tag, length and payload)"""
        span = self.span('signature')
        if span is None:
            raise AttributeError(f'{self.__class__.__qualname__!r} object was not decoded from wire and has no signature span')
        return span

    @cached_property
    def key_type(self) -> KeyType:
        return KeyType.for_public_key(self.signing_pub_key)
