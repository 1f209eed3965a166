# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from xrpl.core import keypairs
from xrpl.core.addresscodec import encode_node_public_key

__all__ = 'CONSENSUS_HASH', 'LEDGER_HASH', 'VALIDATED_HASH', 'Ed25519Signer', 'ReferenceSigner', 'Secp256k1Signer', 'ValidationFields', 'encode_variable_length'


LEDGER_HASH = bytes.fromhex('4109C6F2045FC7EFF4CDE8F9905D19C28820D86304080FF886B299F0206E42B5')
CONSENSUS_HASH = bytes(range(32))
VALIDATED_HASH = bytes(range(32, 64))


def encode_variable_length(length: int) -> bytes:
    if length <= 192:
        return bytes([length])
    if length <= 12480:
        length -= 193
        return bytes([193 + (length >> 8), length & 0xff])
    if length <= 918744:
        length -= 12481
        return bytes([241 + (length >> 16), (length >> 8) & 0xff, length & 0xff])
    raise ValueError(f'Length is too big: {length}')


@dataclass(kw_only=True)
class ValidationFields:
    """Builder for validation messages in their wire format"""

    flags: int = 0x80000001
    ledger_sequence: int = 6_442_241
    close_time: int | None = 683_145_120
    signing_time: int = 683_145_121
    load_fee: int | None = None
    reserve_base: int | None = None
    reserve_increment: int | None = None
    base_fee: int | None = None
    cookie: int | None = 0x0123456789ABCDEF
    server_version: int | None = None
    ledger_hash: bytes = LEDGER_HASH
    consensus_hash: bytes | None = None
    validated_hash: bytes | None = VALIDATED_HASH
    signing_pub_key: bytes = bytes(33)
    amendments: Sequence[bytes] | None = None

    def head(self) -> bytes:
        """Everything that comes before the Signature field"""
        data = b'\x22' + self.flags.to_bytes(4)
        data += b'\x26' + self.ledger_sequence.to_bytes(4)
        if self.close_time is not None:
            data += b'\x27' + self.close_time.to_bytes(4)
        data += b'\x29' + self.signing_time.to_bytes(4)
        if self.load_fee is not None:
            data += b'\x20\x18' + self.load_fee.to_bytes(4)
        if self.reserve_base is not None:
            data += b'\x20\x1f' + self.reserve_base.to_bytes(4)
        if self.reserve_increment is not None:
            data += b'\x20\x20' + self.reserve_increment.to_bytes(4)
        if self.base_fee is not None:
            data += b'\x35' + self.base_fee.to_bytes(8)
        if self.cookie is not None:
            data += b'\x3a' + self.cookie.to_bytes(8)
        if self.server_version is not None:
            data += b'\x3b' + self.server_version.to_bytes(8)
        data += b'\x51' + self.ledger_hash
        if self.consensus_hash is not None:
            data += b'\x50\x17' + self.consensus_hash
        if self.validated_hash is not None:
            data += b'\x50\x19' + self.validated_hash
        data += b'\x73' + bytes([len(self.signing_pub_key)]) + self.signing_pub_key
        return data

    def tail(self) -> bytes:
        """Everything that comes after the Signature field"""
        if self.amendments is None:
            return b''
        payload = b''.join(self.amendments)
        return b'\x03\x13' + encode_variable_length(len(payload)) + payload

    def encode(self, signature: bytes) -> bytes:
        return self.head() + b'\x76' + bytes([len(signature)]) + signature + self.tail()

    def signing_hash(self) -> bytes:
        return hashlib.sha512(b'VAL\x00' + self.head() + self.tail()).digest()[:32]


@dataclass
class Secp256k1Signer:
    private_key: ec.EllipticCurvePrivateKey = field(default_factory=lambda: ec.generate_private_key(ec.SECP256K1()))

    @property
    def public_key(self) -> bytes:
        return self.private_key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)

    @property
    def node_public_key(self) -> str:
        return encode_node_public_key(self.public_key)

    def sign(self, fields: ValidationFields) -> bytes:
        fields.signing_pub_key = self.public_key
        signature = self.private_key.sign(fields.signing_hash(), ec.ECDSA(Prehashed(hashes.SHA256())))
        return fields.encode(signature)


@dataclass
class Ed25519Signer:
    private_key: Ed25519PrivateKey = field(default_factory=Ed25519PrivateKey.generate)

    @property
    def public_key(self) -> bytes:
        return b'\xed' + self.private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    @property
    def node_public_key(self) -> str:
        return encode_node_public_key(self.public_key)

    def sign(self, fields: ValidationFields) -> bytes:
        fields.signing_pub_key = self.public_key
        signature = self.private_key.sign(fields.signing_hash())
        return fields.encode(signature)


@dataclass
class ReferenceSigner:
    """
    A secp256k1 validator signing with the xrpl-py keypairs implementation.

    The signature is made by xrpl-py over the unhashed signing data (prefix,
    fields before and after the Signature field). xrpl-py computes the SHA-512
    half digest and the deterministic ECDSA signature itself, so these
    messages do not depend on ValidationFields.signing_hash.
    """

    seed: str = 'snoPBrXtMeMyMHUVTgbuqAfg1SUTb'  # the well known genesis secret
    public_key_hex: str = field(init=False)
    private_key_hex: str = field(init=False)

    def __post_init__(self) -> None:
        self.public_key_hex, self.private_key_hex = keypairs.derive_keypair(self.seed, validator=True)

    @property
    def public_key(self) -> bytes:
        return bytes.fromhex(self.public_key_hex)

    @property
    def node_public_key(self) -> str:
        return encode_node_public_key(self.public_key)

    @staticmethod
    def signing_data(fields: ValidationFields) -> bytes:
        return b'VAL\x00' + fields.head() + fields.tail()

    def sign(self, fields: ValidationFields) -> bytes:
        fields.signing_pub_key = self.public_key
        signature = bytes.fromhex(keypairs.sign(self.signing_data(fields), self.private_key_hex))
        return fields.encode(signature)

    def is_valid(self, fields: ValidationFields, signature: bytes) -> bool:
        return keypairs.is_valid_message(self.signing_data(fields), signature, self.public_key_hex)
