# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass
from typing import ClassVar, Protocol, Self, assert_never

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from xrpl.core.addresscodec import XRPLAddressCodecException
from xrpl.core.addresscodec import decode_node_public_key as _decode_node_public_key

from valcol.messages.datamodel import KeyType

__all__ = 'SignatureScheme', 'Ed25519Scheme', 'Secp256k1Scheme', 'decode_node_public_key', 'signature_scheme'  # noqa: RUF022


type PublicKey = Ed25519PublicKey | EllipticCurvePublicKey


def decode_node_public_key(identifier: str) -> bytes:
    """Decode a network formatted node public key (n...) into the raw key bytes"""
    try:
        return _decode_node_public_key(identifier)
    except (XRPLAddressCodecException, ValueError, TypeError) as exc:
        raise ValueError(f'Invalid node public key {identifier!r}: {exc}') from exc


class SignatureScheme(Protocol):
    name: ClassVar[str]

    @classmethod
    def from_public_bytes(cls, data: bytes, /) -> Self: ...

    def verify(self, signature: bytes, digest: bytes) -> bool: ...


@dataclass(frozen=True)
class Ed25519Scheme:
    public_key: Ed25519PublicKey

    name: ClassVar[str] = KeyType.ED25519.value

    @classmethod
    def from_public_bytes(cls, data: bytes, /) -> Self:
        # The network form of an Ed25519 key is the 32 key bytes prefixed by the 0xED marker
        if data[:1] != b'\xed':
            raise ValueError('Ed25519 public keys must start with the 0xED marker')
        return cls(Ed25519PublicKey.from_public_bytes(data[1:]))

    def verify(self, signature: bytes, digest: bytes) -> bool:
        try:
            self.public_key.verify(signature, digest)
        except InvalidSignature:
            return False
        return True


@dataclass(frozen=True)
class Secp256k1Scheme:
    public_key: EllipticCurvePublicKey

    name: ClassVar[str] = KeyType.SECP256K1.value

    @classmethod
    def from_public_bytes(cls, data: bytes, /) -> Self:
        return cls(EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), data))

    def verify(self, signature: bytes, digest: bytes) -> bool:
        # The digest is used as is (it is not hashed again), the signature is DER encoded
        try:
            self.public_key.verify(signature, digest, ec.ECDSA(Prehashed(hashes.SHA256())))
        except (InvalidSignature, ValueError):
            return False
        return True


def signature_scheme(key_type: KeyType, public_key: bytes) -> Ed25519Scheme | Secp256k1Scheme:
    """Load the public key for the signature scheme selected by key_type (raises ValueError for invalid keys)"""
    match key_type:
        case KeyType.ED25519:
            return Ed25519Scheme.from_public_bytes(public_key)
        case KeyType.SECP256K1:
            return Secp256k1Scheme.from_public_bytes(public_key)
        case _:
            assert_never(key_type)
