# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import hashlib
from dataclasses import dataclass

from valcol.messages import ValidationMessage
from valcol.messages.datamodel import WireData

from .keys import signature_scheme

__all__ = 'VALIDATION_PREFIX', 'VerificationOutcome', 'signing_hash', 'verify_validation'


VALIDATION_PREFIX = b'VAL\x00'


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    verified: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.verified


def signing_hash(data: WireData, message: ValidationMessage) -> bytes:
    """
    Compute the value signed by the validator.

    This is the first half of the SHA-512 digest of the validation prefix
    followed by the message with its Signature field removed.
    """
    data = bytes(data)
    span = message.signature_span
    digest = hashlib.sha512(VALIDATION_PREFIX + data[:span.start] + data[span.stop:]).digest()
    return digest[:32]


def verify_validation(public_key: str, data: WireData, message: ValidationMessage) -> VerificationOutcome:
    """
    Check that message (decoded from data) was signed by public_key.

    The public key is given as a hex string and must match the message's
    SigningPubKey before the signature is checked.
    """
    if public_key.upper() != message.signing_pub_key.hex().upper():
        return VerificationOutcome(verified=False, error='SigningPubKey did not match or was not present')

    key_type = message.key_type
    try:
        scheme = signature_scheme(key_type, message.signing_pub_key)
    except ValueError:
        return VerificationOutcome(verified=False, error=f'SigningPubKey is not a valid {key_type.value} public key')

    if not scheme.verify(message.signature, signing_hash(data, message)):
        return VerificationOutcome(verified=False, error=f'Signature ({scheme.name}) did not match or was not present')

    return VerificationOutcome(verified=True)
