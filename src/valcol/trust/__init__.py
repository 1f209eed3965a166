# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .keys import Ed25519Scheme, Secp256k1Scheme, SignatureScheme, decode_node_public_key, signature_scheme
from .verify import VALIDATION_PREFIX, VerificationOutcome, signing_hash, verify_validation

__all__ = 'VALIDATION_PREFIX', 'Ed25519Scheme', 'Secp256k1Scheme', 'SignatureScheme', 'VerificationOutcome', 'decode_node_public_key', 'signature_scheme', 'signing_hash', 'verify_validation'
