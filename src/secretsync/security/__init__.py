"""Sealing of secret values against the store's public key."""

from secretsync.security.sealing import (
    KEY_SIZE,
    decode_public_key,
    seal,
    seal_b64,
    validate_key,
)

__all__ = [
    "KEY_SIZE",
    "decode_public_key",
    "seal",
    "seal_b64",
    "validate_key",
]
