"""Anonymous public-key encryption of secret values using libsodium sealed boxes.

Each call generates a fresh ephemeral X25519 key pair, so the sender keeps
no key material and cannot decrypt its own output. Only the holder of the
recipient's private key can open the result.
"""

import base64
import binascii
from typing import Union

from nacl.exceptions import CryptoError
from nacl.public import PublicKey, SealedBox

from secretsync.errors import EncodeError, InvalidKeyError
from secretsync.models import RecipientKey

KEY_SIZE = PublicKey.SIZE


def decode_public_key(key_b64: str) -> bytes:
    """Decode the base64 public key published by the store.

    Args:
        key_b64: Standard-alphabet base64 string.

    Returns:
        Raw key bytes.

    Raises:
        EncodeError: If the string is not valid base64.
    """
    try:
        return base64.b64decode(key_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodeError(f"Public key is not valid base64: {e}") from e


def validate_key(recipient_key: RecipientKey) -> PublicKey:
    """Check a recipient key and build the libsodium public key from it.

    Args:
        recipient_key: Key fetched from the store.

    Returns:
        A PublicKey ready for sealing.

    Raises:
        InvalidKeyError: If the key is not exactly 32 bytes or libsodium
            rejects it.
    """
    key_bytes = recipient_key.key_bytes
    if len(key_bytes) != KEY_SIZE:
        raise InvalidKeyError(
            f"Public key {recipient_key.key_id!r} must be {KEY_SIZE} bytes, "
            f"got {len(key_bytes)}"
        )
    try:
        return PublicKey(key_bytes)
    except (CryptoError, TypeError, ValueError) as e:
        raise InvalidKeyError(f"Public key {recipient_key.key_id!r} rejected: {e}") from e


def seal(plaintext: Union[str, bytes], recipient_key: RecipientKey) -> bytes:
    """Seal a value for the recipient.

    Args:
        plaintext: String (UTF-8 encoded) or bytes to seal.
        recipient_key: Key fetched from the store.

    Returns:
        Ephemeral public key followed by the authenticated ciphertext.

    Raises:
        InvalidKeyError: If the recipient key is invalid.
    """
    public_key = validate_key(recipient_key)
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    return SealedBox(public_key).encrypt(plaintext)


def seal_b64(plaintext: Union[str, bytes], recipient_key: RecipientKey) -> str:
    """Seal a value and base64-encode it for transmission.

    Args:
        plaintext: String or bytes to seal.
        recipient_key: Key fetched from the store.

    Returns:
        Padded standard base64 text.

    Raises:
        InvalidKeyError: If the recipient key is invalid.
        EncodeError: If a string value cannot be UTF-8 encoded.
    """
    try:
        sealed = seal(plaintext, recipient_key)
    except UnicodeEncodeError as e:
        raise EncodeError(f"Value cannot be encoded as UTF-8: {e.reason}") from e
    return base64.b64encode(sealed).decode("ascii")
