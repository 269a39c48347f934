"""
ONDC Request Authentication - Cryptographic Signatures

Implements Ed25519 key generation, detached signing and verification over
raw byte strings.

Keys are handled in the 64-byte secret key form used across the network
(32-byte seed followed by the 32-byte public key) and the 32-byte raw
public key form. Signatures travel as standard base64.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import base64
import binascii
import logging
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

logger = logging.getLogger(__name__)


SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SECRET_KEY_LENGTH = 64
SIGNATURE_LENGTH = 64


class KeyFormatError(ValueError):
    """Raised when signing key material is missing or malformed."""
    pass


def _to_bytes(message: Union[bytes, str]) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return message


def _raw_public_bytes(public_key: Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _load_signing_key(private_key: bytes) -> Ed25519PrivateKey:
    """Load a 64-byte secret key, checking that its public half matches the seed."""
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != SECRET_KEY_LENGTH:
        length = len(private_key) if isinstance(private_key, (bytes, bytearray)) else "n/a"
        raise KeyFormatError(
            f"Invalid private key length: {length} (expected {SECRET_KEY_LENGTH} bytes)"
        )

    signing_key = Ed25519PrivateKey.from_private_bytes(bytes(private_key[:SEED_LENGTH]))
    if _raw_public_bytes(signing_key.public_key()) != bytes(private_key[SEED_LENGTH:]):
        raise KeyFormatError("Private key seed does not match its embedded public key")
    return signing_key


def generate_keypair() -> tuple[bytes, bytes]:
    """
    Generate a new Ed25519 key pair.

    Returns (private_key, public_key) where private_key is the 64-byte
    seed || public form and public_key is the 32-byte raw public key.
    """
    signing_key = Ed25519PrivateKey.generate()
    seed = signing_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_key = _raw_public_bytes(signing_key.public_key())
    return seed + public_key, public_key


def public_key_from_private(private_key: bytes) -> bytes:
    """Return the 32-byte public key of a 64-byte secret key."""
    return _raw_public_bytes(_load_signing_key(private_key).public_key())


def add_base64_padding(value: str) -> str:
    """Restore trailing '=' padding stripped from a base64 string."""
    return value + "=" * (-len(value) % 4)


def b64decode_padded(value: str) -> bytes:
    """Strictly decode base64, tolerating missing padding."""
    return base64.b64decode(add_base64_padding(value.strip()), validate=True)


def keypair_to_base64(private_key: bytes, public_key: bytes) -> tuple[str, str]:
    """Encode a raw key pair the way it is stored in configuration."""
    return (
        base64.b64encode(private_key).decode("ascii"),
        base64.b64encode(public_key).decode("ascii"),
    )


def private_key_from_base64(b64_key: str) -> bytes:
    """
    Decode a base64 64-byte secret key.

    Raises KeyFormatError if the value is not base64 or has the wrong length.
    """
    try:
        raw = b64decode_padded(b64_key)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Invalid private key encoding: {e}") from e
    if len(raw) != SECRET_KEY_LENGTH:
        raise KeyFormatError(
            f"Invalid private key length: {len(raw)} bytes (expected {SECRET_KEY_LENGTH})"
        )
    return raw


def public_key_from_base64(b64_key: str) -> bytes:
    """
    Decode a base64 32-byte public key.

    Raises KeyFormatError if the value is not base64 or has the wrong length.
    """
    try:
        raw = b64decode_padded(b64_key)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Invalid public key encoding: {e}") from e
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise KeyFormatError(
            f"Invalid public key length: {len(raw)} bytes (expected {PUBLIC_KEY_LENGTH})"
        )
    return raw


def sign(message: Union[bytes, str], private_key: bytes) -> str:
    """
    Create a detached Ed25519 signature and return it base64 encoded.

    str messages are signed as their UTF-8 bytes. Raises KeyFormatError
    if private_key is not a valid 64-byte secret key.
    """
    signing_key = _load_signing_key(private_key)
    sig_bytes = signing_key.sign(_to_bytes(message))
    return base64.b64encode(sig_bytes).decode("ascii")


def verify(message: Union[bytes, str], signature: str, public_key: bytes) -> bool:
    """
    Verify a base64 detached signature. Returns True only if valid.

    Signatures with stripped base64 padding are accepted. Malformed
    signatures or keys yield False instead of an exception.
    """
    try:
        sig_bytes = b64decode_padded(signature)
        if len(sig_bytes) != SIGNATURE_LENGTH:
            logger.debug("Signature has invalid length: %d bytes", len(sig_bytes))
            return False

        if len(public_key) != PUBLIC_KEY_LENGTH:
            logger.debug("Public key has invalid length: %d bytes", len(public_key))
            return False

        verify_key = Ed25519PublicKey.from_public_bytes(bytes(public_key))
        verify_key.verify(sig_bytes, _to_bytes(message))
        return True

    except InvalidSignature:
        logger.debug("Signature verification failed")
        return False

    except (binascii.Error, ValueError, TypeError, AttributeError) as e:
        logger.debug("Malformed signature or public key: %s", e)
        return False
