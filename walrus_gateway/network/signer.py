"""Sui Ed25519 keypair loading.

The gateway owns one process-wide signer, built once at startup from
``SUI_SECRET_KEY``. Blob objects created through the publisher are sent to
the signer's address so the key holder can extend or delete them.

Accepted key encodings:
    - Bech32 ``suiprivkey1...`` (as exported by ``sui keytool export``)
    - base64 of the 32-byte seed
    - base64 of ``flag || seed`` (33 bytes)
    - base64 of the legacy ``seed || public key`` pair (64 bytes)

Tests:
    - tests/unit/test_signer.py
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass

import bech32
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

SUI_PRIVATE_KEY_PREFIX = "suiprivkey"
ED25519_FLAG = 0x00
SEED_LENGTH = 32


def _decode_bech32(value: str) -> bytes:
    hrp, data = bech32.bech32_decode(value)
    if hrp != SUI_PRIVATE_KEY_PREFIX or data is None:
        raise ValueError("Invalid Bech32 Sui private key")
    decoded = bech32.convertbits(data, 5, 8, False)
    if decoded is None:
        raise ValueError("Invalid Bech32 Sui private key payload")
    return bytes(decoded)


def _decode_base64(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise ValueError("SUI_SECRET_KEY is neither Bech32 nor base64") from exc


def _extract_seed(raw: bytes) -> bytes:
    if len(raw) == SEED_LENGTH + 1:
        if raw[0] != ED25519_FLAG:
            raise ValueError(f"Unsupported signature scheme flag: {raw[0]:#04x}")
        return raw[1:]
    if len(raw) == SEED_LENGTH:
        return raw
    if len(raw) == SEED_LENGTH * 2:
        return raw[:SEED_LENGTH]
    raise ValueError(f"Unexpected secret key length: {len(raw)} bytes")


@dataclass(frozen=True)
class SuiKeypair:
    """Ed25519 keypair identifying the gateway on Sui.

    Attributes:
        public_key: Raw 32-byte Ed25519 public key
        address: Sui address derived from the public key
    """

    public_key: bytes
    address: str

    @classmethod
    def from_secret_key(cls, value: str) -> "SuiKeypair":
        """Load a keypair from its exported secret key.

        Args:
            value: Bech32 or base64 encoded secret key.

        Returns:
            SuiKeypair.

        Raises:
            ValueError: If the key cannot be decoded or is not Ed25519.
        """
        value = value.strip()
        if not value:
            raise ValueError("SUI_SECRET_KEY is empty")

        if value.startswith(SUI_PRIVATE_KEY_PREFIX):
            raw = _decode_bech32(value)
        else:
            raw = _decode_base64(value)

        seed = _extract_seed(raw)
        private_key = Ed25519PrivateKey.from_private_bytes(seed)
        public_key = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return cls(
            public_key=public_key,
            address=derive_address(public_key),
        )


def derive_address(public_key: bytes, flag: int = ED25519_FLAG) -> str:
    """Derive the Sui address for a public key.

    The address is blake2b-256 over the scheme flag followed by the key.
    """
    digest = hashlib.blake2b(bytes([flag]) + public_key, digest_size=32).hexdigest()
    return f"0x{digest}"
