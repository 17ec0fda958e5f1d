#!/usr/bin/env python3
"""
envelope.py
--------------------
Authenticated encryption of entry bodies.

AES-256-GCM with a fresh random 96-bit nonce per call and no associated
data. The GCM tag is appended to the ciphertext. The result is stored as
a self-describing JSON envelope in a TEXT column:

    {"nonce":[12 byte ints],"ciphertext":[N+16 byte ints]}

Byte arrays cost roughly 2-4x the plaintext size on disk; acceptable for
journal-sized text and free of any binary encoding ambiguity.

Security Note:
    Never log plaintext, envelopes or key material.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import os
from typing import Any, List

# --- Third party imports ---
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

# --- Local imports ---
from diary.core.exceptions import CryptoError, DecryptionError
from .key_vault import SecretKey

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM tag appended to ciphertext


def _as_bytes(field: str, value: Any) -> bytes:
    """Convert a JSON array of byte integers back to bytes."""
    if not isinstance(value, list):
        raise DecryptionError(f"Envelope field '{field}' must be an array of bytes")
    for item in value:
        # bool is an int subclass; reject it explicitly
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
            raise DecryptionError(f"Envelope field '{field}' contains a non-byte value")
    return bytes(value)


class EnvelopeCipher:
    """
    Encrypts and decrypts entry bodies with the vault key.

    The cipher keeps a shared, read-only view of the key for its lifetime.

    Usage:
        cipher = EnvelopeCipher(vault.load_or_create())
        envelope = cipher.encrypt("dear diary")
        assert cipher.decrypt(envelope) == "dear diary"
    """

    def __init__(self, key: SecretKey) -> None:
        """
        Initialize cipher.

        Args:
            key: SecretKey from the KeyVault
        """
        self._key = key
        self._aead = AESGCM(key.expose())

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a UTF-8 string into a JSON envelope.

        Args:
            plaintext: Text to protect

        Returns:
            Envelope string

        Raises:
            CryptoError: If plaintext is not a string or is not
                encodable as UTF-8
        """
        if not isinstance(plaintext, str):
            raise CryptoError(f"Plaintext must be str, got {type(plaintext).__name__}")
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise CryptoError(f"Plaintext is not valid UTF-8 (position {e.start})") from e

        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aead.encrypt(nonce, data, None)
        return self.pack(nonce, ciphertext)

    def decrypt(self, envelope: str) -> str:
        """
        Open a JSON envelope.

        Args:
            envelope: Envelope string produced by encrypt()

        Returns:
            The original plaintext

        Raises:
            DecryptionError: Malformed envelope, wrong nonce length,
                authentication failure or non-UTF-8 plaintext
        """
        nonce, ciphertext = self.unpack(envelope)

        try:
            plaintext = self._aead.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("Envelope authentication failed") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted body is not valid UTF-8") from e

    # -------------------------------------------------------------------------
    # Envelope serialization
    # -------------------------------------------------------------------------

    @staticmethod
    def pack(nonce: bytes, ciphertext: bytes) -> str:
        """Serialize nonce and ciphertext into the compact envelope."""
        payload = {"nonce": list(nonce), "ciphertext": list(ciphertext)}
        return json.dumps(payload, separators=(",", ":"))

    @staticmethod
    def unpack(envelope: str) -> tuple[bytes, bytes]:
        """
        Parse an envelope into (nonce, ciphertext).

        Raises:
            DecryptionError: If the envelope is malformed
        """
        if not isinstance(envelope, str):
            raise DecryptionError(f"Envelope must be str, got {type(envelope).__name__}")

        try:
            payload = json.loads(envelope)
        except json.JSONDecodeError as e:
            raise DecryptionError(f"Envelope is not valid JSON: {e.msg}") from e

        if not isinstance(payload, dict):
            raise DecryptionError("Envelope must be a JSON object")

        missing: List[str] = [k for k in ("nonce", "ciphertext") if k not in payload]
        if missing:
            raise DecryptionError(f"Envelope missing field(s): {', '.join(missing)}")

        nonce = _as_bytes("nonce", payload["nonce"])
        if len(nonce) != NONCE_SIZE:
            raise DecryptionError(
                f"Envelope nonce must be {NONCE_SIZE} bytes, got {len(nonce)}"
            )

        ciphertext = _as_bytes("ciphertext", payload["ciphertext"])
        if len(ciphertext) < TAG_SIZE:
            raise DecryptionError("Envelope ciphertext shorter than the GCM tag")

        return nonce, ciphertext
