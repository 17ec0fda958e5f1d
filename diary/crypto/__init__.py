"""
crypto package
-------------------
Key custody and envelope encryption for entry bodies.

- KeyVault / SecretKey: 32-byte key file in the app data directory
- EnvelopeCipher: AES-256-GCM JSON envelopes
"""
from .key_vault import KEY_LENGTH, KeyVault, SecretKey
from .envelope import NONCE_SIZE, TAG_SIZE, EnvelopeCipher

__all__ = [
    "KEY_LENGTH",
    "KeyVault",
    "SecretKey",
    "NONCE_SIZE",
    "TAG_SIZE",
    "EnvelopeCipher",
]
