#!/usr/bin/env python3
"""
key_vault.py
--------------------
One-time generation, on-disk persistence and in-memory custody of the
256-bit key that protects entry bodies.

The key lives unencrypted in <app-data>/encryption.key. Protection at rest
relies on filesystem permissions only (the file is created with mode 0600
where the platform honours it); this is a documented limitation of the
threat model, not something to paper over.

Usage:
    vault = KeyVault(data_dir, logger=logger)
    key = vault.load_or_create()
    cipher = EnvelopeCipher(key)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import secrets
from pathlib import Path
from typing import NoReturn, Optional

# --- Local imports ---
from diary.core.exceptions import KeyVaultError
from diary.core.logging_manager import DiaryLogger, safe_logger
from diary.core.paths import ensure_dir, key_path

KEY_LENGTH = 32  # AES-256


class SecretKey:
    """
    Container for raw key bytes.

    Bytes are held in a private bytearray that is zeroed by wipe() and on
    garbage collection. The container refuses copying and pickling and
    never prints its contents; callers borrow a read-only memoryview via
    expose().
    """

    __slots__ = ("_buffer", "_wiped", "__weakref__")

    def __init__(self, material: bytes | bytearray) -> None:
        if len(material) != KEY_LENGTH:
            raise KeyVaultError(
                f"Key must be exactly {KEY_LENGTH} bytes, got {len(material)}"
            )
        self._buffer = bytearray(material)
        self._wiped = False

    def expose(self) -> memoryview:
        """Borrow a read-only view of the key bytes."""
        if self.is_wiped:
            raise KeyVaultError("Key has been wiped")
        return memoryview(self._buffer).toreadonly()

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Overwrite the key bytes with zeros and release them."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True
        try:
            self._buffer.clear()
        except BufferError:
            # A borrowed view is still alive; the bytes are already zeroed
            pass

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        state = "wiped" if self.is_wiped else f"{KEY_LENGTH} bytes"
        return f"SecretKey(<redacted {state}>)"

    __str__ = __repr__

    def _refuse(self, *args, **kwargs) -> NoReturn:
        raise TypeError("SecretKey cannot be copied or serialized")

    __copy__ = _refuse
    __deepcopy__ = _refuse
    __reduce__ = _refuse
    __reduce_ex__ = _refuse

    def __del__(self) -> None:
        try:
            self.wipe()
        except Exception:
            pass


class KeyVault:
    """
    Owner of the key file.

    Attributes:
        data_dir: Application data directory
        path: Full path of the key file
        logger: Optional logger for custody events (never the key itself)
    """

    def __init__(self, data_dir: Path, logger: Optional[DiaryLogger] = None) -> None:
        """
        Initialize the vault.

        Args:
            data_dir: Directory holding the key file (created if absent)
            logger: Optional logger
        """
        self.data_dir = Path(data_dir)
        self.path = key_path(self.data_dir)
        self.logger = logger

    def load_or_create(self) -> SecretKey:
        """
        Obtain the process key.

        Reads the first 32 bytes of the key file when it holds at least
        that many; otherwise generates a fresh key and writes it.

        Returns:
            SecretKey holding the key

        Raises:
            KeyVaultError: If the directory or key file cannot be used
        """
        try:
            ensure_dir(self.data_dir)
        except OSError as e:
            raise KeyVaultError(f"Cannot create data directory {self.data_dir}: {e}") from e

        existing = self._load()
        if existing is not None:
            safe_logger(self.logger).log_debug("key_loaded", {"path": str(self.path)})
            return existing

        return self._generate_and_save()

    def _load(self) -> Optional[SecretKey]:
        """Read the key file; None when missing or too short."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "rb") as f:
                material = bytearray(f.read(KEY_LENGTH))
        except OSError as e:
            raise KeyVaultError(f"Cannot read key file {self.path}: {e}") from e

        if len(material) < KEY_LENGTH:
            safe_logger(self.logger).log_warning(
                "Key file shorter than expected, generating a new key",
                {"path": str(self.path), "length": len(material)},
            )
            return None

        try:
            return SecretKey(material)
        finally:
            for i in range(len(material)):
                material[i] = 0

    def _generate_and_save(self) -> SecretKey:
        """Draw a fresh key from the OS CSPRNG and persist it."""
        material = bytearray(secrets.token_bytes(KEY_LENGTH))
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(material)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise KeyVaultError(f"Cannot write key file {self.path}: {e}") from e

        safe_logger(self.logger).log_operation("key_generated", {"path": str(self.path)})

        try:
            return SecretKey(material)
        finally:
            for i in range(len(material)):
                material[i] = 0
