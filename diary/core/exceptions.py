#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the diary store.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in the storage engine and its
collaborators.

Exception Hierarchy:
    Exception (built-in)
    └── DiaryError - Base for every error raised by the store
        ├── StoreInitError - Fatal failure while constructing the store
        ├── KeyVaultError - Key directory/file could not be read or written
        ├── DatabaseError - Base for all database-related errors
        │   ├── EntryNotFoundError - Unknown entry id
        │   └── HealthCheckError - Database health check failures
        ├── CryptoError - Base for envelope cipher failures
        │   └── DecryptionError - Envelope could not be opened
        └── ValidationError - Caller input failed validation

Usage:
    from diary.core.exceptions import DatabaseError, EntryNotFoundError

    try:
        entry = db.get_entry(entry_id)
    except EntryNotFoundError:
        click.echo("No such entry")
    except DatabaseError as e:
        logger.log_error(e)
"""


class DiaryError(Exception):
    """
    Base exception for every error surfaced by the diary store.

    Catch this at the outer boundary (CLI, host application) to convert any
    failure into a user-facing message.
    """

    pass


class StoreInitError(DiaryError):
    """
    Exception for fatal failures while constructing the store.

    Raised when the data directory cannot be created, the connection pool
    cannot be built, or the schema cannot be initialized. The process
    cannot continue using the store after this error.

    Examples:
        >>> raise StoreInitError("Cannot create data directory: permission denied")
    """

    pass


class KeyVaultError(DiaryError):
    """
    Exception for encryption key custody failures.

    Raised when the key file cannot be created, read or written. Always
    fatal to store construction.

    Examples:
        >>> raise KeyVaultError("Cannot write key file: read-only filesystem")
    """

    pass


class DatabaseError(DiaryError):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.
    The engine's own message is kept in the exception text.

    Examples:
        >>> raise DatabaseError("Data integrity violation: FOREIGN KEY constraint failed")
    """

    pass


class EntryNotFoundError(DatabaseError):
    """
    Exception for lookups and deletions of an unknown entry id.

    Attributes:
        entry_id: The id that matched no row
    """

    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class HealthCheckError(DatabaseError):
    """
    Exception for database health check failures.

    Raised when health monitoring itself cannot run, e.g. the pragma or
    orphan queries fail.
    """

    pass


class CryptoError(DiaryError):
    """Base exception for envelope cipher errors."""

    pass


class DecryptionError(CryptoError):
    """
    Exception for envelopes that cannot be opened.

    Raised for malformed envelope JSON, a nonce that is not 12 bytes,
    authentication tag mismatch, or plaintext that is not valid UTF-8.
    Callers never receive substituted plaintext.

    Examples:
        >>> raise DecryptionError("Envelope authentication failed")
    """

    pass


class ValidationError(DiaryError):
    """
    Exception for data validation failures.

    Raised when caller input fails validation checks:
    - Empty entry title
    - Missing parent or child id on a relationship

    Examples:
        >>> raise ValidationError("Parent ID is required")
    """

    pass
