#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for store operations.

Tag names and titles are deliberately NOT trimmed or case-folded: the
store keeps exactly what the caller gave it.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import ValidationError


def require_utf8(value: str) -> None:
    """
    Reject strings SQLite and the cipher cannot store.

    A Python str may hold lone surrogates (for instance argv bytes
    decoded with surrogateescape) that have no UTF-8 encoding.

    Raises:
        ValidationError: If value is not encodable as UTF-8
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError(
            f"Text is not valid UTF-8 (position {e.start})"
        ) from e


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def require_text(value: Any, message: str) -> str:
        """
        Return value unchanged if it is a non-empty string.

        Args:
            value: Candidate value
            message: Error message used when validation fails

        Returns:
            The same string

        Raises:
            ValidationError: If value is not a non-empty string
                or cannot be encoded as UTF-8
        """
        if not isinstance(value, str) or value == "":
            raise ValidationError(message)
        require_utf8(value)
        return value

    @staticmethod
    def unique_names(names: Optional[Iterable[str]]) -> List[str]:
        """
        Drop duplicate names while keeping first-seen order.

        Args:
            names: Tag names as supplied by the caller

        Returns:
            List of distinct names
        """
        if not names:
            return []
        seen: Dict[str, None] = {}
        for name in names:
            if not isinstance(name, str):
                raise ValidationError(f"Tag names must be strings, got {type(name).__name__}")
            seen.setdefault(name, None)
        return list(seen)

    @staticmethod
    def timestamp_now() -> str:
        """
        Current UTC instant as an RFC 3339 string.

        Microseconds are always present so stored values sort
        lexicographically in chronological order.
        """
        return datetime.now(timezone.utc).isoformat(timespec="microseconds")

    @staticmethod
    def parse_timestamp(value: Any) -> Optional[datetime]:
        """
        Parse a stored RFC 3339 timestamp into an aware UTC datetime.

        Args:
            value: Stored timestamp string

        Returns:
            Aware datetime in UTC, or None if the value cannot be parsed
            or carries no timezone
        """
        if not isinstance(value, str) or not value:
            return None
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return parsed.astimezone(timezone.utc)
