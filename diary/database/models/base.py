"""
Base Classes
------------

Foundational ORM classes for the diary database.

Classes:
    - Base: Declarative base for all SQLAlchemy models

Helpers:
    - new_uuid: Canonical v4 UUID string used for every primary key
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import uuid

# --- Third party ---
from sqlalchemy.orm import DeclarativeBase


def new_uuid() -> str:
    """Return a fresh v4 UUID in canonical 36-char hyphenated form."""
    return str(uuid.uuid4())


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation.
    """

    pass
