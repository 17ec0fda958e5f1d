"""
conftest.py
-----------
Shared pytest fixtures for diary tests.

Provides fixtures for:
- Temporary data and log directories
- Key material and ciphers
- Database setup and teardown
- Manager instances bound to a test session
"""
import os

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def data_dir(tmp_dir):
    """Application data directory (not created yet)."""
    return tmp_dir / "data"


@pytest.fixture
def log_dir(tmp_dir):
    """Log directory (not created yet)."""
    return tmp_dir / "logs"


# ----- Crypto Fixtures -----

@pytest.fixture
def secret_key():
    """Fresh random SecretKey, wiped after the test."""
    from diary.crypto import KEY_LENGTH, SecretKey

    key = SecretKey(bytearray(os.urandom(KEY_LENGTH)))
    yield key
    key.wipe()


@pytest.fixture
def cipher(secret_key):
    """EnvelopeCipher over the test key."""
    from diary.crypto import EnvelopeCipher

    return EnvelopeCipher(secret_key)


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db(data_dir):
    """
    Create test database instance with schema.

    Returns a DiaryDB using a temporary data directory.
    The store is closed after the test.
    """
    from diary.database.manager import DiaryDB

    db = DiaryDB(data_dir=data_dir)
    yield db
    db.close()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def entry_manager(db_session, test_db):
    """Create EntryManager instance for testing."""
    from diary.database.managers.entry_manager import EntryManager
    return EntryManager(db_session, test_db.cipher)


@pytest.fixture
def tag_manager(db_session):
    """Create TagManager instance for testing."""
    from diary.database.managers.tag_manager import TagManager
    return TagManager(db_session)


@pytest.fixture
def relationship_manager(db_session):
    """Create RelationshipManager instance for testing."""
    from diary.database.managers.relationship_manager import RelationshipManager
    return RelationshipManager(db_session)


@pytest.fixture
def graph_manager(db_session):
    """Create GraphManager instance for testing."""
    from diary.database.managers.graph_manager import GraphManager
    return GraphManager(db_session)
