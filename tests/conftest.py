"""
Pytest configuration for the call recording archive.

Provides fixtures for:
- Sample recordings and an in-memory store for unit tests
- Database connection management for integration tests
- Schema setup and table cleanup
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Generator, List

import psycopg
import pytest

from callarchive.config import Settings, get_settings
from callarchive.infrastructure.db_factory import get_sync_connection
from callarchive.storage.memory import InMemoryRecordingStore
from tests.factories import make_row

TEST_TABLE = "archiveindex_temp"


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached settings so env tweaks in one test never leak into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_store() -> InMemoryRecordingStore:
    return InMemoryRecordingStore()


@pytest.fixture
def sample_rows() -> List[Dict[str, Any]]:
    """A small, varied archive for search tests."""
    return [
        make_row(
            recording_id="REC-A",
            recording_date=datetime(2024, 5, 1, 9, 0, tzinfo=UTC),
            direction="Inbound",
            workgroup="Sales_Inbound",
            first_participant="Ellen Ripley",
            other_participants="Kyle Reese",
            dnis="18005551234",
            ani="2125550100",
            duration=90,
            tags="important",
        ),
        make_row(
            recording_id="REC-B",
            recording_date=datetime(2024, 5, 2, 23, 59, 59, tzinfo=UTC),
            direction="Outbound",
            workgroup="Sales_Outbound",
            first_participant="James Holden",
            other_participants="Naomi Nagata",
            dnis="4155550199",
            ani="2010",
            duration=200,
            tags="resolved",
            media_type="video",
        ),
        make_row(
            recording_id="REC-C",
            recording_date=datetime(2024, 5, 3, 0, 0, 0, tzinfo=UTC),
            direction="Intercom",
            workgroup="Billing",
            first_participant="Amos Burton",
            other_participants="Internal User (2044)",
            dnis="2044",
            ani="2011",
            duration=30,
            tags="escalated,follow-up",
            recording_type="voicemail",
        ),
    ]


@pytest.fixture
def seeded_memory_store(sample_rows: List[Dict[str, Any]]) -> InMemoryRecordingStore:
    return InMemoryRecordingStore(sample_rows)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "call_archive"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = get_sync_connection(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the recordings table exists by running db/init.sql (idempotent).
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_recordings_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the recordings table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE public.{TEST_TABLE} RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE public.{TEST_TABLE} RESTART IDENTITY;")
    db_connection.commit()
