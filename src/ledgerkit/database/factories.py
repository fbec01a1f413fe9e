"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgerkit.database.sqlalchemy_db import DEFAULT_MAX_RETRIES, SQLAlchemyDatabase


def _max_retries_from_env() -> int:
    value = os.environ.get("LEDGERKIT_TX_RETRIES")
    if value is None or not value.strip():
        return DEFAULT_MAX_RETRIES
    try:
        retries = int(value)
    except ValueError:
        raise ValueError(f"LEDGERKIT_TX_RETRIES must be an integer, got '{value}'")
    if retries < 0:
        raise ValueError(f"LEDGERKIT_TX_RETRIES must not be negative, got {retries}")
    return retries


def create_sqlite_database(
    database_path: Optional[str] = None, max_retries: Optional[int] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERKIT_DB_PATH
            environment variable, then defaults to ~/.ledgerkit/ledgerkit.db
        max_retries: Transaction retry limit. If None, checks LEDGERKIT_TX_RETRIES,
            then defaults to 3

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("LEDGERKIT_DB_PATH")

    if database_path is None:
        # Default to ~/.ledgerkit/ledgerkit.db
        home = Path.home()
        db_dir = home / ".ledgerkit"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledgerkit.db")

    database_url = f"sqlite:///{database_path}"
    return create_database(database_url, max_retries=max_retries)


def create_database(
    database_url: Optional[str] = None, max_retries: Optional[int] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from a SQLAlchemy URL.

    Args:
        database_url: SQLAlchemy URL. If None, checks LEDGERKIT_DATABASE_URL, then
            falls back to the SQLite file resolved by create_sqlite_database
        max_retries: Transaction retry limit. If None, checks LEDGERKIT_TX_RETRIES,
            then defaults to 3

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get("LEDGERKIT_DATABASE_URL")

    if database_url is None:
        return create_sqlite_database(max_retries=max_retries)

    if max_retries is None:
        max_retries = _max_retries_from_env()
    return SQLAlchemyDatabase(database_url, max_retries=max_retries)
