# tenant_foundry/storage/sqlite_base.py
import sqlite3
import logging
from pathlib import Path
from typing import Dict, Optional

from ..settings import settings

logger = logging.getLogger(__name__)

# One connection per database file for the whole application lifecycle
_db_connections: Dict[str, sqlite3.Connection] = {}


def _resolve_db_path(db_path: Optional[str]) -> Path:
    return Path(db_path or settings.registry_db_path).resolve()


async def open_sqlite_db_connection(db_path: str) -> sqlite3.Connection:
    """
    Get or create a connection to an arbitrary SQLite database file.

    Used for tenant databases as well as the registry. The parent directory
    is created on demand and rows are returned as ``sqlite3.Row``.

    Raises:
        sqlite3.Error: If the database cannot be opened
    """
    resolved = _resolve_db_path(db_path)
    key = str(resolved)
    conn = _db_connections.get(key)
    if conn is None:
        try:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Attempting to connect to SQLite DB at: {resolved}")

            # Enable thread-safe access for async callers
            conn = sqlite3.connect(key, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            _db_connections[key] = conn

            logger.info(f"Successfully connected to SQLite DB: {resolved}")
        except sqlite3.Error as e:
            logger.error(f"Error connecting to SQLite database at {resolved}: {e}", exc_info=True)
            raise
    return conn


async def get_sqlite_db_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Get the tenant registry connection, initializing its schema on first use.

    Args:
        db_path: Registry database file. Defaults to ``settings.registry_db_path``.
    """
    key = str(_resolve_db_path(db_path))
    is_new = key not in _db_connections
    conn = await open_sqlite_db_connection(key)
    if is_new:
        await init_sqlite_db(conn)
    return conn


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """
    Initialize the tenant registry schema.

    Uses IF NOT EXISTS to safely handle repeated initialization calls.
    """
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS tenants (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        connection_string TEXT NOT NULL DEFAULT '',
        admin_email TEXT NOT NULL,
        issuer TEXT,
        is_active INTEGER NOT NULL DEFAULT 0,
        valid_until TEXT,
        created_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'tenants' table exists.")

    db_conn.commit()
    logger.info("Tenant registry schema initialized/verified.")


async def close_sqlite_db_connection(db_path: Optional[str] = None):
    """Close one cached connection, the registry's by default."""
    key = str(_resolve_db_path(db_path))
    conn = _db_connections.pop(key, None)
    if conn is not None:
        logger.info(f"Closing SQLite DB connection: {key}")
        conn.close()


async def close_all_sqlite_db_connections():
    """
    Close every cached connection.

    Should be called during application shutdown.
    """
    for key in list(_db_connections):
        await close_sqlite_db_connection(key)
    logger.info("All SQLite DB connections closed.")
