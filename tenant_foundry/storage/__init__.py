# tenant_foundry/storage/__init__.py

"""Storage module initialization.

Shared SQLite plumbing for the tenant registry and the tenant databases.
"""

from .sqlite_base import (
    get_sqlite_db_connection,
    open_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection,
    close_all_sqlite_db_connections,
)

__all__ = [
    "get_sqlite_db_connection",
    "open_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection",
    "close_all_sqlite_db_connections",
]
