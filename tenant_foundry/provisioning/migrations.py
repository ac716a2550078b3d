# tenant_foundry/provisioning/migrations.py
import sqlite3
import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)

# Application schema of a tenant database. Every table carries tenant_id so that
# tenants sharing the default database stay partitioned. Append only: the index
# of a migration (1-based) is its schema version.
MIGRATIONS: List[Tuple[str, List[str]]] = [
    ("create_identity_tables", [
        '''
        CREATE TABLE IF NOT EXISTS roles (
            id TEXT PRIMARY KEY,
            tenant_id TEXT NOT NULL,
            name TEXT NOT NULL,
            normalized_name TEXT NOT NULL,
            description TEXT,
            UNIQUE (tenant_id, normalized_name)
        )
        ''',
        '''
        CREATE TABLE IF NOT EXISTS role_claims (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            tenant_id TEXT NOT NULL,
            role_id TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
            claim_type TEXT NOT NULL,
            claim_value TEXT NOT NULL,
            created_by TEXT
        )
        ''',
        '''
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            tenant_id TEXT NOT NULL,
            user_name TEXT NOT NULL,
            normalized_user_name TEXT NOT NULL,
            email TEXT,
            normalized_email TEXT,
            first_name TEXT,
            last_name TEXT,
            password_hash TEXT,
            email_confirmed INTEGER NOT NULL DEFAULT 0,
            phone_number_confirmed INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            UNIQUE (tenant_id, normalized_user_name)
        )
        ''',
        '''
        CREATE TABLE IF NOT EXISTS user_roles (
            user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            role_id TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
            PRIMARY KEY (user_id, role_id)
        )
        ''',
    ]),
    ("index_user_emails", [
        "CREATE INDEX IF NOT EXISTS ix_users_tenant_email ON users (tenant_id, normalized_email)",
    ]),
]


def current_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def migrate(conn: sqlite3.Connection) -> int:
    """
    Apply every pending migration in order.

    The version is bumped only after all statements of a migration ran.
    Statements are idempotent, so a failed migration is simply re-applied
    on the next run.

    Returns:
        The schema version after migrating

    Raises:
        sqlite3.Error: If a migration fails
    """
    version = current_schema_version(conn)
    for number, (name, statements) in enumerate(MIGRATIONS, start=1):
        if number <= version:
            continue
        logger.info(f"Applying tenant schema migration {number} '{name}'.")
        try:
            for statement in statements:
                conn.execute(statement)
            conn.execute(f"PRAGMA user_version = {number}")
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        version = number
    return version
