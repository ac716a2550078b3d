# tenant_foundry/tenants/sqlite_tenant_store.py
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime

from .storage_interfaces import AbstractTenantStore
from .models import TenantRecord
from ..storage.sqlite_base import get_sqlite_db_connection
from ..errors import TenantStorageError
from ..localization import AbstractMessageLocalizer, DefaultMessageLocalizer
from ..utils.security import FernetEncryptor
from ..settings import settings

logger = logging.getLogger(__name__)

_TENANT_COLUMNS = "id, name, connection_string, admin_email, issuer, is_active, valid_until, created_at"


def _parse_datetime(value) -> Optional[datetime]:
    # SQLite may hand back ISO strings or datetimes
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class SQLiteTenantStore(AbstractTenantStore):
    """
    SQLite implementation of the tenant registry.

    Connection strings are encrypted at rest with Fernet when an encryption
    key is configured. Empty connection strings are stored as-is.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        encryptor: Optional[FernetEncryptor] = None,
        localizer: Optional[AbstractMessageLocalizer] = None,
    ):
        self.db_path = db_path or settings.registry_db_path
        self._encryptor = encryptor or FernetEncryptor(settings.connection_string_encryption_key)
        self._t = localizer or DefaultMessageLocalizer()

    async def initialize(self) -> None:
        """Initialize the tenant store by ensuring database and table exist."""
        await get_sqlite_db_connection(self.db_path)
        logger.info(f"SQLiteTenantStore initialized at {self.db_path}.")

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query with transaction management.

        Raises:
            sqlite3.Error: If query execution fails
        """
        conn = await get_sqlite_db_connection(self.db_path)
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                conn.commit()
        except sqlite3.IntegrityError:
            if commit:
                conn.rollback()
            raise
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query}': {e}", exc_info=True)
            if commit:
                conn.rollback()
            raise
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()

    def _protect(self, connection_string: str) -> str:
        if not connection_string or not self._encryptor.key_valid:
            return connection_string
        return self._encryptor.encrypt(connection_string)

    def _unprotect(self, tenant_id: str, stored_value: str) -> str:
        if not stored_value or not self._encryptor.key_valid:
            return stored_value
        decrypted = self._encryptor.decrypt(stored_value)
        if decrypted is None:
            raise TenantStorageError(
                self._t.format(
                    "Connection string of tenant '{0}' could not be decrypted with the configured key.",
                    tenant_id,
                ),
                tenant_id=tenant_id,
            )
        return decrypted

    def _row_to_tenant(self, row: Optional[sqlite3.Row]) -> Optional[TenantRecord]:
        if not row:
            return None
        return TenantRecord(
            id=row["id"],
            name=row["name"],
            connection_string=self._unprotect(row["id"], row["connection_string"]),
            admin_email=row["admin_email"],
            issuer=row["issuer"],
            is_active=bool(row["is_active"]),
            valid_until=_parse_datetime(row["valid_until"]),
            created_at=_parse_datetime(row["created_at"]),
        )

    async def get_all(self) -> List[TenantRecord]:
        query = f"SELECT {_TENANT_COLUMNS} FROM tenants ORDER BY created_at, id"
        rows = await self._fetchall(query)
        return [self._row_to_tenant(row) for row in rows]

    async def try_get(self, tenant_id: str) -> Optional[TenantRecord]:
        query = f"SELECT {_TENANT_COLUMNS} FROM tenants WHERE id = ?"
        row = await self._fetchone(query, (tenant_id,))
        return self._row_to_tenant(row)

    async def try_add(self, tenant: TenantRecord) -> bool:
        """
        Insert a tenant row. Uniqueness is left to the primary key so that
        concurrent inserts of the same id cannot both succeed.
        """
        query = f"INSERT INTO tenants ({_TENANT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
        params = (
            tenant.id,
            tenant.name,
            self._protect(tenant.connection_string),
            tenant.admin_email,
            tenant.issuer,
            int(tenant.is_active),
            tenant.valid_until.isoformat() if tenant.valid_until else None,
            tenant.created_at.isoformat(),
        )
        try:
            await self._execute_query(query, params)
        except sqlite3.IntegrityError:
            logger.warning(f"Store: tenant with id '{tenant.id}' already exists.")
            return False
        logger.info(f"Store: added tenant '{tenant.id}'.")
        return True

    async def try_update(self, tenant: TenantRecord) -> bool:
        query = """
            UPDATE tenants
            SET name = ?, connection_string = ?, admin_email = ?, issuer = ?, is_active = ?, valid_until = ?
            WHERE id = ?
        """
        params = (
            tenant.name,
            self._protect(tenant.connection_string),
            tenant.admin_email,
            tenant.issuer,
            int(tenant.is_active),
            tenant.valid_until.isoformat() if tenant.valid_until else None,
            tenant.id,
        )
        cursor = await self._execute_query(query, params)
        return cursor.rowcount > 0

    async def try_remove(self, tenant_id: str) -> bool:
        query = "DELETE FROM tenants WHERE id = ?"
        cursor = await self._execute_query(query, (tenant_id,))
        return cursor.rowcount > 0


# Singleton instance management
_sqlite_tenant_store_instance: Optional[SQLiteTenantStore] = None


async def get_sqlite_tenant_store() -> SQLiteTenantStore:
    """Get or create the singleton SQLiteTenantStore bound to the configured registry."""
    global _sqlite_tenant_store_instance
    if _sqlite_tenant_store_instance is None:
        _sqlite_tenant_store_instance = SQLiteTenantStore()
        await _sqlite_tenant_store_instance.initialize()
    return _sqlite_tenant_store_instance
