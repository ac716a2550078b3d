# tenant_foundry/provisioning/sqlite_identity_store.py
import sqlite3
import logging
from typing import List, Optional
from datetime import datetime
from uuid import uuid4

from .models import ApplicationRole, ApplicationRoleClaim, ApplicationUser, IdentityResult
from .storage_interfaces import AbstractRoleManager, AbstractUserManager

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "id, user_name, email, first_name, last_name, password_hash, "
    "email_confirmed, phone_number_confirmed, is_active, created_at"
)


class _SQLiteTenantScopedStore:
    """Common plumbing for stores bound to one tenant inside one tenant database."""

    def __init__(self, conn: sqlite3.Connection, tenant_id: str):
        self.conn = conn
        self.tenant_id = tenant_id

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        cursor = self.conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                self.conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query}': {e}", exc_info=True)
            if commit:
                self.conn.rollback()
            raise
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()


class SQLiteRoleManager(_SQLiteTenantScopedStore, AbstractRoleManager):
    """SQLite role store for one tenant."""

    async def find_by_name(self, role_name: str) -> Optional[ApplicationRole]:
        row = await self._fetchone(
            "SELECT id, name, description FROM roles WHERE tenant_id = ? AND normalized_name = ?",
            (self.tenant_id, role_name.upper()),
        )
        if not row:
            return None
        return ApplicationRole(id=row["id"], name=row["name"], description=row["description"])

    async def create(self, role: ApplicationRole) -> ApplicationRole:
        role_id = role.id or str(uuid4())
        await self._execute_query(
            "INSERT INTO roles (id, tenant_id, name, normalized_name, description) VALUES (?, ?, ?, ?, ?)",
            (role_id, self.tenant_id, role.name, role.normalized_name, role.description),
        )
        return role.model_copy(update={"id": role_id})

    async def get_claims(self, role: ApplicationRole) -> List[ApplicationRoleClaim]:
        rows = await self._fetchall(
            "SELECT role_id, claim_type, claim_value, created_by FROM role_claims "
            "WHERE tenant_id = ? AND role_id = ? ORDER BY id",
            (self.tenant_id, role.id),
        )
        return [
            ApplicationRoleClaim(
                role_id=row["role_id"],
                claim_type=row["claim_type"],
                claim_value=row["claim_value"],
                created_by=row["created_by"],
            )
            for row in rows
        ]

    async def add_claim(self, claim: ApplicationRoleClaim) -> None:
        await self._execute_query(
            "INSERT INTO role_claims (tenant_id, role_id, claim_type, claim_value, created_by) "
            "VALUES (?, ?, ?, ?, ?)",
            (self.tenant_id, claim.role_id, claim.claim_type, claim.claim_value, claim.created_by),
        )


class SQLiteUserManager(_SQLiteTenantScopedStore, AbstractUserManager):
    """SQLite user store for one tenant."""

    def _row_to_user(self, row: Optional[sqlite3.Row]) -> Optional[ApplicationUser]:
        if not row:
            return None
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        return ApplicationUser(
            id=row["id"],
            user_name=row["user_name"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            password_hash=row["password_hash"],
            email_confirmed=bool(row["email_confirmed"]),
            phone_number_confirmed=bool(row["phone_number_confirmed"]),
            is_active=bool(row["is_active"]),
            created_at=created_at,
        )

    async def find_by_name(self, user_name: str) -> Optional[ApplicationUser]:
        row = await self._fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE tenant_id = ? AND normalized_user_name = ?",
            (self.tenant_id, user_name.upper()),
        )
        return self._row_to_user(row)

    async def find_by_email(self, email: str) -> Optional[ApplicationUser]:
        row = await self._fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE tenant_id = ? AND normalized_email = ?",
            (self.tenant_id, email.upper()),
        )
        return self._row_to_user(row)

    async def find_by_id(self, user_id: str) -> Optional[ApplicationUser]:
        row = await self._fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE tenant_id = ? AND id = ?",
            (self.tenant_id, user_id),
        )
        return self._row_to_user(row)

    async def create(self, user: ApplicationUser, password_hash: str) -> ApplicationUser:
        user_id = user.id or str(uuid4())
        await self._execute_query(
            f"INSERT INTO users (tenant_id, normalized_user_name, normalized_email, {_USER_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                self.tenant_id,
                user.normalized_user_name,
                user.normalized_email,
                user_id,
                user.user_name,
                user.email,
                user.first_name,
                user.last_name,
                password_hash,
                int(user.email_confirmed),
                int(user.phone_number_confirmed),
                int(user.is_active),
                user.created_at.isoformat(),
            ),
        )
        return user.model_copy(update={"id": user_id, "password_hash": password_hash})

    async def _find_role_id(self, role_name: str) -> Optional[str]:
        row = await self._fetchone(
            "SELECT id FROM roles WHERE tenant_id = ? AND normalized_name = ?",
            (self.tenant_id, role_name.upper()),
        )
        return row["id"] if row else None

    async def is_in_role(self, user: ApplicationUser, role_name: str) -> bool:
        row = await self._fetchone(
            "SELECT 1 FROM user_roles ur JOIN roles r ON r.id = ur.role_id "
            "WHERE ur.user_id = ? AND r.tenant_id = ? AND r.normalized_name = ?",
            (user.id, self.tenant_id, role_name.upper()),
        )
        return row is not None

    async def add_to_role(self, user: ApplicationUser, role_name: str) -> IdentityResult:
        role_id = await self._find_role_id(role_name)
        if role_id is None:
            return IdentityResult.failed(f"Role '{role_name}' does not exist.")
        if await self.is_in_role(user, role_name):
            return IdentityResult.failed(f"User '{user.user_name}' is already in role '{role_name}'.")
        await self._execute_query(
            "INSERT INTO user_roles (user_id, role_id) VALUES (?, ?)",
            (user.id, role_id),
        )
        return IdentityResult.success()
