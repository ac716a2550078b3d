# tenant_foundry/provisioning/initializer.py
import sqlite3
import logging
from pathlib import Path
from typing import Iterable, Optional

from .migrations import migrate
from .models import SeedSettings
from .seeder import CustomSeederRunner, TenantDbSeeder
from .sqlite_identity_store import SQLiteRoleManager, SQLiteUserManager
from .storage_interfaces import AbstractCustomSeeder, AbstractDatabaseInitializer
from ..errors import TenantProvisioningError, TenantSeedingError
from ..localization import AbstractMessageLocalizer, DefaultMessageLocalizer
from ..storage.sqlite_base import open_sqlite_db_connection
from ..tenants.models import TenantRecord
from ..settings import settings

logger = logging.getLogger(__name__)

_SQLITE_URL_PREFIX = "sqlite:///"
_DATA_SOURCE_KEYS = ("data source", "datasource", "filename")


def resolve_sqlite_path(connection_string: str, base_dir: str) -> Optional[Path]:
    """
    Extract the database file from ``sqlite:///path`` or ``Data Source=path``.

    Relative paths are resolved against ``base_dir``. Returns None for
    anything that is not a SQLite connection string.
    """
    raw = connection_string.strip()
    path: Optional[str] = None
    if raw.lower().startswith(_SQLITE_URL_PREFIX):
        path = raw[len(_SQLITE_URL_PREFIX):]
    else:
        for segment in raw.split(";"):
            key, sep, value = segment.partition("=")
            if sep and key.strip().lower() in _DATA_SOURCE_KEYS:
                path = value.strip()
                break
    if not path:
        return None
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = Path(base_dir) / resolved
    return resolved.resolve()


class SQLiteDatabaseInitializer(AbstractDatabaseInitializer):
    """
    Provisions tenant databases as SQLite files.

    Tenants with an empty connection string share the default database and
    are kept apart by the tenant_id column of every table.
    """

    def __init__(
        self,
        default_connection_string: Optional[str] = None,
        tenant_databases_dir: Optional[str] = None,
        seed_settings: Optional[SeedSettings] = None,
        custom_seeders: Optional[Iterable[AbstractCustomSeeder]] = None,
        localizer: Optional[AbstractMessageLocalizer] = None,
    ):
        self.default_connection_string = default_connection_string or settings.default_connection_string
        self.tenant_databases_dir = tenant_databases_dir or settings.tenant_databases_dir
        self.seed_settings = seed_settings or SeedSettings.from_settings()
        self.custom_seeders = list(custom_seeders or [])
        self._t = localizer or DefaultMessageLocalizer()

    def database_path_for(self, tenant: TenantRecord) -> Path:
        connection_string = tenant.connection_string or self.default_connection_string
        path = resolve_sqlite_path(connection_string, self.tenant_databases_dir)
        if path is None:
            raise TenantProvisioningError(
                self._t.format(
                    "Unsupported connection string for tenant '{0}'. "
                    "Expected 'sqlite:///<path>' or 'Data Source=<path>'.",
                    tenant.id,
                ),
                tenant_id=tenant.id,
            )
        return path

    async def initialize_tenant_database(self, tenant: TenantRecord) -> None:
        db_path = self.database_path_for(tenant)
        logger.info(f"Provisioning: initializing database for tenant '{tenant.id}' at {db_path}.")

        try:
            conn = await open_sqlite_db_connection(str(db_path))
            version = migrate(conn)
        except sqlite3.Error as e:
            logger.error(f"Provisioning: migrating database for tenant '{tenant.id}' failed: {e}", exc_info=True)
            raise TenantProvisioningError(
                self._t.format("Database for tenant '{0}' could not be created: {1}", tenant.id, e),
                tenant_id=tenant.id,
            ) from e
        logger.info(f"Provisioning: tenant '{tenant.id}' database at schema version {version}.")

        seeder = TenantDbSeeder(
            tenant=tenant,
            role_manager=SQLiteRoleManager(conn, tenant.id),
            user_manager=SQLiteUserManager(conn, tenant.id),
            seeder_runner=CustomSeederRunner(self.custom_seeders),
            seed_settings=self.seed_settings,
        )
        try:
            await seeder.seed()
        except TenantProvisioningError:
            raise
        except Exception as e:
            logger.error(f"Provisioning: seeding database for tenant '{tenant.id}' failed: {e}", exc_info=True)
            raise TenantSeedingError(
                self._t.format("Database for tenant '{0}' could not be seeded: {1}", tenant.id, e),
                tenant_id=tenant.id,
            ) from e
        logger.info(f"Provisioning: tenant '{tenant.id}' database initialized and seeded.")
