# tests/conftest.py
import logging

import pytest

from tenant_foundry.provisioning.initializer import SQLiteDatabaseInitializer
from tenant_foundry.provisioning.models import SeedSettings
from tenant_foundry.storage.sqlite_base import close_all_sqlite_db_connections
from tenant_foundry.tenants.service import TenantLifecycleService
from tenant_foundry.tenants.sqlite_tenant_store import SQLiteTenantStore
from tenant_foundry.utils.security import FernetEncryptor

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
)

SHARED_CONNECTION_STRING = "Data Source=shared.sqlite3"
ADMIN_PASSWORD = "Secret@12345"


def fast_hash(password: str) -> str:
    """Stand-in for the Argon2 hasher in tests that don't check credentials."""
    return f"hashed:{password}"


@pytest.fixture
async def registry_store(tmp_path):
    store = SQLiteTenantStore(
        db_path=str(tmp_path / "registry.sqlite3"),
        encryptor=FernetEncryptor(None),
    )
    await store.initialize()
    yield store
    await close_all_sqlite_db_connections()


@pytest.fixture
def seed_settings():
    return SeedSettings(admin_password=ADMIN_PASSWORD)


@pytest.fixture
def tenant_databases_dir(tmp_path):
    return tmp_path / "tenant_databases"


@pytest.fixture
def db_initializer(tenant_databases_dir, seed_settings):
    return SQLiteDatabaseInitializer(
        default_connection_string=SHARED_CONNECTION_STRING,
        tenant_databases_dir=str(tenant_databases_dir),
        seed_settings=seed_settings,
    )


@pytest.fixture
def tenant_service(registry_store, db_initializer):
    return TenantLifecycleService(
        registry_store,
        db_initializer,
        default_connection_string=SHARED_CONNECTION_STRING,
        root_tenant_id="root",
        default_subscription_days=30,
    )
