# tests/test_tenant_lifecycle.py
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from tenant_foundry.errors import (
    TenantConflictError,
    TenantInvalidStateError,
    TenantNotFoundError,
    TenantProvisioningError,
    TenantSeedingError,
)
from tenant_foundry.localization import DefaultMessageLocalizer
from tenant_foundry.provisioning.initializer import SQLiteDatabaseInitializer
from tenant_foundry.provisioning.sqlite_identity_store import SQLiteRoleManager, SQLiteUserManager
from tenant_foundry.provisioning.storage_interfaces import AbstractCustomSeeder, AbstractDatabaseInitializer
from tenant_foundry.storage.sqlite_base import open_sqlite_db_connection
from tenant_foundry.tenants.models import CreateTenantRequest
from tenant_foundry.tenants.service import TenantLifecycleService
from tenant_foundry.utils.security import verify_password

from .conftest import ADMIN_PASSWORD, SHARED_CONNECTION_STRING


def acme_request(**overrides) -> CreateTenantRequest:
    data = {"id": "acme", "name": "Acme Co", "connection_string": "", "admin_email": "admin@acme.io"}
    data.update(overrides)
    return CreateTenantRequest(**data)


async def test_acme_scenario_provisions_and_seeds_shared_database(tenant_service, tenant_databases_dir):
    tenant_id = await tenant_service.create(acme_request())

    assert tenant_id == "acme"
    tenant = await tenant_service.get_by_id("acme")
    assert tenant.is_active is False
    assert tenant.connection_string == ""

    conn = await open_sqlite_db_connection(str(tenant_databases_dir / "shared.sqlite3"))
    roles = SQLiteRoleManager(conn, "acme")
    users = SQLiteUserManager(conn, "acme")

    for role_name in ("SuperAdmin", "Admin", "Basic"):
        role = await roles.find_by_name(role_name)
        assert role is not None
        assert role.description == f"{role_name} Role for acme Tenant"

    admin = await users.find_by_email("admin@acme.io")
    assert admin is not None
    assert admin.user_name == "admin"
    assert admin.email_confirmed and admin.phone_number_confirmed and admin.is_active
    assert verify_password(ADMIN_PASSWORD, admin.password_hash)
    assert await users.is_in_role(admin, "Admin")
    assert await users.is_in_role(admin, "Basic")
    assert not await users.is_in_role(admin, "SuperAdmin")


async def test_default_connection_string_is_cleared(tenant_service, registry_store):
    await tenant_service.create(acme_request(connection_string=f"  {SHARED_CONNECTION_STRING}  "))

    stored = await registry_store.try_get("acme")
    assert stored.connection_string == ""


async def test_dedicated_connection_string_creates_own_database(tenant_service, registry_store, tenant_databases_dir):
    await tenant_service.create(acme_request(connection_string="Data Source=acme.sqlite3"))

    stored = await registry_store.try_get("acme")
    assert stored.connection_string == "Data Source=acme.sqlite3"
    assert (tenant_databases_dir / "acme.sqlite3").exists()
    assert not (tenant_databases_dir / "shared.sqlite3").exists()


async def test_created_tenant_is_inactive_with_default_subscription(tenant_service):
    before = datetime.now(timezone.utc)
    await tenant_service.create(acme_request())

    tenant = await tenant_service.get_by_id("acme")
    assert tenant.is_active is False
    assert tenant.valid_until is not None
    assert before + timedelta(days=30) <= tenant.valid_until <= datetime.now(timezone.utc) + timedelta(days=30)


async def test_no_default_subscription_leaves_validity_empty(registry_store, db_initializer):
    service = TenantLifecycleService(
        registry_store,
        db_initializer,
        default_connection_string=SHARED_CONNECTION_STRING,
        default_subscription_days=None,
    )
    await service.create(acme_request())

    assert (await service.get_by_id("acme")).valid_until is None


async def test_create_with_existing_id_conflicts(tenant_service):
    await tenant_service.create(acme_request())

    with pytest.raises(TenantConflictError) as exc_info:
        await tenant_service.create(acme_request(name="Other Acme"))

    assert exc_info.value.tenant_id == "acme"
    assert (await tenant_service.get_by_id("acme")).name == "Acme Co"


async def test_concurrent_creates_with_same_id_only_one_wins(tenant_service):
    results = await asyncio.gather(
        tenant_service.create(acme_request()),
        tenant_service.create(acme_request()),
        return_exceptions=True,
    )

    assert results.count("acme") == 1
    assert sum(isinstance(r, TenantConflictError) for r in results) == 1
    assert len(await tenant_service.list_all()) == 1


async def test_activate_twice_is_rejected(tenant_service):
    await tenant_service.create(acme_request())

    message = await tenant_service.activate("acme")
    assert message == "Tenant acme is now Activated."
    assert (await tenant_service.get_by_id("acme")).is_active is True

    with pytest.raises(TenantInvalidStateError) as exc_info:
        await tenant_service.activate("acme")
    assert exc_info.value.detail == "Tenant is already Activated."


async def test_deactivate_mirrors_activate(tenant_service):
    await tenant_service.create(acme_request())

    with pytest.raises(TenantInvalidStateError):
        await tenant_service.deactivate("acme")

    await tenant_service.activate("acme")
    message = await tenant_service.deactivate("acme")
    assert message == "Tenant acme is now Deactivated."
    assert (await tenant_service.get_by_id("acme")).is_active is False

    with pytest.raises(TenantInvalidStateError) as exc_info:
        await tenant_service.deactivate("acme")
    assert exc_info.value.detail == "Tenant is already Deactivated."


async def test_root_tenant_cannot_be_deactivated(tenant_service):
    await tenant_service.create(acme_request(id="root", name="Root", admin_email="admin@root.io"))
    await tenant_service.activate("root")

    with pytest.raises(TenantInvalidStateError):
        await tenant_service.deactivate("root")
    assert (await tenant_service.get_by_id("root")).is_active is True


async def test_unknown_tenant_is_not_found(tenant_service):
    with pytest.raises(TenantNotFoundError) as exc_info:
        await tenant_service.get_by_id("nope")
    assert exc_info.value.detail == "Tenant nope Not Found."

    for operation in (tenant_service.activate, tenant_service.deactivate):
        with pytest.raises(TenantNotFoundError):
            await operation("nope")
    with pytest.raises(TenantNotFoundError):
        await tenant_service.update_subscription("nope", datetime(2030, 1, 1, tzinfo=timezone.utc))


async def test_update_subscription_overwrites_validity(tenant_service):
    await tenant_service.create(acme_request())
    new_expiry = datetime(2027, 1, 31, 12, 0, tzinfo=timezone.utc)

    message = await tenant_service.update_subscription("acme", new_expiry)

    assert (await tenant_service.get_by_id("acme")).valid_until == new_expiry
    assert message.startswith("Tenant acme's Subscription Upgraded. Now Valid till 2027-01-31")

    # Backdating is allowed too
    earlier = datetime(2026, 1, 1, tzinfo=timezone.utc)
    await tenant_service.update_subscription("acme", earlier)
    assert (await tenant_service.get_by_id("acme")).valid_until == earlier


async def test_list_all_hides_credentials(tenant_service, registry_store):
    await tenant_service.create(acme_request(connection_string="Data Source=acme.sqlite3;Password=s3cret"))
    await tenant_service.create(acme_request(id="globex", name="Globex", admin_email="it@globex.io"))

    tenants = {t.id: t for t in await tenant_service.list_all()}

    assert tenants["acme"].connection_string == "Data Source=acme.sqlite3;Password=*******"
    assert tenants["globex"].connection_string == ""
    assert (await tenant_service.get_by_id("acme")).connection_string.endswith("Password=*******")
    assert (await registry_store.try_get("acme")).connection_string.endswith("Password=s3cret")


async def test_exists_checks(tenant_service):
    await tenant_service.create(acme_request())

    assert await tenant_service.exists_with_id("acme")
    assert not await tenant_service.exists_with_id("globex")
    assert await tenant_service.exists_with_name("Acme Co")
    assert not await tenant_service.exists_with_name("acme co")


async def test_provisioning_failure_removes_tenant_and_reraises(registry_store):
    failure = TenantProvisioningError("database server unreachable", tenant_id="acme")
    initializer = AsyncMock(spec=AbstractDatabaseInitializer)
    initializer.initialize_tenant_database.side_effect = failure
    service = TenantLifecycleService(registry_store, initializer, default_connection_string=SHARED_CONNECTION_STRING)

    with pytest.raises(TenantProvisioningError) as exc_info:
        await service.create(acme_request())

    assert exc_info.value is failure
    assert "acme" not in [t.id for t in await service.list_all()]
    initializer.initialize_tenant_database.assert_awaited_once()


async def test_unexpected_provisioning_error_is_reraised_unchanged(registry_store):
    initializer = AsyncMock(spec=AbstractDatabaseInitializer)
    initializer.initialize_tenant_database.side_effect = OSError("disk full")
    service = TenantLifecycleService(registry_store, initializer, default_connection_string=SHARED_CONNECTION_STRING)

    with pytest.raises(OSError, match="disk full"):
        await service.create(acme_request())
    assert not await service.exists_with_id("acme")


async def test_failed_compensation_does_not_mask_provisioning_error(registry_store, caplog):
    failure = TenantProvisioningError("boom", tenant_id="acme")
    initializer = AsyncMock(spec=AbstractDatabaseInitializer)
    initializer.initialize_tenant_database.side_effect = failure
    registry_store.try_remove = AsyncMock(side_effect=RuntimeError("registry offline"))
    service = TenantLifecycleService(registry_store, initializer, default_connection_string=SHARED_CONNECTION_STRING)

    with pytest.raises(TenantProvisioningError) as exc_info:
        await service.create(acme_request())

    assert exc_info.value is failure
    assert "inconsistent" in caplog.text


async def test_unsupported_connection_string_fails_provisioning(tenant_service):
    with pytest.raises(TenantProvisioningError):
        await tenant_service.create(acme_request(connection_string="postgresql://app:pw@db.internal/acme"))

    assert not await tenant_service.exists_with_id("acme")


async def test_seeding_failure_is_a_provisioning_failure(registry_store, tenant_databases_dir, seed_settings):
    class BrokenSeeder(AbstractCustomSeeder):
        async def initialize(self, tenant):
            raise RuntimeError("catalog import failed")

    initializer = SQLiteDatabaseInitializer(
        default_connection_string=SHARED_CONNECTION_STRING,
        tenant_databases_dir=str(tenant_databases_dir),
        seed_settings=seed_settings,
        custom_seeders=[BrokenSeeder()],
    )
    service = TenantLifecycleService(registry_store, initializer, default_connection_string=SHARED_CONNECTION_STRING)

    with pytest.raises(TenantSeedingError) as exc_info:
        await service.create(acme_request())

    assert isinstance(exc_info.value, TenantProvisioningError)
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert not await service.exists_with_id("acme")


async def test_cancelled_provisioning_removes_tenant(registry_store):
    started = asyncio.Event()

    class SlowInitializer(AbstractDatabaseInitializer):
        async def initialize_tenant_database(self, tenant):
            started.set()
            await asyncio.sleep(3600)

    service = TenantLifecycleService(registry_store, SlowInitializer(), default_connection_string=SHARED_CONNECTION_STRING)
    task = asyncio.create_task(service.create(acme_request()))
    await started.wait()
    assert await service.exists_with_id("acme")

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not await service.exists_with_id("acme")


async def test_messages_go_through_localizer(registry_store, db_initializer):
    localizer = DefaultMessageLocalizer({
        "Tenant {0} is now Activated.": "Mandant {0} ist jetzt aktiv.",
        "Tenant is already Activated.": "Mandant ist bereits aktiv.",
    })
    service = TenantLifecycleService(
        registry_store, db_initializer, localizer=localizer, default_connection_string=SHARED_CONNECTION_STRING
    )
    await service.create(acme_request())

    assert await service.activate("acme") == "Mandant acme ist jetzt aktiv."
    with pytest.raises(TenantInvalidStateError, match="Mandant ist bereits aktiv."):
        await service.activate("acme")


async def test_provisioning_errors_go_through_localizer(registry_store, tenant_databases_dir, seed_settings):
    localizer = DefaultMessageLocalizer({
        "Unsupported connection string for tenant '{0}'. Expected 'sqlite:///<path>' or 'Data Source=<path>'.":
            "Mandant '{0}' nutzt eine nicht unterstützte Verbindung.",
    })
    initializer = SQLiteDatabaseInitializer(
        default_connection_string=SHARED_CONNECTION_STRING,
        tenant_databases_dir=str(tenant_databases_dir),
        seed_settings=seed_settings,
        localizer=localizer,
    )
    service = TenantLifecycleService(registry_store, initializer, default_connection_string=SHARED_CONNECTION_STRING)

    with pytest.raises(TenantProvisioningError) as exc_info:
        await service.create(acme_request(connection_string="postgresql://app:pw@db.internal/acme"))

    assert exc_info.value.detail == "Mandant 'acme' nutzt eine nicht unterstützte Verbindung."
    assert exc_info.value.tenant_id == "acme"
