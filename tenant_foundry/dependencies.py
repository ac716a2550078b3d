# tenant_foundry/dependencies.py
import logging
from typing import Optional

from .localization import AbstractMessageLocalizer
from .provisioning.initializer import SQLiteDatabaseInitializer
from .provisioning.storage_interfaces import AbstractDatabaseInitializer
from .tenants.service import TenantLifecycleService
from .tenants.sqlite_tenant_store import get_sqlite_tenant_store
from .tenants.storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)


async def get_tenant_service(
    tenant_store: Optional[AbstractTenantStore] = None,
    db_initializer: Optional[AbstractDatabaseInitializer] = None,
    localizer: Optional[AbstractMessageLocalizer] = None,
) -> TenantLifecycleService:
    """
    Factory for TenantLifecycleService.

    Anything not passed in falls back to the SQLite implementations
    configured through ``settings``.
    """
    store = tenant_store or await get_sqlite_tenant_store()
    initializer = db_initializer or SQLiteDatabaseInitializer(localizer=localizer)
    logger.debug(
        f"Building TenantLifecycleService with store {type(store).__name__} "
        f"and initializer {type(initializer).__name__}."
    )
    return TenantLifecycleService(store, initializer, localizer=localizer)
