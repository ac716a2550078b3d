# tenant_foundry/tenants/service.py
import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .connection_string import make_secure
from .models import CreateTenantRequest, TenantDto, TenantRecord, utc_now
from .storage_interfaces import AbstractTenantStore
from ..errors import TenantConflictError, TenantInvalidStateError, TenantNotFoundError
from ..localization import AbstractMessageLocalizer, DefaultMessageLocalizer
from ..provisioning.storage_interfaces import AbstractDatabaseInitializer
from ..settings import settings

logger = logging.getLogger(__name__)


class TenantLifecycleService:
    """
    Orchestrates the tenant lifecycle against the registry and the database provisioner.

    Tenants are created inactive and only change state through ``activate``
    and ``deactivate``; redundant transitions are rejected so callers notice
    them. Creation is a two step saga: register, then provision. If
    provisioning fails the registration is removed again (best effort) and
    the provisioning error is re-raised.
    """

    def __init__(
        self,
        tenant_store: AbstractTenantStore,
        db_initializer: AbstractDatabaseInitializer,
        localizer: Optional[AbstractMessageLocalizer] = None,
        default_connection_string: Optional[str] = None,
        root_tenant_id: Optional[str] = None,
        default_subscription_days: Optional[int] = settings.default_subscription_days,
    ):
        self.tenant_store = tenant_store
        self.db_initializer = db_initializer
        self._t = localizer or DefaultMessageLocalizer()
        self.default_connection_string = (
            default_connection_string if default_connection_string is not None
            else settings.default_connection_string
        )
        self.root_tenant_id = root_tenant_id or settings.root_tenant_id
        self.default_subscription_days = default_subscription_days

    def _to_dto(self, tenant: TenantRecord) -> TenantDto:
        return TenantDto.model_validate(
            tenant.model_dump() | {"connection_string": make_secure(tenant.connection_string)}
        )

    async def _get_tenant(self, tenant_id: str) -> TenantRecord:
        tenant = await self.tenant_store.try_get(tenant_id)
        if tenant is None:
            logger.warning(f"Service: tenant '{tenant_id}' not found.")
            raise TenantNotFoundError(
                self._t.format("{0} {1} Not Found.", "Tenant", tenant_id),
                tenant_id=tenant_id,
            )
        return tenant

    async def list_all(self) -> List[TenantDto]:
        logger.info("Service: listing all tenants.")
        return [self._to_dto(t) for t in await self.tenant_store.get_all()]

    async def exists_with_id(self, tenant_id: str) -> bool:
        return await self.tenant_store.try_get(tenant_id) is not None

    async def exists_with_name(self, name: str) -> bool:
        return any(t.name == name for t in await self.tenant_store.get_all())

    async def get_by_id(self, tenant_id: str) -> TenantDto:
        logger.info(f"Service: getting tenant '{tenant_id}'.")
        return self._to_dto(await self._get_tenant(tenant_id))

    async def create(self, request: CreateTenantRequest) -> str:
        """
        Register a tenant and provision its database.

        The tenant is returned inactive; activation is a separate step.

        Raises:
            TenantConflictError: If the id is already registered
            TenantProvisioningError: If the database could not be provisioned or seeded
        """
        logger.info(f"Service: attempting to create tenant '{request.id}'.")

        connection_string = request.connection_string or ""
        if connection_string.strip() == self.default_connection_string.strip():
            connection_string = ""

        created_at = utc_now()
        tenant = TenantRecord(
            id=request.id,
            name=request.name,
            connection_string=connection_string,
            admin_email=request.admin_email,
            issuer=request.issuer,
            is_active=False,
            valid_until=(
                created_at + timedelta(days=self.default_subscription_days)
                if self.default_subscription_days is not None else None
            ),
            created_at=created_at,
        )

        if not await self.tenant_store.try_add(tenant):
            raise TenantConflictError(
                self._t.format("Tenant with id '{0}' already exists.", tenant.id),
                tenant_id=tenant.id,
            )

        # TODO: run provisioning as a background job and mail the admin once the database is ready.
        try:
            await self.db_initializer.initialize_tenant_database(tenant)
        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"Service: provisioning tenant '{tenant.id}' failed, removing registration: {e!r}")
            await self._compensate_create(tenant.id)
            raise

        logger.info(f"Service: tenant '{tenant.id}' created and provisioned.")
        return tenant.id

    async def _compensate_create(self, tenant_id: str) -> None:
        # Failures here are logged only, the provisioning error is what the caller must see.
        try:
            removed = await self.tenant_store.try_remove(tenant_id)
        except Exception as e:
            logger.critical(
                f"Service: could not remove tenant '{tenant_id}' after failed provisioning. "
                f"Registry and tenant database are inconsistent: {e}",
                exc_info=True
            )
            return
        if not removed:
            logger.critical(
                f"Service: tenant '{tenant_id}' was not found while compensating failed provisioning."
            )

    async def activate(self, tenant_id: str) -> str:
        tenant = await self._get_tenant(tenant_id)
        if tenant.is_active:
            raise TenantInvalidStateError(self._t.format("Tenant is already Activated."), tenant_id=tenant_id)

        tenant.activate()
        await self.tenant_store.try_update(tenant)
        logger.info(f"Service: tenant '{tenant_id}' activated.")
        return self._t.format("Tenant {0} is now Activated.", tenant_id)

    async def deactivate(self, tenant_id: str) -> str:
        tenant = await self._get_tenant(tenant_id)
        if tenant.id == self.root_tenant_id:
            raise TenantInvalidStateError(
                self._t.format("Tenant {0} cannot be Deactivated.", tenant_id), tenant_id=tenant_id
            )
        if not tenant.is_active:
            raise TenantInvalidStateError(self._t.format("Tenant is already Deactivated."), tenant_id=tenant_id)

        tenant.deactivate()
        await self.tenant_store.try_update(tenant)
        logger.info(f"Service: tenant '{tenant_id}' deactivated.")
        return self._t.format("Tenant {0} is now Deactivated.", tenant_id)

    async def update_subscription(self, tenant_id: str, extended_expiry_date: datetime) -> str:
        tenant = await self._get_tenant(tenant_id)
        tenant.set_validity(extended_expiry_date)
        await self.tenant_store.try_update(tenant)
        logger.info(f"Service: tenant '{tenant_id}' valid until {tenant.valid_until}.")
        return self._t.format(
            "Tenant {0}'s Subscription Upgraded. Now Valid till {1}.", tenant_id, tenant.valid_until
        )
