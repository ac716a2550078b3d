# tenant_foundry/provisioning/seeder.py
import logging
from typing import Callable, Iterable, List, Optional, Sequence

from .models import (
    PERMISSION_CLAIM_TYPE,
    ApplicationRole,
    ApplicationRoleClaim,
    ApplicationUser,
    SeedSettings,
)
from .storage_interfaces import AbstractCustomSeeder, AbstractRoleManager, AbstractUserManager
from ..tenants.models import TenantRecord
from ..utils.security import hash_password

logger = logging.getLogger(__name__)


class CustomSeederRunner:
    """Runs the registered custom seeders one after another, in registration order."""

    def __init__(self, seeders: Optional[Iterable[AbstractCustomSeeder]] = None):
        self.seeders: List[AbstractCustomSeeder] = list(seeders or [])

    async def run_seeders(self, tenant: TenantRecord) -> None:
        for seeder in self.seeders:
            logger.info(f"Seeder: running custom seeder {type(seeder).__name__} for tenant '{tenant.id}'.")
            await seeder.initialize(tenant)


class TenantDbSeeder:
    """
    Seeds one freshly provisioned tenant database.

    Order: default roles, then the default administrator and its roles,
    then the custom seeders. Every creation is preceded by a lookup, so
    running the seeder again against a seeded database changes nothing.
    Role and user store failures are not caught here.
    """

    def __init__(
        self,
        tenant: TenantRecord,
        role_manager: AbstractRoleManager,
        user_manager: AbstractUserManager,
        seeder_runner: Optional[CustomSeederRunner] = None,
        seed_settings: Optional[SeedSettings] = None,
        password_hasher: Callable[[str], str] = hash_password,
    ):
        self.tenant = tenant
        self.role_manager = role_manager
        self.user_manager = user_manager
        self.seeder_runner = seeder_runner or CustomSeederRunner()
        self.seed_settings = seed_settings or SeedSettings.from_settings()
        self.password_hasher = password_hasher

    async def seed(self) -> None:
        await self.seed_roles()
        await self.seed_admin_user()
        await self.seeder_runner.run_seeders(self.tenant)

    async def seed_roles(self) -> None:
        for role_name in self.seed_settings.default_roles:
            role = await self.role_manager.find_by_name(role_name)
            if role is None:
                logger.info(f"Seeder: seeding {role_name} role for '{self.tenant.id}' tenant.")
                await self.role_manager.create(
                    ApplicationRole(
                        name=role_name,
                        description=f"{role_name} Role for {self.tenant.id} Tenant",
                    )
                )

    async def assign_permissions_to_role(self, role: ApplicationRole, permissions: Sequence[str]) -> None:
        """
        Attach every missing permission claim to ``role``.

        Not part of ``seed()``: default roles get no permissions until a
        permission catalog exists.
        """
        current_claims = await self.role_manager.get_claims(role)
        granted = {c.claim_value for c in current_claims if c.claim_type == PERMISSION_CLAIM_TYPE}
        for permission in permissions:
            if permission in granted:
                continue
            logger.info(
                f"Seeder: seeding {role.name} permission '{permission}' for '{self.tenant.id}' tenant."
            )
            await self.role_manager.add_claim(
                ApplicationRoleClaim(
                    role_id=role.id,
                    claim_type=PERMISSION_CLAIM_TYPE,
                    claim_value=permission,
                    created_by=type(self).__name__,
                )
            )
            granted.add(permission)

    async def seed_admin_user(self) -> Optional[ApplicationUser]:
        """
        Find or create the default administrator and give it the baseline roles.

        Skipped entirely when the tenant has no id or no admin email.
        """
        admin_email = (self.tenant.admin_email or "").strip()
        if not self.tenant.id.strip() or not admin_email:
            logger.info(f"Seeder: tenant '{self.tenant.id}' has no admin email, skipping administrator.")
            return None

        admin_user = await self.user_manager.find_by_email(admin_email)
        if admin_user is None:
            admin_user = await self.user_manager.find_by_name(self.seed_settings.admin_user_name)
        if admin_user is None:
            admin_user = ApplicationUser(
                user_name=self.seed_settings.admin_user_name,
                first_name=self.seed_settings.admin_first_name,
                last_name=self.seed_settings.admin_last_name,
                email=admin_email,
                email_confirmed=True,
                phone_number_confirmed=True,
                is_active=True,
            )
            logger.info(f"Seeder: seeding default admin user for '{self.tenant.id}' tenant.")
            password_hash = self.password_hasher(self.seed_settings.admin_password)
            admin_user = await self.user_manager.create(admin_user, password_hash)

        await self.assign_user_to_roles(self.seed_settings.assignable_roles, admin_user.id)
        return admin_user

    async def assign_user_to_roles(self, roles: Sequence[str], user_id: str) -> None:
        """
        Assign each role independently.

        A refused assignment is logged and the loop moves on; an exception
        is logged and re-raised, leaving the remaining roles unassigned.
        """
        user = await self.user_manager.find_by_id(user_id)
        if user is None:
            logger.error(f"Seeder: user '{user_id}' not found in '{self.tenant.id}' tenant, no roles assigned.")
            return

        for role_name in roles:
            try:
                if await self.user_manager.is_in_role(user, role_name):
                    logger.debug(f"Seeder: user '{user.user_name}' already has role '{role_name}'.")
                    continue
                result = await self.user_manager.add_to_role(user, role_name)
                if result.succeeded:
                    logger.info(f"Seeder: role '{role_name}' assigned to user '{user.user_name}' successfully.")
                else:
                    logger.error(
                        f"Seeder: failed to assign role '{role_name}' to user '{user.user_name}': "
                        f"{'; '.join(result.errors)}"
                    )
            except Exception as e:
                logger.error(
                    f"Seeder: unexpected error assigning role '{role_name}' to user '{user.user_name}': {e}",
                    exc_info=True
                )
                raise
