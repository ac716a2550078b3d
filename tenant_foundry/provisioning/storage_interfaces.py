# tenant_foundry/provisioning/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import ApplicationRole, ApplicationRoleClaim, ApplicationUser, IdentityResult
from ..tenants.models import TenantRecord


class AbstractRoleManager(ABC):
    """Role store of a single tenant database."""

    @abstractmethod
    async def find_by_name(self, role_name: str) -> Optional[ApplicationRole]:
        """Case-insensitive lookup by role name."""
        pass

    @abstractmethod
    async def create(self, role: ApplicationRole) -> ApplicationRole:
        """Persist a new role and return it with its id assigned."""
        pass

    @abstractmethod
    async def get_claims(self, role: ApplicationRole) -> List[ApplicationRoleClaim]:
        """Return every claim attached to the role."""
        pass

    @abstractmethod
    async def add_claim(self, claim: ApplicationRoleClaim) -> None:
        """Attach a claim to a role."""
        pass


class AbstractUserManager(ABC):
    """User store of a single tenant database."""

    @abstractmethod
    async def find_by_name(self, user_name: str) -> Optional[ApplicationUser]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[ApplicationUser]:
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[ApplicationUser]:
        pass

    @abstractmethod
    async def create(self, user: ApplicationUser, password_hash: str) -> ApplicationUser:
        """Persist a new user with an already hashed password. Returns the user with its id."""
        pass

    @abstractmethod
    async def is_in_role(self, user: ApplicationUser, role_name: str) -> bool:
        pass

    @abstractmethod
    async def add_to_role(self, user: ApplicationUser, role_name: str) -> IdentityResult:
        """
        Assign a role to a user.

        Expected failures (unknown role, existing membership) are reported
        through the result, not raised.
        """
        pass


class AbstractCustomSeeder(ABC):
    """An extra seeding step run after roles and the administrator are in place."""

    @abstractmethod
    async def initialize(self, tenant: TenantRecord) -> None:
        pass


class AbstractDatabaseInitializer(ABC):
    """
    Creates, migrates and seeds the database of a freshly registered tenant.

    ``TenantLifecycleService`` only depends on this interface, so provisioning
    can be handed to a background worker by swapping the implementation.
    """

    @abstractmethod
    async def initialize_tenant_database(self, tenant: TenantRecord) -> None:
        """
        Raises:
            TenantProvisioningError: If the database cannot be created or migrated
            TenantSeedingError: If seeding the database fails
        """
        pass
