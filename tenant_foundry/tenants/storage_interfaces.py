# tenant_foundry/tenants/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import Optional, List
from .models import TenantRecord


class AbstractTenantStore(ABC):
    """
    Abstract base class defining the interface for the tenant registry.

    Implementations must guarantee id uniqueness themselves: of two
    concurrent ``try_add`` calls for the same id exactly one returns True.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend and prepare it for operations."""
        pass

    @abstractmethod
    async def get_all(self) -> List[TenantRecord]:
        """Return every registered tenant."""
        pass

    @abstractmethod
    async def try_get(self, tenant_id: str) -> Optional[TenantRecord]:
        """
        Retrieve a tenant by id.

        Returns:
            The tenant if found, None otherwise
        """
        pass

    @abstractmethod
    async def try_add(self, tenant: TenantRecord) -> bool:
        """
        Register a new tenant.

        Returns:
            True if added, False if a tenant with the same id already exists
        """
        pass

    @abstractmethod
    async def try_update(self, tenant: TenantRecord) -> bool:
        """
        Persist the mutable fields of an existing tenant.

        Returns:
            True if a record was updated, False if the id is unknown
        """
        pass

    @abstractmethod
    async def try_remove(self, tenant_id: str) -> bool:
        """
        Remove a tenant by id.

        Returns:
            True if a record was removed, False if not found
        """
        pass
