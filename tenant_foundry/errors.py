# tenant_foundry/errors.py


class TenantError(Exception):
    """Base class for tenant lifecycle errors.

    Carries a user facing ``detail`` message, already formatted by the
    message localizer, plus the tenant id the error refers to.
    """

    def __init__(self, detail: str, tenant_id: str | None = None):
        self.detail = detail
        self.tenant_id = tenant_id
        super().__init__(detail)


class TenantNotFoundError(TenantError):
    """Raised when no tenant record matches the requested id."""


class TenantConflictError(TenantError):
    """Raised when a tenant with the same id is already registered."""


class TenantInvalidStateError(TenantError):
    """
    Raised when a state transition is requested that the tenant cannot take,
    e.g. activating a tenant that is already active.
    """


class TenantProvisioningError(TenantError):
    """
    The tenant database could not be created or migrated.

    The tenant registration is compensated (removed) before this error
    reaches the caller of ``TenantLifecycleService.create``.
    """


class TenantSeedingError(TenantProvisioningError):
    """A role or user store failure while seeding a freshly provisioned tenant database."""


class TenantStorageError(TenantError):
    """A registry row exists but cannot be read, e.g. its connection string does not decrypt."""
