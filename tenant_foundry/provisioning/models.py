# tenant_foundry/provisioning/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Tuple
from datetime import datetime

from ..settings import settings
from ..tenants.models import utc_now

PERMISSION_CLAIM_TYPE = "permission"


class ApplicationRole(BaseModel):
    """A role inside one tenant database."""
    id: Optional[str] = None
    name: str
    description: Optional[str] = None

    @property
    def normalized_name(self) -> str:
        return self.name.upper()


class ApplicationRoleClaim(BaseModel):
    """A claim (typically a permission) attached to a role."""
    role_id: str
    claim_type: str = PERMISSION_CLAIM_TYPE
    claim_value: str
    created_by: Optional[str] = None


class ApplicationUser(BaseModel):
    """A user account inside one tenant database. ``id`` is assigned on creation."""
    id: Optional[str] = None
    user_name: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password_hash: Optional[str] = None
    email_confirmed: bool = False
    phone_number_confirmed: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def normalized_user_name(self) -> str:
        return self.user_name.upper()

    @property
    def normalized_email(self) -> Optional[str]:
        return self.email.upper() if self.email else None


class IdentityResult(BaseModel):
    """Outcome of an identity store mutation that can fail without raising."""
    succeeded: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))


class SeedSettings(BaseModel):
    """
    Seed data applied to every new tenant database.

    The first role is the reserved super admin role; it is created but never
    assigned to the seeded administrator.
    """
    default_roles: Tuple[str, ...] = ("SuperAdmin", "Admin", "Basic")
    admin_user_name: str = "admin"
    admin_first_name: str = "Tenant"
    admin_last_name: str = "Administrator"
    admin_password: str = "Admin@12345"

    model_config = ConfigDict(frozen=True)

    @property
    def super_admin_role(self) -> str:
        return self.default_roles[0]

    @property
    def assignable_roles(self) -> Tuple[str, ...]:
        return tuple(role for role in self.default_roles if role != self.super_admin_role)

    @classmethod
    def from_settings(cls) -> "SeedSettings":
        return cls(
            default_roles=tuple(settings.default_roles),
            admin_user_name=settings.default_admin_user_name,
            admin_first_name=settings.default_admin_first_name,
            admin_last_name=settings.default_admin_last_name,
            admin_password=settings.default_admin_password,
        )
