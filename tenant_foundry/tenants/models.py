# tenant_foundry/tenants/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TenantBase(BaseModel):
    """Fields shared by every representation of a tenant."""
    id: str = Field(description="Unique, immutable tenant identifier. Also the isolation key.")
    name: str = Field(description="Human readable label.")
    connection_string: str = Field(
        default="",
        description="Tenant specific data store locator. Empty means the shared default database."
    )
    admin_email: str
    issuer: Optional[str] = Field(
        default=None,
        description="Optional external identity provider hint."
    )


class CreateTenantRequest(BaseModel):
    """Input for tenant creation."""
    id: str
    name: str
    connection_string: Optional[str] = None
    admin_email: str
    issuer: Optional[str] = None

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class TenantRecord(TenantBase):
    """A tenant as stored in the registry."""
    is_active: bool = False
    valid_until: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(from_attributes=True)

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False

    def set_validity(self, valid_until: datetime) -> None:
        self.valid_until = valid_until


class TenantDto(TenantRecord):
    """Tenant data handed to callers. The connection string is display safe."""
    pass
