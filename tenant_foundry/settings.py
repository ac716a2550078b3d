# tenant_foundry/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
import logging
from pathlib import Path

# Configure logging for settings module
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(name)s - [%(levelname)s] - %(message)s'
    )

# This settings.py file is at <project>/tenant_foundry/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.debug(f"settings: .env file found at {DOTENV_PATH}")
else:
    logger.debug(
        f"settings: .env file not found at {DOTENV_PATH}. "
        "Relying on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    debug_mode: bool = False

    # Tenant registry (shared, one row per tenant)
    registry_db_path: str = "./tenant_foundry_registry.sqlite3"

    # Connection string of the shared application database. Tenants created with
    # this exact value (or none at all) are stored with an empty connection string.
    default_connection_string: str = "Data Source=./tenant_foundry_shared.sqlite3"
    tenant_databases_dir: str = "./tenant_databases"

    root_tenant_id: str = "root"
    default_subscription_days: Optional[int] = Field(
        default=30,
        description="Initial subscription window for new tenants. None leaves valid_until empty."
    )

    connection_string_encryption_key: Optional[str] = Field(
        default=None,
        description="Fernet key used to encrypt tenant connection strings at rest in the registry."
    )

    # Seed data for every freshly provisioned tenant database
    default_roles: List[str] = Field(
        default_factory=lambda: ["SuperAdmin", "Admin", "Basic"],
        description="Baseline roles. The first entry is the reserved super admin role."
    )
    default_admin_user_name: str = "admin"
    default_admin_first_name: str = "Tenant"
    default_admin_last_name: str = "Administrator"
    default_admin_password: str = Field(
        default="Admin@12345",
        description="Initial password of the seeded administrator account."
    )

    model_config = SettingsConfigDict(
        env_prefix="TENANT_FOUNDRY_",
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )


settings = Settings()

logger.debug(
    f"settings: registry_db_path='{settings.registry_db_path}', "
    f"tenant_databases_dir='{settings.tenant_databases_dir}', "
    f"connection_string_encryption_key={'********' if settings.connection_string_encryption_key else 'None'}, "
    f"default_admin_password={'********' if settings.default_admin_password else 'None'}"
)
