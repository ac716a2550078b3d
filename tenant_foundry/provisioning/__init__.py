# tenant_foundry/provisioning/__init__.py
"""
Tenant database provisioning.

Creates and migrates the database of a new tenant, then seeds it with the
baseline roles and the default administrator account.
"""

from .models import ApplicationRole, ApplicationRoleClaim, ApplicationUser, IdentityResult, SeedSettings
from .storage_interfaces import (
    AbstractCustomSeeder,
    AbstractDatabaseInitializer,
    AbstractRoleManager,
    AbstractUserManager,
)
from .seeder import CustomSeederRunner, TenantDbSeeder
from .sqlite_identity_store import SQLiteRoleManager, SQLiteUserManager
from .initializer import SQLiteDatabaseInitializer

__all__ = [
    # Data models
    "ApplicationRole",
    "ApplicationRoleClaim",
    "ApplicationUser",
    "IdentityResult",
    "SeedSettings",
    # Capability interfaces
    "AbstractCustomSeeder",
    "AbstractDatabaseInitializer",
    "AbstractRoleManager",
    "AbstractUserManager",
    # Seeding pipeline
    "CustomSeederRunner",
    "TenantDbSeeder",
    # SQLite implementations
    "SQLiteRoleManager",
    "SQLiteUserManager",
    "SQLiteDatabaseInitializer",
]
