# tenant_foundry/tenants/__init__.py
"""
Tenant registry module initialization.

Data models, the registry storage abstraction and its SQLite implementation,
and the connection string guard. The lifecycle service lives in
``tenant_foundry.tenants.service``; it depends on the provisioning package,
which itself depends on these models, so it is not re-exported here.
"""

from .models import TenantRecord, TenantDto, CreateTenantRequest
from .storage_interfaces import AbstractTenantStore
from .sqlite_tenant_store import SQLiteTenantStore, get_sqlite_tenant_store
from .connection_string import make_secure

__all__ = [
    # Data models for tenant operations
    "TenantRecord",
    "TenantDto",
    "CreateTenantRequest",
    # Storage layer abstractions and implementations
    "AbstractTenantStore",
    "SQLiteTenantStore",
    "get_sqlite_tenant_store",
    # Display safe connection strings
    "make_secure",
]
