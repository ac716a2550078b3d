# tenant_foundry/__init__.py
"""
Tenant Foundry: lifecycle management for the tenants of a multi-tenant platform.

Registers tenants, provisions and seeds their databases, and manages
activation and subscription validity.
"""

__version__ = "0.1.0"
