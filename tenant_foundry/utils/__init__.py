# tenant_foundry/utils/__init__.py

"""
Utility module initialization file.

Exposes the encryption and password hashing helpers.
"""

from .security import FernetEncryptor, generate_fernet_key, hash_password, verify_password

__all__ = ["FernetEncryptor", "generate_fernet_key", "hash_password", "verify_password"]
