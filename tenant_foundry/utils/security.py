# tenant_foundry/utils/security.py
import logging
from typing import Optional
from base64 import urlsafe_b64decode

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Administrator passwords are hashed with Argon2id
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """One-way hash of a plain text password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain text password against a hash produced by ``hash_password``."""
    return pwd_context.verify(plain_password, password_hash)


def generate_fernet_key() -> str:
    """Generates a new Fernet key and returns it as a string."""
    key_bytes = Fernet.generate_key()
    return key_bytes.decode('utf-8')


class FernetEncryptor:
    """Handles encryption and decryption using Fernet symmetric encryption."""

    def __init__(self, encryption_key: Optional[str]):
        """
        Initialize the encryptor with a Fernet-compatible key.

        Args:
            encryption_key: Base64-encoded Fernet key string, or None
        """
        self.fernet_instance: Optional[Fernet] = None
        self.key_valid = False
        if not encryption_key:
            logger.warning(
                "TENANT_FOUNDRY_CONNECTION_STRING_ENCRYPTION_KEY is not set. "
                "Tenant connection strings will be stored without encryption."
            )
            return
        try:
            key_bytes = encryption_key.encode('utf-8')

            # Fernet keys decode to exactly 32 bytes
            decoded_key_bytes = urlsafe_b64decode(key_bytes)
            if len(decoded_key_bytes) != 32:
                logger.error(
                    f"Invalid encryption key length after base64 decoding. "
                    f"Expected 32 bytes, got {len(decoded_key_bytes)}."
                )
                return
            self.fernet_instance = Fernet(key_bytes)
            self.key_valid = True
            logger.info("FernetEncryptor initialized successfully with a valid key.")
        except (ValueError, TypeError) as e:
            logger.error(
                f"Failed to initialize FernetEncryptor with provided key. Error: {e}",
                exc_info=True
            )

    def encrypt(self, data: str) -> Optional[str]:
        """
        Encrypt a string using Fernet encryption.

        Returns:
            Encrypted data as a string, or None if no valid key is configured
        """
        if not self.fernet_instance or not self.key_valid:
            logger.error("Cannot encrypt: Fernet instance not available or key is invalid.")
            return None
        return self.fernet_instance.encrypt(data.encode('utf-8')).decode('utf-8')

    def decrypt(self, encrypted_data: str) -> Optional[str]:
        """
        Decrypt a Fernet-encrypted string.

        Returns:
            Decrypted plain text string, or None if decryption fails
        """
        if not self.fernet_instance or not self.key_valid:
            logger.error("Cannot decrypt: Fernet instance not available or key is invalid.")
            return None
        try:
            return self.fernet_instance.decrypt(encrypted_data.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            logger.error(
                "Decryption failed: Invalid token. "
                "This may be due to an incorrect key or corrupted data."
            )
            return None
