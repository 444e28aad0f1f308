"""Identifier encryption service using Fernet symmetric encryption."""

from cryptography.fernet import Fernet
import base64
import hashlib
import logging

from privacy_vault.config import settings as default_settings, ENCRYPTED_FIELDS

logger = logging.getLogger(__name__)


class EncryptionService:
    """Service for encrypting and decrypting jurisdiction identifiers (ssn, national_id)."""

    def __init__(self, settings=None):
        self.settings = settings or default_settings
        self._key = None
        self._fernet = None

    @property
    def fernet(self):
        """Lazy load encryption key and create Fernet instance."""
        if self._fernet is None:
            self._key = self._get_encryption_key()
            self._fernet = Fernet(self._key)
        return self._fernet

    def _get_encryption_key(self) -> bytes:
        """Get encryption key from environment, or derive one for development."""
        # Priority 1: Direct environment variable (PII_ENCRYPTION_KEY)
        if self.settings.PII_ENCRYPTION_KEY:
            logger.info("Using PII encryption key from environment variable")
            return self.settings.PII_ENCRYPTION_KEY.encode()

        # Priority 2: Development mode - derive from SECRET_KEY
        if self.settings.ENVIRONMENT == "development":
            logger.warning("Using development encryption key - not for production!")
            key_material = hashlib.sha256(self.settings.SECRET_KEY.encode()).digest()
            return base64.urlsafe_b64encode(key_material)

        raise ValueError(
            "No PII encryption key configured. Set the PII_ENCRYPTION_KEY environment variable."
        )

    def encrypt_identifier_fields(self, data: dict) -> dict:
        """Encrypt identifier fields in a flat dictionary. None values are left alone."""
        encrypted_data = data.copy()

        for field in ENCRYPTED_FIELDS:
            value = encrypted_data.get(field)
            if isinstance(value, str) and value and not self._is_encrypted(value):
                encrypted_data[field] = self.encrypt_string(value)
                logger.debug(f"Encrypted {field}")

        return encrypted_data

    def decrypt_identifier_fields(self, data: dict) -> dict:
        """Decrypt identifier fields in a flat dictionary. Plaintext values pass through."""
        decrypted_data = data.copy()

        for field in ENCRYPTED_FIELDS:
            value = decrypted_data.get(field)
            if isinstance(value, str) and self._is_encrypted(value):
                decrypted_data[field] = self.decrypt_string(value)

        return decrypted_data

    def encrypt_string(self, plaintext: str) -> str:
        """Encrypt a string value."""
        try:
            encrypted_bytes = self.fernet.encrypt(plaintext.encode())
            return encrypted_bytes.decode()
        except Exception as e:
            logger.error(f"Encryption error: {e}")
            raise

    def decrypt_string(self, ciphertext: str) -> str:
        """Decrypt a string value."""
        try:
            decrypted_bytes = self.fernet.decrypt(ciphertext.encode())
            return decrypted_bytes.decode()
        except Exception as e:
            logger.error(f"Decryption error: {type(e).__name__}")
            raise

    def _is_encrypted(self, value: str) -> bool:
        """Check if a value appears to be encrypted (Fernet format)."""
        # Fernet tokens start with 'gAAAAA' and are typically 100+ characters
        return value.startswith("gAAAAA") and len(value) >= 100
