"""Pseudonym minting.

Pseudonyms come from a CSPRNG and are never derived from PII, so nothing in
the clinical or audit store can be traced back to a person by inspection.
"""

from typing import Callable, Optional
import logging
import secrets

from privacy_vault.config import settings as default_settings
from privacy_vault.exceptions import ValidationError

logger = logging.getLogger(__name__)


class PseudonymService:
    """Generates unique opaque pseudonyms, retrying on collision."""

    def __init__(
        self,
        prefix: Optional[str] = None,
        max_attempts: Optional[int] = None,
        token_factory: Optional[Callable[[], str]] = None,
    ):
        self.prefix = default_settings.PSEUDONYM_PREFIX if prefix is None else prefix
        self.max_attempts = max_attempts or default_settings.PSEUDONYM_MAX_ATTEMPTS
        self.token_factory = token_factory or self._random_token

    @staticmethod
    def _random_token() -> str:
        return secrets.token_hex(4).upper()

    def generate(self) -> str:
        """Generate a candidate pseudonym (not checked for uniqueness)."""
        return f"{self.prefix}{self.token_factory()}"

    def mint(self, exists: Callable[[str], bool]) -> str:
        """
        Mint a pseudonym that ``exists`` reports as unused.

        Args:
            exists: Returns True if the candidate is already in use in any store

        Returns:
            A fresh pseudonym

        Raises:
            ValidationError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate()
            if not exists(candidate):
                return candidate
            logger.warning(f"Pseudonym collision on attempt {attempt}/{self.max_attempts}")

        raise ValidationError(
            f"Could not mint a unique pseudonym after {self.max_attempts} attempts"
        )
