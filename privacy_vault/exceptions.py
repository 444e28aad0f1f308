"""Errors raised by the storage gateway."""

from typing import Any, List, Optional


class VaultError(Exception):
    """Base class for all privacy vault errors."""


class ValidationError(VaultError):
    """Malformed input, unknown action, or an id/pseudonym collision."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(VaultError):
    """A lookup that requires a match found nothing."""


class StorageError(VaultError):
    """A store-level I/O failure. The original exception is kept as ``cause``."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class IntegrityWarning(UserWarning):
    """Non-fatal data-integrity anomaly (duplicate pseudonym, orphan record)."""
