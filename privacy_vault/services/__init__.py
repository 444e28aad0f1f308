"""Services used by the storage gateway."""

from privacy_vault.services.audit_service import AuditService
from privacy_vault.services.encryption_service import EncryptionService
from privacy_vault.services.pseudonym_service import PseudonymService
from privacy_vault.services.seed_service import SeedService
from privacy_vault.services.stats_service import StatsService

__all__ = [
    "AuditService",
    "EncryptionService",
    "PseudonymService",
    "SeedService",
    "StatsService",
]
