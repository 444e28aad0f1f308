"""Database models for the three stores."""

from privacy_vault.models.identity import PatientIdentity
from privacy_vault.models.clinical import MedicalRecord
from privacy_vault.models.audit_log import AuditLog, AuditLogImmutableError

__all__ = [
    "PatientIdentity",
    "MedicalRecord",
    "AuditLog",
    "AuditLogImmutableError",
]
