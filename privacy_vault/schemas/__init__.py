"""Pydantic record shapes for input validation and read models."""

from privacy_vault.schemas.identity import Identity, IdentityCreate, IdentityUpdate
from privacy_vault.schemas.clinical import Clinical, ClinicalCreate, ClinicalUpdate, VitalSigns
from privacy_vault.schemas.audit import AccessContext, AuditEntry, AuditEntryCreate, AuditFilter
from privacy_vault.schemas.patient import CompositeRecord
from privacy_vault.schemas.compliance import (
    AuditTrailItem,
    OrphanReport,
    ProcessingActivities,
    SubjectAccessExport,
)
from privacy_vault.schemas.stats import Statistics

__all__ = [
    "Identity",
    "IdentityCreate",
    "IdentityUpdate",
    "Clinical",
    "ClinicalCreate",
    "ClinicalUpdate",
    "VitalSigns",
    "AccessContext",
    "AuditEntry",
    "AuditEntryCreate",
    "AuditFilter",
    "CompositeRecord",
    "AuditTrailItem",
    "OrphanReport",
    "ProcessingActivities",
    "SubjectAccessExport",
    "Statistics",
]
