"""Data-subject request and integrity report schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from privacy_vault.schemas.base import VaultModel
from privacy_vault.schemas.clinical import Clinical
from privacy_vault.schemas.identity import Identity


class ProcessingActivities(VaultModel):
    """Consent state and account lifecycle disclosed to the data subject."""
    consent_given: bool
    consent_date: datetime
    account_created: datetime
    last_updated: datetime


class AuditTrailItem(VaultModel):
    """Condensed audit entry for a subject access export."""
    timestamp: datetime
    action: str
    purpose: str


class SubjectAccessExport(VaultModel):
    """Everything held about one data subject, in machine-readable form."""
    subject_id: str
    pseudonym: str
    exported_at: datetime
    personal_information: Identity
    medical_information: Optional[Clinical] = None
    processing_activities: ProcessingActivities
    audit_trail: List[AuditTrailItem] = Field(default_factory=list)


class OrphanReport(VaultModel):
    """Cross-store consistency diagnostics. Findings are informational, not corruption."""
    identities_without_clinical: List[str] = Field(default_factory=list)  # identity ids
    clinical_without_identity: List[str] = Field(default_factory=list)  # pseudonyms
    duplicate_pseudonyms: List[str] = Field(default_factory=list)  # pseudonyms with >1 clinical row

    @property
    def is_clean(self) -> bool:
        return not (
            self.identities_without_clinical
            or self.clinical_without_identity
            or self.duplicate_pseudonyms
        )
