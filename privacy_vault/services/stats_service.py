"""Statistics service for store-level counts."""

from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from privacy_vault.config import REGIONS
from privacy_vault.models.clinical import MedicalRecord
from privacy_vault.models.identity import PatientIdentity
from privacy_vault.schemas.stats import IdentityStats, RegionCounts, Statistics, StoreTotal
from privacy_vault.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class StatsService:
    """Service for calculating counts across the three stores. Nothing is cached."""

    def __init__(self, identity_db: Session, clinical_db: Session, audit_db: Session):
        self.identity_db = identity_db
        self.clinical_db = clinical_db
        self.audit_db = audit_db

    def get_region_counts(self) -> dict:
        """Identity records per region; every known region is present, even at zero."""
        counts = {region: 0 for region in REGIONS}
        rows = (
            self.identity_db.query(PatientIdentity.region, func.count(PatientIdentity.id))
            .group_by(PatientIdentity.region)
            .all()
        )
        for region, count in rows:
            counts[region] = count
        return counts

    def get_all_stats(self) -> Statistics:
        """Get all store statistics."""
        identity_total = self.identity_db.query(PatientIdentity).count()
        clinical_total = self.clinical_db.query(MedicalRecord).count()
        audit_total = AuditService(self.audit_db).count()

        return Statistics(
            identity=IdentityStats(
                total=identity_total,
                by_region=RegionCounts(**self.get_region_counts()),
            ),
            clinical=StoreTotal(total=clinical_total),
            audit=StoreTotal(total=audit_total),
        )
