"""Audit logging service. Append and read only; there is no update or delete path."""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
import logging
import uuid

from privacy_vault.models.audit_log import AuditLog
from privacy_vault.schemas.audit import AuditEntry, AuditEntryCreate, AuditFilter
from privacy_vault.utils.timezone import to_naive_utc, utc_now

logger = logging.getLogger(__name__)


class AuditService:
    """Service for writing and querying the append-only audit store."""

    def __init__(self, db: Session):
        self.db = db

    def log_action(self, entry: AuditEntryCreate) -> AuditEntry:
        """Append one audit entry and commit it."""
        audit_log = AuditLog(
            id=entry.id or str(uuid.uuid4()),
            timestamp=to_naive_utc(entry.timestamp) if entry.timestamp else utc_now(),
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            pseudonym=entry.pseudonym,
            user_id=entry.user_id,
            user_role=entry.user_role,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            purpose=entry.purpose,
            contains_phi=entry.contains_phi,
            contains_pii=entry.contains_pii,
            region=entry.region,
            success=entry.success,
            error_message=entry.error_message,
            duration=entry.duration,
        )

        self.db.add(audit_log)
        self.db.commit()

        logger.info(
            f"Audit log: {entry.user_id} {entry.action} {entry.resource_type}/{entry.resource_id} - "
            f"{'SUCCESS' if entry.success else 'FAILURE'}"
        )

        return self.to_entry(audit_log)

    def query(self, criteria: AuditFilter) -> List[AuditEntry]:
        """Entries matching every given criterion, newest first."""
        query = self.db.query(AuditLog)

        if criteria.action:
            query = query.filter(AuditLog.action == criteria.action)
        if criteria.resource_id:
            query = query.filter(AuditLog.resource_id == criteria.resource_id)
        if criteria.pseudonym:
            query = query.filter(AuditLog.pseudonym == criteria.pseudonym)
        if criteria.user_id:
            query = query.filter(AuditLog.user_id == criteria.user_id)
        if criteria.start_date:
            query = query.filter(AuditLog.timestamp >= to_naive_utc(criteria.start_date))
        if criteria.end_date:
            query = query.filter(AuditLog.timestamp <= to_naive_utc(criteria.end_date))

        query = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())

        if criteria.limit:
            query = query.limit(criteria.limit)

        return [self.to_entry(row) for row in query.all()]

    def get_subject_trail(self, resource_id: str, limit: Optional[int] = None) -> List[AuditEntry]:
        """Most recent entries about one subject."""
        return self.query(AuditFilter(resource_id=resource_id, limit=limit))

    def count(self, since: Optional[datetime] = None) -> int:
        """Count entries, optionally only those at or after ``since``."""
        query = self.db.query(AuditLog)
        if since:
            query = query.filter(AuditLog.timestamp >= to_naive_utc(since))
        return query.count()

    def pseudonym_exists(self, pseudonym: str) -> bool:
        """Whether any entry references this pseudonym."""
        return self.db.query(AuditLog.id).filter(AuditLog.pseudonym == pseudonym).first() is not None

    @staticmethod
    def to_entry(row: AuditLog) -> AuditEntry:
        return AuditEntry(
            id=row.id,
            timestamp=row.timestamp,
            action=row.action,
            resource_type=row.resource_type,
            resource_id=row.resource_id,
            pseudonym=row.pseudonym,
            user_id=row.user_id,
            user_role=row.user_role,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            purpose=row.purpose,
            contains_phi=bool(row.contains_phi),
            contains_pii=bool(row.contains_pii),
            region=row.region,
            success=bool(row.success),
            error_message=row.error_message,
            duration=row.duration,
        )
