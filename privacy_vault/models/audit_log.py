"""Audit log model. Lives in the audit store and is append-only.

Entries reference a pseudonym and a resource id by value only; there is no
foreign key or cascade, so they outlive the records they describe.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, Text, Index, DDL, event
from privacy_vault.database import AuditBase


class AuditLogImmutableError(Exception):
    """Raised when something tries to change or remove an audit entry."""


class AuditLog(AuditBase):
    """A single access or mutation event against the identity or clinical store."""

    __tablename__ = "audit_logs"

    id = Column(String(64), primary_key=True)
    timestamp = Column(DateTime, nullable=False)

    # What
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(64), nullable=False)
    pseudonym = Column(String(64), nullable=False)

    # Who
    user_id = Column(String(100), nullable=False)
    user_role = Column(String(50), nullable=False)

    # Where
    ip_address = Column(String(50), nullable=False)
    user_agent = Column(String(500), nullable=False)

    # Why
    purpose = Column(String(200), nullable=False)

    # Stored as 0/1
    contains_phi = Column(Boolean, nullable=False, default=False)
    contains_pii = Column(Boolean, nullable=False, default=False)

    region = Column(String(10), nullable=True)

    # Outcome
    success = Column(Boolean, nullable=False)
    error_message = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # milliseconds

    __table_args__ = (
        Index("idx_timestamp", "timestamp"),
        Index("idx_action", "action"),
        Index("idx_resource_id", "resource_id"),
        Index("idx_pseudonym_audit", "pseudonym"),
        Index("idx_user_id", "user_id"),
    )

    def __repr__(self):
        return f"<AuditLog {self.id} {self.action} {self.resource_type}/{self.resource_id}>"


@event.listens_for(AuditLog, "before_update")
def _reject_update(mapper, connection, target):
    raise AuditLogImmutableError(f"Audit entry {target.id} cannot be modified")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(mapper, connection, target):
    raise AuditLogImmutableError(f"Audit entry {target.id} cannot be deleted")


# Guard against writes that bypass the ORM
event.listen(
    AuditLog.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER IF NOT EXISTS audit_logs_no_update BEFORE UPDATE ON audit_logs "
        "BEGIN SELECT RAISE(ABORT, 'audit_logs is append-only'); END"
    ).execute_if(dialect="sqlite"),
)
event.listen(
    AuditLog.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER IF NOT EXISTS audit_logs_no_delete BEFORE DELETE ON audit_logs "
        "BEGIN SELECT RAISE(ABORT, 'audit_logs is append-only'); END"
    ).execute_if(dialect="sqlite"),
)
