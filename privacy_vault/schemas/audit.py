"""Audit entry schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from privacy_vault.config import AUDIT_ACTIONS
from privacy_vault.schemas.base import VaultModel
from privacy_vault.utils.timezone import to_naive_utc


class AccessContext(VaultModel):
    """Who is calling, from where, and why. Supplied to gateway operations that should be audited."""

    user_id: str = Field(..., min_length=1, max_length=100)
    user_role: str = Field(..., min_length=1, max_length=50)
    ip_address: str = Field("127.0.0.1", min_length=1, max_length=50)
    user_agent: str = Field("privacy-vault", min_length=1, max_length=500)
    purpose: str = Field(..., min_length=1, max_length=200)


class AuditEntryCreate(VaultModel):
    """
    A new audit entry.

    Who (user_id, user_role), what (action, resource_type, resource_id),
    when (timestamp), where (ip_address, user_agent), why (purpose) and
    outcome (success) are all mandatory; timestamp defaults to now.
    """

    id: Optional[str] = Field(None, min_length=1, max_length=64)
    timestamp: Optional[datetime] = None

    action: str
    resource_type: str = Field(..., min_length=1, max_length=50)
    resource_id: str = Field(..., min_length=1, max_length=64)
    pseudonym: str = Field(..., min_length=1, max_length=64)

    user_id: str = Field(..., min_length=1, max_length=100)
    user_role: str = Field(..., min_length=1, max_length=50)
    ip_address: str = Field(..., min_length=1, max_length=50)
    user_agent: str = Field(..., min_length=1, max_length=500)
    purpose: str = Field(..., min_length=1, max_length=200)

    contains_phi: bool = Field(False, alias="containsPHI")
    contains_pii: bool = Field(False, alias="containsPII")
    region: Optional[str] = Field(None, max_length=10)

    success: bool
    error_message: Optional[str] = None
    duration: int = Field(0, ge=0)  # milliseconds

    @field_validator("action")
    @classmethod
    def validate_action(cls, v):
        if v not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {v}")
        return v


class AuditEntry(VaultModel):
    """Audit entry read model."""

    id: str
    timestamp: datetime
    action: str
    resource_type: str
    resource_id: str
    pseudonym: str
    user_id: str
    user_role: str
    ip_address: str
    user_agent: str
    purpose: str
    contains_phi: bool = Field(..., alias="containsPHI")
    contains_pii: bool = Field(..., alias="containsPII")
    region: Optional[str] = None
    success: bool
    error_message: Optional[str] = None
    duration: int


class AuditFilter(VaultModel):
    """Audit query filter. Every criterion is optional; an empty filter matches everything."""

    action: Optional[str] = None
    resource_id: Optional[str] = None
    pseudonym: Optional[str] = None
    user_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_date_range(self):
        if self.start_date and self.end_date and to_naive_utc(self.start_date) > to_naive_utc(self.end_date):
            raise ValueError("start_date must not be after end_date")
        return self
