"""Identity (PII) schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from privacy_vault.schemas.base import VaultModel
from privacy_vault.utils.timezone import utc_today

Region = Literal["US", "EU"]

# Fields an update may clear by setting them to None
NULLABLE_IDENTITY_FIELDS = {"ssn", "national_id"}


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and "@" not in value:
        raise ValueError("Invalid email address")
    return value


def _check_date_of_birth(value: Optional[date]) -> Optional[date]:
    if value is not None and value > utc_today():
        raise ValueError("Date of birth cannot be in the future")
    return value


class IdentityCreate(VaultModel):
    """Input for a new identity record. ``id`` and ``pseudonym`` are assigned when omitted."""

    id: Optional[str] = Field(None, min_length=1, max_length=64)
    pseudonym: Optional[str] = Field(None, min_length=1, max_length=64)

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)

    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    region: Region

    date_of_birth: date
    ssn: Optional[str] = None
    national_id: Optional[str] = None

    consent_given: bool = False
    consent_date: Optional[datetime] = None  # defaults to creation time

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        return _check_date_of_birth(v)


class IdentityUpdate(VaultModel):
    """Rectification of PII fields. ``id``, ``pseudonym`` and consent are not updatable here."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)

    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    region: Optional[Region] = None

    date_of_birth: Optional[date] = None
    ssn: Optional[str] = None
    national_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        return _check_date_of_birth(v)

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in NULLABLE_IDENTITY_FIELDS:
                raise ValueError(f"{name} cannot be cleared")
        return self


class Identity(VaultModel):
    """Identity read model."""

    id: str
    pseudonym: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    region: str
    date_of_birth: date
    ssn: Optional[str] = None
    national_id: Optional[str] = None
    consent_given: bool
    consent_date: datetime
    created_at: datetime
    updated_at: datetime
