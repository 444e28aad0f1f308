"""Clinical (PHI) schemas.

None of these shapes has a field for a name, contact detail, postal address,
national identifier or identity id, and unknown fields are rejected.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from privacy_vault.schemas.base import VaultModel

BLOOD_TYPES = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


def _check_blood_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in BLOOD_TYPES:
        raise ValueError(f"Invalid blood type: {value}")
    return value


class VitalSigns(VaultModel):
    """Vital-sign bundle."""

    blood_pressure: str = Field(..., pattern=r"^\d{2,3}/\d{2,3}$")
    heart_rate: int = Field(..., gt=0, lt=300)
    temperature: float = Field(..., gt=0)
    weight: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ClinicalCreate(VaultModel):
    """Input for a new clinical record. The pseudonym comes from the paired identity."""

    id: Optional[str] = Field(None, min_length=1, max_length=64)
    pseudonym: Optional[str] = Field(None, min_length=1, max_length=64)

    blood_type: str
    allergies: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    diagnoses: List[str] = Field(default_factory=list)

    last_visit_date: date
    next_appointment_date: Optional[date] = None

    primary_physician: str = Field(..., min_length=1, max_length=200)
    insurance_provider: str = Field(..., min_length=1, max_length=200)
    policy_number: str = Field(..., min_length=1, max_length=100)
    medical_history: str = ""

    vital_signs: VitalSigns

    @field_validator("blood_type")
    @classmethod
    def validate_blood_type(cls, v):
        return _check_blood_type(v)


class ClinicalUpdate(VaultModel):
    """Partial update of a clinical record."""

    blood_type: Optional[str] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    diagnoses: Optional[List[str]] = None
    last_visit_date: Optional[date] = None
    next_appointment_date: Optional[date] = None
    primary_physician: Optional[str] = Field(None, min_length=1, max_length=200)
    insurance_provider: Optional[str] = Field(None, min_length=1, max_length=200)
    policy_number: Optional[str] = Field(None, min_length=1, max_length=100)
    medical_history: Optional[str] = None
    vital_signs: Optional[VitalSigns] = None

    @field_validator("blood_type")
    @classmethod
    def validate_blood_type(cls, v):
        return _check_blood_type(v)

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name != "next_appointment_date":
                raise ValueError(f"{name} cannot be cleared")
        return self


class Clinical(VaultModel):
    """Clinical read model."""

    id: str
    pseudonym: str
    blood_type: str
    allergies: List[str]
    medications: List[str]
    diagnoses: List[str]
    last_visit_date: date
    next_appointment_date: Optional[date] = None
    primary_physician: str
    insurance_provider: str
    policy_number: str
    medical_history: str
    vital_signs: VitalSigns
    created_at: datetime
    updated_at: datetime
