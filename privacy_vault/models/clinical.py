"""Medical record model (PHI). Lives in the clinical store only.

There is no column that could hold a name, contact detail,
postal address or national identifier, and no identity id.
"""

from sqlalchemy import Column, String, Date, DateTime, Integer, Float, Text, Index
from privacy_vault.database import ClinicalBase


class MedicalRecord(ClinicalBase):
    """Clinical data for a patient, keyed by pseudonym."""

    __tablename__ = "medical_records"

    id = Column(String(64), primary_key=True)
    pseudonym = Column(String(64), nullable=False)

    blood_type = Column(String(5), nullable=False)

    # JSON arrays of strings
    allergies = Column(Text, nullable=False, default="[]")
    medications = Column(Text, nullable=False, default="[]")
    diagnoses = Column(Text, nullable=False, default="[]")

    last_visit_date = Column(Date, nullable=False)
    next_appointment_date = Column(Date, nullable=True)

    primary_physician = Column(String(200), nullable=False)
    insurance_provider = Column(String(200), nullable=False)
    policy_number = Column(String(100), nullable=False)
    medical_history = Column(Text, nullable=False)

    # Vital signs bundle, flattened
    vital_signs_blood_pressure = Column(String(20), nullable=False)
    vital_signs_heart_rate = Column(Integer, nullable=False)
    vital_signs_temperature = Column(Float, nullable=False)
    vital_signs_weight = Column(Integer, nullable=False)
    vital_signs_height = Column(Integer, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_clinical_pseudonym", "pseudonym"),
        Index("idx_last_visit", "last_visit_date"),
    )

    def __repr__(self):
        return f"<MedicalRecord {self.id} ({self.pseudonym})>"
