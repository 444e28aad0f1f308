"""Patient identity model (PII). Lives in the identity store only."""

from sqlalchemy import Column, String, Date, DateTime, Boolean, Text, Index, CheckConstraint
from privacy_vault.database import IdentityBase


class PatientIdentity(IdentityBase):
    """Personally identifying data for a patient, linked to clinical data by pseudonym only."""

    __tablename__ = "patients"

    id = Column(String(64), primary_key=True)
    pseudonym = Column(String(64), nullable=False)

    # Name and contact
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)

    # Postal address
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False)
    region = Column(String(2), nullable=False)

    date_of_birth = Column(Date, nullable=False)

    # Jurisdiction identifiers (Fernet tokens when encryption is enabled)
    ssn = Column(Text, nullable=True)
    national_id = Column(Text, nullable=True)

    # Consent
    consent_given = Column(Boolean, nullable=False, default=False)
    consent_date = Column(DateTime, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_pseudonym", "pseudonym", unique=True),
        Index("idx_email", "email"),
        Index("idx_region", "region"),
        CheckConstraint("region IN ('US', 'EU')", name="ck_patients_region"),
    )

    def __repr__(self):
        return f"<PatientIdentity {self.id} ({self.pseudonym})>"
