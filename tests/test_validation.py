"""Tests for data validation in schemas."""

import pytest
from datetime import timedelta
from pydantic import ValidationError

from privacy_vault.schemas.audit import AccessContext, AuditEntryCreate, AuditFilter
from privacy_vault.schemas.clinical import ClinicalCreate, ClinicalUpdate, VitalSigns
from privacy_vault.schemas.identity import IdentityCreate, IdentityUpdate
from privacy_vault.utils.timezone import utc_today


class TestIdentityValidation:
    """Test suite for identity schemas."""

    def test_valid_identity(self, sample_identity):
        identity = IdentityCreate(**sample_identity)

        assert identity.first_name == "Jane"
        assert identity.region == "EU"
        assert identity.date_of_birth.isoformat() == "1980-05-15"
        assert identity.consent_date is None

    def test_camel_case_accepted(self, sample_identity):
        data = {
            "firstName" if k == "first_name" else k: v
            for k, v in sample_identity.items()
        }

        assert IdentityCreate(**data).first_name == "Jane"

    def test_region_closed_set(self, sample_identity):
        sample_identity["region"] = "APAC"

        with pytest.raises(ValidationError):
            IdentityCreate(**sample_identity)

    def test_invalid_email(self, sample_identity):
        sample_identity["email"] = "jane.doe.example.com"

        with pytest.raises(ValidationError):
            IdentityCreate(**sample_identity)

    def test_future_date_of_birth(self, sample_identity):
        sample_identity["date_of_birth"] = (utc_today() + timedelta(days=1)).isoformat()

        with pytest.raises(ValidationError):
            IdentityCreate(**sample_identity)

    def test_unknown_field_rejected(self, sample_identity):
        sample_identity["blood_type"] = "O+"

        with pytest.raises(ValidationError):
            IdentityCreate(**sample_identity)

    def test_empty_name_rejected(self, sample_identity):
        sample_identity["first_name"] = ""

        with pytest.raises(ValidationError):
            IdentityCreate(**sample_identity)

    def test_update_cannot_clear_required(self):
        with pytest.raises(ValidationError):
            IdentityUpdate(email=None)

    def test_update_can_clear_identifier(self):
        update = IdentityUpdate(ssn=None)

        assert update.model_dump(exclude_unset=True) == {"ssn": None}

    def test_update_rejects_pseudonym(self):
        with pytest.raises(ValidationError):
            IdentityUpdate(pseudonym="PSN-NEW")


class TestClinicalValidation:
    """Test suite for clinical schemas."""

    def test_valid_clinical(self, sample_clinical):
        clinical = ClinicalCreate(**sample_clinical)

        assert clinical.blood_type == "O+"
        assert clinical.vital_signs.heart_rate == 72

    def test_list_fields_default_empty(self, sample_clinical):
        del sample_clinical["allergies"]

        assert ClinicalCreate(**sample_clinical).allergies == []

    def test_invalid_blood_type(self, sample_clinical):
        sample_clinical["blood_type"] = "C+"

        with pytest.raises(ValidationError):
            ClinicalCreate(**sample_clinical)

    @pytest.mark.parametrize("field", [
        "first_name", "last_name", "email", "phone", "address", "ssn", "national_id", "identity_id",
    ])
    def test_pii_fields_rejected(self, sample_clinical, field):
        """The clinical shape has no place for identifying data."""
        sample_clinical[field] = "value"

        with pytest.raises(ValidationError):
            ClinicalCreate(**sample_clinical)

    def test_invalid_blood_pressure(self):
        with pytest.raises(ValidationError):
            VitalSigns(blood_pressure="high", heart_rate=70, temperature=98.6, weight=150, height=170)

    def test_update_rejects_pii(self):
        with pytest.raises(ValidationError):
            ClinicalUpdate(email="jane.doe@example.com")

    def test_update_can_clear_next_appointment(self):
        assert ClinicalUpdate(next_appointment_date=None).model_dump(exclude_unset=True) == {
            "next_appointment_date": None
        }


class TestAuditValidation:
    """Test suite for audit schemas."""

    def test_valid_entry(self, audit_entry):
        entry = AuditEntryCreate(**audit_entry)

        assert entry.action == "ACCESS_IDENTITY"
        assert entry.timestamp is None
        assert entry.duration == 120

    def test_action_vocabulary(self, audit_entry):
        audit_entry["action"] = "access_identity"

        with pytest.raises(ValidationError):
            AuditEntryCreate(**audit_entry)

    def test_negative_duration(self, audit_entry):
        audit_entry["duration"] = -1

        with pytest.raises(ValidationError):
            AuditEntryCreate(**audit_entry)

    def test_access_context_defaults(self):
        context = AccessContext(user_id="user-1", user_role="nurse", purpose="treatment")

        assert context.ip_address == "127.0.0.1"
        assert context.user_agent == "privacy-vault"

    def test_access_context_requires_purpose(self):
        with pytest.raises(ValidationError):
            AccessContext(user_id="user-1", user_role="nurse")

    def test_empty_filter(self):
        criteria = AuditFilter()

        assert criteria.limit is None
        assert criteria.action is None
