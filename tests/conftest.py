"""Pytest configuration and fixtures."""

import pytest
from cryptography.fernet import Fernet

from privacy_vault.config import Settings
from privacy_vault.gateway import StorageGateway


# Each store gets its own in-memory database
MEMORY_URL = "sqlite:///:memory:"


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        DATA_DIR=str(tmp_path),
        ENCRYPT_IDENTIFIERS=True,
        PII_ENCRYPTION_KEY=Fernet.generate_key().decode(),
        PSEUDONYM_MAX_ATTEMPTS=5,
        SUBJECT_EXPORT_AUDIT_LIMIT=5,
    )


@pytest.fixture(scope="function")
def gateway(test_settings):
    """A gateway over three fresh in-memory stores."""
    gw = StorageGateway(MEMORY_URL, MEMORY_URL, MEMORY_URL, settings=test_settings)
    gw.init_schemas()
    try:
        yield gw
    finally:
        gw.close()


@pytest.fixture
def sample_identity():
    """Identity data for an EU patient."""
    return {
        "id": "p1",
        "pseudonym": "PSN-AAA1",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
        "phone": "+44-20-12345678",
        "address": "12 Oak Street",
        "city": "London",
        "state": "England",
        "zip_code": "4821",
        "country": "United Kingdom",
        "region": "EU",
        "date_of_birth": "1980-05-15",
        "national_id": "AB12345678",
        "consent_given": True,
    }


@pytest.fixture
def sample_clinical():
    """Clinical data matching sample_identity."""
    return {
        "pseudonym": "PSN-AAA1",
        "blood_type": "O+",
        "allergies": ["Penicillin"],
        "medications": ["Lisinopril 10mg"],
        "diagnoses": ["Hypertension"],
        "last_visit_date": "2025-01-17",
        "next_appointment_date": "2025-03-01",
        "primary_physician": "Dr. Sarah Chen",
        "insurance_provider": "Aetna",
        "policy_number": "POL-123456",
        "medical_history": "Patient has a history of hypertension.",
        "vital_signs": {
            "blood_pressure": "128/82",
            "heart_rate": 72,
            "temperature": 98.6,
            "weight": 150,
            "height": 168,
        },
    }


@pytest.fixture
def us_identity():
    """Identity data for a US patient, without a caller-supplied id or pseudonym."""
    return {
        "first_name": "John",
        "last_name": "Smith",
        "email": "john.smith@example.com",
        "phone": "+1-555-1234",
        "address": "123 Main Street",
        "city": "New York",
        "state": "NY",
        "zip_code": "10001",
        "country": "United States",
        "region": "US",
        "date_of_birth": "1975-11-02",
        "ssn": "123-45-6789",
    }


@pytest.fixture
def us_clinical(sample_clinical):
    """Clinical data for us_identity."""
    data = dict(sample_clinical)
    data.pop("pseudonym")
    data["blood_type"] = "A-"
    data["diagnoses"] = ["Asthma"]
    return data


@pytest.fixture
def access_context():
    """Caller attribution for audited operations."""
    return {
        "user_id": "user-7",
        "user_role": "physician",
        "ip_address": "10.0.0.50",
        "user_agent": "PrivacyVaultTests/1.0",
        "purpose": "treatment",
    }


@pytest.fixture
def audit_entry():
    """A valid audit entry."""
    return {
        "action": "ACCESS_IDENTITY",
        "resource_type": "Patient",
        "resource_id": "p1",
        "pseudonym": "PSN-AAA1",
        "user_id": "user-1",
        "user_role": "nurse",
        "ip_address": "192.168.1.100",
        "user_agent": "PrivacyVaultHealthApp/1.0.0",
        "purpose": "treatment",
        "contains_pii": True,
        "region": "EU",
        "success": True,
        "duration": 120,
    }
