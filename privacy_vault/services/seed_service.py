"""Synthetic identity, clinical and audit data for demonstrations.

Everything goes through the StorageGateway, so seeded data obeys the same
invariants as real writes.
"""

from datetime import timedelta
from typing import List, Optional
import logging
import random

from privacy_vault.schemas.audit import AuditEntry
from privacy_vault.schemas.patient import CompositeRecord
from privacy_vault.utils.timezone import utc_now

logger = logging.getLogger(__name__)


FIRST_NAMES = ["John", "Jane", "Michael", "Emily", "David", "Sarah", "Robert", "Lisa", "William", "Maria"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez"]
CITIES = ["New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "London", "Paris", "Berlin", "Madrid", "Rome"]
REGION_PATTERN = ["US", "US", "US", "US", "US", "EU", "EU", "EU", "US", "EU"]
STREETS = ["Main", "Oak", "Maple", "Cedar", "Pine"]
US_STATES = ["NY", "CA", "TX", "FL", "IL"]
EU_STATES = ["England", "Ile-de-France", "Bavaria", "Madrid", "Lazio"]
EU_COUNTRIES = ["United Kingdom", "France", "Germany", "Spain", "Italy"]

BLOOD_TYPES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
ALLERGIES = [
    ["Penicillin", "Peanuts"], ["None"], ["Latex", "Shellfish"], ["Aspirin"], ["Sulfa drugs"],
    ["None"], ["Bee stings", "Dust mites"], ["Dairy", "Gluten"], ["None"], ["Iodine"],
]
MEDICATIONS = [
    ["Lisinopril 10mg", "Metformin 500mg"], ["None"], ["Atorvastatin 20mg"],
    ["Levothyroxine 50mcg", "Omeprazole 20mg"], ["Amlodipine 5mg"], ["None"], ["Albuterol inhaler"],
    ["Sertraline 50mg", "Vitamin D"], ["None"], ["Warfarin 5mg", "Metoprolol 25mg"],
]
DIAGNOSES = [
    ["Hypertension", "Type 2 Diabetes"], ["Healthy"], ["Hyperlipidemia"], ["Hypothyroidism", "GERD"],
    ["Essential Hypertension"], ["Healthy"], ["Asthma"], ["Generalized Anxiety Disorder"], ["Healthy"],
    ["Atrial Fibrillation", "Hypertension"],
]
PHYSICIANS = ["Dr. Sarah Chen", "Dr. Michael Roberts", "Dr. Emily Martinez", "Dr. James Wilson", "Dr. Lisa Anderson"]
INSURANCE_PROVIDERS = ["Blue Cross Blue Shield", "Aetna", "UnitedHealthcare", "Cigna", "Humana"]

SEED_ACTIONS = [
    "ACCESS_IDENTITY", "ACCESS_CLINICAL", "UPDATE_IDENTITY", "UPDATE_CLINICAL",
    "GDPR_ACCESS_REQUEST", "GDPR_RECTIFICATION", "GDPR_ERASURE", "HIPAA_PHI_ACCESS",
    "CONSENT_GRANTED", "CONSENT_WITHDRAWN",
]
RESOURCE_TYPES = ["Patient", "MedicalRecord", "Appointment", "Prescription", "LabResult"]
USER_ROLES = ["physician", "nurse", "administrator", "patient", "system"]
PURPOSES = ["treatment", "payment", "healthcare-operations", "patient-request", "system-maintenance"]
IP_ADDRESSES = ["192.168.1.100", "192.168.1.101", "10.0.0.50", "172.16.0.10", "203.0.113.25"]
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "PrivacyVaultHealthApp/1.0.0",
    "PrivacyVaultAPIClient/2.3.1",
    "PrivacyVaultBackgroundJob/1.0",
]


class SeedService:
    """Generates and stores synthetic patients and audit history."""

    def __init__(self, gateway, rng: Optional[random.Random] = None):
        self.gateway = gateway
        self.rng = rng or random.Random()

    def build_identity(self, i: int) -> dict:
        """Identity input for the i-th synthetic patient."""
        rng = self.rng
        first_name = FIRST_NAMES[i % len(FIRST_NAMES)]
        last_name = LAST_NAMES[i % len(LAST_NAMES)]
        region = REGION_PATTERN[i % len(REGION_PATTERN)]
        us = region == "US"

        return {
            "first_name": first_name,
            "last_name": last_name,
            "email": f"{first_name.lower()}.{last_name.lower()}{i}@example.com",
            "phone": (
                f"+1-555-{rng.randint(1000, 9999)}" if us
                else f"+44-20-{rng.randint(10000000, 99999999)}"
            ),
            "address": f"{rng.randint(1, 9999)} {STREETS[i % len(STREETS)]} Street",
            "city": CITIES[i % len(CITIES)],
            "state": US_STATES[i % 5] if us else EU_STATES[i % 5],
            "zip_code": str(rng.randint(10000, 99999)) if us else str(rng.randint(1000, 9999)),
            "country": "United States" if us else EU_COUNTRIES[i % 5],
            "region": region,
            "date_of_birth": f"{rng.randint(1960, 1989)}-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}",
            "ssn": (
                f"{rng.randint(100, 999)}-{rng.randint(10, 99)}-{rng.randint(1000, 9999)}" if us else None
            ),
            "national_id": (
                None if us
                else f"{chr(65 + rng.randint(0, 25))}{chr(65 + rng.randint(0, 25))}{rng.randint(10000000, 99999999)}"
            ),
            "consent_given": rng.random() > 0.2,
            "consent_date": utc_now() - timedelta(days=rng.randint(0, 364)),
        }

    def build_clinical(self, i: int) -> dict:
        """Clinical input for the i-th synthetic patient. Contains no PII."""
        rng = self.rng
        today = utc_now().date()
        diagnoses = DIAGNOSES[i % len(DIAGNOSES)]

        return {
            "blood_type": BLOOD_TYPES[i % len(BLOOD_TYPES)],
            "allergies": list(ALLERGIES[i % len(ALLERGIES)]),
            "medications": list(MEDICATIONS[i % len(MEDICATIONS)]),
            "diagnoses": list(diagnoses),
            "last_visit_date": today - timedelta(days=rng.randint(0, 89)),
            "next_appointment_date": (
                today + timedelta(days=rng.randint(1, 60)) if rng.random() > 0.3 else None
            ),
            "primary_physician": PHYSICIANS[i % len(PHYSICIANS)],
            "insurance_provider": INSURANCE_PROVIDERS[i % len(INSURANCE_PROVIDERS)],
            "policy_number": f"POL-{rng.randint(100000, 999999)}",
            "medical_history": (
                f"Patient has a history of {', '.join(diagnoses).lower()}. Regular checkups scheduled."
            ),
            "vital_signs": {
                "blood_pressure": f"{rng.randint(110, 149)}/{rng.randint(70, 99)}",
                "heart_rate": rng.randint(60, 99),
                "temperature": round(rng.uniform(97.0, 99.0), 1),
                "weight": rng.randint(120, 199),
                "height": rng.randint(160, 179),
            },
        }

    def seed_patients(self, count: int = 10) -> List[CompositeRecord]:
        """Create ``count`` synthetic patients."""
        return [
            self.gateway.create_patient(self.build_identity(i), self.build_clinical(i))
            for i in range(count)
        ]

    def seed_audit_logs(self, patients: List[CompositeRecord], count: int = 50) -> List[AuditEntry]:
        """Append ``count`` synthetic audit entries spread over the last 30 days."""
        if not patients:
            return []

        rng = self.rng
        now = utc_now()
        entries = []
        for _ in range(count):
            identity = rng.choice(patients).identity
            action = rng.choice(SEED_ACTIONS)
            success = rng.random() > 0.05

            entries.append(self.gateway.record_audit({
                "timestamp": now - timedelta(seconds=rng.randint(0, 30 * 24 * 60 * 60)),
                "action": action,
                "resource_type": rng.choice(RESOURCE_TYPES),
                "resource_id": identity.id,
                "pseudonym": identity.pseudonym,
                "user_id": f"user-{rng.randint(1, 20)}",
                "user_role": rng.choice(USER_ROLES),
                "ip_address": rng.choice(IP_ADDRESSES),
                "user_agent": rng.choice(USER_AGENTS),
                "purpose": rng.choice(PURPOSES),
                "contains_phi": "CLINICAL" in action or "PHI" in action,
                "contains_pii": "IDENTITY" in action or "GDPR" in action,
                "region": identity.region,
                "success": success,
                "error_message": None if success else "Access denied: Insufficient permissions",
                "duration": rng.randint(50, 549),
            }))
        return entries

    def seed(self, patient_count: int = 10, audit_count: int = 50) -> dict:
        """Seed patients and audit history; returns what was created."""
        patients = self.seed_patients(patient_count)
        entries = self.seed_audit_logs(patients, audit_count)
        logger.info(f"Seeded {len(patients)} patients and {len(entries)} audit entries")
        return {"patients": patients, "audit_entries": entries}
