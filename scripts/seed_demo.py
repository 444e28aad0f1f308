"""
Seed the identity, clinical and audit stores with synthetic patients.
Run this after configuring the store URLs (or leave them empty to use
SQLite files under DATA_DIR).

Usage: python scripts/seed_demo.py [patient_count] [audit_count]
"""

import sys
import os
import logging

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from privacy_vault.config import settings
from privacy_vault.gateway import StorageGateway
from privacy_vault.services.seed_service import SeedService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def seed_demo(patient_count=10, audit_count=50):
    """Create the schemas, seed synthetic data and print store statistics."""
    with StorageGateway.from_settings(settings) as gateway:
        gateway.init_schemas()
        SeedService(gateway).seed(patient_count, audit_count)

        stats = gateway.statistics()
        locations = gateway.store_locations()

        print(f"✓ Identity store ({locations['identity']}): {stats.identity.total} patients "
              f"(US: {stats.identity.by_region.US}, EU: {stats.identity.by_region.EU})")
        print(f"✓ Clinical store ({locations['clinical']}): {stats.clinical.total} medical records")
        print(f"✓ Audit store ({locations['audit']}): {stats.audit.total} entries")


if __name__ == "__main__":
    patients = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    audits = int(sys.argv[2]) if len(sys.argv) > 2 else 50
    seed_demo(patients, audits)
