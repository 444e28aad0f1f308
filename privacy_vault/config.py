"""
Application Configuration Settings
Privacy Vault - separated identity, clinical and audit storage
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Application
    APP_NAME: str = "Privacy Vault"
    APP_VERSION: str = "1.0.0"
    SECRET_KEY: str = "change-this-in-production"

    # Storage (empty URL means a SQLite file under DATA_DIR)
    DATA_DIR: str = "./databases"
    IDENTITY_DATABASE_URL: str = ""
    CLINICAL_DATABASE_URL: str = ""
    AUDIT_DATABASE_URL: str = ""

    # Pseudonyms
    PSEUDONYM_PREFIX: str = "PSN-"
    PSEUDONYM_MAX_ATTEMPTS: int = 5

    # Identifier encryption (ssn / national_id)
    ENCRYPT_IDENTIFIERS: bool = True
    PII_ENCRYPTION_KEY: str = ""  # Fernet key; derived from SECRET_KEY in development

    # Compliance
    AUDIT_LOG_RETENTION_DAYS: int = 2555  # 7 years, enforced outside this system
    SUBJECT_EXPORT_AUDIT_LIMIT: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True

    def database_url(self, store: str) -> str:
        """Resolve the connection URL for one of the three stores."""
        if store not in STORES:
            raise ValueError(f"Unknown store: {store}")

        configured = getattr(self, f"{store.upper()}_DATABASE_URL")
        if configured:
            return configured

        data_dir = Path(self.DATA_DIR)
        data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{data_dir / f'{store}.db'}"


settings = Settings()

STORES = ("identity", "clinical", "audit")

REGIONS = ("US", "EU")

AUDIT_ACTIONS = (
    "ACCESS_IDENTITY",
    "ACCESS_CLINICAL",
    "ACCESS_COMPOSITE",
    "CREATE_PATIENT",
    "UPDATE_IDENTITY",
    "UPDATE_CLINICAL",
    "GDPR_ACCESS_REQUEST",
    "GDPR_RECTIFICATION",
    "GDPR_ERASURE",
    "GDPR_RESTRICTION",
    "GDPR_PORTABILITY",
    "GDPR_OBJECTION",
    "GDPR_AUTOMATED_DECISION_INFO",
    "HIPAA_PHI_ACCESS",
    "CONSENT_GRANTED",
    "CONSENT_WITHDRAWN",
    "BREACH_SIMULATION",
)

PII_FIELDS = [
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
    "date_of_birth",
    "ssn",
    "national_id",
]

# Jurisdiction identifiers encrypted at rest in the identity store
ENCRYPTED_FIELDS = ["ssn", "national_id"]
