"""
Storage Gateway

The only component that opens the identity, clinical and audit stores.

- Identity and clinical records are joined in two steps:
  id -> identity row -> pseudonym -> clinical rows (indexed on pseudonym).
  No clinical row carries an identity id.
- Writes touch exactly one store, except create_patient, which writes the
  identity store and then the clinical store as two independent transactions.
- When an AccessContext is supplied, every operation appends one audit entry
  describing who did what, including failed attempts.
"""

from contextlib import contextmanager
from typing import List, Optional, Tuple
import json
import logging
import time
import uuid
import warnings

from cryptography.fernet import InvalidToken
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from privacy_vault.config import REGIONS, STORES, settings as default_settings
from privacy_vault.database import create_store_engine, init_store
from privacy_vault.database import health_check as store_health_check
from privacy_vault.exceptions import (
    IntegrityWarning,
    NotFoundError,
    StorageError,
    ValidationError,
)
from privacy_vault.models.clinical import MedicalRecord
from privacy_vault.models.identity import PatientIdentity
from privacy_vault.schemas.audit import AccessContext, AuditEntry, AuditEntryCreate, AuditFilter
from privacy_vault.schemas.clinical import Clinical, ClinicalCreate, ClinicalUpdate, VitalSigns
from privacy_vault.schemas.compliance import (
    AuditTrailItem,
    OrphanReport,
    ProcessingActivities,
    SubjectAccessExport,
)
from privacy_vault.schemas.identity import Identity, IdentityCreate, IdentityUpdate
from privacy_vault.schemas.patient import CompositeRecord
from privacy_vault.schemas.stats import Statistics
from privacy_vault.services.audit_service import AuditService
from privacy_vault.services.encryption_service import EncryptionService
from privacy_vault.services.pseudonym_service import PseudonymService
from privacy_vault.services.stats_service import StatsService
from privacy_vault.utils.timezone import to_naive_utc, utc_now

logger = logging.getLogger(__name__)

# Placeholder for audit entries written before the subject could be resolved
UNRESOLVED = "UNRESOLVED"

CLINICAL_LIST_FIELDS = ("allergies", "medications", "diagnoses")
VITAL_SIGN_FIELDS = ("blood_pressure", "heart_rate", "temperature", "weight", "height")


def _validate(schema, data, label: Optional[str] = None):
    """Coerce ``data`` into ``schema``, translating pydantic errors into ValidationError."""
    label = label or schema.__name__
    if isinstance(data, schema):
        return data
    if data is None:
        raise ValidationError(f"{label} is required")
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)

    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_input=False)
        # Messages name the offending fields only; input values may be PII
        summary = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or label}: {err['msg']}"
            for err in errors
        )
        raise ValidationError(f"Invalid {label}: {summary}", errors=errors) from e


def _check_limit(limit: Optional[int]):
    if limit is not None and limit < 1:
        raise ValidationError(f"limit must be at least 1, got {limit}")

class _AuditTrail:
    """Details of an audited operation, filled in as the operation resolves its subject."""

    def __init__(self, action: str, resource_type: str, resource_id: Optional[str],
                 contains_phi: bool, contains_pii: bool):
        self.action = action
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.pseudonym = None
        self.region = None
        self.contains_phi = contains_phi
        self.contains_pii = contains_pii
        self.error_message = None

    def fail(self, message: str):
        self.error_message = message


class StorageGateway:
    """Sole access path to the identity, clinical and audit stores."""

    def __init__(
        self,
        identity_url: str,
        clinical_url: str,
        audit_url: str,
        *,
        settings=None,
        encryption: Optional[EncryptionService] = None,
        pseudonyms: Optional[PseudonymService] = None,
    ):
        self.settings = settings or default_settings
        self.encryption = encryption or EncryptionService(self.settings)
        self.pseudonyms = pseudonyms or PseudonymService(
            prefix=self.settings.PSEUDONYM_PREFIX,
            max_attempts=self.settings.PSEUDONYM_MAX_ATTEMPTS,
        )

        urls = {"identity": identity_url, "clinical": clinical_url, "audit": audit_url}
        self._engines = {}
        self._sessions = {}
        self._closed = False
        try:
            for store in STORES:
                engine = create_store_engine(urls[store], echo=self.settings.DEBUG)
                self._engines[store] = engine
                self._sessions[store] = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        except SQLAlchemyError as e:
            self.close()
            raise StorageError("Failed to open stores", cause=e) from e
        except Exception:
            self.close()
            raise

        logger.info("Storage gateway opened identity, clinical and audit stores")

    @classmethod
    def from_settings(cls, settings=None, **kwargs) -> "StorageGateway":
        """Build a gateway from configured store URLs."""
        settings = settings or default_settings
        return cls(
            settings.database_url("identity"),
            settings.database_url("clinical"),
            settings.database_url("audit"),
            settings=settings,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init_schemas(self):
        """Create the tables of all three stores (only tables that don't exist)."""
        for store in STORES:
            try:
                init_store(store, self._engine(store))
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to initialize {store} store", cause=e) from e

    def close(self):
        """Release all three store handles. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        failures = []
        for store, engine in self._engines.items():
            try:
                engine.dispose()
            except SQLAlchemyError as e:
                logger.error(f"Failed to close {store} store: {e}")
                failures.append(e)

        logger.info("Storage gateway closed")
        if failures:
            raise StorageError("Failed to release store handles", cause=failures[0]) from failures[0]

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _engine(self, store: str):
        if self._closed:
            raise StorageError("Storage gateway is closed")
        return self._engines[store]

    @contextmanager
    def _session(self, store: str):
        if self._closed:
            raise StorageError("Storage gateway is closed")
        db = self._sessions[store]()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"{store} store operation failed: {type(e).__name__}")
            raise StorageError(f"{store} store operation failed", cause=e) from e
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Audit side effect
    # ------------------------------------------------------------------

    @contextmanager
    def _audited(self, context, action: str, resource_type: str, resource_id: Optional[str],
                 contains_phi: bool = False, contains_pii: bool = False):
        """Record one audit entry for the wrapped operation when a context is given."""
        if context is not None:
            context = _validate(AccessContext, context, "access context")

        trail = _AuditTrail(action, resource_type, resource_id, contains_phi, contains_pii)
        started = time.perf_counter()
        try:
            yield trail
        except Exception as e:
            if context is not None:
                trail.fail(str(e) or type(e).__name__)
                try:
                    self._write_trail(context, trail, started)
                except StorageError as audit_error:
                    logger.error(f"Could not audit failed {action}: {audit_error}")
            raise

        if context is not None:
            self._write_trail(context, trail, started)

    def _write_trail(self, context: AccessContext, trail: _AuditTrail, started: float):
        entry = AuditEntryCreate(
            action=trail.action,
            resource_type=trail.resource_type,
            resource_id=trail.resource_id or UNRESOLVED,
            pseudonym=trail.pseudonym or UNRESOLVED,
            user_id=context.user_id,
            user_role=context.user_role,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            purpose=context.purpose,
            contains_phi=trail.contains_phi,
            contains_pii=trail.contains_pii,
            region=trail.region,
            success=trail.error_message is None,
            error_message=trail.error_message,
            duration=int((time.perf_counter() - started) * 1000),
        )
        with self._session("audit") as db:
            AuditService(db).log_action(entry)

    # ------------------------------------------------------------------
    # Row <-> read model
    # ------------------------------------------------------------------

    def _identity_from_row(self, row: PatientIdentity) -> Identity:
        data = {column: getattr(row, column) for column in PatientIdentity.__table__.columns.keys()}
        try:
            data = self.encryption.decrypt_identifier_fields(data)
        except InvalidToken as e:
            raise StorageError(f"Could not decrypt identifiers of identity {row.id}", cause=e) from e
        return Identity(**data)

    @staticmethod
    def _clinical_from_row(row: MedicalRecord) -> Clinical:
        return Clinical(
            id=row.id,
            pseudonym=row.pseudonym,
            blood_type=row.blood_type,
            allergies=json.loads(row.allergies),
            medications=json.loads(row.medications),
            diagnoses=json.loads(row.diagnoses),
            last_visit_date=row.last_visit_date,
            next_appointment_date=row.next_appointment_date,
            primary_physician=row.primary_physician,
            insurance_provider=row.insurance_provider,
            policy_number=row.policy_number,
            medical_history=row.medical_history,
            vital_signs=VitalSigns(
                **{field: getattr(row, f"vital_signs_{field}") for field in VITAL_SIGN_FIELDS}
            ),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _clinical_columns(values: dict) -> dict:
        """Encode list fields as JSON text and flatten the vital-sign bundle."""
        columns = dict(values)
        for field in CLINICAL_LIST_FIELDS:
            if field in columns:
                columns[field] = json.dumps(columns[field])

        vitals = columns.pop("vital_signs", None)
        if vitals is not None:
            for field, value in vitals.items():
                columns[f"vital_signs_{field}"] = value
        return columns

    def _identity_columns(self, values: dict) -> dict:
        if self.settings.ENCRYPT_IDENTIFIERS:
            return self.encryption.encrypt_identifier_fields(values)
        return dict(values)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _load_identity(self, identity_id: str) -> Optional[Identity]:
        with self._session("identity") as db:
            row = db.get(PatientIdentity, identity_id)
            return self._identity_from_row(row) if row is not None else None

    def _clinical_rows(self, db, pseudonym: str) -> Tuple[Optional[MedicalRecord], List[str]]:
        """Clinical rows for a pseudonym; the earliest wins and duplicates become warnings."""
        rows = (
            db.query(MedicalRecord)
            .filter(MedicalRecord.pseudonym == pseudonym)
            .order_by(MedicalRecord.created_at, MedicalRecord.id)
            .all()
        )
        if not rows:
            return None, []

        issues = []
        if len(rows) > 1:
            message = (
                f"{len(rows)} clinical records share pseudonym {pseudonym}; "
                f"using the earliest ({rows[0].id})"
            )
            logger.warning(message)
            warnings.warn(message, IntegrityWarning, stacklevel=4)
            issues.append(message)
        return rows[0], issues

    def _load_clinical(self, pseudonym: str) -> Tuple[Optional[Clinical], List[str]]:
        with self._session("clinical") as db:
            row, issues = self._clinical_rows(db, pseudonym)
            return (self._clinical_from_row(row) if row is not None else None), issues

    def _pseudonym_in_use(self, pseudonym: str) -> bool:
        """Whether any of the three stores already references ``pseudonym``."""
        with self._session("identity") as db:
            if db.query(PatientIdentity.id).filter(PatientIdentity.pseudonym == pseudonym).first():
                return True
        with self._session("clinical") as db:
            if db.query(MedicalRecord.id).filter(MedicalRecord.pseudonym == pseudonym).first():
                return True
        with self._session("audit") as db:
            return AuditService(db).pseudonym_exists(pseudonym)

    @staticmethod
    def _identity_conflicts(db, identity_id: str, pseudonym: str) -> bool:
        """Whether the identity id or the pseudonym is already taken in the identity store."""
        if db.get(PatientIdentity, identity_id) is not None:
            return True
        return db.query(PatientIdentity.id).filter(PatientIdentity.pseudonym == pseudonym).first() is not None

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def create_patient(self, identity, clinical, context=None) -> CompositeRecord:
        """
        Create an identity record and its clinical record under one new pseudonym.

        The pseudonym is taken from the input when one is supplied, otherwise it
        is minted (retrying on collision). Identity is written first, then
        clinical; a failure in between leaves a readable identity without a
        clinical record.

        Raises:
            ValidationError: Missing/malformed/unknown fields, id or pseudonym
                already in use, mismatched pseudonyms, or minting exhausted
            StorageError: A store write failed
        """
        with self._audited(context, "CREATE_PATIENT", "Patient", None,
                           contains_phi=True, contains_pii=True) as trail:
            identity_in = _validate(IdentityCreate, identity, "identity")
            clinical_in = _validate(ClinicalCreate, clinical, "clinical")

            if (identity_in.pseudonym and clinical_in.pseudonym
                    and identity_in.pseudonym != clinical_in.pseudonym):
                raise ValidationError("Clinical pseudonym does not match identity pseudonym")

            identity_id = identity_in.id or str(uuid.uuid4())
            clinical_id = clinical_in.id or str(uuid.uuid4())
            trail.resource_id = identity_id
            trail.region = identity_in.region

            requested = identity_in.pseudonym or clinical_in.pseudonym
            if requested:
                if self._pseudonym_in_use(requested):
                    raise ValidationError(f"Pseudonym {requested} already exists")
                pseudonym = requested
            else:
                pseudonym = self.pseudonyms.mint(self._pseudonym_in_use)
            trail.pseudonym = pseudonym

            with self._session("identity") as db:
                if db.get(PatientIdentity, identity_id) is not None:
                    raise ValidationError(f"Identity {identity_id} already exists")
            with self._session("clinical") as db:
                if db.get(MedicalRecord, clinical_id) is not None:
                    raise ValidationError(f"Clinical record {clinical_id} already exists")

            now = utc_now()

            values = identity_in.model_dump(exclude={"id", "pseudonym"})
            consent_date = to_naive_utc(values.pop("consent_date")) or now
            with self._session("identity") as db:
                row = PatientIdentity(
                    id=identity_id,
                    pseudonym=pseudonym,
                    consent_date=consent_date,
                    created_at=now,
                    updated_at=now,
                    **self._identity_columns(values),
                )
                db.add(row)
                try:
                    db.commit()
                except IntegrityError as e:
                    db.rollback()
                    if self._identity_conflicts(db, identity_id, pseudonym):
                        raise ValidationError(
                            f"Identity {identity_id} or pseudonym {pseudonym} already exists"
                        ) from e
                    raise
                stored_identity = self._identity_from_row(row)

            try:
                with self._session("clinical") as db:
                    record = MedicalRecord(
                        id=clinical_id,
                        pseudonym=pseudonym,
                        created_at=now,
                        updated_at=now,
                        **self._clinical_columns(clinical_in.model_dump(exclude={"id", "pseudonym"})),
                    )
                    db.add(record)
                    try:
                        db.commit()
                    except IntegrityError as e:
                        db.rollback()
                        if db.get(MedicalRecord, clinical_id) is not None:
                            raise ValidationError(f"Clinical record {clinical_id} already exists") from e
                        raise
                    stored_clinical = self._clinical_from_row(record)
            except Exception:
                logger.error(
                    f"Clinical write failed; identity {identity_id} ({pseudonym}) "
                    f"has no clinical record"
                )
                raise

            logger.info(f"Created patient {identity_id} ({pseudonym})")
            return CompositeRecord(identity=stored_identity, clinical=stored_clinical)

    def get_identity(self, identity_id: str, context=None) -> Optional[Identity]:
        """Identity record by id, or None."""
        with self._audited(context, "ACCESS_IDENTITY", "Patient", identity_id,
                           contains_pii=True) as trail:
            identity = self._load_identity(identity_id)
            if identity is None:
                trail.fail("Identity not found")
                return None

            trail.pseudonym = identity.pseudonym
            trail.region = identity.region
            return identity

    def get_clinical(self, pseudonym: str, context=None) -> Optional[Clinical]:
        """
        Clinical record by pseudonym, or None.

        Works whether or not an identity still exists for the pseudonym.
        """
        with self._audited(context, "ACCESS_CLINICAL", "MedicalRecord", None,
                           contains_phi=True) as trail:
            trail.pseudonym = pseudonym
            clinical, _ = self._load_clinical(pseudonym)
            if clinical is None:
                trail.fail("Clinical record not found")
                return None

            trail.resource_id = clinical.id
            return clinical

    def get_composite(self, identity_id: str, context=None) -> CompositeRecord:
        """
        Identity joined to its clinical record through the pseudonym.

        Raises:
            NotFoundError: No identity with this id
        """
        with self._audited(context, "ACCESS_COMPOSITE", "Patient", identity_id,
                           contains_phi=True, contains_pii=True) as trail:
            identity = self._load_identity(identity_id)
            if identity is None:
                raise NotFoundError(f"Identity {identity_id} not found")

            trail.pseudonym = identity.pseudonym
            trail.region = identity.region

            clinical, issues = self._load_clinical(identity.pseudonym)
            if clinical is None:
                logger.debug(f"Identity {identity_id} has no clinical record")

            return CompositeRecord(identity=identity, clinical=clinical, warnings=issues)

    def erase_identity(self, identity_id: str, context=None) -> bool:
        """
        Delete an identity record (data-subject erasure).

        The clinical record and every audit entry are left untouched. Erasing
        an id that no longer exists is a no-op.

        Returns:
            True if a row was deleted
        """
        with self._audited(context, "GDPR_ERASURE", "Patient", identity_id,
                           contains_pii=True) as trail:
            with self._session("identity") as db:
                row = db.get(PatientIdentity, identity_id)
                if row is None:
                    logger.info(f"Identity {identity_id} already erased or never existed")
                    return False

                trail.pseudonym = row.pseudonym
                trail.region = row.region
                db.delete(row)
                db.commit()

            logger.info(f"Erased identity {identity_id} ({trail.pseudonym})")
            return True

    def record_audit(self, entry) -> AuditEntry:
        """
        Append one audit entry.

        Raises:
            ValidationError: Unknown action or missing attribution; nothing is written
        """
        entry = _validate(AuditEntryCreate, entry, "audit entry")
        with self._session("audit") as db:
            try:
                return AuditService(db).log_action(entry)
            except IntegrityError as e:
                db.rollback()
                raise ValidationError(f"Audit entry {entry.id} already exists") from e

    def query_audit(self, criteria=None) -> List[AuditEntry]:
        """Audit entries matching ``criteria`` (AuditFilter or dict), newest first."""
        criteria = _validate(AuditFilter, criteria if criteria is not None else {}, "audit filter")
        with self._session("audit") as db:
            return AuditService(db).query(criteria)

    def statistics(self) -> Statistics:
        """Counts read from the current contents of all three stores."""
        with self._session("identity") as identity_db, \
                self._session("clinical") as clinical_db, \
                self._session("audit") as audit_db:
            return StatsService(identity_db, clinical_db, audit_db).get_all_stats()

    # ------------------------------------------------------------------
    # Rectification and consent
    # ------------------------------------------------------------------

    def update_identity(self, identity_id: str, updates, context=None) -> Identity:
        """
        Rectify PII fields. The pseudonym never changes.

        Raises:
            ValidationError: Unknown fields, id/pseudonym in updates, or nothing to update
            NotFoundError: No identity with this id
        """
        with self._audited(context, "GDPR_RECTIFICATION", "Patient", identity_id,
                           contains_pii=True) as trail:
            changes = _validate(IdentityUpdate, updates, "identity update")
            values = changes.model_dump(exclude_unset=True)
            if not values:
                raise ValidationError("No fields to update")

            with self._session("identity") as db:
                row = db.get(PatientIdentity, identity_id)
                if row is None:
                    raise NotFoundError(f"Identity {identity_id} not found")

                trail.pseudonym = row.pseudonym
                for field, value in self._identity_columns(values).items():
                    setattr(row, field, value)
                row.updated_at = utc_now()
                db.commit()
                trail.region = row.region

                logger.info(f"Updated identity {identity_id}: {', '.join(sorted(values))}")
                return self._identity_from_row(row)

    def update_consent(self, identity_id: str, consent_given: bool, context=None) -> Identity:
        """Grant or withdraw consent and stamp the consent date."""
        if not isinstance(consent_given, bool):
            raise ValidationError("consent_given must be a boolean")

        action = "CONSENT_GRANTED" if consent_given else "CONSENT_WITHDRAWN"
        with self._audited(context, action, "Patient", identity_id, contains_pii=True) as trail:
            with self._session("identity") as db:
                row = db.get(PatientIdentity, identity_id)
                if row is None:
                    raise NotFoundError(f"Identity {identity_id} not found")

                trail.pseudonym = row.pseudonym
                trail.region = row.region
                now = utc_now()
                row.consent_given = consent_given
                row.consent_date = now
                row.updated_at = now
                db.commit()

                logger.info(f"Consent {'granted' if consent_given else 'withdrawn'} for {identity_id}")
                return self._identity_from_row(row)

    def update_clinical(self, pseudonym: str, updates, context=None) -> Clinical:
        """
        Update the clinical record for a pseudonym.

        Raises:
            ValidationError: Unknown or invalid fields, or nothing to update
            NotFoundError: No clinical record for this pseudonym
        """
        with self._audited(context, "UPDATE_CLINICAL", "MedicalRecord", None,
                           contains_phi=True) as trail:
            trail.pseudonym = pseudonym
            changes = _validate(ClinicalUpdate, updates, "clinical update")
            values = changes.model_dump(exclude_unset=True)
            if not values:
                raise ValidationError("No fields to update")

            with self._session("clinical") as db:
                row, _ = self._clinical_rows(db, pseudonym)
                if row is None:
                    raise NotFoundError(f"No clinical record for pseudonym {pseudonym}")

                trail.resource_id = row.id
                for field, value in self._clinical_columns(values).items():
                    setattr(row, field, value)
                row.updated_at = utc_now()
                db.commit()

                logger.info(f"Updated clinical record {row.id}: {', '.join(sorted(values))}")
                return self._clinical_from_row(row)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def list_identities(self, region: Optional[str] = None, limit: Optional[int] = None) -> List[Identity]:
        """Identity records, oldest first, optionally for one region."""
        if region is not None and region not in REGIONS:
            raise ValidationError(f"Unknown region: {region}")
        _check_limit(limit)

        with self._session("identity") as db:
            query = db.query(PatientIdentity)
            if region:
                query = query.filter(PatientIdentity.region == region)
            query = query.order_by(PatientIdentity.created_at, PatientIdentity.id)
            if limit is not None:
                query = query.limit(limit)
            return [self._identity_from_row(row) for row in query.all()]

    def list_clinical(self, limit: Optional[int] = None) -> List[Clinical]:
        """Clinical records, oldest first."""
        _check_limit(limit)
        with self._session("clinical") as db:
            query = db.query(MedicalRecord).order_by(MedicalRecord.created_at, MedicalRecord.id)
            if limit is not None:
                query = query.limit(limit)
            return [self._clinical_from_row(row) for row in query.all()]

    def export_subject_data(self, identity_id: str, context=None, portable: bool = False) -> SubjectAccessExport:
        """
        Everything held about one data subject (access or portability request).

        Raises:
            NotFoundError: No identity with this id
        """
        action = "GDPR_PORTABILITY" if portable else "GDPR_ACCESS_REQUEST"
        with self._audited(context, action, "Patient", identity_id,
                           contains_phi=True, contains_pii=True) as trail:
            identity = self._load_identity(identity_id)
            if identity is None:
                raise NotFoundError(f"Identity {identity_id} not found")

            trail.pseudonym = identity.pseudonym
            trail.region = identity.region
            clinical, _ = self._load_clinical(identity.pseudonym)

            with self._session("audit") as db:
                history = AuditService(db).get_subject_trail(
                    identity_id, limit=self.settings.SUBJECT_EXPORT_AUDIT_LIMIT
                )

            return SubjectAccessExport(
                subject_id=identity.id,
                pseudonym=identity.pseudonym,
                exported_at=utc_now(),
                personal_information=identity,
                medical_information=clinical,
                processing_activities=ProcessingActivities(
                    consent_given=identity.consent_given,
                    consent_date=identity.consent_date,
                    account_created=identity.created_at,
                    last_updated=identity.updated_at,
                ),
                audit_trail=[
                    AuditTrailItem(timestamp=entry.timestamp, action=entry.action, purpose=entry.purpose)
                    for entry in history
                ],
            )

    def find_orphans(self) -> OrphanReport:
        """
        Cross-store consistency check.

        Identities without clinical records (partial create, pre-visit) and
        clinical records without identities (post-erasure) are valid states;
        they are reported, never repaired.
        """
        with self._session("identity") as db:
            identity_rows = db.query(PatientIdentity.id, PatientIdentity.pseudonym).all()
        with self._session("clinical") as db:
            clinical_counts = dict(
                db.query(MedicalRecord.pseudonym, func.count(MedicalRecord.id))
                .group_by(MedicalRecord.pseudonym)
                .all()
            )

        identity_pseudonyms = {pseudonym for _, pseudonym in identity_rows}
        report = OrphanReport(
            identities_without_clinical=sorted(
                identity_id for identity_id, pseudonym in identity_rows
                if pseudonym not in clinical_counts
            ),
            clinical_without_identity=sorted(
                pseudonym for pseudonym in clinical_counts if pseudonym not in identity_pseudonyms
            ),
            duplicate_pseudonyms=sorted(
                pseudonym for pseudonym, count in clinical_counts.items() if count > 1
            ),
        )

        if report.duplicate_pseudonyms:
            logger.warning(
                f"{len(report.duplicate_pseudonyms)} pseudonyms have more than one clinical record"
            )
        logger.info(
            f"Orphan check: {len(report.identities_without_clinical)} identities without clinical, "
            f"{len(report.clinical_without_identity)} clinical without identity"
        )
        return report

    def health_check(self) -> dict:
        """Connectivity of each store."""
        return {store: store_health_check(self._engine(store)) for store in STORES}

    def store_locations(self) -> dict:
        """Connection URL of each store, passwords masked."""
        return {
            store: self._engines[store].url.render_as_string(hide_password=True)
            for store in STORES
        }
