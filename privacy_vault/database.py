"""
Database Engines and Declarative Bases

Each of the three stores has its own declarative base so that its tables can
only ever be created on, and queried through, its own engine:

- IdentityBase: patients (PII)
- ClinicalBase: medical_records (PHI)
- AuditBase: audit_logs (append-only)

Supports:
- SQLite (local development, tests)
- Any other SQLAlchemy URL (pooled)
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import QueuePool, StaticPool
import logging

logger = logging.getLogger(__name__)

IdentityBase = declarative_base()
ClinicalBase = declarative_base()
AuditBase = declarative_base()

BASES = {
    "identity": IdentityBase,
    "clinical": ClinicalBase,
    "audit": AuditBase,
}


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for one store."""
    if url.startswith("sqlite"):
        # SQLite: a single shared connection so in-memory stores survive
        # across sessions
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )
        event.listen(engine, "connect", _set_sqlite_pragmas)
    else:
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=1800,
            echo=echo
        )
    return engine


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def init_store(store: str, engine: Engine):
    """Create the tables of one store (only tables that don't exist)."""
    # Models register themselves on the bases when imported
    import privacy_vault.models  # noqa: F401

    BASES[store].metadata.create_all(bind=engine)
    logger.info(f"{store} store tables initialized")


def health_check(engine: Engine) -> bool:
    """Check database connectivity."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
