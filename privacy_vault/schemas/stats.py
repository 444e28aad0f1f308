"""Statistics schemas."""

from pydantic import BaseModel

from privacy_vault.schemas.base import VaultModel


class RegionCounts(BaseModel):
    """Identity records per jurisdiction."""
    US: int = 0
    EU: int = 0


class IdentityStats(VaultModel):
    """Identity store counts."""
    total: int
    by_region: RegionCounts


class StoreTotal(VaultModel):
    """Row count of a single store."""
    total: int


class Statistics(VaultModel):
    """Counts across all three stores, read live from each store."""
    identity: IdentityStats
    clinical: StoreTotal
    audit: StoreTotal
