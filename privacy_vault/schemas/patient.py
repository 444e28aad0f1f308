"""Composite (joined) patient read model."""

from typing import List, Optional

from pydantic import Field

from privacy_vault.schemas.base import VaultModel
from privacy_vault.schemas.clinical import Clinical
from privacy_vault.schemas.identity import Identity


class CompositeRecord(VaultModel):
    """Identity joined to its clinical record by pseudonym. ``clinical`` is None after erasure or before a first visit."""

    identity: Identity
    clinical: Optional[Clinical] = None
    warnings: List[str] = Field(default_factory=list)
