"""Shared pydantic configuration for all record shapes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class VaultModel(BaseModel):
    """
    Fixed-shape record.

    Attributes are snake_case; ``model_dump(by_alias=True)`` produces the
    camelCase read-model shape. Unknown fields are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
