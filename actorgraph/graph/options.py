from typing import Literal

from pydantic import BaseModel, field_validator

from .model import EdgeSource

GroupBy = Literal["team", "organization", "type"]


class GraphOptions(BaseModel):
    """Filters applied when building a graph. Equal options share a cache entry."""

    actor_types: tuple[str, ...] | None = None
    edge_types: tuple[EdgeSource, ...] | None = None
    min_confidence: float = 0.0
    include_implicit: bool = True
    include_archived: bool = False
    include_unapproved: bool = False
    group_by: GroupBy | None = None

    model_config = {"frozen": True}

    @field_validator("actor_types", "edge_types", mode="before")
    @classmethod
    def _canonicalize(cls, value):
        """Deduplicate and sort list filters; an empty filter means no filter."""
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        values = sorted({str(getattr(v, "value", v)).strip() for v in value} - {""})
        return tuple(values) or None

    def cache_key(self) -> str:
        return self.model_dump_json()
