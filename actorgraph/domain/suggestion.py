"""Suggestion (candidate relationship) domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class SuggestionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DISMISSED = "dismissed"


class Suggestion(BaseModel):
    """A candidate relationship that accumulates evidence until it is reviewed.

    Unique per (context_id, source_actor_id, target_actor_id, relationship_type).

    Attributes:
        id: Ledger identifier
        context_id: Project/workspace scope
        source_actor_id: Actor the relationship starts from
        target_actor_id: Actor the relationship points to
        relationship_type: Open relationship type, e.g. "works_with"
        source_text: Representative text the suggestion was first seen in
        confidence: Confidence between 0 and 1, never lowered by new evidence
        evidence_count: Number of documents the triple was observed in
        source_documents: References of those documents, without duplicates
        context_samples: Short excerpts, newest first, capped in size
        status: pending, approved or dismissed
    """

    id: int
    context_id: str
    source_actor_id: str
    target_actor_id: str
    relationship_type: str = "related_to"
    source_text: str = ""
    confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    evidence_count: int = Field(default=1, ge=1)
    source_documents: list[str] = []
    context_samples: list[str] = []
    status: SuggestionStatus = SuggestionStatus.PENDING
    created_at: datetime | None = None
    last_seen_at: datetime | None = None
    reviewed_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_approved(self) -> bool:
        return self.status is SuggestionStatus.APPROVED

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dismissed(self) -> bool:
        return self.status is SuggestionStatus.DISMISSED

    @property
    def triple(self) -> tuple[str, str, str]:
        return (self.source_actor_id, self.target_actor_id, self.relationship_type)


class Observation(BaseModel):
    """A single extracted sighting of a candidate relationship."""

    source_actor_id: str
    target_actor_id: str
    relationship_type: str = "related_to"
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    document_ref: str | None = None
    excerpt: str | None = None


class SuggestionView(BaseModel):
    """A suggestion joined with the names and types of its actors, for listings."""

    suggestion: Suggestion
    source_name: str | None = None
    source_type: str | None = None
    target_name: str | None = None
    target_type: str | None = None


class SuggestionStats(BaseModel):
    total: int = 0
    pending: int = 0
    strong_evidence: int = 0
    high_confidence: int = 0
    dismissed: int = 0
    avg_evidence: float = 0.0
