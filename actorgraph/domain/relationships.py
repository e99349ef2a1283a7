"""Relationship domain models."""

from datetime import datetime

from pydantic import BaseModel, Field


class Relationship(BaseModel):
    """A confirmed, directed relationship between two actors.

    Unique per (context_id, source_actor_id, relationship_type, target_actor_id).
    """

    id: int
    context_id: str
    source_actor_id: str
    target_actor_id: str
    relationship_type: str = "related_to"
    context: str | None = None  # text the relationship was confirmed from
    strength: float = 1.0
    confidence: float = 1.0
    is_approved: bool = True
    source_document_id: str | None = None
    source_file: str | None = None  # filled in on read from the document table

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (
            self.context_id,
            self.source_actor_id,
            self.relationship_type,
            self.target_actor_id,
        )


class DocumentTag(BaseModel):
    tag_type: str  # person, project, system, organization, ...
    tag_value: str


class Document(BaseModel):
    """A tagged document known to a context."""

    id: str
    context_id: str
    filepath: str | None = None
    tags: list[DocumentTag] = []
    created_at: datetime | None = None


class TagCooccurrence(BaseModel):
    """A person tagged together with a project/system/organization on several documents."""

    person: str
    project: str
    doc_count: int = Field(ge=1)
