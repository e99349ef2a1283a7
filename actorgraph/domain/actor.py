"""Actor domain models."""

from datetime import datetime

from pydantic import BaseModel

KNOWN_ACTOR_TYPES = (
    "person",
    "team",
    "system",
    "organization",
    "role",
    "project",
    "location",
    "technology",
    "unknown",
)


class Actor(BaseModel):
    """A person, team, system or organization mentioned in a context.

    Attributes:
        id: Identifier, unique within the context
        context_id: Project/workspace the actor belongs to
        name: Display name
        actor_type: One of KNOWN_ACTOR_TYPES; other values are accepted as-is
        role: Optional role or job title
        team: Optional team name, used for implicit same-team edges
        organization: Optional organization name, used for implicit same-org edges
        description: Optional free text
        last_seen_at: When the actor was last mentioned
        mention_count: How many times the actor has been mentioned
        archived_at: Set when the actor is archived; archived actors are left out of graphs
    """

    id: str
    context_id: str
    name: str
    actor_type: str = "unknown"
    role: str | None = None
    team: str | None = None
    organization: str | None = None
    description: str | None = None
    last_seen_at: datetime | None = None
    mention_count: int = 1
    archived_at: datetime | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None
