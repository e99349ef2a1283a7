from contextlib import AbstractContextManager
from typing import Protocol

from actorgraph.domain.actor import Actor
from actorgraph.domain.relationships import Document, Relationship, TagCooccurrence
from actorgraph.domain.suggestion import Suggestion


class ActorRepository(Protocol):
    def get_actor(self, context_id: str, actor_id: str) -> Actor | None:
        """Get an actor by its ID."""
        ...

    def list_actors(
        self,
        context_id: str,
        actor_types: list[str] | None = None,
        include_archived: bool = False,
    ) -> list[Actor]:
        """List the actors of a context, optionally filtered by type."""
        ...

    def upsert_actor(self, actor: Actor) -> Actor:
        """Add a new actor or record a new mention of an existing one."""
        ...

    def archive_actor(self, context_id: str, actor_id: str) -> Actor:
        """Archive an actor so it is left out of graph builds."""
        ...

    def restore_actor(self, context_id: str, actor_id: str) -> Actor:
        """Bring an archived actor back into graph builds."""
        ...

    def list_stale_actors(self, context_id: str, days: int) -> list[Actor]:
        """List active actors not seen for more than the given number of days, oldest first."""
        ...

    def list_archived_actors(self, context_id: str) -> list[Actor]:
        """List archived actors, most recently archived first."""
        ...


class RelationshipRepository(Protocol):
    def list_relationships(
        self, context_id: str, include_unapproved: bool = False
    ) -> list[Relationship]:
        """List confirmed relationships, annotated with their source file path."""
        ...

    def upsert_relationship(
        self,
        *,
        context_id: str,
        source_actor_id: str,
        target_actor_id: str,
        relationship_type: str,
        context: str | None = None,
        strength: float = 1.0,
        confidence: float = 1.0,
        is_approved: bool = True,
        source_document_id: str | None = None,
    ) -> Relationship:
        """Insert a relationship, or update context/strength/confidence if it already exists."""
        ...

    def delete_relationship(self, context_id: str, relationship_id: int) -> bool:
        """Delete a relationship, returning whether it existed."""
        ...


class SuggestionRepository(Protocol):
    def get_suggestion(self, context_id: str, suggestion_id: int) -> Suggestion | None:
        """Get a suggestion by its ID."""
        ...

    def find_suggestion(
        self,
        context_id: str,
        source_actor_id: str,
        target_actor_id: str,
        relationship_type: str,
    ) -> Suggestion | None:
        """Find the suggestion for a (source, target, type) triple, whatever its status."""
        ...

    def list_suggestions(self, context_id: str) -> list[Suggestion]:
        """List every suggestion of a context in ID order."""
        ...

    def add_suggestion(self, suggestion: Suggestion) -> Suggestion:
        """Store a new suggestion, assigning its ID."""
        ...

    def update_suggestion(self, suggestion: Suggestion) -> None:
        """Replace a stored suggestion."""
        ...

    def delete_suggestion(self, context_id: str, suggestion_id: int) -> bool:
        """Delete a suggestion, returning whether it existed."""
        ...


class TagRepository(Protocol):
    def add_document(self, document: Document) -> None:
        """Add or replace a tagged document."""
        ...

    def person_project_cooccurrence(
        self, context_id: str, min_docs: int = 2
    ) -> list[TagCooccurrence]:
        """Count documents on which a person tag appears with a project/system/organization tag."""
        ...


class Store(ActorRepository, RelationshipRepository, SuggestionRepository, TagRepository, Protocol):
    """All repositories behind a single transactional store."""

    def is_available(self) -> bool:
        """Whether the store is open and can serve queries."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """All-or-nothing block: changes made inside are discarded if it raises."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...
