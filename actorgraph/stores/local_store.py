import copy
import json
import logging
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from actorgraph.domain.actor import Actor
from actorgraph.domain.relationships import Document, Relationship, TagCooccurrence
from actorgraph.domain.suggestion import Suggestion
from actorgraph.errors import NotFoundError
from actorgraph.stores.base import Store

logger = logging.getLogger(__name__)

COOCCURRENCE_TAG_TYPES = ("project", "system", "organization")


class LocalStore(Store):
    """Local store that keeps actors, relationships, suggestions and tags in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalStore.

        Args:
            filepath: Path to store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._closed = False
        self._transaction_depth = 0

        self._actors: dict[str, dict[str, Actor]] = {}
        self._relationships: dict[int, Relationship] = {}
        self._suggestions: dict[int, Suggestion] = {}
        self._documents: dict[str, dict[str, Document]] = {}
        self._next_relationship_id = 1
        self._next_suggestion_id = 1

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._load(data)

    @classmethod
    def from_data(
        cls,
        actors: list[Actor] | None = None,
        relationships: list[Relationship] | None = None,
        suggestions: list[Suggestion] | None = None,
        documents: list[Document] | None = None,
    ) -> "LocalStore":
        """Create LocalStore from provided data (useful for testing).

        Args:
            actors: Actors of any context
            relationships: Confirmed relationships, IDs are kept
            suggestions: Suggestions, IDs are kept
            documents: Tagged documents

        Returns:
            LocalStore instance with provided data
        """
        instance = cls(filepath=None)
        instance._load(
            {
                "actors": [a.model_dump(mode="json") for a in actors or []],
                "relationships": [r.model_dump(mode="json") for r in relationships or []],
                "suggestions": [s.model_dump(mode="json") for s in suggestions or []],
                "documents": [d.model_dump(mode="json") for d in documents or []],
            }
        )
        return instance

    def _load(self, data: dict) -> None:
        for actor_data in data.get("actors", []):
            actor = Actor(**actor_data)
            self._actors.setdefault(actor.context_id, {})[actor.id] = actor
        for rel_data in data.get("relationships", []):
            rel = Relationship(**rel_data)
            self._relationships[rel.id] = rel
        for suggestion_data in data.get("suggestions", []):
            suggestion = Suggestion(**suggestion_data)
            self._suggestions[suggestion.id] = suggestion
        for doc_data in data.get("documents", []):
            doc = Document(**doc_data)
            self._documents.setdefault(doc.context_id, {})[doc.id] = doc

        self._next_relationship_id = max(self._relationships, default=0) + 1
        self._next_suggestion_id = max(self._suggestions, default=0) + 1

    # -- lifecycle -------------------------------------------------------

    def is_available(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """Close the store; graph queries against it fail until it is reopened."""
        self._closed = True

    def reopen(self) -> None:
        self._closed = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run a block all-or-nothing.

        The outermost transaction snapshots the tables and restores them if the
        block raises. On success a file-backed store is saved.
        """
        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield
            finally:
                self._transaction_depth -= 1
            return

        snapshot = self._snapshot()
        self._transaction_depth = 1
        try:
            yield
        except BaseException:
            self._restore(snapshot)
            logger.warning("Transaction rolled back")
            raise
        finally:
            self._transaction_depth = 0

        if self._filepath:
            self.save()

    def _snapshot(self) -> dict:
        return copy.deepcopy(
            {
                "actors": self._actors,
                "relationships": self._relationships,
                "suggestions": self._suggestions,
                "documents": self._documents,
                "next_relationship_id": self._next_relationship_id,
                "next_suggestion_id": self._next_suggestion_id,
            }
        )

    def _restore(self, snapshot: dict) -> None:
        self._actors = snapshot["actors"]
        self._relationships = snapshot["relationships"]
        self._suggestions = snapshot["suggestions"]
        self._documents = snapshot["documents"]
        self._next_relationship_id = snapshot["next_relationship_id"]
        self._next_suggestion_id = snapshot["next_suggestion_id"]

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = str(save_path)
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        data = {
            "actors": [
                actor.model_dump(mode="json")
                for actors in self._actors.values()
                for actor in actors.values()
            ],
            "relationships": [rel.model_dump(mode="json") for rel in self._relationships.values()],
            "suggestions": [s.model_dump(mode="json") for s in self._suggestions.values()],
            "documents": [
                doc.model_dump(mode="json")
                for docs in self._documents.values()
                for doc in docs.values()
            ],
        }
        with open(save_path, "w") as f:
            json.dump(data, f)

    # -- actors ----------------------------------------------------------

    def get_actor(self, context_id: str, actor_id: str) -> Actor | None:
        """Get an actor by its ID."""
        return self._actors.get(context_id, {}).get(actor_id)

    def list_actors(
        self,
        context_id: str,
        actor_types: list[str] | None = None,
        include_archived: bool = False,
    ) -> list[Actor]:
        """List the actors of a context in insertion order."""
        actors = []
        for actor in self._actors.get(context_id, {}).values():
            if actor.is_archived and not include_archived:
                continue
            if actor_types and actor.actor_type not in actor_types:
                continue
            actors.append(actor)
        return actors

    def upsert_actor(self, actor: Actor) -> Actor:
        """Add a new actor or record a new mention of an existing one.

        Empty optional attributes of the incoming actor never overwrite stored ones.
        """
        now = datetime.now(timezone.utc)
        context_actors = self._actors.setdefault(actor.context_id, {})
        existing = context_actors.get(actor.id)
        if existing is None:
            stored = actor.model_copy(update={"last_seen_at": actor.last_seen_at or now})
        else:
            stored = existing.model_copy(
                update={
                    "name": actor.name,
                    "actor_type": actor.actor_type,
                    "role": actor.role or existing.role,
                    "team": actor.team or existing.team,
                    "organization": actor.organization or existing.organization,
                    "description": actor.description or existing.description,
                    "last_seen_at": now,
                    "mention_count": existing.mention_count + 1,
                }
            )
        context_actors[actor.id] = stored
        return stored

    def archive_actor(self, context_id: str, actor_id: str) -> Actor:
        """Archive an actor so it is left out of graph builds."""
        actor = self.get_actor(context_id, actor_id)
        if actor is None:
            raise NotFoundError(f"Actor {actor_id} not found in context {context_id}")
        archived = actor.model_copy(update={"archived_at": datetime.now(timezone.utc)})
        self._actors[context_id][actor_id] = archived
        return archived

    def restore_actor(self, context_id: str, actor_id: str) -> Actor:
        """Bring an archived actor back into graph builds."""
        actor = self.get_actor(context_id, actor_id)
        if actor is None:
            raise NotFoundError(f"Actor {actor_id} not found in context {context_id}")
        restored = actor.model_copy(update={"archived_at": None})
        self._actors[context_id][actor_id] = restored
        return restored

    def list_stale_actors(self, context_id: str, days: int) -> list[Actor]:
        """List active actors last seen more than days ago, oldest first.

        Actors that were never seen are not stale. Naive timestamps are taken as UTC.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        stale = [
            actor
            for actor in self._actors.get(context_id, {}).values()
            if not actor.is_archived
            and actor.last_seen_at is not None
            and _as_utc(actor.last_seen_at) < cutoff
        ]
        return sorted(stale, key=lambda actor: _as_utc(actor.last_seen_at))

    def list_archived_actors(self, context_id: str) -> list[Actor]:
        """List archived actors, most recently archived first."""
        archived = [a for a in self._actors.get(context_id, {}).values() if a.is_archived]
        return sorted(archived, key=lambda actor: _as_utc(actor.archived_at), reverse=True)

    # -- relationships ---------------------------------------------------

    def list_relationships(
        self, context_id: str, include_unapproved: bool = False
    ) -> list[Relationship]:
        """List relationships of a context, annotated with the path of their source document."""
        documents = self._documents.get(context_id, {})
        relationships = []
        for rel in self._relationships.values():
            if rel.context_id != context_id:
                continue
            if not rel.is_approved and not include_unapproved:
                continue
            doc = documents.get(rel.source_document_id) if rel.source_document_id else None
            relationships.append(
                rel.model_copy(update={"source_file": doc.filepath if doc else None})
            )
        return relationships

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
        key = (context_id, source_actor_id, relationship_type, target_actor_id)
        for rel_id, existing in self._relationships.items():
            if existing.key == key:
                updated = existing.model_copy(
                    update={
                        "context": context or existing.context,
                        "strength": strength,
                        "confidence": confidence,
                        "is_approved": existing.is_approved or is_approved,
                        "source_document_id": existing.source_document_id or source_document_id,
                    }
                )
                self._relationships[rel_id] = updated
                return updated

        rel = Relationship(
            id=self._next_relationship_id,
            context_id=context_id,
            source_actor_id=source_actor_id,
            target_actor_id=target_actor_id,
            relationship_type=relationship_type,
            context=context,
            strength=strength,
            confidence=confidence,
            is_approved=is_approved,
            source_document_id=source_document_id,
        )
        self._relationships[rel.id] = rel
        self._next_relationship_id += 1
        return rel

    def delete_relationship(self, context_id: str, relationship_id: int) -> bool:
        """Delete a relationship, returning whether it existed."""
        rel = self._relationships.get(relationship_id)
        if rel is None or rel.context_id != context_id:
            return False
        del self._relationships[relationship_id]
        return True

    # -- suggestions -----------------------------------------------------

    def get_suggestion(self, context_id: str, suggestion_id: int) -> Suggestion | None:
        """Get a suggestion by its ID."""
        suggestion = self._suggestions.get(suggestion_id)
        if suggestion is None or suggestion.context_id != context_id:
            return None
        return suggestion

    def find_suggestion(
        self,
        context_id: str,
        source_actor_id: str,
        target_actor_id: str,
        relationship_type: str,
    ) -> Suggestion | None:
        """Find the suggestion for a (source, target, type) triple, whatever its status."""
        triple = (source_actor_id, target_actor_id, relationship_type)
        for suggestion in self._suggestions.values():
            if suggestion.context_id == context_id and suggestion.triple == triple:
                return suggestion
        return None

    def list_suggestions(self, context_id: str) -> list[Suggestion]:
        """List every suggestion of a context in ID order."""
        return [s for s in self._suggestions.values() if s.context_id == context_id]

    def add_suggestion(self, suggestion: Suggestion) -> Suggestion:
        """Store a new suggestion, assigning its ID."""
        stored = suggestion.model_copy(update={"id": self._next_suggestion_id})
        self._suggestions[stored.id] = stored
        self._next_suggestion_id += 1
        return stored

    def update_suggestion(self, suggestion: Suggestion) -> None:
        """Replace a stored suggestion."""
        if suggestion.id not in self._suggestions:
            raise NotFoundError(f"Suggestion {suggestion.id} not found")
        self._suggestions[suggestion.id] = suggestion

    def delete_suggestion(self, context_id: str, suggestion_id: int) -> bool:
        """Delete a suggestion, returning whether it existed."""
        if self.get_suggestion(context_id, suggestion_id) is None:
            return False
        del self._suggestions[suggestion_id]
        return True

    # -- tags ------------------------------------------------------------

    def add_document(self, document: Document) -> None:
        """Add or replace a tagged document."""
        self._documents.setdefault(document.context_id, {})[document.id] = document

    def person_project_cooccurrence(
        self, context_id: str, min_docs: int = 2
    ) -> list[TagCooccurrence]:
        """Count documents on which a person tag appears with a project/system/organization tag.

        Args:
            context_id: Context whose documents are counted
            min_docs: Minimum number of shared documents for a pair to be returned

        Returns:
            Pairs sorted by person then project
        """
        counts: Counter[tuple[str, str]] = Counter()
        for doc in self._documents.get(context_id, {}).values():
            people = {t.tag_value for t in doc.tags if t.tag_type == "person"}
            projects = {t.tag_value for t in doc.tags if t.tag_type in COOCCURRENCE_TAG_TYPES}
            for person in people:
                for project in projects:
                    counts[(person, project)] += 1

        return [
            TagCooccurrence(person=person, project=project, doc_count=count)
            for (person, project), count in sorted(counts.items())
            if count >= min_docs
        ]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
