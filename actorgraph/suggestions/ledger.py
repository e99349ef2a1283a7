"""Suggestion ledger: candidate relationships that simmer until reviewed."""

import logging
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel

from actorgraph.domain.relationships import Relationship
from actorgraph.domain.suggestion import (
    Observation,
    Suggestion,
    SuggestionStats,
    SuggestionStatus,
    SuggestionView,
)
from actorgraph.errors import NotFoundError
from actorgraph.graph.cache import GraphCache
from actorgraph.stores.base import Store

logger = logging.getLogger(__name__)

SortBy = Literal["evidence", "confidence"]


class ApprovalResult(BaseModel):
    suggestion: Suggestion
    relationship: Relationship


class SuggestionLedger:
    """Owns the lifecycle of suggestions: merge, list, approve, reject and dismiss.

    A suggestion is pending until it is approved (promoted into a confirmed
    relationship), rejected (deleted, may come back) or dismissed (kept forever
    and never revived by new observations).
    """

    def __init__(
        self,
        store: Store,
        graph_cache: GraphCache | None = None,
        *,
        max_context_samples: int = 5,
        context_sample_chars: int = 500,
        min_confidence: float = 0.3,
        strong_evidence_threshold: int = 3,
        high_confidence_threshold: float = 0.7,
        list_limit: int = 50,
    ) -> None:
        """Initialize the ledger.

        Args:
            store: Store holding suggestions, relationships and actors
            graph_cache: Cache to invalidate when an approval changes a context's relationships
            max_context_samples: Excerpts kept per suggestion, newest first
            context_sample_chars: Excerpts are truncated to this length
            min_confidence: Observations below this confidence are discarded
            strong_evidence_threshold: Evidence count counted as strong in stats
            high_confidence_threshold: Confidence counted as high in stats
            list_limit: Default maximum number of listed suggestions
        """
        self.store = store
        self.graph_cache = graph_cache
        self.max_context_samples = max_context_samples
        self.context_sample_chars = context_sample_chars
        self.min_confidence = min_confidence
        self.strong_evidence_threshold = strong_evidence_threshold
        self.high_confidence_threshold = high_confidence_threshold
        self.list_limit = list_limit

    def list_suggestions(
        self,
        context_id: str,
        *,
        approved: bool = False,
        include_dismissed: bool = False,
        min_evidence: int = 0,
        sort_by: SortBy = "evidence",
        limit: int | None = None,
    ) -> list[SuggestionView]:
        """List suggestions of a context, joined with their actors.

        Args:
            context_id: Context to list
            approved: List approved suggestions instead of open ones
            include_dismissed: Also list dismissed suggestions
            min_evidence: Minimum evidence count
            sort_by: "evidence" orders by evidence then confidence, "confidence" the reverse
            limit: Maximum number of items, defaults to list_limit

        Returns:
            Suggestions ordered best first; ties keep ledger order
        """
        selected = []
        for suggestion in self.store.list_suggestions(context_id):
            if approved != (suggestion.status is SuggestionStatus.APPROVED):
                continue
            if suggestion.status is SuggestionStatus.DISMISSED and not include_dismissed:
                continue
            if min_evidence > 0 and suggestion.evidence_count < min_evidence:
                continue
            selected.append(suggestion)

        if sort_by == "confidence":
            selected.sort(key=lambda s: (-s.confidence, -s.evidence_count))
        else:
            selected.sort(key=lambda s: (-s.evidence_count, -s.confidence))

        limit = self.list_limit if limit is None else limit
        return [self._view(suggestion) for suggestion in selected[:limit]]

    def stats(self, context_id: str) -> SuggestionStats:
        """Summary of the suggestions of a context that are not approved yet."""
        open_suggestions = [
            s
            for s in self.store.list_suggestions(context_id)
            if s.status is not SuggestionStatus.APPROVED
        ]
        if not open_suggestions:
            return SuggestionStats()

        dismissed = sum(1 for s in open_suggestions if s.status is SuggestionStatus.DISMISSED)
        return SuggestionStats(
            total=len(open_suggestions),
            pending=len(open_suggestions) - dismissed,
            strong_evidence=sum(
                1 for s in open_suggestions if s.evidence_count >= self.strong_evidence_threshold
            ),
            high_confidence=sum(
                1 for s in open_suggestions if s.confidence >= self.high_confidence_threshold
            ),
            dismissed=dismissed,
            avg_evidence=round(
                sum(s.evidence_count for s in open_suggestions) / len(open_suggestions), 1
            ),
        )

    def approve(self, context_id: str, suggestion_id: int) -> ApprovalResult:
        """Promote a suggestion into a confirmed relationship.

        The relationship write and the status change happen in one store
        transaction. Approving again updates the same relationship.

        Raises:
            NotFoundError: If the suggestion does not exist in the context
        """
        with self.store.transaction():
            suggestion = self._get(context_id, suggestion_id)
            relationship = self.store.upsert_relationship(
                context_id=context_id,
                source_actor_id=suggestion.source_actor_id,
                target_actor_id=suggestion.target_actor_id,
                relationship_type=suggestion.relationship_type,
                context=suggestion.source_text or None,
                confidence=suggestion.confidence,
                is_approved=True,
                source_document_id=(
                    suggestion.source_documents[0] if suggestion.source_documents else None
                ),
            )
            approved = suggestion.model_copy(
                update={"status": SuggestionStatus.APPROVED, "reviewed_at": _now()}
            )
            self.store.update_suggestion(approved)

        logger.info(
            f"Approved suggestion {suggestion_id} in context {context_id} "
            f"as relationship {relationship.id}"
        )
        if self.graph_cache is not None:
            self.graph_cache.invalidate(context_id)
        return ApprovalResult(suggestion=approved, relationship=relationship)

    def reject(self, context_id: str, suggestion_id: int) -> Suggestion:
        """Delete a suggestion. The same triple may be suggested again later.

        Raises:
            NotFoundError: If the suggestion does not exist in the context
        """
        with self.store.transaction():
            suggestion = self._get(context_id, suggestion_id)
            self.store.delete_suggestion(context_id, suggestion_id)
        logger.info(f"Rejected suggestion {suggestion_id} in context {context_id}")
        return suggestion

    def dismiss(self, context_id: str, suggestion_id: int) -> Suggestion:
        """Dismiss a suggestion forever; later observations of its triple are ignored.

        Approved suggestions are final and are returned unchanged.

        Raises:
            NotFoundError: If the suggestion does not exist in the context
        """
        with self.store.transaction():
            suggestion = self._get(context_id, suggestion_id)
            if suggestion.status is SuggestionStatus.APPROVED:
                logger.info(f"Suggestion {suggestion_id} is already approved, not dismissing")
                return suggestion
            dismissed = suggestion.model_copy(
                update={"status": SuggestionStatus.DISMISSED, "reviewed_at": _now()}
            )
            self.store.update_suggestion(dismissed)
        logger.info(f"Dismissed suggestion {suggestion_id} in context {context_id}")
        return dismissed

    def merge_observation(self, context_id: str, observation: Observation) -> Suggestion | None:
        """Record an observation of a (source, target, type) triple.

        A new triple creates a pending suggestion with evidence 1. A known triple
        gains evidence when the observation comes from a document not seen before.
        Evidence counts distinct documents, not merges: observing a triple again in
        an already recorded document adds no evidence, so re-running extraction
        over the same documents cannot inflate it. An observation without a
        document reference always counts. Either way its confidence becomes
        the higher of the stored and observed values and the excerpt is pushed to the
        front of its samples. Dismissed triples are left untouched.

        Args:
            context_id: Context of the observation
            observation: The observed candidate relationship

        Returns:
            The stored suggestion, or None when the observation was discarded
        """
        if observation.confidence < self.min_confidence:
            logger.debug(
                f"Discarding observation {observation.source_actor_id} -> "
                f"{observation.target_actor_id}: confidence {observation.confidence:.2f} "
                f"below {self.min_confidence:.2f}"
            )
            return None
        if observation.source_actor_id == observation.target_actor_id:
            logger.debug(f"Discarding self-referencing observation on {observation.source_actor_id}")
            return None

        excerpt = (observation.excerpt or "").strip()[: self.context_sample_chars]
        document_ref = observation.document_ref
        now = _now()

        with self.store.transaction():
            existing = self.store.find_suggestion(
                context_id,
                observation.source_actor_id,
                observation.target_actor_id,
                observation.relationship_type,
            )

            if existing is None:
                return self.store.add_suggestion(
                    Suggestion(
                        id=0,
                        context_id=context_id,
                        source_actor_id=observation.source_actor_id,
                        target_actor_id=observation.target_actor_id,
                        relationship_type=observation.relationship_type,
                        source_text=excerpt,
                        confidence=observation.confidence,
                        evidence_count=1,
                        source_documents=[document_ref] if document_ref else [],
                        context_samples=[excerpt] if excerpt else [],
                        created_at=now,
                        last_seen_at=now,
                    )
                )

            if existing.status is SuggestionStatus.DISMISSED:
                logger.debug(f"Ignoring observation of dismissed suggestion {existing.id}")
                return existing

            is_new_document = document_ref is None or document_ref not in existing.source_documents
            source_documents = list(existing.source_documents)
            if document_ref and is_new_document:
                source_documents.append(document_ref)

            context_samples = list(existing.context_samples)
            if excerpt:
                context_samples = [excerpt] + [s for s in context_samples if s != excerpt]
            context_samples = context_samples[: self.max_context_samples]

            updated = existing.model_copy(
                update={
                    "evidence_count": existing.evidence_count + (1 if is_new_document else 0),
                    "source_documents": source_documents,
                    "context_samples": context_samples,
                    "confidence": max(existing.confidence, observation.confidence),
                    "source_text": existing.source_text or excerpt,
                    "last_seen_at": now,
                }
            )
            self.store.update_suggestion(updated)

        logger.debug(
            f"Simmer: suggestion {updated.id} evidence {updated.evidence_count}, "
            f"confidence {updated.confidence:.0%}"
        )
        return updated

    def _get(self, context_id: str, suggestion_id: int) -> Suggestion:
        suggestion = self.store.get_suggestion(context_id, suggestion_id)
        if suggestion is None:
            raise NotFoundError(f"Suggestion {suggestion_id} not found in context {context_id}")
        return suggestion

    def _view(self, suggestion: Suggestion) -> SuggestionView:
        source = self.store.get_actor(suggestion.context_id, suggestion.source_actor_id)
        target = self.store.get_actor(suggestion.context_id, suggestion.target_actor_id)
        return SuggestionView(
            suggestion=suggestion,
            source_name=source.name if source else None,
            source_type=source.actor_type if source else None,
            target_name=target.name if target else None,
            target_type=target.actor_type if target else None,
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)
