"""Tests for the suggestion ledger lifecycle."""

import pytest

from actorgraph.domain.suggestion import Observation, SuggestionStatus
from actorgraph.errors import NotFoundError
from actorgraph.graph.cache import GraphCache
from actorgraph.graph.options import GraphOptions
from actorgraph.graph.service import GraphService
from actorgraph.stores.local_store import LocalStore
from actorgraph.suggestions.ledger import SuggestionLedger


def _observation(doc: str | None, excerpt: str | None = None, **kwargs) -> Observation:
    data = {
        "source_actor_id": "alice",
        "target_actor_id": "carol",
        "relationship_type": "works_with",
        "confidence": 0.5,
        "document_ref": doc,
        "excerpt": excerpt,
    }
    data.update(kwargs)
    return Observation(**data)


def test_first_observation_creates_pending_suggestion(ledger: SuggestionLedger) -> None:
    suggestion = ledger.merge_observation("proj1", _observation("doc1", "Alice and Carol met"))

    assert suggestion.id == 2
    assert suggestion.status is SuggestionStatus.PENDING
    assert suggestion.evidence_count == 1
    assert suggestion.source_documents == ["doc1"]
    assert suggestion.context_samples == ["Alice and Carol met"]
    assert suggestion.source_text == "Alice and Carol met"


def test_repeated_observations_accumulate_evidence(ledger: SuggestionLedger) -> None:
    ledger.merge_observation("proj1", _observation("doc1", "first", confidence=0.5))
    ledger.merge_observation("proj1", _observation("doc2", "second", confidence=0.8))
    suggestion = ledger.merge_observation("proj1", _observation("doc3", "third", confidence=0.4))

    assert suggestion.evidence_count == 3
    assert suggestion.confidence == 0.8
    assert suggestion.source_documents == ["doc1", "doc2", "doc3"]
    assert suggestion.context_samples == ["third", "second", "first"]
    assert suggestion.source_text == "first"


def test_same_document_does_not_add_evidence(ledger: SuggestionLedger) -> None:
    ledger.merge_observation("proj1", _observation("doc1", "first"))
    suggestion = ledger.merge_observation("proj1", _observation("doc1", "again", confidence=0.9))

    assert suggestion.evidence_count == 1
    assert suggestion.source_documents == ["doc1"]
    assert suggestion.context_samples == ["again", "first"]
    assert suggestion.confidence == 0.9


def test_context_samples_are_capped_and_truncated(store: LocalStore) -> None:
    ledger = SuggestionLedger(store, max_context_samples=5, context_sample_chars=500)
    for i in range(8):
        ledger.merge_observation("proj1", _observation(f"doc{i}", f"sample {i} " + "x" * 600))

    suggestion = store.find_suggestion("proj1", "alice", "carol", "works_with")

    assert suggestion.evidence_count == 8
    assert len(suggestion.context_samples) == 5
    assert suggestion.context_samples[0].startswith("sample 7")
    assert all(len(sample) == 500 for sample in suggestion.context_samples)


def test_low_confidence_and_self_references_are_discarded(ledger: SuggestionLedger) -> None:
    assert ledger.merge_observation("proj1", _observation("doc1", confidence=0.1)) is None
    assert ledger.merge_observation("proj1", _observation("doc1", target_actor_id="alice")) is None
    assert ledger.stats("proj1").total == 1


def test_direction_and_type_make_distinct_suggestions(ledger: SuggestionLedger) -> None:
    forward = ledger.merge_observation("proj1", _observation("doc1"))
    reverse = ledger.merge_observation(
        "proj1", _observation("doc1", source_actor_id="carol", target_actor_id="alice")
    )
    other_type = ledger.merge_observation("proj1", _observation("doc1", relationship_type="owns"))

    assert len({forward.id, reverse.id, other_type.id}) == 3


def test_dismissed_suggestion_is_not_revived(ledger: SuggestionLedger) -> None:
    suggestion = ledger.merge_observation("proj1", _observation("doc1"))
    ledger.dismiss("proj1", suggestion.id)

    merged = ledger.merge_observation("proj1", _observation("doc2", confidence=0.9))

    assert merged.id == suggestion.id
    assert merged.status is SuggestionStatus.DISMISSED
    assert merged.evidence_count == 1
    assert merged.confidence == 0.5
    assert [view.suggestion.id for view in ledger.list_suggestions("proj1")] == [1]


def test_rejected_suggestion_can_come_back(ledger: SuggestionLedger, store: LocalStore) -> None:
    suggestion = ledger.merge_observation("proj1", _observation("doc1"))
    ledger.reject("proj1", suggestion.id)

    assert store.get_suggestion("proj1", suggestion.id) is None

    again = ledger.merge_observation("proj1", _observation("doc2"))
    assert again.id != suggestion.id
    assert again.evidence_count == 1


def test_approve_creates_relationship(ledger: SuggestionLedger, store: LocalStore) -> None:
    result = ledger.approve("proj1", 1)

    assert result.suggestion.status is SuggestionStatus.APPROVED
    assert result.suggestion.reviewed_at is not None
    relationship = result.relationship
    assert (relationship.source_actor_id, relationship.target_actor_id) == ("bob", "dave")
    assert relationship.relationship_type == "works_with"
    assert relationship.confidence == 0.6
    assert relationship.context == "Bob paired with Dave"
    assert relationship.source_document_id == "doc1"
    assert relationship.is_approved


def test_approving_twice_keeps_one_relationship(ledger: SuggestionLedger, store: LocalStore) -> None:
    first = ledger.approve("proj1", 1)
    second = ledger.approve("proj1", 1)

    assert first.relationship.id == second.relationship.id
    matching = [
        rel
        for rel in store.list_relationships("proj1")
        if (rel.source_actor_id, rel.target_actor_id) == ("bob", "dave")
    ]
    assert len(matching) == 1


def test_approve_invalidates_cached_graphs(
    ledger: SuggestionLedger, graph_service: GraphService, graph_cache: GraphCache
) -> None:
    graph_service.graph("proj1")
    graph_service.graph("proj1", GraphOptions(include_implicit=False))
    assert not graph_service.graph("proj1").has_edge_between("bob", "dave")

    ledger.approve("proj1", 1)

    assert len(graph_cache) == 0
    assert graph_service.graph("proj1").has_edge_between("bob", "dave")


def test_approve_is_atomic(ledger: SuggestionLedger, store: LocalStore, monkeypatch) -> None:
    def fail(suggestion):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "update_suggestion", fail)

    with pytest.raises(RuntimeError):
        ledger.approve("proj1", 1)

    assert store.get_suggestion("proj1", 1).status is SuggestionStatus.PENDING
    assert store.find_suggestion("proj1", "bob", "dave", "works_with") is not None
    assert not any(rel.source_actor_id == "bob" for rel in store.list_relationships("proj1"))


def test_merging_into_approved_suggestion_keeps_it_approved(ledger: SuggestionLedger) -> None:
    ledger.approve("proj1", 1)

    merged = ledger.merge_observation(
        "proj1",
        _observation("doc3", source_actor_id="bob", target_actor_id="dave"),
    )

    assert merged.status is SuggestionStatus.APPROVED
    assert merged.evidence_count == 3


def test_unknown_suggestion_raises(ledger: SuggestionLedger) -> None:
    with pytest.raises(NotFoundError):
        ledger.approve("proj1", 99)
    with pytest.raises(NotFoundError):
        ledger.reject("proj1", 99)
    with pytest.raises(NotFoundError):
        ledger.dismiss("other", 1)


def test_list_suggestions_filters_and_sorts(ledger: SuggestionLedger) -> None:
    ledger.merge_observation("proj1", _observation("doc1", confidence=0.9))
    weak = ledger.merge_observation(
        "proj1", _observation("doc1", relationship_type="owns", confidence=0.4)
    )
    ledger.dismiss("proj1", weak.id)

    by_evidence = ledger.list_suggestions("proj1")
    assert [view.suggestion.id for view in by_evidence] == [1, 2]
    assert by_evidence[0].source_name == "Bob"
    assert by_evidence[0].target_type == "person"

    by_confidence = ledger.list_suggestions("proj1", sort_by="confidence")
    assert [view.suggestion.id for view in by_confidence] == [2, 1]

    with_dismissed = ledger.list_suggestions("proj1", include_dismissed=True)
    assert [view.suggestion.id for view in with_dismissed] == [1, 2, 3]

    assert [view.suggestion.id for view in ledger.list_suggestions("proj1", min_evidence=2)] == [1]
    assert len(ledger.list_suggestions("proj1", limit=1)) == 1
    assert ledger.list_suggestions("proj1", approved=True) == []


def test_stats(ledger: SuggestionLedger) -> None:
    ledger.merge_observation("proj1", _observation("doc1", confidence=0.9))
    dismissed = ledger.merge_observation("proj1", _observation("doc1", relationship_type="owns"))
    ledger.dismiss("proj1", dismissed.id)

    stats = ledger.stats("proj1")

    assert stats.total == 3
    assert stats.pending == 2
    assert stats.dismissed == 1
    assert stats.high_confidence == 1
    assert stats.strong_evidence == 0
    assert stats.avg_evidence == 1.3


def test_stats_of_empty_context(ledger: SuggestionLedger) -> None:
    assert ledger.stats("empty").total == 0
    assert ledger.stats("empty").avg_evidence == 0.0


def test_dismissing_approved_suggestion_keeps_it_approved(
    ledger: SuggestionLedger, store: LocalStore
) -> None:
    ledger.approve("proj1", 1)

    result = ledger.dismiss("proj1", 1)

    assert result.status is SuggestionStatus.APPROVED
    assert store.get_suggestion("proj1", 1).status is SuggestionStatus.APPROVED
    assert [view.suggestion.id for view in ledger.list_suggestions("proj1", approved=True)] == [1]
    assert ledger.stats("proj1").total == 0
    assert ledger.stats("proj1").dismissed == 0
