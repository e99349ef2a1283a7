import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from actorgraph.api import create_app
from actorgraph.domain.actor import Actor
from actorgraph.domain.relationships import Document, DocumentTag, Relationship
from actorgraph.domain.suggestion import Suggestion
from actorgraph.graph.builder import GraphBuilder
from actorgraph.graph.cache import GraphCache
from actorgraph.graph.service import GraphService
from actorgraph.stores.local_store import LocalStore
from actorgraph.suggestions.ledger import SuggestionLedger

CONTEXT = "proj1"


@pytest.fixture
def test_actors() -> list[Actor]:
    """Alice and Bob share a team, Carol shares an org with Alice, Dave is alone."""
    return [
        Actor(
            id="alice",
            context_id=CONTEXT,
            name="Alice",
            actor_type="person",
            team="Platform",
            organization="Acme",
        ),
        Actor(id="bob", context_id=CONTEXT, name="Bob", actor_type="person", team="Platform"),
        Actor(
            id="carol",
            context_id=CONTEXT,
            name="Carol",
            actor_type="person",
            organization="Acme",
        ),
        Actor(id="billing", context_id=CONTEXT, name="Billing", actor_type="system"),
        Actor(id="dave", context_id=CONTEXT, name="Dave", actor_type="person"),
    ]


@pytest.fixture
def test_relationships() -> list[Relationship]:
    return [
        Relationship(
            id=1,
            context_id=CONTEXT,
            source_actor_id="alice",
            target_actor_id="billing",
            relationship_type="owns",
            context="Alice owns the billing system",
            confidence=0.9,
            source_document_id="doc1",
        ),
    ]


@pytest.fixture
def test_documents() -> list[Document]:
    tags = [
        DocumentTag(tag_type="person", tag_value="Carol"),
        DocumentTag(tag_type="system", tag_value="Billing"),
    ]
    return [
        Document(id="doc1", context_id=CONTEXT, filepath="notes/billing.md", tags=tags),
        Document(id="doc2", context_id=CONTEXT, filepath="notes/standup.md", tags=tags),
    ]


@pytest.fixture
def test_suggestions() -> list[Suggestion]:
    return [
        Suggestion(
            id=1,
            context_id=CONTEXT,
            source_actor_id="bob",
            target_actor_id="dave",
            relationship_type="works_with",
            source_text="Bob paired with Dave",
            confidence=0.6,
            evidence_count=2,
            source_documents=["doc1", "doc2"],
            context_samples=["Bob paired with Dave"],
        ),
    ]


@pytest.fixture
def store(
    test_actors: list[Actor],
    test_relationships: list[Relationship],
    test_suggestions: list[Suggestion],
    test_documents: list[Document],
) -> LocalStore:
    return LocalStore.from_data(
        actors=test_actors,
        relationships=test_relationships,
        suggestions=test_suggestions,
        documents=test_documents,
    )


@pytest.fixture
def graph_cache() -> GraphCache:
    return GraphCache()


@pytest.fixture
def builder(store: LocalStore) -> GraphBuilder:
    return GraphBuilder(store)


@pytest.fixture
def graph_service(builder: GraphBuilder, graph_cache: GraphCache) -> GraphService:
    return GraphService(builder, cache=graph_cache)


@pytest.fixture
def ledger(store: LocalStore, graph_cache: GraphCache) -> SuggestionLedger:
    return SuggestionLedger(store, graph_cache=graph_cache)


@pytest.fixture
def test_client(
    store: LocalStore, graph_service: GraphService, ledger: SuggestionLedger
) -> TestClient:
    """Create test client backed by an in-memory store."""
    app = create_app(store=store, graph_service=graph_service, ledger=ledger)
    return TestClient(app)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)
