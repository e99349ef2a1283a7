import sys

from loguru import logger

from actorgraph.api import create_app
from actorgraph.config import settings
from actorgraph.graph.builder import GraphBuilder
from actorgraph.graph.cache import GraphCache
from actorgraph.graph.service import GraphService
from actorgraph.graph.synthesizer import EdgeWeights
from actorgraph.stores.local_store import LocalStore
from actorgraph.suggestions.ledger import SuggestionLedger

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Loading actor graph store from {settings.store_path}")
store = LocalStore(filepath=settings.store_path)
graph_cache = GraphCache()
builder = GraphBuilder(
    store,
    weights=EdgeWeights(
        explicit=settings.explicit_edge_weight,
        same_team=settings.team_edge_weight,
        same_org=settings.org_edge_weight,
        tag_cooccurrence=settings.tag_edge_weight,
    ),
    tag_min_documents=settings.tag_min_documents,
)
graph_service = GraphService(builder, cache=graph_cache)
ledger = SuggestionLedger(
    store,
    graph_cache=graph_cache,
    max_context_samples=settings.max_context_samples,
    context_sample_chars=settings.context_sample_chars,
    min_confidence=settings.suggestion_min_confidence,
    strong_evidence_threshold=settings.strong_evidence_threshold,
    high_confidence_threshold=settings.high_confidence_threshold,
    list_limit=settings.suggestion_list_limit,
)
app = create_app(store=store, graph_service=graph_service, ledger=ledger)
