"""Building actor graphs from the store."""

import logging

from actorgraph.domain.actor import Actor
from actorgraph.errors import DuplicateEdgeError, ServiceUnavailableError
from actorgraph.stores.base import Store

from .model import ActorGraph, EdgeSource, GraphEdge, GraphNode, color_for_actor_type
from .options import GraphOptions
from .synthesizer import EdgeWeights, synthesize_edges

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds a fresh ActorGraph for a context from actors, relationships and tags."""

    def __init__(
        self,
        store: Store | None,
        weights: EdgeWeights | None = None,
        tag_min_documents: int = 2,
    ) -> None:
        """Initialize the builder.

        Args:
            store: Store to load actors, relationships and tag co-occurrences from
            weights: Edge weights passed to the synthesizer
            tag_min_documents: Shared documents needed for a tag co-occurrence edge
        """
        self.store = store
        self.weights = weights or EdgeWeights()
        self.tag_min_documents = tag_min_documents

    def require_store(self) -> Store:
        if self.store is None or not self.store.is_available():
            raise ServiceUnavailableError("Store not available")
        return self.store

    def build(self, context_id: str, options: GraphOptions | None = None) -> ActorGraph:
        """Build the graph of a context.

        Args:
            context_id: Context to build
            options: Actor and edge filters

        Returns:
            A new graph with degree metrics computed
        """
        options = options or GraphOptions()
        store = self.require_store()

        actors = store.list_actors(
            context_id,
            actor_types=list(options.actor_types) if options.actor_types else None,
            include_archived=options.include_archived,
        )
        relationships = store.list_relationships(
            context_id, include_unapproved=options.include_unapproved
        )
        cooccurrences = (
            store.person_project_cooccurrence(context_id, min_docs=self.tag_min_documents)
            if options.include_implicit
            else []
        )

        edges = synthesize_edges(
            actors,
            relationships,
            cooccurrences,
            weights=self.weights,
            include_implicit=options.include_implicit,
        )

        graph = ActorGraph(context_id)
        for actor in actors:
            graph.add_node(_actor_node(actor))

        for edge in edges:
            if not _passes_filters(edge, options):
                continue
            try:
                graph.add_edge(edge.model_copy())
            except DuplicateEdgeError:
                logger.debug(f"Ignoring duplicate edge {edge.source} -> {edge.target}")

        graph.compute_metrics()

        implicit_count = sum(1 for e in graph.edges() if e.edge_source is not EdgeSource.EXPLICIT)
        logger.info(
            f"Built graph for context {context_id}: {graph.node_count} nodes, "
            f"{graph.edge_count} edges ({implicit_count} implicit)"
        )
        return graph


def _actor_node(actor: Actor) -> GraphNode:
    return GraphNode(
        id=actor.id,
        label=actor.name,
        actor_type=actor.actor_type,
        role=actor.role,
        team=actor.team,
        organization=actor.organization,
        last_seen_at=actor.last_seen_at,
        mention_count=actor.mention_count or 1,
        color=color_for_actor_type(actor.actor_type),
    )


def _passes_filters(edge: GraphEdge, options: GraphOptions) -> bool:
    if options.edge_types and edge.edge_source not in options.edge_types:
        return False
    if options.min_confidence > 0 and edge.confidence < options.min_confidence:
        return False
    return True
