"""Context-level graph operations backed by the builder and the cache."""

from . import queries
from .builder import GraphBuilder
from .cache import GraphCache
from .model import ActorGraph
from .options import GraphOptions


class GraphService:
    """Entry point for graph queries of a context.

    Every operation checks the store first, so an unavailable store fails with
    ServiceUnavailableError instead of serving a stale cached graph.
    """

    def __init__(self, builder: GraphBuilder, cache: GraphCache | None = None) -> None:
        self.builder = builder
        self.cache = cache if cache is not None else GraphCache()

    def graph(
        self, context_id: str, options: GraphOptions | None = None, refresh: bool = False
    ) -> ActorGraph:
        """Get the graph of a context, from the cache when possible."""
        self.builder.require_store()
        options = options or GraphOptions()
        return self.cache.get_or_build(context_id, options, self.builder.build, refresh=refresh)

    def to_json(
        self, context_id: str, options: GraphOptions | None = None, refresh: bool = False
    ) -> dict[str, list[dict]]:
        options = options or GraphOptions()
        graph = self.graph(context_id, options, refresh=refresh)
        return queries.to_json(graph, group_by=options.group_by)

    def stats(self, context_id: str, options: GraphOptions | None = None) -> queries.GraphStats:
        return queries.graph_stats(self.graph(context_id, options))

    def hubs(
        self, context_id: str, limit: int = 10, options: GraphOptions | None = None
    ) -> list[queries.Hub]:
        return queries.hubs(self.graph(context_id, options), limit=limit)

    def isolated(
        self, context_id: str, options: GraphOptions | None = None
    ) -> list[queries.ActorSummary]:
        return queries.isolated(self.graph(context_id, options))

    def shortest_path(
        self,
        context_id: str,
        source_id: str,
        target_id: str,
        options: GraphOptions | None = None,
    ) -> queries.PathResult:
        return queries.shortest_path(self.graph(context_id, options), str(source_id), str(target_id))

    def neighbors(
        self,
        context_id: str,
        actor_id: str,
        depth: int = 1,
        options: GraphOptions | None = None,
    ) -> queries.Neighborhood:
        return queries.neighborhood(self.graph(context_id, options), str(actor_id), depth=depth)

    def invalidate(self, context_id: str) -> int:
        return self.cache.invalidate(context_id)

    def refresh(self, context_id: str) -> dict[str, int]:
        """Drop the cached graphs of a context and rebuild the default one.

        Returns:
            Node and edge counts of the rebuilt graph
        """
        self.builder.require_store()
        self.invalidate(context_id)
        graph = self.graph(context_id, refresh=True)
        return {"nodes": graph.node_count, "edges": graph.edge_count}
