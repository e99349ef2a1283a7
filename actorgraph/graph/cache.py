"""Process-wide cache of built graphs."""

import logging
from typing import Callable

from .model import ActorGraph
from .options import GraphOptions

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


class GraphCache:
    """Memoizes built graphs per (context, options).

    Entries never expire. Code that changes actors, relationships or approved
    suggestions of a context must call invalidate() for that context.
    """

    def __init__(self) -> None:
        self._graphs: dict[CacheKey, ActorGraph] = {}

    @staticmethod
    def key(context_id: str, options: GraphOptions) -> CacheKey:
        return (str(context_id), options.cache_key())

    def get(self, context_id: str, options: GraphOptions) -> ActorGraph | None:
        return self._graphs.get(self.key(context_id, options))

    def put(self, context_id: str, options: GraphOptions, graph: ActorGraph) -> None:
        self._graphs[self.key(context_id, options)] = graph

    def get_or_build(
        self,
        context_id: str,
        options: GraphOptions,
        build: Callable[[str, GraphOptions], ActorGraph],
        refresh: bool = False,
    ) -> ActorGraph:
        """Return the cached graph, building and storing it on a miss or when refresh is set."""
        if not refresh:
            cached = self.get(context_id, options)
            if cached is not None:
                return cached

        graph = build(context_id, options)
        self.put(context_id, options, graph)
        return graph

    def invalidate(self, context_id: str) -> int:
        """Drop every cached graph of a context.

        Returns:
            Number of entries dropped
        """
        keys = [key for key in self._graphs if key[0] == str(context_id)]
        for key in keys:
            del self._graphs[key]
        logger.info(f"Invalidated {len(keys)} cached graphs for context {context_id}")
        return len(keys)

    def clear(self) -> None:
        self._graphs.clear()
        logger.info("Cleared all graph caches")

    def __len__(self) -> int:
        return len(self._graphs)

    def __contains__(self, key: object) -> bool:
        return key in self._graphs
