"""Endpoints serving the actor graph and queries over it."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from actorgraph.config import settings
from actorgraph.graph import queries
from actorgraph.graph.options import GraphOptions, GroupBy
from actorgraph.graph.service import GraphService


def graph_options(
    actor_types: str | None = None,
    edge_types: str | None = None,
    min_confidence: float = 0.0,
    include_implicit: bool = True,
    include_archived: bool = False,
    include_unapproved: bool = False,
    group_by: GroupBy | None = None,
) -> GraphOptions:
    """Parse graph filters from query parameters; list filters are comma separated."""
    try:
        return GraphOptions(
            actor_types=actor_types,
            edge_types=edge_types,
            min_confidence=min_confidence,
            include_implicit=include_implicit,
            include_archived=include_archived,
            include_unapproved=include_unapproved,
            group_by=group_by,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _create_graph_endpoint(graph_service: GraphService):
    """Create the graph projection endpoint handler."""

    async def get_graph(
        context_id: str,
        refresh: bool = False,
        options: GraphOptions = Depends(graph_options),  # noqa: B008
    ):
        return graph_service.to_json(context_id, options, refresh=refresh)

    return get_graph


def _create_path_endpoint(graph_service: GraphService):
    """Create the shortest path endpoint handler."""

    async def find_path(context_id: str, from_id: str, to_id: str):
        result = graph_service.shortest_path(context_id, from_id, to_id)
        if result.reason == "not_found":
            raise HTTPException(status_code=404, detail="Actor not found in graph")
        return {"path": result.path, "found": result.found}

    return find_path


def _create_neighbors_endpoint(graph_service: GraphService):
    """Create the neighbors endpoint handler."""

    async def get_neighbors(context_id: str, actor_id: str, depth: int = 1):
        if depth < 0:
            raise HTTPException(status_code=422, detail="depth must not be negative")
        result = graph_service.neighbors(context_id, actor_id, depth=depth)
        if not result.found:
            raise HTTPException(status_code=404, detail="Actor not found in graph")
        return queries.neighborhood_json(result)

    return get_neighbors


def get_graph_router(*, graph_service: GraphService) -> APIRouter:
    router = APIRouter(prefix="/api/contexts/{context_id}/graph")

    router.get("")(_create_graph_endpoint(graph_service))
    router.get("/path/{from_id}/{to_id}")(_create_path_endpoint(graph_service))
    router.get("/neighbors/{actor_id}")(_create_neighbors_endpoint(graph_service))

    @router.get("/stats")
    async def graph_stats(context_id: str):
        return graph_service.stats(context_id)

    @router.get("/hubs")
    async def get_hubs(context_id: str, limit: int = settings.default_hub_limit):
        return {"hubs": graph_service.hubs(context_id, limit=limit)}

    @router.get("/isolated")
    async def get_isolated(context_id: str):
        return {"isolated": graph_service.isolated(context_id)}

    @router.post("/refresh")
    async def refresh_graph(context_id: str):
        counts = graph_service.refresh(context_id)
        return {"refreshed": True, **counts}

    return router
