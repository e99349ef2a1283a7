"""Endpoints for the actor lifecycle and confirmed relationships.

Every write drops the cached graphs of the context it touches.
"""

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from actorgraph.graph.service import GraphService
from actorgraph.stores.base import Store


class ActorIds(BaseModel):
    actor_ids: list[str] = Field(min_length=1)


class RelationshipCreate(BaseModel):
    source_actor_id: str
    target_actor_id: str
    relationship_type: str
    context: str | None = None
    strength: float = 1.0
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


def _create_archive_endpoint(store: Store, graph_service: GraphService):
    """Create the actor archive endpoint handler."""

    async def archive_actors(context_id: str, body: ActorIds):
        archived = 0
        with store.transaction():
            for actor_id in body.actor_ids:
                actor = store.get_actor(context_id, actor_id)
                if actor is None or actor.is_archived:
                    continue
                store.archive_actor(context_id, actor_id)
                archived += 1
        if archived:
            graph_service.invalidate(context_id)
        logger.info(f"Archived {archived} actors in context {context_id}")
        return {"archived": archived}

    return archive_actors


def _create_restore_endpoint(store: Store, graph_service: GraphService):
    """Create the actor restore endpoint handler."""

    async def restore_actors(context_id: str, body: ActorIds):
        restored = 0
        with store.transaction():
            for actor_id in body.actor_ids:
                actor = store.get_actor(context_id, actor_id)
                if actor is None or not actor.is_archived:
                    continue
                store.restore_actor(context_id, actor_id)
                restored += 1
        if restored:
            graph_service.invalidate(context_id)
        logger.info(f"Restored {restored} actors in context {context_id}")
        return {"restored": restored}

    return restore_actors


def _create_add_relationship_endpoint(store: Store, graph_service: GraphService):
    """Create the confirmed relationship endpoint handler."""

    async def add_relationship(context_id: str, body: RelationshipCreate):
        if body.source_actor_id == body.target_actor_id:
            raise HTTPException(status_code=422, detail="An actor cannot relate to itself")
        for actor_id in (body.source_actor_id, body.target_actor_id):
            if store.get_actor(context_id, actor_id) is None:
                raise HTTPException(status_code=404, detail=f"Actor {actor_id} not found")

        with store.transaction():
            relationship = store.upsert_relationship(
                context_id=context_id,
                source_actor_id=body.source_actor_id,
                target_actor_id=body.target_actor_id,
                relationship_type=body.relationship_type,
                context=body.context,
                strength=body.strength,
                confidence=body.confidence,
                is_approved=True,
            )
        graph_service.invalidate(context_id)
        return {
            "id": relationship.id,
            "relationship_type": relationship.relationship_type,
            "context_id": context_id,
        }

    return add_relationship


def get_actors_router(*, store: Store, graph_service: GraphService) -> APIRouter:
    router = APIRouter(prefix="/api/contexts/{context_id}")

    router.post("/actors/archive")(_create_archive_endpoint(store, graph_service))
    router.post("/actors/restore")(_create_restore_endpoint(store, graph_service))
    router.post("/relationships")(_create_add_relationship_endpoint(store, graph_service))

    @router.get("/actors")
    async def list_actors(context_id: str, include_archived: bool = False):
        actors = store.list_actors(context_id, include_archived=include_archived)
        return {"actors": actors, "count": len(actors)}

    @router.get("/actors/stale")
    async def list_stale_actors(context_id: str, days: int = 90):
        if days < 0:
            raise HTTPException(status_code=422, detail="days must not be negative")
        actors = store.list_stale_actors(context_id, days)
        return {"stale_actors": actors, "threshold": days, "count": len(actors)}

    @router.get("/actors/archived")
    async def list_archived_actors(context_id: str):
        actors = store.list_archived_actors(context_id)
        return {"archived_actors": actors, "count": len(actors)}

    @router.get("/relationships")
    async def list_relationships(context_id: str, include_unapproved: bool = False):
        relationships = store.list_relationships(
            context_id, include_unapproved=include_unapproved
        )
        return {
            "relationships": relationships,
            "total": len(relationships),
            "context_id": context_id,
        }

    @router.delete("/relationships/{relationship_id}")
    async def delete_relationship(context_id: str, relationship_id: int):
        with store.transaction():
            deleted = store.delete_relationship(context_id, relationship_id)
        if deleted:
            graph_service.invalidate(context_id)
        return {"deleted": deleted}

    return router
