from fastapi import APIRouter

from actorgraph.domain.suggestion import SuggestionStatus
from actorgraph.errors import ServiceUnavailableError
from actorgraph.stores.base import Store


def _create_context_stats_endpoint(store: Store):
    """Create the context stats endpoint handler."""

    async def context_stats(context_id: str):
        """Count the actors, relationships and open suggestions of a context."""
        if not store.is_available():
            raise ServiceUnavailableError("Store not available")

        pending = [
            s
            for s in store.list_suggestions(context_id)
            if s.status is not SuggestionStatus.APPROVED
        ]
        return {
            "context_id": context_id,
            "actors": len(store.list_actors(context_id, include_archived=True)),
            "relationships": len(store.list_relationships(context_id, include_unapproved=True)),
            "pending_suggestions": len(pending),
        }

    return context_stats


def get_endpoints_router(*, store: Store) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy" if store.is_available() else "unavailable"}

    router.get("/api/contexts/{context_id}/stats")(_create_context_stats_endpoint(store))

    return router
