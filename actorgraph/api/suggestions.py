"""Endpoints for reviewing relationship suggestions."""

from typing import Literal

from fastapi import APIRouter, HTTPException
from loguru import logger

from actorgraph.domain.suggestion import Observation
from actorgraph.errors import NotFoundError
from actorgraph.suggestions.ledger import SortBy, SuggestionLedger


def _create_list_endpoint(ledger: SuggestionLedger):
    """Create the suggestion inbox endpoint handler."""

    async def list_suggestions(
        context_id: str,
        status: Literal["pending", "approved"] = "pending",
        include_dismissed: bool = False,
        min_evidence: int = 0,
        sort_by: SortBy = "evidence",
    ):
        items = ledger.list_suggestions(
            context_id,
            approved=status == "approved",
            include_dismissed=include_dismissed,
            min_evidence=min_evidence,
            sort_by=sort_by,
        )
        return {
            "items": items,
            "stats": ledger.stats(context_id),
            "total": len(items),
            "context_id": context_id,
        }

    return list_suggestions


def _create_observation_endpoint(ledger: SuggestionLedger):
    """Create the observation merge endpoint handler."""

    async def merge_observation(context_id: str, observation: Observation):
        try:
            suggestion = ledger.merge_observation(context_id, observation)
        except Exception as e:
            logger.error(f"Error merging observation in context {context_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e
        if suggestion is None:
            logger.debug(f"Observation discarded in context {context_id}")
        return {"merged": suggestion is not None, "suggestion": suggestion}

    return merge_observation


def get_suggestions_router(*, ledger: SuggestionLedger) -> APIRouter:
    router = APIRouter(prefix="/api/contexts/{context_id}/suggestions")

    router.get("")(_create_list_endpoint(ledger))
    router.post("/observations")(_create_observation_endpoint(ledger))

    @router.post("/{suggestion_id}/approve")
    async def approve_suggestion(context_id: str, suggestion_id: int):
        try:
            result = ledger.approve(context_id, suggestion_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Error approving suggestion {suggestion_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e
        return {
            "approved": True,
            "relationship_id": result.relationship.id,
            "evidence": result.suggestion.evidence_count,
        }

    @router.post("/{suggestion_id}/reject")
    async def reject_suggestion(context_id: str, suggestion_id: int):
        ledger.reject(context_id, suggestion_id)
        return {"rejected": True}

    @router.post("/{suggestion_id}/dismiss")
    async def dismiss_suggestion(context_id: str, suggestion_id: int):
        suggestion = ledger.dismiss(context_id, suggestion_id)
        return {"dismissed": suggestion.is_dismissed, "suggestion": suggestion}

    return router
