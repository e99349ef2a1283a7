from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from actorgraph.api.actors import get_actors_router
from actorgraph.api.endpoints import get_endpoints_router
from actorgraph.api.graph import get_graph_router
from actorgraph.api.suggestions import get_suggestions_router
from actorgraph.config import settings
from actorgraph.errors import NotFoundError, ServiceUnavailableError
from actorgraph.graph.service import GraphService
from actorgraph.stores.base import Store
from actorgraph.suggestions.ledger import SuggestionLedger


def create_app(
    *,
    store: Store,
    graph_service: GraphService,
    ledger: SuggestionLedger,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ServiceUnavailableError)
    async def unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
        logger.error(f"Service unavailable: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Graph service not available"})

    app.include_router(router=get_endpoints_router(store=store))
    app.include_router(router=get_actors_router(store=store, graph_service=graph_service))
    app.include_router(router=get_graph_router(graph_service=graph_service))
    app.include_router(router=get_suggestions_router(ledger=ledger))

    return app
