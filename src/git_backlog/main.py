"""FastAPI application for the backlog API."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .errors import InvalidArgumentError, NotFoundError
from .models import (
    BacklogItem,
    BacklogStats,
    CreateItemRequest,
    DeleteResponse,
    ItemListResponse,
)
from .store import BacklogStore, seed_items

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_store(request: Request) -> BacklogStore:
    """Dependency returning the store owned by the running app."""
    return request.app.state.store


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


async def _invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request body for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"})


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(status_code=exc.status_code, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    settings: Settings = request.app.state.settings
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Something went wrong!",
            "message": str(exc) if settings.debug else "Internal server error",
        },
    )


def create_app(settings: Optional[Settings] = None, store: Optional[BacklogStore] = None) -> FastAPI:
    """
    Build the backlog API.

    Args:
        settings: Runtime settings; read from the environment when omitted
        store: Backing store; a store holding the seed items when omitted
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Git Backlog API",
        description="Manage backlog items with CRUD operations and aggregate statistics",
        version=__version__,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else BacklogStore(seed_items())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(InvalidArgumentError, _invalid_argument_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    @app.get("/")
    async def root():
        """Service banner."""
        return {"message": "Git Backlog API", "version": __version__, "status": "running"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/backlog", response_model=ItemListResponse)
    async def list_items(
        status: Optional[str] = None,
        priority: Optional[str] = None,
        store: BacklogStore = Depends(get_store),
    ) -> ItemListResponse:
        """
        List backlog items.

        - **status**: only items with this status (todo, in-progress, done)
        - **priority**: only items with this priority (high, medium, low)
        """
        items = store.list_all()
        if status is not None:
            items = store.filter_by_status(status)
        if priority is not None:
            matching = {item.id for item in store.filter_by_priority(priority)}
            items = [item for item in items if item.id in matching]
        return ItemListResponse(items=items)

    @app.get("/api/backlog/stats", response_model=BacklogStats)
    async def backlog_stats(store: BacklogStore = Depends(get_store)) -> BacklogStats:
        """Item counts by status and priority."""
        return store.stats()

    @app.get("/api/backlog/{item_id}", response_model=BacklogItem)
    async def get_item(item_id: str, store: BacklogStore = Depends(get_store)) -> BacklogItem:
        return store.get_by_id(item_id)

    @app.post("/api/backlog", response_model=BacklogItem, status_code=status.HTTP_201_CREATED)
    async def create_item(
        body: Optional[CreateItemRequest] = None,
        store: BacklogStore = Depends(get_store),
    ) -> BacklogItem:
        """
        Create a backlog item.

        - **title**: non-empty title
        - **priority**: high, medium or low (case-insensitive)
        """
        body = body or CreateItemRequest()
        return store.create(body.title, body.priority)

    @app.put("/api/backlog/{item_id}", response_model=BacklogItem)
    async def update_item(
        item_id: str,
        payload: dict[str, Any] = Body(...),
        store: BacklogStore = Depends(get_store),
    ) -> BacklogItem:
        """Apply a partial update; only title, priority and status may be set."""
        return store.update(item_id, payload)

    @app.delete("/api/backlog/{item_id}", response_model=DeleteResponse)
    async def delete_item(item_id: str, store: BacklogStore = Depends(get_store)) -> DeleteResponse:
        item = store.delete(item_id)
        return DeleteResponse(message="Item deleted successfully", item=item)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings: Settings = app.state.settings
    logger.info(f"Server is running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
