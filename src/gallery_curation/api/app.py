"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from gallery_curation.api.dashboard import router as dashboard_router
from gallery_curation.app_logging import configure_logging
from gallery_curation.containers import AppContainer
from gallery_curation.services.selections import (
    PhotoNotFoundError,
    ProjectNotFoundError,
    SelectionLockedError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.job_queue.start()
        logger.info("Analysis worker started")
        yield
        await app.state.container.job_queue.stop()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(dashboard_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/projects/{project_id}/photos/{photo_id}/selection")
    async def toggle_selection(
        project_id: UUID, photo_id: UUID, request: Request
    ) -> dict[str, object]:
        """Toggle a client's favorite mark on a photo."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.selection_service.toggle(project_id, photo_id)
        except (ProjectNotFoundError, PhotoNotFoundError) as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        except SelectionLockedError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return {
            "selected": result.selected,
            "total_selected": result.total_selected,
            "order": [str(pid) for pid in result.order]
            if result.order is not None
            else None,
        }

    return app
