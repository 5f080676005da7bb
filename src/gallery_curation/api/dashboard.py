"""Photographer dashboard endpoints with simple token auth."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from gallery_curation.api.dashboard_models import AlbumRenameRequest
from gallery_curation.services.albums import AlbumNameError
from gallery_curation.services.analysis_control import AnalysisInProgressError
from gallery_curation.services.progress import can_restart, can_retry

if TYPE_CHECKING:
    from gallery_curation.containers import AppContainer
    from gallery_curation.domain.albums import AlbumSuggestion

router = APIRouter(prefix="/projects", tags=["dashboard"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/{project_id}/analysis/status", dependencies=[Depends(require_admin)])
async def analysis_status(
    project_id: UUID, request: Request, since: datetime | None = None
) -> dict[str, object]:
    """Return photo counts by analysis status.

    With ``since``, also report how many photos got a narrative judgment
    from that moment on, so a run started at ``since`` can be followed.
    """
    container: AppContainer = request.app.state.container
    control = container.analysis_control
    payload = control.get_status(project_id).as_dict()
    if since is not None:
        payload["analyzed_since"] = control.count_analyzed_since(project_id, since)
    return payload


@router.get(
    "/{project_id}/analysis/progress", dependencies=[Depends(require_admin)]
)
async def analysis_progress(
    project_id: UUID, request: Request
) -> dict[str, object]:
    """Return status counts with the run state and available actions."""
    container: AppContainer = request.app.state.container
    control = container.analysis_control
    state, counts = control.get_progress(project_id)
    return {
        **counts.as_dict(),
        "state": state.value,
        "can_restart": can_restart(state),
        "can_retry": can_retry(counts),
        "poll_interval_seconds": control.progress_tracker.poll_interval_seconds,
    }


@router.post("/{project_id}/analysis", dependencies=[Depends(require_admin)])
async def analyze_pending(project_id: UUID, request: Request) -> dict[str, int]:
    """Dispatch every pending or failed photo."""
    container: AppContainer = request.app.state.container
    return {"queued": container.analysis_control.analyze_pending(project_id)}


@router.post("/{project_id}/analysis/restart", dependencies=[Depends(require_admin)])
async def restart_stalled(project_id: UUID, request: Request) -> dict[str, int]:
    """Release stalled photos and dispatch them again."""
    container: AppContainer = request.app.state.container
    return {"queued": container.analysis_control.restart_stalled(project_id)}


@router.post("/{project_id}/analysis/retry", dependencies=[Depends(require_admin)])
async def retry_failed(project_id: UUID, request: Request) -> dict[str, int]:
    """Re-dispatch failed photos of a drained run."""
    container: AppContainer = request.app.state.container
    try:
        queued = container.analysis_control.retry_failed(project_id)
    except AnalysisInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    return {"queued": queued}


@router.post("/{project_id}/albums", dependencies=[Depends(require_admin)])
async def regenerate_albums(project_id: UUID, request: Request) -> dict[str, object]:
    """Rebuild album suggestions from current analysis results."""
    container: AppContainer = request.app.state.container
    albums = await container.album_curator.curate(project_id)
    return {"albums": [_serialize_album(album) for album in albums]}


@router.get("/{project_id}/albums", dependencies=[Depends(require_admin)])
async def list_albums(project_id: UUID, request: Request) -> dict[str, object]:
    """Return stored album suggestions."""
    container: AppContainer = request.app.state.container
    albums = container.album_curator.list_albums(project_id)
    return {"albums": [_serialize_album(album) for album in albums]}


@router.get(
    "/{project_id}/albums/{category}/photos", dependencies=[Depends(require_admin)]
)
async def album_photos(
    project_id: UUID, category: str, request: Request
) -> dict[str, object]:
    """Return the photos of one album, best first."""
    container: AppContainer = request.app.state.container
    photo_ids = container.album_curator.album_photo_ids(project_id, category)
    if photo_ids is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"category": category, "photo_ids": [str(pid) for pid in photo_ids]}


@router.patch(
    "/{project_id}/albums/{category}", dependencies=[Depends(require_admin)]
)
async def rename_album(
    project_id: UUID, category: str, body: AlbumRenameRequest, request: Request
) -> dict[str, object]:
    """Rename one album."""
    container: AppContainer = request.app.state.container
    try:
        album = container.album_curator.rename_album(project_id, category, body.name)
    except AlbumNameError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if album is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _serialize_album(album)


@router.delete(
    "/{project_id}/albums/{category}",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_album(project_id: UUID, category: str, request: Request) -> None:
    """Delete one album suggestion."""
    container: AppContainer = request.app.state.container
    if not container.album_curator.delete_album(project_id, category):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/{project_id}/order", dependencies=[Depends(require_admin)])
async def photo_order(project_id: UUID, request: Request) -> dict[str, object]:
    """Return the client-facing photo order."""
    container: AppContainer = request.app.state.container
    order = container.affinity_service.compute_order(project_id)
    return {"photo_ids": [str(photo_id) for photo_id in order]}


def _serialize_album(album: AlbumSuggestion) -> dict[str, object]:
    return {
        "category": album.category,
        "name": album.name,
        "cover_photo_id": str(album.cover_photo_id) if album.cover_photo_id else None,
        "photo_count": album.photo_count,
    }
