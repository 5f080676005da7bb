"""Request bodies for dashboard endpoints."""

from pydantic import BaseModel


class AlbumRenameRequest(BaseModel):
    """New display name for an album."""

    name: str
