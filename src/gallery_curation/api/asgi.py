"""ASGI entrypoint for the gallery curation API."""

from gallery_curation.api.app import create_app
from gallery_curation.containers import build_container

app = create_app(build_container())
