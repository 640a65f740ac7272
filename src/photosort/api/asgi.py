"""ASGI entrypoint for the PhotoSort API."""

from photosort.api.app import create_app
from photosort.containers import build_container

app = create_app(build_container())
