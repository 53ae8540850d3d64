"""ASGI entrypoint for the session board API."""

from setlist_board.api.app import create_app
from setlist_board.containers import build_container

app = create_app(build_container())
