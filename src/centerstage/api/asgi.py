"""ASGI entrypoint for the CenterStage API."""

from centerstage.api.app import create_app
from centerstage.containers import build_container

app = create_app(build_container())
