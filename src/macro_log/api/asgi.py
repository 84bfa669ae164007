"""ASGI entrypoint for the macro log API."""

from macro_log.api.app import create_app
from macro_log.containers import build_container

app = create_app(build_container())
