"""ASGI entrypoint for the fit planner API."""

from fit_planner.api.app import create_app
from fit_planner.containers import build_container

app = create_app(build_container())
