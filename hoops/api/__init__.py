"""FastAPI application for the hoops simulator."""

from hoops.api.main import app, create_app, run_api

__all__ = ["app", "create_app", "run_api"]
