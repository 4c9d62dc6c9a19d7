"""API routers for match resources."""

from hoops.api.routers.match import router as match_router
from hoops.api.routers.match_websocket import router as match_websocket_router

__all__ = [
    "match_router",
    "match_websocket_router",
]
