"""API services for live match sessions."""

from hoops.api.services.session_manager import (
    MatchSession,
    MatchSessionManager,
    apply_command,
    get_session_manager,
)

__all__ = ["MatchSession", "MatchSessionManager", "apply_command", "get_session_manager"]
