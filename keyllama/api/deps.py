from fastapi import Request

from ..services.session_engine.tracker import SessionTracker


def get_tracker(request: Request) -> SessionTracker:
    """The session tracker owned by the running app (see main.lifespan)."""
    return request.app.state.tracker
