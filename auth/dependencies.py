"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The session cookie ("session") is the only authentication method. The
SessionManager built at startup lives on app.state.sessions; these helpers
fetch it from the request so routes never reach for module globals.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or records/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.session import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def try_get_current_user(request: Request) -> User | None:
    """Return the User behind the session cookie, or None. Never raises."""
    return get_session_manager(request).current_user(request)


def get_current_user(request: Request) -> User:
    """Require a valid session. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
