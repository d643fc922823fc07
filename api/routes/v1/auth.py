"""
api/routes/v1/auth.py -- Sign-up, sign-in and session endpoints.

Routes:
  POST /api/v1/auth/sign-up    -- write the User document for the caller's provider account
  POST /api/v1/auth/sign-in    -- exchange a client-SDK ID token for the session cookie
  POST /api/v1/auth/register   -- sign-up form: create provider account + User document
  POST /api/v1/auth/login      -- sign-in form: email/password -> session cookie
  POST /api/v1/auth/sign-out   -- clear the session cookie
  GET  /api/v1/auth/me         -- current user (requires session)

Result contract:
  Every action route answers 200 with {success, message}. A failed sign-in
  is {success: false} with a curated message, not a 4xx, so the form can show
  it as-is. Request validation failures are 422 (see api/main.py). A session
  cookie mint failure is the one 500 (SessionError handler in api/main.py).

Security:
  sign-up requires an ID token whose uid matches the body uid, so a client
  can only create the User document for its own provider account.
  sign-in and login are rate-limited per client IP (Settings.login_rate_limit).
  Cache-Control: no-store on every response that can set the cookie.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import (
    ActionResponse,
    LoginRequest,
    RegisterRequest,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)
from auth.actions import login, register, sign_in, sign_out, verified_sign_up
from auth.dependencies import get_current_user
from auth.identity import IdentityProvider
from auth.models import User
from auth.session import SessionManager
from auth.store import UserStore
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/sign-in, register, login, sign-out: public
# - POST /api/v1/auth/sign-up: public, but needs an ID token for the body uid
# - GET  /api/v1/auth/me: requires session (get_current_user)
router = APIRouter()


def _login_limit() -> str:
    return get_settings().login_rate_limit


# ---------------------------------------------------------------------------
# Server actions
# ---------------------------------------------------------------------------


@router.post("/auth/sign-up", response_model=ActionResponse)
def sign_up_route(request: Request, body: SignUpRequest) -> ActionResponse:
    """Create the User document for a uid the caller holds an ID token for."""
    identity: IdentityProvider = request.app.state.identity
    users: UserStore = request.app.state.users
    result = verified_sign_up(
        identity,
        users,
        id_token=body.id_token,
        uid=body.uid,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    return ActionResponse.from_result(result)


@limiter.limit(_login_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/sign-in", response_model=ActionResponse)
def sign_in_route(request: Request, response: Response, body: SignInRequest) -> ActionResponse:
    """Verify the ID token and set the session cookie on success."""
    identity: IdentityProvider = request.app.state.identity
    users: UserStore = request.app.state.users
    sessions: SessionManager = request.app.state.sessions
    result = sign_in(identity, users, sessions, response, email=body.email, id_token=body.id_token)
    response.headers["Cache-Control"] = "no-store"
    return ActionResponse.from_result(result)


@router.post("/auth/sign-out", response_model=ActionResponse)
def sign_out_route(request: Request, response: Response) -> ActionResponse:
    sessions: SessionManager = request.app.state.sessions
    return ActionResponse.from_result(sign_out(sessions, response))


# ---------------------------------------------------------------------------
# Form flows
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=ActionResponse)
def register_route(request: Request, body: RegisterRequest) -> ActionResponse:
    """Sign-up form. On success the user still has to sign in."""
    identity: IdentityProvider = request.app.state.identity
    users: UserStore = request.app.state.users
    result = register(identity, users, name=body.name, email=str(body.email), password=body.password)
    return ActionResponse.from_result(result)


@limiter.limit(_login_limit)
@router.post("/auth/login", response_model=ActionResponse)
def login_route(request: Request, response: Response, body: LoginRequest) -> ActionResponse:
    """Sign-in form: password check, token verification and session cookie in one call."""
    identity: IdentityProvider = request.app.state.identity
    users: UserStore = request.app.state.users
    sessions: SessionManager = request.app.state.sessions
    result = login(identity, users, sessions, response, email=str(body.email), password=body.password)
    response.headers["Cache-Control"] = "no-store"
    return ActionResponse.from_result(result)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the user behind the session cookie."""
    return UserResponse.from_user(current_user)
