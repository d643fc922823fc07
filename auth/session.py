"""
auth/session.py -- Session cookie lifecycle.

States per browser: no cookie -> active -> expired / revoked / cleared.

  establish()     mint a session cookie from a verified ID token and write it
                  to the response. The ONLY fatal path in the auth flow: a
                  mint failure raises SessionError instead of returning a
                  failed ActionResult, because a signed-in user without a
                  session is a hard dependency failure.
  current_user()  read + verify the cookie, then load the User document.
                  Any failure (no cookie, expired, revoked, invalid, no user
                  document, store error) is the same None.
  clear()         delete the cookie. Always succeeds.

Cookie attributes:
  httponly=True   JS cannot read the cookie.
  samesite="lax"  sent on same-site navigations and top-level GETs only.
  secure          production only (Settings.secure_cookies).
  path="/"        every route sees it.
  max_age         Settings.session_max_age (one week), equal to the minted
                  cookie's own lifetime so both expire together.

Layer rule: no imports from api/ or records/. Request/Response are used as
duck-typed Starlette objects (request.cookies, response.set_cookie).
"""

from __future__ import annotations

import logging

from auth.identity import IdentityError, IdentityProvider
from auth.models import ActionResult, User
from auth.store import UserStore
from core.config import Settings
from docstore.store import StoreError

logger = logging.getLogger("intrevue.session")

SESSION_COOKIE = "session"


class SessionError(Exception):
    """The session cookie could not be created. Never mapped to a message."""


class SessionManager:
    def __init__(self, identity: IdentityProvider, users: UserStore, settings: Settings) -> None:
        self._identity = identity
        self._users = users
        self._max_age = settings.session_max_age
        self._secure = settings.secure_cookies

    def establish(self, response, id_token: str) -> None:
        """Mint a session cookie for id_token and set it on response."""
        try:
            cookie = self._identity.mint_session_cookie(id_token, ttl=self._max_age)
        except IdentityError as exc:
            logger.error("Session cookie mint failed: %s", exc.code.value)
            raise SessionError("Failed to create session") from exc
        response.set_cookie(
            SESSION_COOKIE,
            value=cookie,
            max_age=self._max_age,
            httponly=True,
            secure=self._secure,
            path="/",
            samesite="lax",
        )

    def current_user(self, request) -> User | None:
        """Return the signed-in User, or None. Never raises."""
        cookie = request.cookies.get(SESSION_COOKIE)
        if not cookie:
            return None
        try:
            claims = self._identity.verify_session_cookie(cookie, check_revoked=True)
        except IdentityError as exc:
            logger.debug("Session cookie rejected: %s", exc.code.value)
            return None
        try:
            return self._users.get(claims.uid, email=claims.email)
        except StoreError as exc:
            logger.warning("User lookup failed for session uid=%s: %s", claims.uid, exc)
            return None

    def is_authenticated(self, request) -> bool:
        return self.current_user(request) is not None

    def clear(self, response) -> ActionResult:
        response.delete_cookie(SESSION_COOKIE, path="/")
        return ActionResult(success=True, message="Signed out successfully")
