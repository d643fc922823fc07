"""
auth/identity.py -- Identity provider client (Firebase Authentication).

Two halves, one error vocabulary:

  Password operations (create_account, verify_credential) go to the Identity
  Toolkit REST API with the project's web API key -- the same calls the
  browser SDK makes for createUserWithEmailAndPassword and
  signInWithEmailAndPassword.

  Token operations (verify_id_token, mint_session_cookie,
  verify_session_cookie) use the Firebase Admin SDK.

Every failure leaves this module as IdentityError carrying an AuthErrorCode.
Admin SDK exception classes and REST error strings ("EMAIL_EXISTS",
"INVALID_LOGIN_CREDENTIALS", ...) are translated here and nowhere else.

Secrets: passwords, ID tokens and cookies are never logged.

Layer rule: no imports from api/, docstore/, or records/.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from enum import Enum

import firebase_admin
import requests
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

from auth.models import DecodedToken

logger = logging.getLogger("intrevue.identity")

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{action}"


# ---------------------------------------------------------------------------
# Error vocabulary
# ---------------------------------------------------------------------------


class AuthErrorCode(str, Enum):
    EMAIL_IN_USE = "email-already-in-use"
    WEAK_PASSWORD = "weak-password"
    INVALID_EMAIL = "invalid-email"
    USER_NOT_FOUND = "user-not-found"
    WRONG_PASSWORD = "wrong-password"
    USER_DISABLED = "user-disabled"
    TOO_MANY_REQUESTS = "too-many-requests"
    NETWORK_ERROR = "network-request-failed"
    TOKEN_EXPIRED = "id-token-expired"
    TOKEN_REVOKED = "id-token-revoked"
    TOKEN_INVALID = "invalid-id-token"
    MINT_FAILED = "session-cookie-mint-failed"
    COOKIE_EXPIRED = "session-cookie-expired"
    COOKIE_REVOKED = "session-cookie-revoked"
    COOKIE_INVALID = "invalid-session-cookie"
    UNKNOWN = "unknown"


# User-facing text for failures surfaced by the sign-in / sign-up forms.
_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.USER_NOT_FOUND: "No account found with this email",
    AuthErrorCode.WRONG_PASSWORD: "Incorrect password",
    AuthErrorCode.INVALID_EMAIL: "Invalid email address",
    AuthErrorCode.USER_DISABLED: "This account has been disabled",
    AuthErrorCode.EMAIL_IN_USE: "An account with this email already exists",
    AuthErrorCode.WEAK_PASSWORD: "Password is too weak",
    AuthErrorCode.NETWORK_ERROR: "Network error. Please check your connection",
    AuthErrorCode.TOO_MANY_REQUESTS: "Too many failed attempts. Please try again later",
}

_DEFAULT_MESSAGE = "Authentication failed"


def message_for(code: AuthErrorCode) -> str:
    return _MESSAGES.get(code, _DEFAULT_MESSAGE)


class IdentityError(Exception):
    """An identity provider call failed. code is always an AuthErrorCode."""

    def __init__(self, code: AuthErrorCode, message: str = "") -> None:
        super().__init__(message or code.value)
        self.code = code


# Identity Toolkit REST error strings. The message field can carry a suffix
# ("WEAK_PASSWORD : Password should be at least 6 characters"), so only the
# leading token is looked up.
_REST_ERRORS: dict[str, AuthErrorCode] = {
    "EMAIL_EXISTS": AuthErrorCode.EMAIL_IN_USE,
    "WEAK_PASSWORD": AuthErrorCode.WEAK_PASSWORD,
    "INVALID_EMAIL": AuthErrorCode.INVALID_EMAIL,
    "MISSING_EMAIL": AuthErrorCode.INVALID_EMAIL,
    "EMAIL_NOT_FOUND": AuthErrorCode.USER_NOT_FOUND,
    "INVALID_PASSWORD": AuthErrorCode.WRONG_PASSWORD,
    "MISSING_PASSWORD": AuthErrorCode.WRONG_PASSWORD,
    # Returned instead of EMAIL_NOT_FOUND / INVALID_PASSWORD when email
    # enumeration protection is enabled on the project.
    "INVALID_LOGIN_CREDENTIALS": AuthErrorCode.WRONG_PASSWORD,
    "USER_DISABLED": AuthErrorCode.USER_DISABLED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": AuthErrorCode.TOO_MANY_REQUESTS,
}


def _rest_error_code(resp: requests.Response) -> AuthErrorCode:
    try:
        raw = resp.json().get("error", {}).get("message", "")
    except ValueError:
        return AuthErrorCode.UNKNOWN
    key = str(raw).split(":", 1)[0].strip()
    return _REST_ERRORS.get(key, AuthErrorCode.UNKNOWN)


def _decoded(claims: dict) -> DecodedToken:
    return DecodedToken(uid=claims["uid"], email=claims.get("email"), expiry=claims.get("exp"))


def _backend_code(exc: fb_exceptions.FirebaseError) -> AuthErrorCode:
    """Code for an Admin SDK backend failure not covered by a specific class."""
    if isinstance(exc, (fb_exceptions.UnavailableError, fb_exceptions.DeadlineExceededError)):
        return AuthErrorCode.NETWORK_ERROR
    return AuthErrorCode.UNKNOWN


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class IdentityProvider:
    """Firebase Authentication client.

    Usage:
        identity = IdentityProvider(firebase_app, web_api_key=settings.firebase_web_api_key)
        uid = identity.create_account("ada@example.com", "hunter22")
        id_token = identity.verify_credential("ada@example.com", "hunter22")
        cookie = identity.mint_session_cookie(id_token, ttl=ONE_WEEK)
        claims = identity.verify_session_cookie(cookie)
    """

    def __init__(
        self,
        app: firebase_admin.App,
        web_api_key: str,
        session: requests.Session | None = None,
        timeout: float = 10,
    ) -> None:
        self._app = app
        self._web_api_key = web_api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Password operations (Identity Toolkit REST)
    # ------------------------------------------------------------------

    def _post(self, action: str, payload: dict) -> dict:
        try:
            resp = self._session.post(
                IDENTITY_TOOLKIT_URL.format(action=action),
                params={"key": self._web_api_key},
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Identity Toolkit %s unreachable: %s", action, exc)
            raise IdentityError(AuthErrorCode.NETWORK_ERROR, str(exc)) from exc
        if not resp.ok:
            code = _rest_error_code(resp)
            logger.info("Identity Toolkit %s rejected (%s, HTTP %d)", action, code.value, resp.status_code)
            raise IdentityError(code)
        return resp.json()

    def create_account(self, email: str, password: str) -> str:
        """Create a password account and return its uid."""
        body = self._post("signUp", {"email": email, "password": password, "returnSecureToken": True})
        return body["localId"]

    def verify_credential(self, email: str, password: str) -> str:
        """Check an email/password pair and return a fresh ID token."""
        body = self._post("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})
        return body["idToken"]

    # ------------------------------------------------------------------
    # Token operations (Admin SDK)
    # ------------------------------------------------------------------

    def verify_id_token(self, id_token: str) -> DecodedToken:
        # Expired and Revoked are subclasses of InvalidIdTokenError, so they
        # are matched first.
        try:
            claims = fb_auth.verify_id_token(id_token, app=self._app)
        except fb_auth.ExpiredIdTokenError as exc:
            raise IdentityError(AuthErrorCode.TOKEN_EXPIRED, str(exc)) from exc
        except fb_auth.RevokedIdTokenError as exc:
            raise IdentityError(AuthErrorCode.TOKEN_REVOKED, str(exc)) from exc
        except fb_auth.UserDisabledError as exc:
            raise IdentityError(AuthErrorCode.USER_DISABLED, str(exc)) from exc
        except fb_auth.CertificateFetchError as exc:
            raise IdentityError(AuthErrorCode.NETWORK_ERROR, str(exc)) from exc
        except (fb_auth.InvalidIdTokenError, fb_auth.UserNotFoundError, ValueError) as exc:
            raise IdentityError(AuthErrorCode.TOKEN_INVALID, str(exc)) from exc
        except fb_exceptions.FirebaseError as exc:
            raise IdentityError(_backend_code(exc), str(exc)) from exc
        return _decoded(claims)

    def mint_session_cookie(self, id_token: str, ttl: int) -> str:
        """Exchange an ID token for a session cookie valid for ttl seconds."""
        try:
            cookie = fb_auth.create_session_cookie(id_token, expires_in=timedelta(seconds=ttl), app=self._app)
        except (fb_exceptions.FirebaseError, ValueError) as exc:
            raise IdentityError(AuthErrorCode.MINT_FAILED, str(exc)) from exc
        return cookie.decode("utf-8") if isinstance(cookie, bytes) else cookie

    def verify_session_cookie(self, cookie: str, check_revoked: bool = True) -> DecodedToken:
        try:
            claims = fb_auth.verify_session_cookie(cookie, check_revoked=check_revoked, app=self._app)
        except fb_auth.ExpiredSessionCookieError as exc:
            raise IdentityError(AuthErrorCode.COOKIE_EXPIRED, str(exc)) from exc
        except fb_auth.RevokedSessionCookieError as exc:
            raise IdentityError(AuthErrorCode.COOKIE_REVOKED, str(exc)) from exc
        except fb_auth.UserDisabledError as exc:
            raise IdentityError(AuthErrorCode.USER_DISABLED, str(exc)) from exc
        except fb_auth.CertificateFetchError as exc:
            raise IdentityError(AuthErrorCode.NETWORK_ERROR, str(exc)) from exc
        # check_revoked looks the account up; a deleted account is UserNotFoundError.
        except (fb_auth.InvalidSessionCookieError, fb_auth.UserNotFoundError, ValueError) as exc:
            raise IdentityError(AuthErrorCode.COOKIE_INVALID, str(exc)) from exc
        except fb_exceptions.FirebaseError as exc:
            raise IdentityError(_backend_code(exc), str(exc)) from exc
        return _decoded(claims)

    def close(self) -> None:
        self._session.close()
