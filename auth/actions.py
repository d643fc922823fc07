"""
auth/actions.py -- Sign-up, sign-in and sign-out workflows.

Every entry point returns an ActionResult and never raises, with one
exception: SessionError from SessionManager.establish() propagates out of
sign_in() and login(). Known failures map to curated messages by error code;
everything else gets a generic fallback. All failures are logged first.

The public sign-up route goes through verified_sign_up(), which only writes
the User document when an ID token for the same uid is presented.

Two-phase sign-up:
  register() creates the identity-provider account, then sign_up() writes
  the User document. There is no rollback: if the second step fails, the
  provider account is orphaned and the user sees the sign-up error. The
  orphan is logged at WARNING with its uid so it can be cleaned up by hand.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

import logging

from auth.identity import AuthErrorCode, IdentityError, IdentityProvider, message_for
from auth.models import ActionResult
from auth.session import SessionManager
from auth.store import UserStore
from docstore.store import StoreError

logger = logging.getLogger("intrevue.auth")

# sign_up() failure messages by store / provider code.
_SIGN_UP_ERRORS: dict[str, str] = {
    AuthErrorCode.EMAIL_IN_USE.value: "Email already in use",
    "permission-denied": "Permission denied. Please check your Firestore rules.",
}

# sign_in() failure messages by token verification code.
_SIGN_IN_ERRORS: dict[AuthErrorCode, str] = {
    AuthErrorCode.TOKEN_EXPIRED: "Session expired. Please sign in again.",
    AuthErrorCode.TOKEN_REVOKED: "Access revoked. Please sign in again.",
    AuthErrorCode.TOKEN_INVALID: "Invalid authentication. Please try again.",
}


# ---------------------------------------------------------------------------
# Server actions
# ---------------------------------------------------------------------------


def sign_up(users: UserStore, uid: str, name: str, email: str, password: str | None = None) -> ActionResult:
    """Persist the User document for an already-created provider account.

    password is accepted for call-site parity with the sign-up form and is
    never stored; the identity provider owns credentials.
    """
    try:
        if users.exists(uid):
            return ActionResult(False, "User already exists. Please sign in instead")
        users.create(uid, name=name, email=email)
        logger.info("User registered uid=%s", uid)
        return ActionResult(True, "Account created successfully. Please sign in.")
    except (StoreError, IdentityError) as exc:
        code = exc.code.value if isinstance(exc, IdentityError) else exc.code
        logger.error("Error creating user uid=%s (%s): %s", uid, code, exc)
        return ActionResult(False, _SIGN_UP_ERRORS.get(code, "Failed to register user"))


def verified_sign_up(
    identity: IdentityProvider,
    users: UserStore,
    id_token: str,
    uid: str,
    name: str,
    email: str,
    password: str | None = None,
) -> ActionResult:
    """sign_up() for a caller who proves they own uid with a fresh ID token."""
    try:
        claims = identity.verify_id_token(id_token)
    except IdentityError as exc:
        logger.info("Sign-up rejected (%s)", exc.code.value)
        return ActionResult(False, _SIGN_IN_ERRORS.get(exc.code, "Failed to register user"))
    if claims.uid != uid:
        logger.warning("Sign-up token uid=%s does not match requested uid=%s", claims.uid, uid)
        return ActionResult(False, "Invalid authentication token")
    return sign_up(users, uid=uid, name=name, email=email, password=password)


def sign_in(
    identity: IdentityProvider,
    users: UserStore,
    sessions: SessionManager,
    response,
    email: str,
    id_token: str,
) -> ActionResult:
    """Verify id_token belongs to email and an existing user, then start a session."""
    try:
        claims = identity.verify_id_token(id_token)
        if claims.email != email:
            logger.warning("Sign-in token email mismatch for uid=%s", claims.uid)
            return ActionResult(False, "Invalid authentication token")

        if not users.exists(claims.uid):
            return ActionResult(False, "User does not exist. Create an account instead.")
    except IdentityError as exc:
        logger.info("Sign-in rejected (%s)", exc.code.value)
        return ActionResult(False, _SIGN_IN_ERRORS.get(exc.code, "Failed to log into account."))
    except StoreError as exc:
        logger.error("Sign-in user lookup failed: %s", exc)
        return ActionResult(False, "Failed to log into account.")

    # Outside the try: a mint failure is fatal and must propagate.
    sessions.establish(response, id_token)
    logger.info("Signed in uid=%s", claims.uid)
    return ActionResult(True, "Signed in successfully")


def sign_out(sessions: SessionManager, response) -> ActionResult:
    return sessions.clear(response)


# ---------------------------------------------------------------------------
# Form flows
# ---------------------------------------------------------------------------


def register(identity: IdentityProvider, users: UserStore, name: str, email: str, password: str) -> ActionResult:
    """Sign-up form: create the provider account, then the User document."""
    try:
        uid = identity.create_account(email, password)
    except IdentityError as exc:
        return ActionResult(False, message_for(exc.code))

    result = sign_up(users, uid=uid, name=name, email=email, password=password)
    if not result.success:
        logger.warning("Provider account uid=%s has no user document: %s", uid, result.message)
    return result


def login(
    identity: IdentityProvider,
    users: UserStore,
    sessions: SessionManager,
    response,
    email: str,
    password: str,
) -> ActionResult:
    """Sign-in form: exchange the password for an ID token, then sign_in()."""
    try:
        id_token = identity.verify_credential(email, password)
    except IdentityError as exc:
        return ActionResult(False, message_for(exc.code))
    if not id_token:
        return ActionResult(False, "Sign in failed")
    return sign_in(identity, users, sessions, response, email=email, id_token=id_token)
