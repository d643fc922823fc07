"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the
orchestrator do the work; routes map these onto pydantic response models.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account, as stored in the users collection.

    id and uid are both the identity provider's account id. id is the
    document key; uid is the verified claim from the session cookie. They are
    always equal, the pair is kept because the web front-end reads both.
    """

    id: str
    uid: str
    name: str
    email: str
    created_at: str | None = None


@dataclass(frozen=True)
class DecodedToken:
    """Verified claims from an ID token or session cookie."""

    uid: str
    email: str | None = None
    expiry: int | None = None  # epoch seconds


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a sign-up / sign-in / sign-out call.

    Failures are values, not exceptions: every orchestrator entry point
    returns one of these.
    """

    success: bool
    message: str
