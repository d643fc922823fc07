"""
auth/store.py -- User repository over the users collection.

Pattern: Repository + Data Mapper. UserStore is the repository;
_doc_to_user is the mapper. Orchestration code never reads raw documents.

Document shape (users/{uid}):
    {"name": str, "email": str, "createdAt": ISO-8601 UTC}

The document key is the identity provider's uid. Documents are created once
at sign-up and never updated or deleted by this codebase.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from auth.models import User
from docstore.store import USERS, Document, DocumentStore


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserStore:
    """Repository for User documents.

    Usage:
        users = UserStore(document_store)
        users.create("uid-1", name="Ada", email="ada@example.com")
        user = users.get("uid-1")
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def exists(self, uid: str) -> bool:
        return self._store.get_document(USERS, uid) is not None

    def get(self, uid: str, email: str | None = None) -> User | None:
        """Look up a user by uid. Returns None if no document exists.

        email is a fallback for documents written without one (the verified
        claim from a session cookie); a stored email always wins.
        """
        doc = self._store.get_document(USERS, uid)
        return _doc_to_user(doc, email) if doc is not None else None

    def create(self, uid: str, name: str, email: str) -> None:
        """Write the user document. Callers check exists() first.

        The check and the write are two round trips; a concurrent sign-up for
        the same uid can land between them and the second write wins.
        """
        self._store.set_document(USERS, uid, {"name": name, "email": email, "createdAt": _now_iso()})


# ---------------------------------------------------------------------------
# Document mapper
# ---------------------------------------------------------------------------


def _doc_to_user(doc: Document, email: str | None = None) -> User:
    data = doc.data
    return User(
        id=doc.id,
        uid=doc.id,
        name=data.get("name", ""),
        email=data.get("email") or email or "",
        created_at=data.get("createdAt"),
    )
