"""
docstore/store.py -- Document store repository for Intrevue collections.

Pattern: Repository (same role as the SQL stores elsewhere in the codebase).
DocumentStore is the contract; FirestoreDocumentStore is the production
backend on top of google-cloud-firestore. Route and orchestration code never
touches the Firestore SDK directly.

Contract:
  get_document(collection, id)          -> Document | None
  set_document(collection, id, fields)  -> id   (upsert; id=None -> auto id)
  query(Query)                          -> list[Document]

Every query is validated by docstore.query.validate_query() in the base class
before a backend sees it, so the single-inequality-field rule is identical in
production and in the in-memory fakes used by tests.

Errors:
  StorePermissionDenied -- security rules or IAM refused the call.
  StoreError            -- any other backend failure. .code carries the
                           provider's status string for message mapping;
                           exhausted retries and credential-refresh
                           transport failures are code "unavailable".

Layer rule: no imports from api/, auth/, or records/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from google.api_core import exceptions as gexc
from google.auth import exceptions as gauth_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from docstore.query import DESCENDING, Query, validate_query

logger = logging.getLogger("intrevue.store")

USERS = "users"
INTERVIEWS = "interviews"
FEEDBACK = "feedback"


# ---------------------------------------------------------------------------
# Data + errors
# ---------------------------------------------------------------------------


@dataclass
class Document:
    """A stored document: its key plus a copy of its fields."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class StoreError(Exception):
    """A document store call failed.

    code is a short provider status string ("permission-denied",
    "unavailable", ...) that orchestration code can map to user messages.
    """

    def __init__(self, message: str, code: str = "unknown") -> None:
        super().__init__(message)
        self.code = code


class StorePermissionDenied(StoreError):
    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, code="permission-denied")


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class DocumentStore:
    """Base repository. Subclasses implement the three _underscore hooks."""

    def get_document(self, collection: str, doc_id: str) -> Document | None:
        if not doc_id:
            return None
        return self._get(collection, doc_id)

    def set_document(self, collection: str, doc_id: str | None, fields: dict[str, Any]) -> str:
        """Upsert fields at collection/doc_id and return the document id.

        doc_id=None asks the backend for a fresh id.
        """
        return self._set(collection, doc_id, dict(fields))

    def query(self, query: Query) -> list[Document]:
        validate_query(query)
        return self._query(query)

    def close(self) -> None:
        pass

    def _get(self, collection: str, doc_id: str) -> Document | None:
        raise NotImplementedError

    def _set(self, collection: str, doc_id: str | None, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def _query(self, query: Query) -> list[Document]:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Firestore backend
# ---------------------------------------------------------------------------


# Everything the Firestore client raises for a failed call. RetryError and
# TransportError are not GoogleAPICallError subclasses.
_BACKEND_ERRORS = (gexc.GoogleAPICallError, gexc.RetryError, gauth_exceptions.TransportError)


def _translate(exc: Exception, action: str) -> StoreError:
    """Map a google-api-core or google-auth error onto the store's error vocabulary."""
    if not isinstance(exc, gexc.GoogleAPICallError):
        return StoreError(f"{action}: {exc}", code="unavailable")
    if isinstance(exc, gexc.PermissionDenied):
        return StorePermissionDenied(f"{action}: {exc.message}")
    code = getattr(exc, "grpc_status_code", None)
    code_name = code.name.lower().replace("_", "-") if code is not None else "unknown"
    return StoreError(f"{action}: {exc.message}", code=code_name)


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore backed by a google.cloud.firestore.Client.

    Usage:
        store = FirestoreDocumentStore(firebase_admin.firestore.client(app))
        store.set_document("users", uid, {"name": "Ada", "email": "ada@example.com"})
        doc = store.get_document("users", uid)
    """

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    def _get(self, collection: str, doc_id: str) -> Document | None:
        try:
            snapshot = self._client.collection(collection).document(doc_id).get()
        except _BACKEND_ERRORS as exc:
            raise _translate(exc, f"get {collection}/{doc_id}") from exc
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    def _set(self, collection: str, doc_id: str | None, fields: dict[str, Any]) -> str:
        coll = self._client.collection(collection)
        ref = coll.document(doc_id) if doc_id else coll.document()
        try:
            ref.set(fields)
        except _BACKEND_ERRORS as exc:
            raise _translate(exc, f"set {collection}/{ref.id}") from exc
        logger.debug("Wrote %s/%s", collection, ref.id)
        return ref.id

    def _query(self, query: Query) -> list[Document]:
        q = self._client.collection(query.collection)
        for f in query.filters:
            q = q.where(filter=FieldFilter(f.field, f.op, f.value))
        for o in query.order_by:
            direction = firestore.Query.DESCENDING if o.direction == DESCENDING else firestore.Query.ASCENDING
            q = q.order_by(o.field, direction=direction)
        if query.limit is not None:
            q = q.limit(query.limit)
        try:
            return [Document(id=snap.id, data=snap.to_dict() or {}) for snap in q.stream()]
        except _BACKEND_ERRORS as exc:
            raise _translate(exc, f"query {query.collection}") from exc

    def close(self) -> None:
        self._client.close()
