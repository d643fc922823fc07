"""
tests/test_docstore_query.py -- Unit tests for docstore/query.py and the
in-memory store used by the rest of the suite.

Coverage:
  - validate_query(): single inequality field, inequality field ordered first,
    unknown operators / directions, non-positive limits
  - Filter.matches(): missing fields, mixed types
  - MemoryDocumentStore: rejects invalid queries through the base class,
    multi-key ordering, limit, auto ids
  - FirestoreDocumentStore: google-api-core and google-auth failures,
    including exhausted retries, surface as StoreError
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as gexc
from google.auth import exceptions as gauth_exceptions

from auth.actions import sign_up
from auth.store import UserStore
from docstore.query import ASCENDING, DESCENDING, Filter, InvalidQuery, Query, validate_query
from docstore.store import FirestoreDocumentStore, StoreError, StorePermissionDenied
from fakes import MemoryDocumentStore


class TestValidateQuery:
    def test_equality_only_needs_no_ordering(self) -> None:
        validate_query(Query("interviews").where("userId", "==", "u1").where("finalized", "==", True))

    def test_inequality_field_ordered_first_is_valid(self) -> None:
        q = Query("interviews").where("userId", "!=", "u1").order("userId").order("createdAt", DESCENDING)
        validate_query(q)

    def test_inequality_without_ordering_rejected(self) -> None:
        with pytest.raises(InvalidQuery):
            validate_query(Query("interviews").where("userId", "!=", "u1"))

    def test_inequality_field_not_first_in_ordering_rejected(self) -> None:
        q = Query("interviews").where("userId", "!=", "u1").order("createdAt", DESCENDING).order("userId")
        with pytest.raises(InvalidQuery, match="must be ordered first"):
            validate_query(q)

    def test_two_inequality_fields_rejected(self) -> None:
        q = Query("interviews").where("userId", "!=", "u1").where("createdAt", ">", "2024").order("userId")
        with pytest.raises(InvalidQuery, match="more than one field"):
            validate_query(q)

    def test_two_inequalities_on_same_field_allowed(self) -> None:
        q = Query("interviews").where("createdAt", ">", "2024-01").where("createdAt", "<", "2024-06").order("createdAt")
        validate_query(q)

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(InvalidQuery, match="Unsupported operator"):
            validate_query(Query("users").where("name", "array-contains", "x"))

    def test_unknown_direction_rejected(self) -> None:
        with pytest.raises(InvalidQuery, match="direction"):
            validate_query(Query("users").order("name", "sideways"))

    def test_zero_limit_rejected(self) -> None:
        with pytest.raises(InvalidQuery):
            validate_query(Query("users").take(0))

    def test_builders_do_not_mutate(self) -> None:
        base = Query("users")
        base.where("name", "==", "Ada").order("name").take(5)
        assert base.filters == () and base.order_by == () and base.limit is None


class TestFilterMatches:
    def test_missing_field_never_matches(self) -> None:
        assert not Filter("userId", "==", "u1").matches({})
        assert not Filter("userId", "!=", "u1").matches({})

    def test_comparison_across_types_is_false(self) -> None:
        assert not Filter("createdAt", ">", 5).matches({"createdAt": "2024"})

    def test_ordering_operators(self) -> None:
        assert Filter("n", "<", 3).matches({"n": 2})
        assert Filter("n", "<=", 3).matches({"n": 3})
        assert Filter("n", ">=", 3).matches({"n": 3})
        assert not Filter("n", ">", 3).matches({"n": 3})


class TestMemoryDocumentStore:
    def test_invalid_query_never_reaches_backend(self) -> None:
        store = MemoryDocumentStore()
        with pytest.raises(InvalidQuery):
            store.query(Query("interviews").where("userId", "!=", "u1").order("createdAt", DESCENDING))
        assert store.queries == []

    def test_multi_key_ordering_and_limit(self) -> None:
        store = MemoryDocumentStore()
        store.seed("interviews", "a", {"userId": "u2", "createdAt": "2024-01-01"})
        store.seed("interviews", "b", {"userId": "u1", "createdAt": "2024-01-03"})
        store.seed("interviews", "c", {"userId": "u1", "createdAt": "2024-01-02"})
        store.seed("interviews", "d", {"userId": "u3", "createdAt": "2024-01-04"})

        q = Query("interviews").order("userId", ASCENDING).order("createdAt", DESCENDING).take(3)
        assert [d.id for d in store.query(q)] == ["b", "c", "a"]

    def test_auto_id_on_set(self) -> None:
        store = MemoryDocumentStore()
        doc_id = store.set_document("feedback", None, {"x": 1})
        assert doc_id
        assert store.get_document("feedback", doc_id).data == {"x": 1}

    def test_get_with_empty_id_returns_none(self) -> None:
        store = MemoryDocumentStore()
        store.fail_with = StoreError("should not be called")
        assert store.get_document("users", "") is None


class TestFirestoreErrorTranslation:
    """The Firestore client is a MagicMock; only the raised exception matters."""

    def _store(self, error: Exception) -> tuple[FirestoreDocumentStore, MagicMock]:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.side_effect = error
        doc_ref.set.side_effect = error
        client.collection.return_value.where.return_value.stream.side_effect = error
        return FirestoreDocumentStore(client), client

    @pytest.mark.parametrize(
        "error",
        [
            gexc.RetryError("Deadline of 60.0s exceeded", cause=None),
            gauth_exceptions.TransportError("metadata server unreachable"),
            gexc.ServiceUnavailable("backend down"),
        ],
    )
    def test_backend_failures_are_unavailable(self, error: Exception) -> None:
        store, _ = self._store(error)

        with pytest.raises(StoreError) as excinfo:
            store.get_document("users", "uid-1")
        assert excinfo.value.code == "unavailable"

        with pytest.raises(StoreError):
            store.set_document("users", "uid-1", {"name": "Ada"})

        with pytest.raises(StoreError):
            store.query(Query("users").where("email", "==", "ada@example.com"))

    def test_permission_denied(self) -> None:
        store, _ = self._store(gexc.PermissionDenied("rules"))
        with pytest.raises(StorePermissionDenied):
            store.get_document("users", "uid-1")

    def test_sign_up_reports_exhausted_retries_as_failure(self) -> None:
        store, _ = self._store(gexc.RetryError("Deadline of 60.0s exceeded", cause=None))

        result = sign_up(UserStore(store), uid="uid-1", name="Ada", email="ada@example.com")

        assert result.success is False
        assert result.message == "Failed to register user"
