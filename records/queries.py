"""
records/queries.py -- Read-only queries over interviews and feedback.

No side effects. Store errors propagate to the caller (the API maps StoreError
to 503); empty ids short-circuit to an empty result without touching the
store.

Latest-interviews ordering:
  With an exclusion id the query carries `userId != <id>`, and the document
  store requires an inequality field to lead the ordering. The effective
  order is therefore (userId asc, createdAt desc): newest-first within each
  author, not globally. latest_interviews() re-sorts the returned page by
  createdAt desc so callers always see newest first.
"""

from __future__ import annotations

from docstore.query import DESCENDING, Query
from docstore.store import FEEDBACK, INTERVIEWS, Document, DocumentStore
from records.models import CategoryScore, Feedback, Interview

DEFAULT_LATEST_LIMIT = 20


def interviews_by_user(store: DocumentStore, user_id: str) -> list[Interview]:
    """All interviews owned by user_id, newest first, finalized or not."""
    if not user_id:
        return []
    query = Query(INTERVIEWS).where("userId", "==", user_id).order("createdAt", DESCENDING)
    return [_doc_to_interview(d) for d in store.query(query)]


def latest_interviews(
    store: DocumentStore,
    exclude_user_id: str | None = None,
    limit: int = DEFAULT_LATEST_LIMIT,
) -> list[Interview]:
    """Finalized interviews, optionally excluding one user's own, capped at limit."""
    query = Query(INTERVIEWS).where("finalized", "==", True)
    if exclude_user_id:
        query = query.where("userId", "!=", exclude_user_id).order("userId")
    query = query.order("createdAt", DESCENDING).take(limit)
    interviews = [_doc_to_interview(d) for d in store.query(query)]
    if exclude_user_id:
        interviews.sort(key=lambda i: i.created_at or "", reverse=True)
    return interviews


def interview_by_id(store: DocumentStore, interview_id: str) -> Interview | None:
    doc = store.get_document(INTERVIEWS, interview_id)
    return _doc_to_interview(doc) if doc is not None else None


def feedback_for(store: DocumentStore, interview_id: str, user_id: str) -> Feedback | None:
    """The feedback for (interview_id, user_id). First match wins if duplicates exist."""
    if not interview_id or not user_id:
        return None
    query = Query(FEEDBACK).where("interviewId", "==", interview_id).where("userId", "==", user_id).take(1)
    docs = store.query(query)
    return _doc_to_feedback(docs[0]) if docs else None


# ---------------------------------------------------------------------------
# Document mappers
# ---------------------------------------------------------------------------

_INTERVIEW_FIELDS = ("userId", "finalized", "createdAt")


def _doc_to_interview(doc: Document) -> Interview:
    data = doc.data
    return Interview(
        id=doc.id,
        user_id=data.get("userId", ""),
        finalized=bool(data.get("finalized", False)),
        created_at=data.get("createdAt"),
        extra={k: v for k, v in data.items() if k not in _INTERVIEW_FIELDS},
    )


def _doc_to_feedback(doc: Document) -> Feedback:
    data = doc.data
    return Feedback(
        id=doc.id,
        interview_id=data.get("interviewId", ""),
        user_id=data.get("userId", ""),
        total_score=data.get("totalScore", 0),
        category_scores=[
            CategoryScore(name=c.get("name", ""), score=c.get("score", 0), comment=c.get("comment", ""))
            for c in data.get("categoryScores") or []
            if isinstance(c, dict)
        ],
        strengths=list(data.get("strengths") or []),
        areas_for_improvement=list(data.get("areasForImprovement") or []),
        final_assessment=data.get("finalAssessment", ""),
        created_at=data.get("createdAt"),
    )
