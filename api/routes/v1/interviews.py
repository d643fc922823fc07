"""
api/routes/v1/interviews.py -- Interview and feedback endpoints.

Routes (all require a session):
  GET  /api/v1/interviews                    -- the caller's interviews, newest first
  GET  /api/v1/interviews/latest?limit=      -- finalized interviews by other users
  GET  /api/v1/interviews/{id}               -- one interview (404 if missing)
  GET  /api/v1/interviews/{id}/feedback      -- the caller's feedback (404 if none)
  POST /api/v1/interviews/{id}/feedback      -- score a transcript and store feedback

/latest is registered before /{id} so it is not captured as an interview id.

POST feedback always answers 200 with {success, feedbackId | error}; an
unknown interview is {success: false} rather than 404, matching the other
action routes. A store failure during the interview lookup is also
{success: false}, never a 503.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.models import CreateFeedbackRequest, CreateFeedbackResponse, FeedbackResponse, InterviewResponse
from auth.dependencies import get_current_user
from auth.models import User
from core.config import get_settings
from docstore.store import DocumentStore, StoreError
from records.feedback import create_feedback
from records.models import FeedbackResult
from records.queries import feedback_for, interview_by_id, interviews_by_user, latest_interviews
from records.scoring import ScoringClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/interviews", response_model=list[InterviewResponse])
def list_my_interviews(request: Request, current_user: User = Depends(get_current_user)) -> list[InterviewResponse]:
    store: DocumentStore = request.app.state.store
    return [InterviewResponse.from_interview(i) for i in interviews_by_user(store, current_user.id)]


@router.get("/interviews/latest", response_model=list[InterviewResponse])
def list_latest_interviews(
    request: Request,
    limit: int | None = Query(default=None, ge=1, le=100),
    current_user: User = Depends(get_current_user),
) -> list[InterviewResponse]:
    """Finalized interviews from other users, for the community feed."""
    store: DocumentStore = request.app.state.store
    effective = limit or get_settings().latest_interviews_limit
    interviews = latest_interviews(store, exclude_user_id=current_user.id, limit=effective)
    return [InterviewResponse.from_interview(i) for i in interviews]


@router.get("/interviews/{interview_id}", response_model=InterviewResponse)
def get_interview(
    request: Request,
    interview_id: str,
    current_user: User = Depends(get_current_user),
) -> InterviewResponse:
    store: DocumentStore = request.app.state.store
    interview = interview_by_id(store, interview_id)
    if interview is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Interview not found."},
        )
    return InterviewResponse.from_interview(interview)


@router.get("/interviews/{interview_id}/feedback", response_model=FeedbackResponse)
def get_feedback(
    request: Request,
    interview_id: str,
    current_user: User = Depends(get_current_user),
) -> FeedbackResponse:
    store: DocumentStore = request.app.state.store
    feedback = feedback_for(store, interview_id, current_user.id)
    if feedback is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "No feedback for this interview yet."},
        )
    return FeedbackResponse.from_feedback(feedback)


@router.post("/interviews/{interview_id}/feedback", response_model=CreateFeedbackResponse)
def post_feedback(
    request: Request,
    interview_id: str,
    body: CreateFeedbackRequest,
    current_user: User = Depends(get_current_user),
) -> CreateFeedbackResponse:
    store: DocumentStore = request.app.state.store
    scorer: ScoringClient = request.app.state.scorer

    try:
        interview = interview_by_id(store, interview_id)
    except StoreError as exc:
        logger.warning("Interview lookup failed before feedback for %s: %s", interview_id, exc)
        return CreateFeedbackResponse.from_result(FeedbackResult(success=False, error=str(exc)))
    if interview is None:
        return CreateFeedbackResponse.from_result(FeedbackResult(success=False, error="Interview not found."))

    result = create_feedback(
        store,
        scorer,
        interview_id=interview_id,
        user_id=current_user.id,
        transcript=[entry.model_dump() for entry in body.transcript],
        feedback_id=body.feedback_id,
    )
    return CreateFeedbackResponse.from_result(result)
