"""
API request and response models for the Intrevue REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
records/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (idToken, createdAt, feedbackId) to match the web
front-end and the stored documents; Python attributes stay snake_case through
an alias generator. FastAPI serializes response models by alias.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from auth.models import ActionResult, User
from records.models import Feedback, FeedbackResult, Interview


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class SignUpRequest(_CamelModel):
    """Body for POST /auth/sign-up: the provider account already exists."""

    model_config = ConfigDict(str_strip_whitespace=True)

    uid: str = Field(min_length=1, max_length=128)
    id_token: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)
    password: Optional[str] = Field(default=None, max_length=255)


class SignInRequest(_CamelModel):
    """Body for POST /auth/sign-in: an ID token from the client SDK."""

    email: str = Field(min_length=3, max_length=320)
    id_token: str = Field(min_length=1)


class RegisterRequest(_CamelModel):
    """Body for POST /auth/register (sign-up form)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(min_length=3, max_length=255)


class LoginRequest(_CamelModel):
    """Body for POST /auth/login (sign-in form)."""

    email: EmailStr
    password: str = Field(min_length=3, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class ActionResponse(_CamelModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionResponse":
        return cls(success=result.success, message=result.message)


class UserResponse(_CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    uid: str
    name: str
    email: str
    created_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, uid=user.uid, name=user.name, email=user.email, created_at=user.created_at)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class InterviewResponse(_CamelModel):
    """An interview document: typed core fields plus whatever else it stores."""

    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str
    finalized: bool
    created_at: Optional[str] = None

    @classmethod
    def from_interview(cls, interview: Interview) -> "InterviewResponse":
        extra = {k: v for k, v in interview.extra.items() if k not in ("id", "userId", "finalized", "createdAt")}
        return cls(
            id=interview.id,
            user_id=interview.user_id,
            finalized=interview.finalized,
            created_at=interview.created_at,
            **extra,
        )


class CategoryScoreResponse(_CamelModel):
    name: str
    score: float
    comment: str


class FeedbackResponse(_CamelModel):
    id: str
    interview_id: str
    user_id: str
    total_score: float
    category_scores: list[CategoryScoreResponse]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str
    created_at: Optional[str] = None

    @classmethod
    def from_feedback(cls, fb: Feedback) -> "FeedbackResponse":
        return cls(
            id=fb.id,
            interview_id=fb.interview_id,
            user_id=fb.user_id,
            total_score=fb.total_score,
            category_scores=[
                CategoryScoreResponse(name=c.name, score=c.score, comment=c.comment) for c in fb.category_scores
            ],
            strengths=fb.strengths,
            areas_for_improvement=fb.areas_for_improvement,
            final_assessment=fb.final_assessment,
            created_at=fb.created_at,
        )


class TranscriptEntry(_CamelModel):
    role: str = Field(min_length=1, max_length=32)
    content: str = Field(max_length=20000)


class CreateFeedbackRequest(_CamelModel):
    """Body for POST /interviews/{id}/feedback.

    An empty transcript is accepted here and rejected by create_feedback(),
    so the caller gets the same {success: false} shape either way.
    """

    transcript: list[TranscriptEntry] = Field(max_length=500)
    feedback_id: Optional[str] = Field(default=None, max_length=128)


class CreateFeedbackResponse(_CamelModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    feedback_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: FeedbackResult) -> "CreateFeedbackResponse":
        return cls(success=result.success, feedback_id=result.feedback_id, error=result.error)


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
