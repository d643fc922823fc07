"""
records/models.py -- Domain dataclasses for interviews, feedback and transcripts.

Stored documents use camelCase field names (shared with the web front-end).
Dataclass attributes are snake_case; the mappers in records/queries.py
translate between the two.

Interview documents are written by the interview-generation flow, which owns
most of their fields. Only the fields read here are typed; everything else
lands in Interview.extra unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Interview:
    id: str
    user_id: str
    finalized: bool = False
    created_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)  # role, level, type, techstack, questions, ...


@dataclass
class CategoryScore:
    name: str
    score: float = 0
    comment: str = ""


@dataclass
class Feedback:
    id: str
    interview_id: str
    user_id: str
    total_score: float = 0
    category_scores: list[CategoryScore] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    areas_for_improvement: list[str] = field(default_factory=list)
    final_assessment: str = ""
    created_at: str | None = None


@dataclass(frozen=True)
class TranscriptMessage:
    role: str  # "user" | "assistant" | "system"
    content: str


@dataclass(frozen=True)
class FeedbackResult:
    """Outcome of create_feedback(). Exactly one of feedback_id / error is set."""

    success: bool
    feedback_id: str | None = None
    error: str | None = None
