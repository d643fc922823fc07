"""
records/feedback.py -- Feedback generation for a finished interview.

create_feedback() validates the transcript, asks the scoring model for a
structured evaluation, fills any field the model left out with a neutral
default, and upserts the result into the feedback collection.

It always returns a FeedbackResult. Validation failures (MissingIdentifiers,
InvalidTranscript) are rejected before any external call; scoring and store
failures are logged and returned as {success: False, error: <message>}.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, Optional

from docstore.store import FEEDBACK, DocumentStore
from records.models import FeedbackResult, TranscriptMessage
from records.scoring import ScoringClient, build_prompt

logger = logging.getLogger("intrevue.records")


class InvalidTranscript(ValueError):
    def __init__(self, message: str = "Transcript is empty or invalid.") -> None:
        super().__init__(message)


class MissingIdentifiers(ValueError):
    def __init__(self, message: str = "Interview id and user id are required.") -> None:
        super().__init__(message)


def _normalize_transcript(transcript: Any) -> list[TranscriptMessage]:
    """Accept TranscriptMessage objects or {role, content} mappings.

    Raises InvalidTranscript for a non-list, an empty list, or any entry
    without string role and content.
    """
    if not isinstance(transcript, Sequence) or isinstance(transcript, (str, bytes)) or not transcript:
        raise InvalidTranscript()
    messages: list[TranscriptMessage] = []
    for entry in transcript:
        if isinstance(entry, TranscriptMessage):
            messages.append(entry)
            continue
        if not isinstance(entry, dict):
            raise InvalidTranscript()
        role, content = entry.get("role"), entry.get("content")
        if not isinstance(role, str) or not isinstance(content, str):
            raise InvalidTranscript()
        messages.append(TranscriptMessage(role=role, content=content))
    return messages


def format_transcript(messages: Sequence[TranscriptMessage]) -> str:
    return "".join(f"- {m.role}: {m.content}\n" for m in messages)


def _with_defaults(obj: dict[str, Any]) -> dict[str, Any]:
    """Model output with every feedback field present.

    Explicit nulls count as missing.
    """

    def pick(key: str, default: Any) -> Any:
        value = obj.get(key)
        return default if value is None else value

    return {
        "totalScore": pick("totalScore", 0),
        "categoryScores": pick("categoryScores", []),
        "strengths": pick("strengths", []),
        "areasForImprovement": pick("areasForImprovement", []),
        "finalAssessment": pick("finalAssessment", ""),
    }


def create_feedback(
    store: DocumentStore,
    scorer: ScoringClient,
    interview_id: str,
    user_id: str,
    transcript: Any,
    feedback_id: Optional[str] = None,
) -> FeedbackResult:
    try:
        if not interview_id or not user_id:
            raise MissingIdentifiers()
        messages = _normalize_transcript(transcript)

        obj = scorer.score(build_prompt(format_transcript(messages)))
        if not isinstance(obj, dict):
            raise ValueError("AI model returned an invalid response.")

        feedback = {
            "interviewId": interview_id,
            "userId": user_id,
            **_with_defaults(obj),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        saved_id = store.set_document(FEEDBACK, feedback_id, feedback)
        logger.info("Saved feedback %s for interview %s", saved_id, interview_id)
        return FeedbackResult(success=True, feedback_id=saved_id)
    except (MissingIdentifiers, InvalidTranscript) as exc:
        logger.info("Feedback rejected for interview %s: %s", interview_id, exc)
        return FeedbackResult(success=False, error=str(exc))
    except Exception as exc:
        logger.exception("Error saving feedback for interview %s", interview_id)
        return FeedbackResult(success=False, error=str(exc))
