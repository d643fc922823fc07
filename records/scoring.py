"""
records/scoring.py -- Interview scoring via Gemini (google-genai).

The model is asked for JSON matching FeedbackSchema. The schema marks every
field required, but responses are still treated as untrusted: score()
returns the decoded object as a plain dict (or None when the body is not a
JSON object) and records/feedback.py applies defaults field by field.

API errors (google.genai.errors.APIError, network failures) propagate; the
caller owns error reporting.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

logger = logging.getLogger("intrevue.scoring")

SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories."
)

CATEGORIES = (
    ("Communication Skills", "Clarity, articulation, structured responses."),
    ("Technical Knowledge", "Understanding of key concepts for the role."),
    ("Problem Solving", "Ability to analyze problems and propose solutions."),
    ("Cultural & Role Fit", "Alignment with company values and job role."),
    ("Confidence & Clarity", "Confidence in responses, engagement, and clarity."),
)


class CategoryScoreSchema(BaseModel):
    name: str
    score: int = Field(ge=0, le=100)
    comment: str


class FeedbackSchema(BaseModel):
    """Response schema sent to the model."""

    totalScore: int = Field(ge=0, le=100)
    categoryScores: list[CategoryScoreSchema]
    strengths: list[str]
    areasForImprovement: list[str]
    finalAssessment: str


def build_prompt(formatted_transcript: str) -> str:
    categories = "\n".join(f"- **{name}**: {desc}" for name, desc in CATEGORIES)
    return (
        "You are an AI interviewer analyzing a mock interview. "
        "Your task is to evaluate the candidate based on structured categories. "
        "Be thorough and detailed in your analysis. Don't be lenient. "
        "If there are mistakes or areas for improvement, point them out.\n\n"
        f"Transcript:\n{formatted_transcript}\n"
        "Please score the candidate from 0 to 100 in the following areas:\n"
        f"{categories}\n"
    )


class ScoringClient:
    """Thin wrapper over genai.Client for structured feedback generation.

    Usage:
        scorer = ScoringClient(api_key=settings.gemini_api_key, model=settings.scoring_model)
        obj = scorer.score(build_prompt(transcript_text))
    """

    def __init__(self, api_key: str, model: str, client: Optional[genai.Client] = None) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        # genai.Client rejects an empty key, so it is built on first score().
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def score(self, prompt: str, system: str = SYSTEM_PROMPT) -> Optional[dict[str, Any]]:
        response = self.client.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system,
                response_mime_type="application/json",
                response_schema=FeedbackSchema,
            ),
        )
        text = (response.text or "").strip()
        try:
            obj = json.loads(text)
        except ValueError:
            logger.warning("Scoring model returned non-JSON output (%d chars)", len(text))
            return None
        return obj if isinstance(obj, dict) else None
