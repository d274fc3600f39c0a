"""Final pipeline artifact handed to persistence, UI and analytics consumers."""

from datetime import datetime

from pydantic import BaseModel, Field

from speaking_assessor.models.schemas.skill_score import SkillScore
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.models.schemas.verdict_result import (
    DetailedFeedback,
    ErrorEntry,
    Recommendation,
    SkillRanking,
)


class Assessment(BaseModel):
    """Complete result of one assessment invocation.

    Built once by the Scoring Engine and never mutated afterwards. The
    timestamp is supplied by the caller and takes no part in scoring.
    """
    overall_score: int = Field(ge=0, le=100)
    level: str
    level_description: str
    scores: dict[str, int]
    skills: dict[str, SkillScore]
    errors: list[ErrorEntry] = []
    recommendations: list[Recommendation] = []
    strengths: list[SkillRanking] = []
    weaknesses: list[SkillRanking] = []
    detailed_feedback: DetailedFeedback
    topic: str = ""
    duration_seconds: float
    transcription: TranscriptAnalysis | None = None
    analysis_version: str = ""
    timestamp: datetime | None = None

    model_config = {"frozen": True}
