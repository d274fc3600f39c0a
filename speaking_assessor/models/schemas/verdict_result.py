"""Stage 4 output: ranked errors, recommendations and narrative feedback."""

from typing import Literal

from pydantic import BaseModel


class ErrorEntry(BaseModel):
    skill: str
    type: str  # display name, e.g. "Pronunciation"
    severity: Literal["high", "medium", "low"]
    description: str = ""
    examples: list[str] = []

    model_config = {"frozen": True}


class Recommendation(BaseModel):
    priority: Literal["high", "medium"]
    category: str
    title: str
    description: str
    actions: list[str] = []

    model_config = {"frozen": True}


class SkillRanking(BaseModel):
    name: str  # display name
    score: int

    model_config = {"frozen": True}


class OverviewSection(BaseModel):
    level: str
    level_description: str
    overall_score: int
    duration_display: str  # "1m 30s"
    words_spoken: int | None = None

    model_config = {"frozen": True}


class TranscriptionSection(BaseModel):
    text: str
    word_count: int
    unique_word_count: int
    sentence_count: int
    filler_word_count: int = 0

    model_config = {"frozen": True}


class SkillFeedbackSection(BaseModel):
    skill: str
    title: str
    score: int
    summary: str = ""
    narrative_assessment: str = ""
    stats: dict[str, str] = {}
    issues: list[str] = []
    details: list[str] = []

    model_config = {"frozen": True}


class DetailedFeedback(BaseModel):
    overview: OverviewSection
    transcription: TranscriptionSection | None = None
    skills: list[SkillFeedbackSection] = []

    model_config = {"frozen": True}


class VerdictResult(BaseModel):
    """Structured output of the Verdict builders (Stage 4).

    Template-based and deterministic: every field is derived from the
    skill scores, the level and the transcript statistics.
    """
    errors: list[ErrorEntry] = []
    recommendations: list[Recommendation] = []
    strengths: list[SkillRanking] = []
    weaknesses: list[SkillRanking] = []
    detailed_feedback: DetailedFeedback

    model_config = {"frozen": True}
