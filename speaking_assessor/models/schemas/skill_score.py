"""Per-skill scoring result produced inside the Scoring Engine."""

from pydantic import BaseModel, Field

SKILL_NAMES: tuple[str, ...] = (
    "pronunciation",
    "fluency",
    "vocabulary",
    "grammar",
    "coherence",
    "time",
)

# Skills considered for errors, recommendations and strengths/weaknesses
RANKED_SKILLS: tuple[str, ...] = SKILL_NAMES[:5]


class SkillScore(BaseModel):
    """One independently scored proficiency dimension."""
    score: int = Field(default=0, ge=0, le=100)
    positive_signals: list[str] = []
    issues: list[str] = []
    details: list[str] = []
    narrative_assessment: str = ""
    stats: dict[str, str] = {}

    model_config = {"frozen": True}
