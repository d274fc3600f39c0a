"""Immutable rubric configuration owned by a ScoringEngine instance."""

from pydantic import BaseModel, Field, model_validator

from speaking_assessor.models.schemas.skill_score import SKILL_NAMES


class LevelBand(BaseModel):
    """Half-open score band [min, max) mapped to a CEFR level."""
    level: str
    min: int
    max: int
    description: str

    model_config = {"frozen": True}

    def contains(self, score: int) -> bool:
        return self.min <= score < self.max


DEFAULT_WEIGHTS: dict[str, float] = {
    "pronunciation": 0.22,
    "fluency": 0.22,
    "vocabulary": 0.18,
    "grammar": 0.15,
    "coherence": 0.13,
    "time": 0.10,
}

DEFAULT_LEVEL_BANDS: list[LevelBand] = [
    LevelBand(level="A1", min=0, max=28, description="Beginner - Basic words and phrases"),
    LevelBand(level="A2", min=28, max=42, description="Elementary - Simple everyday expressions"),
    LevelBand(level="B1", min=42, max=58, description="Intermediate - Familiar topics with effort"),
    LevelBand(level="B2", min=58, max=73, description="Upper Intermediate - Fluent interaction"),
    LevelBand(level="C1", min=73, max=87, description="Advanced - Complex topics with ease"),
    LevelBand(level="C2", min=87, max=100, description="Mastery - Near-native proficiency"),
]


class ScoringConfig(BaseModel):
    """Weights, level bands and feedback thresholds for one rubric.

    Frozen so a single engine can be shared between concurrent assessments,
    and several differently configured engines can coexist.
    """
    weights: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    level_bands: list[LevelBand] = Field(default_factory=lambda: list(DEFAULT_LEVEL_BANDS))
    fallback_level: str = "C2"

    error_threshold: int = 58
    strength_threshold: int = 65
    weakness_threshold: int = 58
    second_recommendation_threshold: int = 60
    filler_recommendation_min: int = 5
    max_recommendations: int = 4
    max_strengths: int = 3
    max_weaknesses: int = 3

    analysis_version: str = "4.0"

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _validate_rubric(self) -> "ScoringConfig":
        missing = set(SKILL_NAMES) - set(self.weights)
        if missing:
            raise ValueError(f"Missing weights for skills: {sorted(missing)}")

        total_weight = sum(self.weights.values())
        if abs(total_weight - 1.0) > 0.01:
            raise ValueError(f"Weights must sum to 1.0, got {total_weight}")

        if not self.level_bands:
            raise ValueError("At least one level band is required")
        if self.level_bands[0].min != 0:
            raise ValueError("Level bands must start at 0")
        for prev, band in zip(self.level_bands, self.level_bands[1:]):
            if band.min != prev.max:
                raise ValueError(
                    f"Level bands must be contiguous: {prev.level} ends at {prev.max}, "
                    f"{band.level} starts at {band.min}"
                )

        if self.fallback_level not in self.levels:
            raise ValueError(f"Unknown fallback level: {self.fallback_level}")
        return self

    @property
    def levels(self) -> list[str]:
        return [band.level for band in self.level_bands]

    def band_for(self, level: str) -> LevelBand:
        for band in self.level_bands:
            if band.level == level:
                return band
        raise ValueError(f"Unknown level: {level}")
