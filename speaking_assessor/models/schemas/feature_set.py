"""Stage 1 output: quantitative features extracted from the audio buffer."""

from pydantic import BaseModel, Field, model_validator


class FeatureSet(BaseModel):
    """Structured output of the Audio Feature Extractor (Stage 1).

    Energy-based proxies only: pitch_variation is the variability of the
    50ms amplitude envelope, not a fundamental-frequency estimate.
    """
    duration_seconds: float = Field(gt=0)
    duration_score: int = Field(default=0, ge=0, le=100)
    duration_feedback: str = ""

    average_volume: float = Field(default=0.0, ge=0)
    volume_consistency: float = Field(default=0.0, ge=0, le=1)  # 0.0-1.0
    energy_level: float = Field(default=0.0, ge=0)  # RMS

    pause_count: int = Field(default=0, ge=0)
    pause_duration_seconds: float = Field(default=0.0, ge=0)
    pause_score: int = Field(default=0, ge=0, le=100)

    speech_rate_wpm: float = Field(default=0.0, ge=0)
    speech_rate_score: int = Field(default=0, ge=0, le=100)
    speech_rate_feedback: str = ""

    pitch_variation: float = Field(default=0.0, ge=0)
    pitch_score: int = Field(default=0, ge=0, le=100)

    clarity: int = Field(default=0, ge=0, le=100)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _pauses_fit_in_duration(self) -> "FeatureSet":
        if self.pause_duration_seconds > self.duration_seconds:
            raise ValueError(
                f"pause_duration_seconds ({self.pause_duration_seconds}) exceeds "
                f"duration_seconds ({self.duration_seconds})"
            )
        return self
