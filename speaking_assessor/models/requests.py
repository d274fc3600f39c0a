from pydantic import BaseModel, Field

from speaking_assessor.config import settings
from speaking_assessor.models.schemas.feature_set import FeatureSet


class TranscriptRequest(BaseModel):
    text: str = Field("", max_length=settings.max_transcript_chars, description="Recognized speech transcript")


class FeatureScoreRequest(BaseModel):
    features: FeatureSet
    transcript: str = Field(
        "", max_length=settings.max_transcript_chars, description="Recognized speech transcript",
    )
    topic: str = Field(..., max_length=100, description="Speaking topic identifier, or 'custom'")
