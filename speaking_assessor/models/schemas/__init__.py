"""Inter-stage Pydantic contracts for the assessment pipeline."""

from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.models.schemas.skill_score import SkillScore
from speaking_assessor.models.schemas.scoring_config import ScoringConfig
from speaking_assessor.models.schemas.verdict_result import VerdictResult
from speaking_assessor.models.schemas.assessment import Assessment

__all__ = [
    "FeatureSet",
    "TranscriptAnalysis",
    "SkillScore",
    "ScoringConfig",
    "VerdictResult",
    "Assessment",
]
