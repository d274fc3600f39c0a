"""Pipeline orchestrator: wires the assessment stages together.

Flow:
    samples + sample_rate          transcript text
      ├─ S1.extract(...)  → FeatureSet
      │                            ├─ S2.analyze(...)  → TranscriptAnalysis
      │         ↓                              ↓
      └─ S3.score(features, transcript, topic)  → Assessment
                    └─ S4.build(...)  → VerdictResult (embedded)
"""

import logging
from datetime import datetime
from typing import Sequence

import numpy as np

from speaking_assessor.errors import AnalysisError, InvalidAudioError
from speaking_assessor.models.schemas.assessment import Assessment
from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.services.pipeline.s3_scoring_engine import ScoringEngine
from speaking_assessor.services.pipeline.stage_registry import get_stage

logger = logging.getLogger(__name__)


def assess(
    samples: Sequence[float] | np.ndarray,
    sample_rate: int,
    transcript: str | None = "",
    topic: str = "custom",
    engine: ScoringEngine | None = None,
    timestamp: datetime | None = None,
) -> Assessment:
    """Run the full pipeline on one recording.

    Raises:
        InvalidAudioError: the sample buffer or sample rate is unusable.
        AnalysisError: any other failure while computing features or scores.
    """
    try:
        # --- Stage 1: audio features ---
        features: FeatureSet = get_stage("s1_audio_extractor").run(
            samples=samples, sample_rate=sample_rate,
        )

        # --- Stage 2: transcript indicators (independent of Stage 1) ---
        analysis: TranscriptAnalysis = get_stage("s2_transcript_analyzer").run(text=transcript)

        # --- Stage 3 + 4: scoring and feedback ---
        scorer = engine or get_stage("s3_scoring_engine")
        assessment: Assessment = scorer.run(
            features=features,
            transcript=None if analysis.is_empty else analysis,
            topic=topic,
            timestamp=timestamp,
        )
    except InvalidAudioError:
        raise
    except Exception as e:
        logger.exception("Assessment failed")
        raise AnalysisError(f"Failed to analyze speaking: {e}") from e

    logger.info(
        "Assessment complete: duration=%.1fs words=%d level=%s overall=%d",
        features.duration_seconds, analysis.word_count, assessment.level, assessment.overall_score,
    )
    return assessment


def assess_features(
    features: FeatureSet,
    transcript: str | None = "",
    topic: str = "custom",
    engine: ScoringEngine | None = None,
    timestamp: datetime | None = None,
) -> Assessment:
    """Score pre-extracted features, skipping Stage 1.

    Raises:
        AnalysisError: any failure while analyzing the transcript or scoring.
    """
    try:
        analysis: TranscriptAnalysis = get_stage("s2_transcript_analyzer").run(text=transcript)
        scorer = engine or get_stage("s3_scoring_engine")
        assessment: Assessment = scorer.run(
            features=features,
            transcript=None if analysis.is_empty else analysis,
            topic=topic,
            timestamp=timestamp,
        )
    except Exception as e:
        logger.exception("Feature assessment failed")
        raise AnalysisError(f"Failed to analyze speaking: {e}") from e

    logger.info(
        "Feature assessment complete: words=%d level=%s overall=%d",
        analysis.word_count, assessment.level, assessment.overall_score,
    )
    return assessment
