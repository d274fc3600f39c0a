"""Tests for the pipeline orchestrator (end-to-end on synthetic audio)."""

from datetime import datetime, timezone
from unittest.mock import patch

import numpy as np
import pytest

from speaking_assessor.errors import AnalysisError, InvalidAudioError
from speaking_assessor.models.schemas.assessment import Assessment
from speaking_assessor.models.schemas.scoring_config import ScoringConfig
from speaking_assessor.services.pipeline import orchestrator
from speaking_assessor.services.pipeline.s1_audio_extractor import AudioFeatureExtractor
from speaking_assessor.services.pipeline.s3_scoring_engine import ScoringEngine

SAMPLE_RATE = 8000


def _speech(seconds: float = 90, pauses=((10, 2), (30, 2), (50, 2), (70, 2))) -> np.ndarray:
    samples = np.full(int(seconds * SAMPLE_RATE), 0.02, dtype=np.float32)
    for start, length in pauses:
        begin = int(start * SAMPLE_RATE)
        samples[begin:begin + int(length * SAMPLE_RATE)] = 0.0
    return samples


TRANSCRIPT = (
    "I would like to talk about technology. Although it has been difficult, "
    "innovative devices significantly enhance our daily experience. However, "
    "if we could evaluate the impact carefully, we would understand it better. "
    "In conclusion, technology is remarkable."
)


class TestAssess:
    def test_audio_only(self):
        result = orchestrator.assess(_speech(), SAMPLE_RATE)
        assert isinstance(result, Assessment)
        assert result.transcription is None
        assert result.topic == "custom"
        assert result.duration_seconds == pytest.approx(90.0)
        assert result.scores["time"] == 95
        assert result.detailed_feedback.overview.words_spoken is None

    def test_with_transcript(self):
        result = orchestrator.assess(_speech(), SAMPLE_RATE, transcript=TRANSCRIPT, topic="technology")
        assert result.transcription is not None
        assert result.transcription.coherence_indicators.has_introduction
        assert result.transcription.grammar_indicators.has_conditionals
        assert result.topic == "technology"
        assert any(d.startswith("Topic vocabulary expected: digital")
                   for d in result.skills["vocabulary"].details)
        assert 0 <= result.overall_score <= 100

    @pytest.mark.parametrize("transcript", ["", "   ", None])
    def test_blank_transcript_is_absent(self, transcript):
        result = orchestrator.assess(_speech(), SAMPLE_RATE, transcript=transcript)
        assert result.transcription is None
        assert result == orchestrator.assess(_speech(), SAMPLE_RATE)

    def test_custom_engine(self):
        engine = ScoringEngine(ScoringConfig(analysis_version="custom-rubric"))
        result = orchestrator.assess(_speech(), SAMPLE_RATE, engine=engine)
        assert result.analysis_version == "custom-rubric"

    def test_timestamp_passthrough(self):
        ts = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        result = orchestrator.assess(_speech(), SAMPLE_RATE, timestamp=ts)
        assert result.timestamp == ts


class TestAssessErrors:
    def test_empty_buffer_is_invalid_audio(self):
        with pytest.raises(InvalidAudioError):
            orchestrator.assess(np.array([], dtype=np.float32), SAMPLE_RATE)

    def test_bad_sample_rate_is_invalid_audio(self):
        with pytest.raises(InvalidAudioError):
            orchestrator.assess(_speech(5, pauses=()), 0)

    def test_unexpected_failure_wrapped(self):
        with patch(
            "speaking_assessor.services.pipeline.s3_scoring_engine.ScoringEngine.score",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(AnalysisError, match="Failed to analyze speaking: boom") as exc_info:
                orchestrator.assess(_speech(5, pauses=()), SAMPLE_RATE)
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestAssessFeatures:
    def setup_method(self):
        self.features = AudioFeatureExtractor().extract(_speech(), SAMPLE_RATE)

    def test_matches_full_pipeline(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        full = orchestrator.assess(_speech(), SAMPLE_RATE, TRANSCRIPT, topic="technology", timestamp=ts)
        scored = orchestrator.assess_features(self.features, TRANSCRIPT, topic="technology", timestamp=ts)
        assert scored == full

    def test_blank_transcript_is_absent(self):
        assessment = orchestrator.assess_features(self.features, "   ")
        assert assessment.transcription is None

    def test_unexpected_failure_wrapped(self):
        with patch(
            "speaking_assessor.services.pipeline.s3_scoring_engine.ScoringEngine.score",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(AnalysisError, match="Failed to analyze speaking: boom") as exc_info:
                orchestrator.assess_features(self.features)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
