import pytest
from pydantic import ValidationError

from speaking_assessor.models.schemas.scoring_config import (
    DEFAULT_LEVEL_BANDS,
    DEFAULT_WEIGHTS,
    LevelBand,
    ScoringConfig,
)


class TestScoringConfig:
    def test_defaults(self):
        config = ScoringConfig()
        assert config.weights == DEFAULT_WEIGHTS
        assert config.levels == ["A1", "A2", "B1", "B2", "C1", "C2"]
        assert config.fallback_level == "C2"
        assert config.analysis_version == "4.0"

    def test_default_weights_sum_to_one(self):
        assert sum(DEFAULT_WEIGHTS.values()) == pytest.approx(1.0)

    def test_frozen(self):
        config = ScoringConfig()
        with pytest.raises(ValidationError):
            config.error_threshold = 10

    def test_weights_must_sum_to_one(self):
        weights = dict(DEFAULT_WEIGHTS, time=0.5)
        with pytest.raises(ValidationError, match="Weights must sum to 1.0"):
            ScoringConfig(weights=weights)

    def test_small_rounding_tolerated(self):
        weights = dict(DEFAULT_WEIGHTS, time=0.105)
        assert ScoringConfig(weights=weights).weights["time"] == 0.105

    def test_missing_skill_weight(self):
        weights = {k: v for k, v in DEFAULT_WEIGHTS.items() if k != "time"}
        weights["pronunciation"] += 0.10
        with pytest.raises(ValidationError, match="Missing weights"):
            ScoringConfig(weights=weights)

    def test_bands_must_be_contiguous(self):
        bands = list(DEFAULT_LEVEL_BANDS)
        bands[1] = LevelBand(level="A2", min=30, max=42, description="gap")
        with pytest.raises(ValidationError, match="contiguous"):
            ScoringConfig(level_bands=bands)

    def test_bands_must_start_at_zero(self):
        bands = [LevelBand(level="B1", min=10, max=100, description="")]
        with pytest.raises(ValidationError, match="start at 0"):
            ScoringConfig(level_bands=bands, fallback_level="B1")

    def test_unknown_fallback_level(self):
        with pytest.raises(ValidationError, match="Unknown fallback level"):
            ScoringConfig(fallback_level="D1")

    def test_band_for(self):
        config = ScoringConfig()
        assert config.band_for("B2").description == "Upper Intermediate - Fluent interaction"
        with pytest.raises(ValueError):
            config.band_for("Z9")


class TestLevelBand:
    def test_half_open(self):
        band = LevelBand(level="B2", min=58, max=73, description="")
        assert band.contains(58)
        assert band.contains(72)
        assert not band.contains(73)
        assert not band.contains(57)
