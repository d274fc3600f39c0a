"""Lazy registry of default-configured pipeline stages.

Stages are stateless apart from frozen configuration, so one shared
instance per name is safe across threads.
"""

import logging

from speaking_assessor.services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

_registry: dict[str, BaseStage] = {}


def _create_stage(name: str) -> BaseStage:
    """Factory: create a stage by name with deferred imports."""
    if name == "s1_audio_extractor":
        from speaking_assessor.services.pipeline.s1_audio_extractor import AudioFeatureExtractor
        return AudioFeatureExtractor()
    elif name == "s2_transcript_analyzer":
        from speaking_assessor.services.pipeline.s2_transcript_analyzer import TranscriptAnalyzer
        return TranscriptAnalyzer()
    elif name == "s3_scoring_engine":
        from speaking_assessor.services.pipeline.s3_scoring_engine import ScoringEngine
        return ScoringEngine()
    elif name == "s4_verdict":
        from speaking_assessor.services.pipeline.s4_verdict import VerdictBuilder
        return VerdictBuilder()
    else:
        raise ValueError(f"Unknown stage: {name}")


def get_stage(name: str) -> BaseStage:
    """Get a stage by name, creating it on first access."""
    if name not in _registry:
        _registry[name] = _create_stage(name)
        logger.info("Stage ready: %s", name)
    return _registry[name]


def preload(*names: str) -> None:
    """Create multiple stages up front (e.g. at startup)."""
    for name in names:
        get_stage(name)


def clear() -> None:
    """Drop all cached stages. Useful for testing."""
    _registry.clear()
