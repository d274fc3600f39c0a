"""Shared dependencies for API routes."""

from speaking_assessor.services.pipeline.s2_transcript_analyzer import TranscriptAnalyzer
from speaking_assessor.services.pipeline.s3_scoring_engine import ScoringEngine
from speaking_assessor.services.pipeline.stage_registry import get_stage


def get_engine() -> ScoringEngine:
    return get_stage("s3_scoring_engine")


def get_analyzer() -> TranscriptAnalyzer:
    return get_stage("s2_transcript_analyzer")
