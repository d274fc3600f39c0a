"""Typed failures surfaced by the assessment pipeline."""


class AssessmentError(Exception):
    """Base class for all pipeline failures."""


class InvalidAudioError(AssessmentError):
    """Audio buffer is unusable: empty, not mono, undecodable, or bad sample rate."""


class AnalysisError(AssessmentError):
    """Unexpected failure while computing features or scores."""
