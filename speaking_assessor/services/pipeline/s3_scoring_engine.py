"""Stage 3: Scoring Engine - multi-criteria proficiency scoring.

Deterministic rules engine. Each skill starts from a baseline and applies
ordered adjustments from the audio features and (optionally) the transcript
analysis, recording a positive signal, issue or detail string per
adjustment. Skills are independent of each other.

The weighted overall score maps to a CEFR level through the configured
bands. Feedback artifacts are delegated to the Verdict builders (Stage 4).
"""

import logging
import math
from datetime import datetime
from typing import Any

from speaking_assessor.models.schemas.assessment import Assessment
from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.models.schemas.scoring_config import ScoringConfig
from speaking_assessor.models.schemas.skill_score import SKILL_NAMES, SkillScore
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.services.lexicon import topic_vocabulary
from speaking_assessor.services.numeric import clamp_score, round_half_up, round_to
from speaking_assessor.services.pipeline.base import BaseStage
from speaking_assessor.services.pipeline.s4_verdict import VerdictBuilder

logger = logging.getLogger(__name__)

CUSTOM_TOPIC = "custom"
GRAMMAR_DISCLAIMER = "Note: Full grammar accuracy requires human review"

# ---------------------------------------------------------------------------
# Narrative assessments, chosen by score: >=80, >=65, >=50, else
# ---------------------------------------------------------------------------
NARRATIVES: dict[str, tuple[str, str, str, str]] = {
    "pronunciation": (
        "Your pronunciation is excellent. Native speakers understand you easily.",
        "Good pronunciation with minor issues. Keep practicing difficult sounds.",
        "Pronunciation is developing. Practice with native audio regularly.",
        "Focus on basic pronunciation. Record yourself and compare with natives.",
    ),
    "fluency": (
        "Excellent fluency! You speak naturally and smoothly.",
        "Good fluency with some hesitations. Practice speaking without pausing.",
        "Fluency needs work. Try shadowing exercises.",
        "Significant fluency issues. Focus on reducing pauses and filler words.",
    ),
    "vocabulary": (
        "Excellent vocabulary range! You use varied and sophisticated words.",
        "Good vocabulary. Continue learning new words daily.",
        "Vocabulary is developing. Read more to expand your word bank.",
        "Limited vocabulary. Focus on learning common words and phrases first.",
    ),
    "grammar": (
        "Grammar appears strong with complex structures used correctly.",
        "Good grammar control. Focus on advanced structures.",
        "Grammar is adequate. Review common error patterns.",
        "Grammar needs attention. Start with basic sentence structures.",
    ),
    "coherence": (
        "Excellent organization! Ideas flow logically.",
        "Good coherence. Use more transition words.",
        "Organization needs work. Plan before speaking.",
        "Focus on clear structure: introduction, body, conclusion.",
    ),
}


def narrative_for(skill: str, score: int) -> str:
    excellent, good, developing, weak = NARRATIVES[skill]
    if score >= 80:
        return excellent
    elif score >= 65:
        return good
    elif score >= 50:
        return developing
    return weak


def _skill(
    name: str,
    score: float,
    positives: list[str],
    issues: list[str],
    details: list[str],
    stats: dict[str, str] | None = None,
) -> SkillScore:
    final = clamp_score(score)
    return SkillScore(
        score=final,
        positive_signals=positives,
        issues=issues,
        details=details,
        narrative_assessment=narrative_for(name, final),
        stats=stats or {},
    )


def _format_number(value: float) -> str:
    """137.0 -> '137', 137.5 -> '137.5'."""
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Per-skill scoring
# ---------------------------------------------------------------------------

def score_pronunciation(features: FeatureSet, transcript: TranscriptAnalysis | None) -> SkillScore:
    score = 50
    positives: list[str] = []
    issues: list[str] = []
    details: list[str] = []

    clarity = features.clarity or 50
    if clarity >= 80:
        score += 25
        positives.append("Excellent speech clarity")
        details.append("Your articulation is clear and easy to understand")
    elif clarity >= 60:
        score += 15
        positives.append("Good clarity overall")
    elif clarity >= 40:
        score += 5
        issues.append("Work on clearer articulation")
    else:
        score -= 10
        issues.append("Pronunciation needs significant improvement")

    # Intonation
    pitch = features.pitch_variation
    if 0.25 <= pitch <= 0.55:
        score += 15
        positives.append("Natural intonation")
    elif pitch < 0.15:
        score -= 12
        issues.append("Speech sounds monotone - add expression")
    elif pitch > 0.7:
        score -= 5
        issues.append("Intonation too varied")
    else:
        score += 8

    if features.volume_consistency >= 0.6:
        score += 10
        positives.append("Consistent volume")
    elif features.volume_consistency < 0.3:
        score -= 5
        issues.append("Volume varies too much")

    if transcript is not None and transcript.avg_word_length >= 4.5:
        score += 5
        details.append("Clear pronunciation of longer words detected")

    return _skill("pronunciation", score, positives, issues, details)


def score_fluency(features: FeatureSet, transcript: TranscriptAnalysis | None) -> SkillScore:
    score = 50
    positives: list[str] = []
    issues: list[str] = []
    details: list[str] = []

    pause_count = features.pause_count
    pause_ratio = features.pause_duration_seconds / features.duration_seconds
    speech_rate = features.speech_rate_wpm or 100

    if pause_ratio < 0.15 and 3 <= pause_count <= 12:
        score += 28
        positives.append("Excellent fluency with natural pauses")
    elif pause_ratio < 0.25 and pause_count <= 18:
        score += 18
        positives.append("Good fluency overall")
    elif pause_ratio < 0.35:
        score += 8
        issues.append("Reduce hesitations between thoughts")
    else:
        score -= 10
        issues.append("Too many pauses - practice speaking more smoothly")

    if 110 <= speech_rate <= 150:
        score += 18
        positives.append("Natural speaking pace")
    elif 90 <= speech_rate < 110:
        score += 10
        issues.append("Try speaking a bit faster")
    elif 150 < speech_rate <= 170:
        score += 10
        issues.append("Slow down slightly")
    elif speech_rate < 90:
        score -= 5
        issues.append("Speaking too slowly")
    else:
        score -= 10
        issues.append("Speaking too fast - listeners may struggle")

    if transcript is not None:
        filler_ratio = transcript.filler_ratio_pct
        if filler_ratio > 8:
            score -= 15
            issues.append(f"Too many filler words ({transcript.filler_word_count} detected)")
            details.append("Common fillers: " + ", ".join(transcript.filler_word_counts))
        elif filler_ratio > 4:
            score -= 8
            issues.append('Reduce filler words like "um", "uh", "like"')
        elif filler_ratio <= 2:
            score += 5
            positives.append("Minimal filler words - great fluency!")

    stats = {
        "pause_ratio": f"{round_to(pause_ratio * 100, 1):.1f}%",
        "speech_rate": f"{_format_number(speech_rate)} wpm",
        "pause_count": str(pause_count),
        "filler_words": str(transcript.filler_word_count if transcript is not None else 0),
    }
    return _skill("fluency", score, positives, issues, details, stats)


def score_vocabulary(
    features: FeatureSet,
    transcript: TranscriptAnalysis | None,
    topic: str,
) -> SkillScore:
    score = 45
    positives: list[str] = []
    issues: list[str] = []
    details: list[str] = []

    if transcript is not None:
        word_count = transcript.word_count
        if word_count >= 150:
            score += 20
            positives.append(f"Good vocabulary demonstration ({word_count} words)")
        elif word_count >= 80:
            score += 12
            positives.append(f"Adequate word count ({word_count} words)")
        else:
            score += 5
            issues.append("Speak more to demonstrate vocabulary range")

        richness = transcript.vocabulary_richness_pct
        if richness >= 65:
            score += 18
            positives.append("Excellent word variety")
            details.append(f"{transcript.unique_word_count} unique words used")
        elif richness >= 45:
            score += 12
            positives.append("Good word variety")
        else:
            score += 5
            issues.append("Use more varied vocabulary - avoid repetition")

        if transcript.advanced_word_count >= 5:
            score += 15
            positives.append("Strong use of advanced vocabulary")
            details.append("Advanced words: " + ", ".join(transcript.advanced_words[:5]))
        elif transcript.advanced_word_count >= 2:
            score += 8
            positives.append("Some advanced vocabulary used")
        else:
            issues.append("Try using more sophisticated vocabulary")
    else:
        # Audio-only estimate of words spoken
        speech_rate = features.speech_rate_wpm or 100
        speaking_time = features.duration_seconds - features.pause_duration_seconds
        estimated_words = round_half_up(speaking_time * (speech_rate / 60))

        if estimated_words >= 150:
            score += 25
            positives.append("Good vocabulary range demonstrated")
        elif estimated_words >= 80:
            score += 15
        else:
            issues.append("Speak longer to show vocabulary")

    if topic and topic != CUSTOM_TOPIC:
        score += 5
        details.append(f"Topic vocabulary expected: {topic_vocabulary(topic)}")

    return _skill("vocabulary", score, positives, issues, details)


def score_grammar(features: FeatureSet, transcript: TranscriptAnalysis | None) -> SkillScore:
    score = 50
    positives: list[str] = []
    issues: list[str] = []
    details: list[str] = []

    # Confident delivery as a proxy for grammar control
    if features.volume_consistency >= 0.6 and features.speech_rate_wpm >= 100:
        score += 15
        positives.append("Confident speech suggests good grammar control")
    elif features.volume_consistency >= 0.4:
        score += 8
    else:
        issues.append("Hesitation may indicate grammar uncertainty")

    if transcript is not None:
        gi = transcript.grammar_indicators
        if gi.has_complex_sentences:
            score += 12
            positives.append("Uses complex sentence structures")
        if gi.has_conditionals:
            score += 8
            positives.append("Good use of conditionals")
        if gi.has_perfect_tenses:
            score += 8
            positives.append("Uses perfect tenses correctly")
        if gi.has_passive_voice:
            score += 5
            details.append("Passive voice structures detected")

        if transcript.avg_words_per_sentence >= 12:
            score += 8
            positives.append("Good sentence complexity")
        elif transcript.avg_words_per_sentence < 6:
            issues.append("Try using longer, more complex sentences")

    if features.clarity >= 70:
        score += 8
        positives.append("Clear speech structure")

    details.append(GRAMMAR_DISCLAIMER)
    return _skill("grammar", score, positives, issues, details)


def score_coherence(features: FeatureSet, transcript: TranscriptAnalysis | None) -> SkillScore:
    score = 45
    positives: list[str] = []
    issues: list[str] = []
    details: list[str] = []

    pause_score = features.pause_score or 50
    if pause_score >= 85:
        score += 20
        positives.append("Well-organized speech structure")
    elif pause_score >= 70:
        score += 15
        positives.append("Good organization")
    else:
        score += 5
        issues.append("Organize ideas more clearly")

    if 0.2 <= features.pitch_variation <= 0.5:
        score += 12
        positives.append("Good use of emphasis")

    if transcript is not None:
        ci = transcript.coherence_indicators
        if ci.has_introduction:
            score += 10
            positives.append("Clear introduction detected")
        else:
            issues.append("Start with a clear introduction")

        if ci.has_conclusion:
            score += 10
            positives.append("Good conclusion")
        else:
            issues.append("End with a clear conclusion")

        if ci.transition_words_used:
            score += 3 * len(ci.transition_words_used)
            positives.append(
                "Uses transition words: " + ", ".join(ci.transition_words_used[:3])
            )
        else:
            issues.append("Use linking words: however, therefore, moreover")

    duration = features.duration_seconds
    if 60 <= duration <= 180:
        score += 5
    elif duration < 30:
        score -= 10
        issues.append("Response too short for coherent development")

    return _skill("coherence", score, positives, issues, details)


def score_time(features: FeatureSet) -> SkillScore:
    """Time management over minutes spoken. Carries no narrative assessment."""
    minutes = features.duration_seconds / 60
    issues: list[str] = []

    if minutes < 0.5:
        score, feedback = 30, "Too short! Aim for 1-2 minutes minimum"
        issues.append("Expand your response with more details")
    elif minutes < 1:
        score, feedback = 55, "A bit short. Add more content"
        issues.append("Include examples and explanations")
    elif minutes <= 2.5:
        score, feedback = 95, "Perfect timing! Well-balanced response"
    elif minutes <= 3.5:
        score, feedback = 82, "Good length, slightly long"
        issues.append("Be more concise")
    else:
        score, feedback = 65, "Too long. Focus on key points"
        issues.append("Practice summarizing")

    return SkillScore(
        score=score,
        positive_signals=[feedback],
        issues=issues,
        stats={"minutes": f"{round_to(minutes, 1):.1f}"},
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ScoringEngine(BaseStage):
    stage_name = "s3_scoring_engine"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self._verdict = VerdictBuilder(self.config)

    def run(self, **kwargs: Any) -> Assessment:
        return self.score(
            features=kwargs["features"],
            transcript=kwargs.get("transcript"),
            topic=kwargs.get("topic", ""),
            timestamp=kwargs.get("timestamp"),
        )

    def score(
        self,
        features: FeatureSet,
        transcript: TranscriptAnalysis | None,
        topic: str,
        timestamp: datetime | None = None,
    ) -> Assessment:
        """Score every skill and assemble the Assessment.

        A transcript without words is treated exactly like no transcript.
        ``timestamp`` is copied onto the result and takes no part in scoring.
        """
        if transcript is not None and transcript.is_empty:
            transcript = None

        skills = {
            "pronunciation": score_pronunciation(features, transcript),
            "fluency": score_fluency(features, transcript),
            "vocabulary": score_vocabulary(features, transcript, topic),
            "grammar": score_grammar(features, transcript),
            "coherence": score_coherence(features, transcript),
            "time": score_time(features),
        }
        scores = {name: skills[name].score for name in SKILL_NAMES}

        overall = self.compute_overall_score(scores)
        level = self.determine_level(overall)

        verdict = self._verdict.build(
            skills=skills,
            level=level,
            overall_score=overall,
            features=features,
            transcript=transcript,
        )

        logger.debug("Scored skills: %s -> overall=%d level=%s", scores, overall, level)

        return Assessment(
            overall_score=overall,
            level=level,
            level_description=self.config.band_for(level).description,
            scores=scores,
            skills=skills,
            errors=verdict.errors,
            recommendations=verdict.recommendations,
            strengths=verdict.strengths,
            weaknesses=verdict.weaknesses,
            detailed_feedback=verdict.detailed_feedback,
            topic=topic,
            duration_seconds=features.duration_seconds,
            transcription=transcript,
            analysis_version=self.config.analysis_version,
            timestamp=timestamp,
        )

    def compute_overall_score(self, scores: dict[str, int]) -> int:
        """Weighted sum of skill scores, clamped to [0, 100] and rounded.

        Skills missing from ``scores`` contribute 0.
        """
        total = math.fsum(
            scores.get(name, 0) * weight for name, weight in self.config.weights.items()
        )
        return clamp_score(total)

    def determine_level(self, overall_score: int) -> str:
        """First band containing the score; the fallback level otherwise."""
        for band in self.config.level_bands:
            if band.contains(overall_score):
                return band.level
        return self.config.fallback_level
