"""Stage 4: Verdict - user-facing feedback generation.

Template-based rules engine. Turns per-skill scores, the proficiency level
and transcript statistics into ranked errors, recommendations,
strengths/weaknesses and structured detailed-feedback sections.
"""

import logging
from typing import Any

from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.models.schemas.scoring_config import ScoringConfig
from speaking_assessor.models.schemas.skill_score import RANKED_SKILLS, SKILL_NAMES, SkillScore
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.models.schemas.verdict_result import (
    DetailedFeedback,
    ErrorEntry,
    OverviewSection,
    Recommendation,
    SkillFeedbackSection,
    SkillRanking,
    TranscriptionSection,
    VerdictResult,
)
from speaking_assessor.services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

_SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# ---------------------------------------------------------------------------
# Recommendation templates
# ---------------------------------------------------------------------------
SKILL_RECOMMENDATIONS: dict[str, dict[str, Any]] = {
    "pronunciation": {
        "title": "Improve Pronunciation",
        "description": "Focus on clear articulation",
        "actions": [
            "Use pronunciation apps (ELSA, Speechling)",
            "Record yourself and compare with natives",
            "Practice difficult sounds daily",
            "Learn word stress patterns",
        ],
    },
    "fluency": {
        "title": "Improve Fluency",
        "description": "Speak more smoothly",
        "actions": [
            "Practice shadowing technique",
            "Read aloud for 10 minutes daily",
            "Reduce thinking time before speaking",
            "Learn common phrases and expressions",
        ],
    },
    "vocabulary": {
        "title": "Expand Vocabulary",
        "description": "Learn and use more words",
        "actions": [
            "Learn 5-10 new words daily",
            "Use spaced repetition apps",
            "Read extensively on various topics",
            "Use new words in sentences immediately",
        ],
    },
    "grammar": {
        "title": "Strengthen Grammar",
        "description": "Master sentence structures",
        "actions": [
            "Focus on one grammar rule per week",
            "Practice with grammar exercises",
            "Write sentences using new structures",
            "Get feedback from teachers or apps",
        ],
    },
    "coherence": {
        "title": "Improve Organization",
        "description": "Structure your ideas clearly",
        "actions": [
            "Use introduction-body-conclusion structure",
            "Learn transition words",
            "Plan your response before speaking",
            "Practice IELTS/TOEFL speaking tasks",
        ],
    },
}

FILLER_ACTIONS = [
    'Practice pausing silently instead of saying "um"',
    "Record yourself and count filler words",
    "Slow down and think before speaking",
    "Use transition words instead of fillers",
]

FOUNDATION_ACTIONS = [
    "Learn the 1000 most common English words",
    "Practice basic sentence patterns daily",
    "Watch English videos with subtitles",
    "Speak English for 10 minutes every day",
]

FOUNDATION_LEVELS = frozenset({"A1", "A2"})


def display_name(skill: str) -> str:
    return skill[:1].upper() + skill[1:]


class VerdictBuilder(BaseStage):
    stage_name = "s4_verdict"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def run(self, **kwargs: Any) -> VerdictResult:
        return self.build(
            skills=kwargs["skills"],
            level=kwargs["level"],
            overall_score=kwargs["overall_score"],
            features=kwargs["features"],
            transcript=kwargs.get("transcript"),
        )

    def build(
        self,
        skills: dict[str, SkillScore],
        level: str,
        overall_score: int,
        features: FeatureSet,
        transcript: TranscriptAnalysis | None = None,
    ) -> VerdictResult:
        """Assemble every feedback artifact for one assessment.

        ``transcript`` must already be None when it holds no words.
        """
        strengths, weaknesses = _build_strengths_weaknesses(skills, self.config)
        return VerdictResult(
            errors=_build_errors(skills, self.config),
            recommendations=_build_recommendations(skills, level, transcript, self.config),
            strengths=strengths,
            weaknesses=weaknesses,
            detailed_feedback=_build_detailed_feedback(
                skills, level, overall_score, features, transcript, self.config,
            ),
        )


# ---------------------------------------------------------------------------
# Template builders
# ---------------------------------------------------------------------------

def _severity(score: int) -> str:
    if score < 40:
        return "high"
    elif score < 50:
        return "medium"
    return "low"


def _build_errors(skills: dict[str, SkillScore], config: ScoringConfig) -> list[ErrorEntry]:
    """One entry per ranked skill under the error threshold, most severe first."""
    errors: list[ErrorEntry] = []
    for name in RANKED_SKILLS:
        skill = skills[name]
        if skill.score < config.error_threshold:
            errors.append(ErrorEntry(
                skill=name,
                type=display_name(name),
                severity=_severity(skill.score),
                description=skill.narrative_assessment,
                examples=list(skill.issues),
            ))

    # sorted() is stable, so detection order survives within a severity
    return sorted(errors, key=lambda e: _SEVERITY_ORDER[e.severity])


def _skill_recommendation(name: str, score: int) -> Recommendation:
    template = SKILL_RECOMMENDATIONS[name]
    return Recommendation(
        priority="high" if score < 50 else "medium",
        category=display_name(name),
        title=template["title"],
        description=template["description"],
        actions=list(template["actions"]),
    )


def _build_recommendations(
    skills: dict[str, SkillScore],
    level: str,
    transcript: TranscriptAnalysis | None,
    config: ScoringConfig,
) -> list[Recommendation]:
    ranked = sorted(RANKED_SKILLS, key=lambda name: skills[name].score)
    weakest, second = ranked[0], ranked[1]

    recommendations = [_skill_recommendation(weakest, skills[weakest].score)]

    if skills[second].score < config.second_recommendation_threshold:
        recommendations.append(_skill_recommendation(second, skills[second].score))

    if transcript is not None and transcript.filler_word_count > config.filler_recommendation_min:
        recommendations.append(Recommendation(
            priority="high",
            category="Fluency",
            title="Reduce Filler Words",
            description=f"You used {transcript.filler_word_count} filler words",
            actions=list(FILLER_ACTIONS),
        ))

    if level in FOUNDATION_LEVELS:
        recommendations.append(Recommendation(
            priority="high",
            category="Foundation",
            title="Build Strong Foundation",
            description="Focus on basic skills first",
            actions=list(FOUNDATION_ACTIONS),
        ))

    return recommendations[: config.max_recommendations]


def _build_strengths_weaknesses(
    skills: dict[str, SkillScore],
    config: ScoringConfig,
) -> tuple[list[SkillRanking], list[SkillRanking]]:
    ranked = sorted(
        (SkillRanking(name=display_name(name), score=skills[name].score) for name in RANKED_SKILLS),
        key=lambda r: r.score,
        reverse=True,
    )

    strengths = [r for r in ranked if r.score >= config.strength_threshold][: config.max_strengths]

    # Worst first: the last N below threshold, reversed
    below = [r for r in ranked if r.score < config.weakness_threshold]
    weaknesses = list(reversed(below[-config.max_weaknesses:])) if below else []

    return strengths, weaknesses


def format_duration(seconds: float) -> str:
    """Whole minutes and seconds, e.g. 90.7 -> '1m 30s'."""
    total = int(seconds)
    return f"{total // 60}m {total % 60}s"


def _summary(positive_signals: list[str]) -> str:
    text = ". ".join(positive_signals)
    if text and text[-1] not in ".!?":
        text += "."
    return text


def _build_detailed_feedback(
    skills: dict[str, SkillScore],
    level: str,
    overall_score: int,
    features: FeatureSet,
    transcript: TranscriptAnalysis | None,
    config: ScoringConfig,
) -> DetailedFeedback:
    overview = OverviewSection(
        level=level,
        level_description=config.band_for(level).description,
        overall_score=overall_score,
        duration_display=format_duration(features.duration_seconds),
        words_spoken=transcript.word_count if transcript is not None else None,
    )

    transcription = None
    if transcript is not None:
        transcription = TranscriptionSection(
            text=transcript.raw_text,
            word_count=transcript.word_count,
            unique_word_count=transcript.unique_word_count,
            sentence_count=transcript.sentence_count,
            filler_word_count=transcript.filler_word_count,
        )

    sections = [
        SkillFeedbackSection(
            skill=name,
            title=display_name(name),
            score=skills[name].score,
            summary=_summary(skills[name].positive_signals),
            narrative_assessment=skills[name].narrative_assessment,
            stats=dict(skills[name].stats),
            issues=list(skills[name].issues),
            details=list(skills[name].details),
        )
        for name in SKILL_NAMES
    ]

    return DetailedFeedback(overview=overview, transcription=transcription, skills=sections)
