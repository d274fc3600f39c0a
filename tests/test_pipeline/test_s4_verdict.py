"""Tests for Stage 4: Verdict (template feedback builders)."""

import pytest

from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.models.schemas.scoring_config import ScoringConfig
from speaking_assessor.models.schemas.skill_score import SKILL_NAMES, SkillScore
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.models.schemas.verdict_result import VerdictResult
from speaking_assessor.services.pipeline.s4_verdict import VerdictBuilder, format_duration


def _make_skills(**scores) -> dict[str, SkillScore]:
    defaults = dict(pronunciation=45, fluency=30, vocabulary=55, grammar=35, coherence=70, time=20)
    defaults.update(scores)
    return {
        name: SkillScore(
            score=defaults[name],
            issues=[f"{name} issue"],
            narrative_assessment=f"{name} narrative",
        )
        for name in SKILL_NAMES
    }


def _make_verdict_inputs(**overrides):
    defaults = dict(
        skills=_make_skills(),
        level="A2",
        overall_score=40,
        features=FeatureSet(duration_seconds=90.7),
        transcript=TranscriptAnalysis(
            word_count=50, unique_word_count=30, sentence_count=5,
            filler_word_count=6, raw_text="some words",
        ),
    )
    defaults.update(overrides)
    return defaults


class TestVerdictBuilder:
    def setup_method(self):
        self.builder = VerdictBuilder()

    def test_produces_complete_output(self):
        result = self.builder.build(**_make_verdict_inputs())
        assert isinstance(result, VerdictResult)
        assert result.errors
        assert result.recommendations
        assert result.detailed_feedback.overview.level == "A2"

    def test_run_delegates_to_build(self):
        inputs = _make_verdict_inputs()
        assert self.builder.run(**inputs) == self.builder.build(**inputs)


class TestErrors:
    def setup_method(self):
        self.builder = VerdictBuilder()

    def test_sorted_by_severity_then_detection_order(self):
        errors = self.builder.build(**_make_verdict_inputs()).errors
        assert [(e.skill, e.severity) for e in errors] == [
            ("fluency", "high"),
            ("grammar", "high"),
            ("pronunciation", "medium"),
            ("vocabulary", "low"),
        ]

    def test_entry_content(self):
        errors = self.builder.build(**_make_verdict_inputs()).errors
        fluency = errors[0]
        assert fluency.type == "Fluency"
        assert fluency.description == "fluency narrative"
        assert fluency.examples == ["fluency issue"]

    def test_time_never_reported(self):
        errors = self.builder.build(**_make_verdict_inputs()).errors
        assert "time" not in {e.skill for e in errors}

    def test_threshold_is_exclusive(self):
        skills = _make_skills(pronunciation=58, fluency=58, vocabulary=58, grammar=58, coherence=57)
        errors = self.builder.build(**_make_verdict_inputs(skills=skills)).errors
        assert [e.skill for e in errors] == ["coherence"]


class TestRecommendations:
    def setup_method(self):
        self.builder = VerdictBuilder()

    def test_full_set_in_order(self):
        recs = self.builder.build(**_make_verdict_inputs()).recommendations
        assert [r.title for r in recs] == [
            "Improve Fluency",
            "Strengthen Grammar",
            "Reduce Filler Words",
            "Build Strong Foundation",
        ]
        assert recs[0].priority == "high"
        assert recs[0].category == "Fluency"
        assert len(recs[0].actions) == 4
        assert recs[2].description == "You used 6 filler words"
        assert recs[3].category == "Foundation"

    def test_weakest_always_recommended(self):
        skills = _make_skills(pronunciation=90, fluency=85, vocabulary=80, grammar=88, coherence=95)
        recs = self.builder.build(**_make_verdict_inputs(
            skills=skills, level="C1", transcript=None,
        )).recommendations
        assert len(recs) == 1
        assert recs[0].title == "Expand Vocabulary"
        assert recs[0].priority == "medium"

    def test_ties_keep_skill_order(self):
        skills = _make_skills(pronunciation=60, fluency=60, vocabulary=60, grammar=60, coherence=60)
        recs = self.builder.build(**_make_verdict_inputs(
            skills=skills, level="B2", transcript=None,
        )).recommendations
        assert [r.category for r in recs] == ["Pronunciation"]

    def test_filler_threshold_is_exclusive(self):
        transcript = TranscriptAnalysis(word_count=50, unique_word_count=30, filler_word_count=5)
        recs = self.builder.build(**_make_verdict_inputs(transcript=transcript)).recommendations
        assert "Reduce Filler Words" not in [r.title for r in recs]

    def test_capped_by_config(self):
        builder = VerdictBuilder(ScoringConfig(max_recommendations=2))
        recs = builder.build(**_make_verdict_inputs()).recommendations
        assert len(recs) == 2


class TestStrengthsWeaknesses:
    def setup_method(self):
        self.builder = VerdictBuilder()

    def test_ranking(self):
        result = self.builder.build(**_make_verdict_inputs())
        assert [(s.name, s.score) for s in result.strengths] == [("Coherence", 70)]
        assert [(w.name, w.score) for w in result.weaknesses] == [
            ("Fluency", 30), ("Grammar", 35), ("Pronunciation", 45),
        ]

    def test_at_most_three_strengths(self):
        skills = _make_skills(pronunciation=90, fluency=85, vocabulary=80, grammar=88, coherence=95)
        result = self.builder.build(**_make_verdict_inputs(skills=skills))
        assert [s.name for s in result.strengths] == ["Coherence", "Pronunciation", "Grammar"]
        assert result.weaknesses == []


class TestDetailedFeedback:
    def setup_method(self):
        self.builder = VerdictBuilder()

    def test_overview(self):
        overview = self.builder.build(**_make_verdict_inputs()).detailed_feedback.overview
        assert overview.level_description == "Elementary - Simple everyday expressions"
        assert overview.overall_score == 40
        assert overview.duration_display == "1m 30s"
        assert overview.words_spoken == 50

    def test_transcription_section(self):
        section = self.builder.build(**_make_verdict_inputs()).detailed_feedback.transcription
        assert section.text == "some words"
        assert section.word_count == 50
        assert section.filler_word_count == 6

    def test_no_transcript(self):
        feedback = self.builder.build(**_make_verdict_inputs(transcript=None)).detailed_feedback
        assert feedback.transcription is None
        assert feedback.overview.words_spoken is None

    def test_one_section_per_skill(self):
        sections = self.builder.build(**_make_verdict_inputs()).detailed_feedback.skills
        assert [s.skill for s in sections] == list(SKILL_NAMES)
        assert sections[0].title == "Pronunciation"
        assert sections[0].narrative_assessment == "pronunciation narrative"

    def test_summary_joins_positive_signals(self):
        skills = _make_skills()
        skills["fluency"] = SkillScore(
            score=96, positive_signals=["Natural speaking pace", "Minimal filler words - great fluency!"],
        )
        skills["pronunciation"] = SkillScore(
            score=80, positive_signals=["Natural intonation", "Consistent volume"],
        )
        sections = self.builder.build(**_make_verdict_inputs(skills=skills)).detailed_feedback.skills
        assert sections[0].summary == "Natural intonation. Consistent volume."
        assert sections[1].summary == "Natural speaking pace. Minimal filler words - great fluency!"
        assert sections[2].summary == ""


@pytest.mark.parametrize("seconds, expected", [
    (90.7, "1m 30s"), (59.9, "0m 59s"), (125, "2m 5s"), (0.5, "0m 0s"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
