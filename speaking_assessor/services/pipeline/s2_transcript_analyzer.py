"""Stage 2: Transcript Analyzer - lexical and structural indicators.

Pure text processing over the recognized transcript. Tokens are
whitespace-delimited and keep their punctuation ("job." and "job" are
different tokens), which is what the downstream bands expect.
"""

import logging
import re
from typing import Any

from speaking_assessor.models.schemas.transcript_analysis import (
    CoherenceIndicators,
    GrammarIndicators,
    TranscriptAnalysis,
    VocabularyLevel,
)
from speaking_assessor.services.lexicon import (
    ADVANCED_VOCABULARY,
    COMPLEX_SENTENCE_MARKERS,
    CONCLUSION_MARKERS,
    CONDITIONAL_MARKERS,
    INTRODUCTION_MARKERS,
    LONG_WORD_MIN_LENGTH,
    MAX_ADVANCED_WORDS,
    MIN_CONDITIONAL_MARKERS,
    PASSIVE_VOICE_MARKERS,
    PERFECT_TENSE_MARKERS,
    TRANSITION_WORDS,
    count_fillers,
    markers_present,
)
from speaking_assessor.services.numeric import clamp, round_to
from speaking_assessor.services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

# Indicator score bonuses
_COMPLEX_BONUS = 15
_CONDITIONAL_BONUS = 10
_PERFECT_BONUS = 10
_PASSIVE_BONUS = 5
_INTRODUCTION_BONUS = 15
_CONCLUSION_BONUS = 15
_TRANSITION_BONUS = 5  # per distinct transition word


class TranscriptAnalyzer(BaseStage):
    stage_name = "s2_transcript_analyzer"

    def run(self, **kwargs: Any) -> TranscriptAnalysis:
        return self.analyze(kwargs.get("text"))

    def analyze(self, text: str | None) -> TranscriptAnalysis:
        """Analyze a transcript. Blank or missing text gives the neutral analysis."""
        if not text or not text.strip():
            return TranscriptAnalysis(raw_text=text or "")

        lower_text = text.lower()
        words = lower_text.split()
        sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]

        word_count = len(words)
        unique_word_count = len(set(words))
        richness = unique_word_count / word_count * 100
        avg_words_per_sentence = word_count / len(sentences) if sentences else 0.0
        avg_word_length = sum(len(w) for w in words) / word_count

        filler_counts = count_fillers(text)
        filler_total = sum(filler_counts.values())
        # Multi-word fillers can in principle outnumber tokens
        filler_ratio = min(100.0, filler_total / word_count * 100)

        advanced = detect_advanced_vocabulary(words)

        richness = round_to(richness, 1)
        avg_words_per_sentence = round_to(avg_words_per_sentence, 1)
        filler_ratio = round_to(filler_ratio, 1)

        analysis = TranscriptAnalysis(
            word_count=word_count,
            unique_word_count=unique_word_count,
            sentence_count=len(sentences),
            vocabulary_richness_pct=richness,
            avg_words_per_sentence=avg_words_per_sentence,
            avg_word_length=round_to(avg_word_length, 1),
            filler_word_count=filler_total,
            filler_word_counts=filler_counts,
            filler_ratio_pct=filler_ratio,
            advanced_words=advanced,
            advanced_word_count=len(advanced),
            grammar_indicators=analyze_grammar(lower_text),
            coherence_indicators=analyze_coherence(lower_text),
            vocabulary_level=estimate_vocabulary_level(
                word_count=word_count,
                richness=richness,
                advanced_count=len(advanced),
                avg_words_per_sentence=avg_words_per_sentence,
                filler_ratio=filler_ratio,
            ),
            raw_text=text,
        )

        logger.debug(
            "Transcript analyzed: words=%d unique=%d sentences=%d fillers=%d advanced=%d",
            word_count, unique_word_count, len(sentences), filler_total, len(advanced),
        )
        return analysis


# ---------------------------------------------------------------------------
# Indicator helpers
# ---------------------------------------------------------------------------

def detect_advanced_vocabulary(words: list[str]) -> list[str]:
    """Curated lexicon hits (lexicon order), then long tokens (text order).

    De-duplicated and capped at MAX_ADVANCED_WORDS.
    """
    word_set = set(words)
    found = [w for w in ADVANCED_VOCABULARY if w in word_set]
    seen = set(found)

    for word in words:
        if len(found) >= MAX_ADVANCED_WORDS:
            break
        if len(word) >= LONG_WORD_MIN_LENGTH and word not in seen:
            found.append(word)
            seen.add(word)

    return found[:MAX_ADVANCED_WORDS]


def analyze_grammar(lower_text: str) -> GrammarIndicators:
    has_complex = bool(markers_present(lower_text, COMPLEX_SENTENCE_MARKERS))
    has_conditionals = (
        len(markers_present(lower_text, CONDITIONAL_MARKERS)) >= MIN_CONDITIONAL_MARKERS
    )
    has_perfect = bool(markers_present(lower_text, PERFECT_TENSE_MARKERS))
    has_passive = bool(markers_present(lower_text, PASSIVE_VOICE_MARKERS))

    score = 50
    if has_complex:
        score += _COMPLEX_BONUS
    if has_conditionals:
        score += _CONDITIONAL_BONUS
    if has_perfect:
        score += _PERFECT_BONUS
    if has_passive:
        score += _PASSIVE_BONUS

    return GrammarIndicators(
        has_complex_sentences=has_complex,
        has_conditionals=has_conditionals,
        has_perfect_tenses=has_perfect,
        has_passive_voice=has_passive,
        score=min(100, score),
    )


def analyze_coherence(lower_text: str) -> CoherenceIndicators:
    has_introduction = bool(markers_present(lower_text, INTRODUCTION_MARKERS))
    has_conclusion = bool(markers_present(lower_text, CONCLUSION_MARKERS))
    transitions = markers_present(lower_text, TRANSITION_WORDS)

    score = 50
    if has_introduction:
        score += _INTRODUCTION_BONUS
    if has_conclusion:
        score += _CONCLUSION_BONUS
    score += _TRANSITION_BONUS * len(transitions)

    return CoherenceIndicators(
        has_introduction=has_introduction,
        has_conclusion=has_conclusion,
        has_transition_words=bool(transitions),
        transition_words_used=transitions,
        score=min(100, score),
    )


def estimate_vocabulary_level(
    word_count: int,
    richness: float,
    advanced_count: int,
    avg_words_per_sentence: float,
    filler_ratio: float,
) -> VocabularyLevel:
    """Rough CEFR band from transcript statistics alone."""
    if word_count == 0:
        return VocabularyLevel()

    score = 0
    if word_count >= 150:
        score += 20
    elif word_count >= 100:
        score += 15
    elif word_count >= 50:
        score += 10
    else:
        score += 5

    if richness >= 70:
        score += 25
    elif richness >= 50:
        score += 18
    elif richness >= 35:
        score += 12
    else:
        score += 5

    if advanced_count >= 5:
        score += 20
    elif advanced_count >= 3:
        score += 15
    elif advanced_count >= 1:
        score += 8

    if avg_words_per_sentence >= 15:
        score += 15
    elif avg_words_per_sentence >= 10:
        score += 10
    elif avg_words_per_sentence >= 7:
        score += 5

    if filler_ratio > 10:
        score -= 15
    elif filler_ratio > 5:
        score -= 8
    elif filler_ratio > 2:
        score -= 3

    score = int(clamp(score, 0, 100))

    if score >= 80:
        level = "C1-C2"
    elif score >= 65:
        level = "B2"
    elif score >= 50:
        level = "B1"
    elif score >= 35:
        level = "A2"
    else:
        level = "A1"

    return VocabularyLevel(level=level, score=score)
