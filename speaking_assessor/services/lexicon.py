"""Static lexical tables for transcript analysis and feedback.

Built once at import and never mutated. Order matters for the tuples:
detection results are reported in table order.
"""

import re

# ---------------------------------------------------------------------------
# Filler words / phrases (fluency penalty signals)
# Matched case-insensitively as whole words against the unlowered text
# ---------------------------------------------------------------------------
FILLER_PHRASES: tuple[str, ...] = (
    "um", "uh", "like", "you know", "basically", "actually",
    "literally", "so", "well", "i mean", "kind of", "sort of",
)

_FILLER_PATTERNS: list[tuple[str, re.Pattern]] = [
    (phrase, re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE))
    for phrase in FILLER_PHRASES
]

# ---------------------------------------------------------------------------
# Curated B2-C2 vocabulary
# ---------------------------------------------------------------------------
ADVANCED_VOCABULARY: tuple[str, ...] = (
    "furthermore", "moreover", "nevertheless", "consequently", "subsequently",
    "particularly", "significantly", "essentially", "predominantly", "fundamentally",
    "comprehensive", "substantial", "considerable", "remarkable", "extraordinary",
    "implement", "establish", "demonstrate", "illustrate", "emphasize",
    "perspective", "approach", "aspect", "factor", "impact",
    "enhance", "facilitate", "contribute", "integrate", "accommodate",
    "environment", "technology", "development", "opportunity", "experience",
    "sustainable", "innovative", "efficient", "effective", "beneficial",
    "analyze", "evaluate", "assess", "determine", "investigate",
    "phenomenon", "methodology", "hypothesis", "paradigm", "synthesis",
)

# Tokens at least this long count as advanced even outside the curated list
LONG_WORD_MIN_LENGTH = 8
MAX_ADVANCED_WORDS = 20

# ---------------------------------------------------------------------------
# Grammar indicator markers (substring checks on lower-cased text)
# ---------------------------------------------------------------------------
COMPLEX_SENTENCE_MARKERS: tuple[str, ...] = (
    "although", "whereas", "while", "despite", "unless", "provided that",
)
CONDITIONAL_MARKERS: tuple[str, ...] = ("if", "would", "could", "might", "should")
MIN_CONDITIONAL_MARKERS = 2
PERFECT_TENSE_MARKERS: tuple[str, ...] = (
    "have been", "has been", "had been", "have had", "has had",
)
PASSIVE_VOICE_MARKERS: tuple[str, ...] = (
    "is done", "was done", "been done", "be done", "is made", "was made",
)

# ---------------------------------------------------------------------------
# Coherence markers
# ---------------------------------------------------------------------------
INTRODUCTION_MARKERS: tuple[str, ...] = (
    "i would like to", "i want to talk about", "let me", "first of all",
    "to begin with", "i think", "in my opinion",
)
CONCLUSION_MARKERS: tuple[str, ...] = (
    "in conclusion", "to sum up", "finally", "overall",
    "to conclude", "in summary", "all in all",
)
TRANSITION_WORDS: tuple[str, ...] = (
    "firstly", "secondly", "thirdly", "however", "therefore",
    "moreover", "furthermore", "additionally", "nevertheless",
    "on the other hand", "for example", "for instance",
    "as a result", "consequently", "in addition",
)

# ---------------------------------------------------------------------------
# Expected vocabulary per speaking topic
# ---------------------------------------------------------------------------
TOPIC_VOCABULARY: dict[str, str] = {
    "introduction": "personal, background, experience, interests, hobbies",
    "education": "academic, learning, skills, courses, degree, university",
    "work": "career, professional, responsibilities, achievements, colleagues",
    "technology": "digital, innovation, devices, software, artificial intelligence",
    "environment": "nature, sustainability, climate, ecosystem, pollution",
    "health": "wellness, fitness, nutrition, mental health, lifestyle",
    "travel": "culture, destinations, experiences, adventure, tourism",
    "sports": "competition, training, teamwork, fitness, championship",
    "food": "cuisine, cooking, ingredients, nutrition, restaurant",
}
DEFAULT_TOPIC_VOCABULARY = "general vocabulary"


def count_fillers(text: str) -> dict[str, int]:
    """Count whole-word occurrences of each filler phrase.

    Only phrases that occur are included, in FILLER_PHRASES order.
    """
    counts: dict[str, int] = {}
    for phrase, pattern in _FILLER_PATTERNS:
        matches = pattern.findall(text)
        if matches:
            counts[phrase] = len(matches)
    return counts


def markers_present(lower_text: str, markers: tuple[str, ...]) -> list[str]:
    """Return the markers that occur as substrings, in table order."""
    return [m for m in markers if m in lower_text]


def topic_vocabulary(topic: str) -> str:
    return TOPIC_VOCABULARY.get(topic, DEFAULT_TOPIC_VOCABULARY)
