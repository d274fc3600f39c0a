"""Stage 2 output: lexical and structural indicators from the transcript."""

from pydantic import BaseModel, Field, model_validator


class GrammarIndicators(BaseModel):
    has_complex_sentences: bool = False
    has_conditionals: bool = False
    has_perfect_tenses: bool = False
    has_passive_voice: bool = False
    score: int = Field(default=50, ge=0, le=100)

    model_config = {"frozen": True}


class CoherenceIndicators(BaseModel):
    has_introduction: bool = False
    has_conclusion: bool = False
    has_transition_words: bool = False
    transition_words_used: list[str] = []  # lexicon order, no repeats
    score: int = Field(default=50, ge=0, le=100)

    model_config = {"frozen": True}


class VocabularyLevel(BaseModel):
    """Rough CEFR band estimated from transcript statistics alone."""
    level: str = "Unknown"  # A1, A2, B1, B2, C1-C2, Unknown
    score: int = Field(default=0, ge=0, le=100)

    model_config = {"frozen": True}


class TranscriptAnalysis(BaseModel):
    """Structured output of the Transcript Analyzer (Stage 2).

    The default instance is the neutral analysis returned for an empty
    transcript: all counts zero, both indicator scores at 50.
    """
    word_count: int = Field(default=0, ge=0)
    unique_word_count: int = Field(default=0, ge=0)
    sentence_count: int = Field(default=0, ge=0)
    vocabulary_richness_pct: float = Field(default=0.0, ge=0, le=100)
    avg_words_per_sentence: float = Field(default=0.0, ge=0)
    avg_word_length: float = Field(default=0.0, ge=0)

    filler_word_count: int = Field(default=0, ge=0)
    filler_word_counts: dict[str, int] = {}
    filler_ratio_pct: float = Field(default=0.0, ge=0, le=100)

    advanced_words: list[str] = []  # max 20
    advanced_word_count: int = Field(default=0, ge=0)

    grammar_indicators: GrammarIndicators = GrammarIndicators()
    coherence_indicators: CoherenceIndicators = CoherenceIndicators()
    vocabulary_level: VocabularyLevel = VocabularyLevel()

    raw_text: str = ""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _unique_within_total(self) -> "TranscriptAnalysis":
        if self.unique_word_count > self.word_count:
            raise ValueError("unique_word_count cannot exceed word_count")
        return self

    @property
    def is_empty(self) -> bool:
        return self.word_count == 0
