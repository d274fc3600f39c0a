from speaking_assessor.services.lexicon import (
    ADVANCED_VOCABULARY,
    FILLER_PHRASES,
    TRANSITION_WORDS,
    count_fillers,
    markers_present,
    topic_vocabulary,
)


def test_table_sizes():
    assert len(FILLER_PHRASES) == 12
    assert len(ADVANCED_VOCABULARY) == 50
    assert len(set(ADVANCED_VOCABULARY)) == 50
    assert len(TRANSITION_WORDS) == 15


class TestCountFillers:
    def test_multi_word_phrases(self):
        assert count_fillers("It was kind of, sort of, you know, fine.") == {
            "you know": 1, "kind of": 1, "sort of": 1,
        }

    def test_reported_in_table_order(self):
        counts = count_fillers("well so like um")
        assert list(counts) == ["um", "like", "so", "well"]

    def test_case_insensitive(self):
        assert count_fillers("UM Um um") == {"um": 3}

    def test_no_fillers(self):
        assert count_fillers("Precise and deliberate speech.") == {}


def test_markers_present_keeps_table_order():
    text = "however, firstly, for example"
    assert markers_present(text, TRANSITION_WORDS) == ["firstly", "however", "for example"]


def test_topic_vocabulary():
    assert topic_vocabulary("food") == "cuisine, cooking, ingredients, nutrition, restaurant"
    assert topic_vocabulary("custom") == "general vocabulary"
