from backend.app.levels import STOP_WORDS, assign_level, lookup_level, tokenize
from backend.app.wordlists import CefrWordlists


def test_direct_match(wordlists):
    assert assign_level("cat", wordlists, 3) == 1
    assert assign_level("Journey", wordlists, 1) == 3


def test_word_in_a1_and_a2_resolves_to_a1():
    lists = CefrWordlists.from_raw(a1=["run"], a2=["run", "walk"])
    assert assign_level("run", lists, 4) == 1


def test_fallback_picks_easiest_content_word(wordlists):
    # "quick" is B1, "fox" A2, "the" is a stop word
    assert lookup_level("the quick brown fox", wordlists) == 2


def test_stop_words_never_decide_the_level():
    lists = CefrWordlists.from_raw(a1=["the", "is"], b2=["nevertheless"])
    assert lookup_level("the weather is nevertheless fine", lists) == 4


def test_default_level_when_nothing_is_known(wordlists):
    assert lookup_level("spaceship launch", wordlists) is None
    assert assign_level("spaceship launch", wordlists, 2) == 2
    assert assign_level("spaceship launch", wordlists) == 1


def test_tokenize_keeps_apostrophes_and_accents():
    assert tokenize("Don't go to the Café!") == ["don't", "go", "to", "the", "café"]


def test_stop_word_set_membership():
    assert {"the", "a", "an", "i", "they", "being", "its"} <= STOP_WORDS
    assert "not" not in STOP_WORDS
    assert len(STOP_WORDS) == 37
