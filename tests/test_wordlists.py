import json

from backend.app.wordlists import (
    WordlistRegistry,
    dedupe_across_tiers,
    load_wordlists,
    normalize_unique,
)


def test_normalize_unique_trims_lowers_and_keeps_first_order():
    assert normalize_unique(["  Apple", "banana", "APPLE", "", "  ", "Cherry", 3, None]) == [
        "apple",
        "banana",
        "cherry",
    ]


def test_normalize_unique_non_list_is_empty():
    assert normalize_unique({"a1": ["cat"]}) == []
    assert normalize_unique(None) == []


def test_lower_tier_claims_word_first():
    a1, a2, b1, b2 = dedupe_across_tiers([["cat", "dog"], ["dog", "ticket"], ["ticket", "cat", "quick"], ["quick"]])
    assert a1 == ["cat", "dog"]
    assert a2 == ["ticket"]
    assert b1 == ["quick"]
    assert b2 == []


def test_canonical_map_uses_lowest_level(wordlists):
    assert wordlists.level_of("run") == 1
    assert wordlists.level_of("however") == 2
    assert wordlists.level_of("Quick") == 3
    assert wordlists.level_of("nevertheless") == 4
    assert wordlists.level_of("spaceship") is None
    assert "run" not in wordlists.a2


def test_counts_reflect_deduplicated_tiers(wordlists):
    assert wordlists.counts() == {"a1": 6, "a2": 4, "b1": 3, "b2": 2}
    assert len(wordlists.canonical) == 15


def test_load_wordlists_treats_missing_and_corrupt_files_as_empty(tmp_path):
    (tmp_path / "a1.json").write_text(json.dumps(["Cat", "dog"]), encoding="utf-8")
    (tmp_path / "a2.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "b1.json").write_text(json.dumps({"words": ["x"]}), encoding="utf-8")

    lists = load_wordlists(tmp_path)

    assert lists.a1 == ("cat", "dog")
    assert lists.a2 == ()
    assert lists.b1 == ()
    assert lists.b2 == ()


def test_load_wordlists_from_missing_directory(tmp_path):
    lists = load_wordlists(tmp_path / "nowhere")
    assert lists.counts() == {"a1": 0, "a2": 0, "b1": 0, "b2": 0}


def test_registry_loads_once_and_reloads_on_demand(tmp_path):
    (tmp_path / "a1.json").write_text(json.dumps(["cat"]), encoding="utf-8")
    registry = WordlistRegistry(tmp_path)

    first = registry.get()
    (tmp_path / "a1.json").write_text(json.dumps(["cat", "dog"]), encoding="utf-8")
    assert registry.get() is first
    assert registry.get().level_of("dog") is None

    reloaded = registry.reload()
    assert reloaded is not first
    assert reloaded.level_of("dog") == 1
    assert registry.get() is reloaded
