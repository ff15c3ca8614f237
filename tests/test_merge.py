from backend.app.merge import merge_entry, merge_partition, purge_other_levels
from backend.app.storage import InMemoryStore


def _ex(correct, question="q", type_="multiple-choice"):
    return {"type": type_, "question": question, "correct": correct}


def test_merge_entry_unions_translations_without_duplicates():
    target = {"word": "run", "translations": ["correr", "ejecutar"]}
    merge_entry(target, {"word": "run", "translations": ["correr"]})
    assert target["translations"] == ["correr", "ejecutar"]

    merge_entry(target, {"word": "run", "translations": ["Correr", "huir"]})
    assert target["translations"] == ["correr", "ejecutar", "Correr", "huir"]


def test_merge_entry_unions_exercises_by_type_question_correct():
    target = {"word": "run", "exercises": [_ex("correr")]}
    merge_entry(target, {"word": "run", "exercises": [_ex("correr"), _ex("correr", question="other"), _ex("correr", type_="translate")]})
    assert target["exercises"] == [
        _ex("correr"),
        _ex("correr", question="other"),
        _ex("correr", type_="translate"),
    ]


def test_merge_entry_keeps_missing_translations_absent():
    target = {"word": "run", "exercises": []}
    merge_entry(target, {"word": "run"})
    assert "translations" not in target


def test_append_adds_new_and_merges_existing():
    store = InMemoryStore({("vocabulary", 1): [{"word": "run", "translations": ["correr", "ejecutar"], "exercises": [_ex("correr")]}]})
    result = merge_partition(
        store,
        "vocabulary",
        1,
        [{"word": "Run", "translations": ["correr"]}, {"word": "cat", "exercises": [_ex("gato")]}],
        "append",
    )
    assert result.summary() == {"file": "vocabulary/lvl1.json", "added": 1, "total": 2}
    stored = store.partitions[("vocabulary", 1)]
    assert stored[0]["translations"] == ["correr", "ejecutar"]
    assert stored[1]["word"] == "cat"


def test_duplicates_inside_one_batch_are_merged():
    store = InMemoryStore()
    result = merge_partition(
        store,
        "vocabulary",
        1,
        [
            {"word": "dog", "translations": ["perro"], "exercises": [_ex("perro")]},
            {"word": "dog", "translations": ["can"], "exercises": [_ex("perro"), _ex("can")]},
        ],
    )
    assert (result.added, result.total) == (1, 1)
    (entry,) = store.partitions[("vocabulary", 1)]
    assert entry["translations"] == ["perro", "can"]
    assert [e["correct"] for e in entry["exercises"]] == ["perro", "can"]


def test_replace_starts_from_empty():
    store = InMemoryStore({("phrases", 2): [{"phrase": "old one"}, {"phrase": "older one"}]})
    result = merge_partition(store, "phrases", 2, [{"phrase": "new one"}], "replace")
    assert (result.added, result.total) == (1, 1)
    assert store.partitions[("phrases", 2)] == [{"phrase": "new one"}]


def test_non_list_partition_is_treated_as_empty():
    store = InMemoryStore({("vocabulary", 1): {"oops": True}})
    result = merge_partition(store, "vocabulary", 1, [{"word": "cat"}])
    assert (result.added, result.total) == (1, 1)


def test_added_keys_are_purged_from_sibling_levels():
    store = InMemoryStore({
        ("vocabulary", 2): [{"word": "cat"}, {"word": "house"}],
        ("vocabulary", 3): [{"word": "CAT"}],
        ("phrases", 2): [{"phrase": "cat"}],
    })
    result = merge_partition(store, "vocabulary", 1, [{"word": "cat"}])
    assert result.purged == {2: 1, 3: 1}
    assert store.partitions[("vocabulary", 2)] == [{"word": "house"}]
    assert store.partitions[("vocabulary", 3)] == []
    # other modules are untouched
    assert store.partitions[("phrases", 2)] == [{"phrase": "cat"}]


def test_merged_keys_are_not_purged():
    store = InMemoryStore({
        ("vocabulary", 1): [{"word": "cat"}],
        ("vocabulary", 2): [{"word": "cat"}],
    })
    result = merge_partition(store, "vocabulary", 1, [{"word": "cat"}])
    assert result.added == 0
    assert store.partitions[("vocabulary", 2)] == [{"word": "cat"}]


def test_purge_skips_levels_without_matches():
    class CountingStore(InMemoryStore):
        writes = 0

        def write(self, module, level, items):
            CountingStore.writes += 1
            super().write(module, level, items)

    store = CountingStore({("vocabulary", 2): [{"word": "house"}]})
    assert purge_other_levels(store, "vocabulary", 1, ["cat"]) == {}
    assert CountingStore.writes == 0
