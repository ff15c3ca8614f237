from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Tuple, TypedDict


MODULES: Tuple[str, ...] = ("vocabulary", "phrases", "structures", "conectors", "tenses")

# Public URLs use the English spelling; the storage directory does not.
MODULE_ALIASES: Dict[str, str] = {"connectors": "conectors"}

LEVELS: Tuple[int, ...] = (1, 2, 3, 4)

# Order matters: the first populated field is the item's key.
KEY_FIELDS: Tuple[str, ...] = ("word", "phrase", "connector", "sentence")


class Targets(TypedDict, total=False):
    words: List[str]


class Exercise(TypedDict, total=False):
    type: str
    question: str
    options: List[str]
    correct: str
    targets: Targets


Item = Dict[str, Any]


def resolve_module(name: str) -> Optional[str]:
    name = (name or "").strip().lower()
    name = MODULE_ALIASES.get(name, name)
    return name if name in MODULES else None


def text_of(value: Any) -> Optional[str]:
    """Return ``value`` if it is a non-blank string, else None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def first_exercise(item: Item) -> Optional[Exercise]:
    exercises = item.get("exercises")
    if isinstance(exercises, list) and exercises and isinstance(exercises[0], dict):
        return exercises[0]
    return None


def canonical_key(item: Item, *, fallback: bool = True) -> Optional[str]:
    """Key text by priority: word, phrase, connector, sentence, example, first answer.

    With ``fallback=False`` only the four key fields are considered, which is
    how catalog lookups identify items.
    """
    for field in KEY_FIELDS:
        value = text_of(item.get(field))
        if value is not None:
            return value
    if not fallback:
        return None
    value = text_of(item.get("example"))
    if value is not None:
        return value
    ex = first_exercise(item)
    if ex is not None:
        return text_of(ex.get("correct"))
    return None


def key_of(item: Item) -> str:
    """Comparison form of the canonical key ("" when none)."""
    return (canonical_key(item) or "").strip().lower()


def exercise_signature(ex: Any) -> Tuple[str, str, str]:
    if not isinstance(ex, dict):
        return ("", "", "")
    return (str(ex.get("type") or ""), str(ex.get("question") or ""), str(ex.get("correct") or ""))


def clone(item: Item) -> Item:
    return copy.deepcopy(item)


# Kind transitions used by reclassification. Each returns a new record and
# leaves the translations/exercises payload untouched.

def word_to_tense_drill(item: Item, text: str, tense: str) -> Item:
    out = clone(item)
    out.pop("word", None)
    out["tense"] = tense
    out["example"] = text
    return out


def word_to_phrase(item: Item, text: str) -> Item:
    out = clone(item)
    out.pop("word", None)
    out["phrase"] = text
    return out


def word_to_sentence(item: Item, text: str) -> Item:
    out = clone(item)
    out.pop("word", None)
    out["sentence"] = text
    return out


def phrase_to_word(item: Item, text: str) -> Item:
    out = clone(item)
    out.pop("phrase", None)
    out["word"] = text.strip().lower()
    return out
