"""Decide which module an incoming item belongs to.

Two passes: the *declared* module comes from whichever key field the author
filled in; reclassification then looks at the shape of the key text and
moves the item when the two disagree (a multi-word "word", a one-word
"phrase", a verb-tense pattern filed as vocabulary). Both passes are pure so
the preview endpoint and the real import always route identically.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .errors import UnresolvableItem
from .items import (
    Item,
    canonical_key,
    clone,
    first_exercise,
    phrase_to_word,
    text_of,
    word_to_phrase,
    word_to_sentence,
    word_to_tense_drill,
)


logger = logging.getLogger(__name__)

# A "to <verb>" hint anywhere in the first question (usually "(to go)") marks a tense drill.
TENSE_MARKER = re.compile(r"to\s+\w+", re.IGNORECASE)

TENSE_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"^had\s+\w+"), "past-perfect"),
    (re.compile(r"^(would|could|should)\s+have\s+\w+"), "conditional-perfect"),
    (re.compile(r"^will\s+\w+"), "future-simple"),
    (re.compile(r"^(am|is|are)\s+\w+ing"), "present-continuous"),
]

PUNCTUATION = re.compile(r"[.,;:!?]")
WHITESPACE = re.compile(r"\s")

MAX_PHRASE_TOKENS = 3


@dataclass(frozen=True)
class Inference:
    key: str
    module: str


@dataclass(frozen=True)
class Routing:
    item: Item
    key: str
    module: str
    declared_module: str

    @property
    def rerouted(self) -> bool:
        return self.module != self.declared_module


def declared_module(item: Item) -> str:
    if text_of(item.get("phrase")):
        return "phrases"
    if text_of(item.get("connector")):
        # A connector usually ships with an example sentence; the connector wins.
        return "conectors"
    if text_of(item.get("sentence")):
        return "structures"
    if text_of(item.get("tense")):
        return "tenses"
    ex = first_exercise(item)
    if ex is not None and TENSE_MARKER.search(str(ex.get("question") or "")):
        return "tenses"
    return "vocabulary"


def infer_key_and_module(item: Any) -> Inference:
    if not isinstance(item, dict):
        raise UnresolvableItem(f"item is not an object: {type(item).__name__}")
    key = canonical_key(item)
    if key is None:
        raise UnresolvableItem("item has no key field, example or exercise answer")
    return Inference(key=key, module=declared_module(item))


def guess_tense(lowered: str) -> Optional[str]:
    for pattern, tag in TENSE_PATTERNS:
        if pattern.search(lowered):
            return tag
    return None


def _normalize_fields(item: Item, module: str) -> None:
    if module == "conectors" and text_of(item.get("connector")):
        item["connector"] = item["connector"].strip().lower()
    elif module == "phrases" and text_of(item.get("phrase")):
        item["phrase"] = item["phrase"].strip()
    elif module == "vocabulary" and text_of(item.get("word")):
        item["word"] = item["word"].strip().lower()


def reclassify(raw: Any) -> Routing:
    """Route ``raw`` to its final module and return a rewritten copy of it.

    Raises UnresolvableItem when no key can be derived at all.
    """
    inferred = infer_key_and_module(raw)
    text = inferred.key.strip()
    lowered = text.lower()
    module = inferred.module
    item = clone(raw)

    if module == "vocabulary" and WHITESPACE.search(lowered):
        tense = guess_tense(lowered)
        if tense:
            item = word_to_tense_drill(item, text, tense)
            module = "tenses"
        elif len(lowered.split()) <= MAX_PHRASE_TOKENS and not PUNCTUATION.search(text):
            item = word_to_phrase(item, text)
            module = "phrases"
        else:
            item = word_to_sentence(item, text)
            module = "structures"
    elif module == "phrases" and not WHITESPACE.search(lowered):
        item = phrase_to_word(item, lowered)
        module = "vocabulary"

    _normalize_fields(item, module)
    key = canonical_key(item) or text
    if module != inferred.module:
        logger.debug("Rerouted %r from %s to %s", lowered, inferred.module, module)
    return Routing(item=item, key=key, module=module, declared_module=inferred.module)
