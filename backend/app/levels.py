from __future__ import annotations

import re
from typing import FrozenSet, List, Optional

from .wordlists import CefrWordlists


DEFAULT_LEVEL = 1

# Kept exactly as authored; changing membership changes level fallbacks.
STOP_WORDS: FrozenSet[str] = frozenset([
    "the", "a", "an", "and", "or", "but", "so", "to", "of", "in", "on", "at", "by",
    "for", "with", "from", "as", "that", "this", "these", "those", "it", "its",
    "is", "am", "are", "was", "were", "be", "been", "being",
    "i", "you", "he", "she", "we", "they",
])

TOKEN = re.compile(r"[a-zÀ-ÖØ-öø-ÿ']+")


def tokenize(text: str) -> List[str]:
    return TOKEN.findall((text or "").lower())


def lookup_level(key: str, wordlists: CefrWordlists) -> Optional[int]:
    """CEFR level of ``key`` or None when neither it nor any content word is listed.

    A whole-key match wins; otherwise the easiest level among the non-stop-word
    tokens is used.
    """
    direct = wordlists.level_of(key)
    if direct is not None:
        return direct
    found = [
        wordlists.canonical[token]
        for token in tokenize(key)
        if token not in STOP_WORDS and token in wordlists.canonical
    ]
    return min(found) if found else None


def assign_level(key: str, wordlists: CefrWordlists, default_level: int = DEFAULT_LEVEL) -> int:
    level = lookup_level(key, wordlists)
    return default_level if level is None else level
