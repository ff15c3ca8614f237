from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ReferenceDataUnavailable


logger = logging.getLogger(__name__)

TIERS: Tuple[str, ...] = ("a1", "a2", "b1", "b2")


def normalize_unique(raw: Any) -> List[str]:
    """Lower-case and trim entries, drop blanks and repeats, keep first-seen order."""
    out: List[str] = []
    seen = set()
    if not isinstance(raw, list):
        return out
    for entry in raw:
        if not isinstance(entry, str):
            continue
        word = entry.strip().lower()
        if not word or word in seen:
            continue
        seen.add(word)
        out.append(word)
    return out


def dedupe_across_tiers(lists: Sequence[Any]) -> List[List[str]]:
    # Lower tiers claim first; a word only survives in the easiest list.
    claimed = set()
    result: List[List[str]] = []
    for raw in lists:
        words = [w for w in normalize_unique(raw) if w not in claimed]
        claimed.update(words)
        result.append(words)
    return result


@dataclass(frozen=True)
class CefrWordlists:
    a1: Tuple[str, ...] = ()
    a2: Tuple[str, ...] = ()
    b1: Tuple[str, ...] = ()
    b2: Tuple[str, ...] = ()
    canonical: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_raw(cls, a1: Any = None, a2: Any = None, b1: Any = None, b2: Any = None) -> "CefrWordlists":
        tiers = dedupe_across_tiers([a1, a2, b1, b2])
        canonical: Dict[str, int] = {}
        for level, words in enumerate(tiers, start=1):
            for word in words:
                canonical.setdefault(word, level)
        return cls(
            a1=tuple(tiers[0]),
            a2=tuple(tiers[1]),
            b1=tuple(tiers[2]),
            b2=tuple(tiers[3]),
            canonical=MappingProxyType(canonical),
        )

    def tier(self, name: str) -> Tuple[str, ...]:
        return getattr(self, name.lower())

    def level_of(self, word: str) -> Optional[int]:
        return self.canonical.get((word or "").strip().lower())

    def counts(self) -> Dict[str, int]:
        return {tier: len(self.tier(tier)) for tier in TIERS}


def read_wordlist(path: Path) -> List[Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ReferenceDataUnavailable(f"{path.name} not found") from exc
    except (OSError, ValueError) as exc:
        raise ReferenceDataUnavailable(f"{path.name} unreadable: {exc}") from exc
    if not isinstance(data, list):
        raise ReferenceDataUnavailable(f"{path.name} is not a JSON array")
    return data


def load_wordlists(directory: Path) -> CefrWordlists:
    """Load a1/a2/b1/b2.json from ``directory``; bad or missing lists count as empty."""
    raw: Dict[str, List[Any]] = {}
    for tier in TIERS:
        try:
            raw[tier] = read_wordlist(Path(directory) / f"{tier}.json")
        except ReferenceDataUnavailable as exc:
            logger.warning("CEFR wordlist %s treated as empty: %s", tier, exc)
            raw[tier] = []
    lists = CefrWordlists.from_raw(**raw)
    logger.info("Loaded CEFR wordlists from %s: %s", directory, lists.counts())
    return lists


class WordlistRegistry:
    """Holds the current wordlists; loaded on first use and replaced on reload()."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._current: Optional[CefrWordlists] = None

    def get(self) -> CefrWordlists:
        if self._current is None:
            self._current = load_wordlists(self.directory)
        return self._current

    def reload(self) -> CefrWordlists:
        self._current = load_wordlists(self.directory)
        return self._current
