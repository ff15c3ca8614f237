from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence, Set, Tuple

from .items import LEVELS, MODULES, Item, canonical_key
from .storage import PartitionStore
from .wordlists import TIERS, CefrWordlists


def iter_catalog(store: PartitionStore) -> Iterator[Tuple[str, int, Item]]:
    for module in MODULES:
        for level in LEVELS:
            for item in store.read(module, level):
                if isinstance(item, dict):
                    yield module, level, item


def target_words(item: Item) -> Set[str]:
    words: Set[str] = set()
    exercises = item.get("exercises")
    if not isinstance(exercises, list):
        return words
    for ex in exercises:
        targets = ex.get("targets") if isinstance(ex, dict) else None
        if not isinstance(targets, dict) or not isinstance(targets.get("words"), list):
            continue
        for word in targets["words"]:
            if isinstance(word, str) and word.strip():
                words.add(word.strip().lower())
    return words


def build_modules_index(store: PartitionStore) -> Dict[str, Set[str]]:
    """Lower-cased key or exercise target word -> modules that contain it."""
    index: Dict[str, Set[str]] = {}
    for module, _level, item in iter_catalog(store):
        key = (canonical_key(item, fallback=False) or "").strip().lower()
        if key:
            index.setdefault(key, set()).add(module)
        for word in target_words(item):
            index.setdefault(word, set()).add(module)
    return index


def find_exercises_for_words(store: PartitionStore, words: Sequence[str]) -> Dict[str, Any]:
    wanted = [w.strip().lower() for w in words if isinstance(w, str) and w.strip()]
    wanted_set = set(wanted)
    found: List[Dict[str, Any]] = []
    matched: Set[str] = set()
    for module, level, item in iter_catalog(store):
        key = (canonical_key(item, fallback=False) or "").strip().lower()
        if key and key in wanted_set:
            found.append({"module": module, "level": level, "item": item})
            matched.add(key)
            continue
        hits = target_words(item) & wanted_set
        if hits:
            found.append({"module": module, "level": level, "item": item})
            matched.update(hits)
    missing = [w for w in dict.fromkeys(wanted) if w not in matched]
    return {"found": found, "missing": missing}


def coverage_report(wordlists: CefrWordlists, store: PartitionStore) -> Dict[str, Dict[str, Any]]:
    index = build_modules_index(store)
    report: Dict[str, Dict[str, Any]] = {}
    for tier in TIERS:
        words = wordlists.tier(tier)
        present = 0
        gaps: List[Dict[str, Any]] = []
        for word in words:
            modules = index.get(word, set())
            if modules:
                present += 1
            missing = [m for m in MODULES if m not in modules]
            if missing:
                gaps.append({"word": word, "missing_modules": missing})
        total = len(words)
        report[tier.upper()] = {
            "total": total,
            "present": present,
            "percent": round(present * 100 / total) if total else 0,
            "gaps": gaps,
        }
    return report
