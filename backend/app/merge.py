from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Set

from .items import LEVELS, Item, exercise_signature, key_of
from .storage import PartitionStore


logger = logging.getLogger(__name__)

MODES = ("append", "replace")


@dataclass
class PartitionResult:
    file: str
    module: str
    level: int
    added: int
    total: int
    added_keys: List[str] = field(default_factory=list)
    purged: Dict[int, int] = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        return {"file": self.file, "added": self.added, "total": self.total}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def merge_entry(target: Item, incoming: Item) -> None:
    """Fold ``incoming`` into ``target`` in place.

    Translations are unioned (existing first). Exercises are unioned by
    (type, question, correct), new ones appended in their original order.
    """
    translations: List[Any] = []
    for value in _as_list(target.get("translations")) + _as_list(incoming.get("translations")):
        if value and value not in translations:
            translations.append(value)
    if translations:
        target["translations"] = translations

    exercises = _as_list(target.get("exercises"))
    signatures = {exercise_signature(ex) for ex in exercises}
    for ex in _as_list(incoming.get("exercises")):
        sig = exercise_signature(ex)
        if sig not in signatures:
            exercises.append(ex)
            signatures.add(sig)
    target["exercises"] = exercises


def merge_partition(
    store: PartitionStore,
    module: str,
    level: int,
    items: Sequence[Item],
    mode: str = "append",
) -> PartitionResult:
    existing: List[Item] = [] if mode == "replace" else store.read(module, level)
    index: Dict[str, Item] = {}
    for entry in existing:
        if isinstance(entry, dict):
            index.setdefault(key_of(entry), entry)

    added: List[str] = []
    for item in items:
        key = key_of(item)
        if not key:
            continue
        if key in index:
            merge_entry(index[key], item)
        else:
            existing.append(item)
            index[key] = item
            added.append(key)

    store.write(module, level, existing)
    result = PartitionResult(
        file=store.identifier(module, level),
        module=module,
        level=level,
        added=len(added),
        total=len(existing),
        added_keys=added,
    )
    logger.info("Wrote %s: %d added, %d total", result.file, result.added, result.total)
    result.purged = purge_other_levels(store, module, level, added)
    return result


def purge_other_levels(
    store: PartitionStore,
    module: str,
    level: int,
    keys: Iterable[str],
    levels: Iterable[int] = LEVELS,
) -> Dict[int, int]:
    """Drop ``keys`` from every other level of ``module``; returns removals per level."""
    doomed: Set[str] = set(keys)
    removed: Dict[int, int] = {}
    if not doomed:
        return removed
    for other in levels:
        if other == level:
            continue
        entries = store.read(module, other)
        if not entries:
            continue
        kept = [e for e in entries if not (isinstance(e, dict) and key_of(e) in doomed)]
        if len(kept) != len(entries):
            store.write(module, other, kept)
            removed[other] = len(entries) - len(kept)
            logger.info(
                "Purged %d duplicate(s) from %s", removed[other], store.identifier(module, other)
            )
    return removed
