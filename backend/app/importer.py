"""Content import: classify a submitted batch and merge it into level partitions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .classify import Routing, reclassify
from .errors import InvalidInput, UnresolvableItem
from .items import LEVELS, Item
from .levels import DEFAULT_LEVEL, assign_level, lookup_level
from .merge import MODES, PartitionResult, merge_partition
from .storage import PartitionStore
from .wordlists import CefrWordlists


logger = logging.getLogger(__name__)

UNASSIGNED = "UNASSIGNED"


@dataclass
class ClassifiedItem:
    routing: Routing
    level: Optional[int]

    @property
    def module(self) -> str:
        return self.routing.module


@dataclass
class ImportOutcome:
    partitions: List[PartitionResult] = field(default_factory=list)
    item_count: int = 0
    skipped: int = 0

    @property
    def added_total(self) -> int:
        return sum(p.added for p in self.partitions)

    def to_response(self) -> Dict[str, Any]:
        return {"ok": True, "summary": [p.summary() for p in self.partitions]}


def validate_request(items: Any, mode: Any = "append", default_level: Any = DEFAULT_LEVEL) -> Tuple[List[Any], str, int]:
    if not isinstance(items, list) or not items:
        raise InvalidInput("items array required")
    if mode is None:
        mode = "append"
    if mode not in MODES:
        raise InvalidInput(f"mode must be one of {', '.join(MODES)}")
    if default_level is None:
        default_level = DEFAULT_LEVEL
    if isinstance(default_level, bool) or not isinstance(default_level, int) or default_level not in LEVELS:
        raise InvalidInput(f"defaultLevel must be an integer between {LEVELS[0]} and {LEVELS[-1]}")
    return items, mode, default_level


def classify_items(items: Sequence[Any], wordlists: CefrWordlists) -> Tuple[List[ClassifiedItem], int]:
    """Route every item; unresolvable ones are counted and dropped."""
    classified: List[ClassifiedItem] = []
    skipped = 0
    for position, raw in enumerate(items):
        try:
            routing = reclassify(raw)
        except UnresolvableItem as exc:
            logger.info("Skipping item #%d: %s", position, exc)
            skipped += 1
            continue
        classified.append(ClassifiedItem(routing=routing, level=lookup_level(routing.key, wordlists)))
    return classified, skipped


def group_by_partition(
    classified: Sequence[ClassifiedItem], wordlists: CefrWordlists, default_level: int
) -> Dict[Tuple[str, int], List[Item]]:
    # dicts keep insertion order, which is the order partitions are reported in
    groups: Dict[Tuple[str, int], List[Item]] = {}
    for entry in classified:
        level = assign_level(entry.routing.key, wordlists, default_level)
        groups.setdefault((entry.module, level), []).append(entry.routing.item)
    return groups


def run_import(
    items: Any,
    store: PartitionStore,
    wordlists: CefrWordlists,
    mode: Any = "append",
    default_level: Any = DEFAULT_LEVEL,
) -> ImportOutcome:
    """Classify ``items`` and merge them into ``store``.

    Raises InvalidInput before touching storage, PartitionWriteFailure if a
    partition cannot be written (earlier partitions stay written).
    """
    items, mode, default_level = validate_request(items, mode, default_level)
    classified, skipped = classify_items(items, wordlists)
    outcome = ImportOutcome(item_count=len(items), skipped=skipped)
    for (module, level), bucket in group_by_partition(classified, wordlists, default_level).items():
        outcome.partitions.append(merge_partition(store, module, level, bucket, mode))
    logger.info(
        "Import finished (%s): %d items, %d skipped, %d added across %d partition(s)",
        mode, outcome.item_count, skipped, outcome.added_total, len(outcome.partitions),
    )
    return outcome


def preview(items: Any, wordlists: CefrWordlists, default_level: Any = None) -> Dict[str, Any]:
    """Report where each item would go, without writing anything."""
    if not isinstance(items, list) or not items:
        raise InvalidInput("items array required")
    if default_level is not None:
        _, _, default_level = validate_request(items, "append", default_level)
    classified, skipped = classify_items(items, wordlists)

    buckets: Dict[str, int] = {}
    unassigned: Dict[str, set] = {}
    reroutes: List[Dict[str, str]] = []
    for entry in classified:
        routing = entry.routing
        lowered = routing.key.strip().lower()
        if routing.rerouted:
            reroutes.append({"key": lowered, "from": routing.declared_module, "to": routing.module})
        level = entry.level if entry.level is not None else default_level
        label = f"{routing.module}:{level if level is not None else UNASSIGNED}"
        buckets[label] = buckets.get(label, 0) + 1
        if level is None:
            unassigned.setdefault(routing.module, set()).add(lowered)

    return {
        "buckets": buckets,
        "unassigned": {mod: sorted(keys) for mod, keys in unassigned.items()},
        "reroutes": reroutes,
        "skipped": skipped,
    }
