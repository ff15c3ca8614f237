from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import Depends

from .settings import settings
from .storage import JsonFileStore, PartitionStore
from .wordlists import CefrWordlists, WordlistRegistry


# Imports read-modify-write partition files; only one may run at a time.
import_lock = asyncio.Lock()

_registry: Optional[WordlistRegistry] = None


def get_store() -> PartitionStore:
	return JsonFileStore(settings.data_dir)


def get_registry() -> WordlistRegistry:
	global _registry
	directory = settings.resolved_wordlist_dir
	if _registry is None or _registry.directory != directory:
		_registry = WordlistRegistry(directory)
	return _registry


def get_wordlists(registry: WordlistRegistry = Depends(get_registry)) -> CefrWordlists:
	return registry.get()
