from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import PartitionWriteFailure, ReferenceDataUnavailable
from .items import Item


logger = logging.getLogger(__name__)


class PartitionStore(ABC):
	"""Collections of items addressed by (module, level)."""

	def identifier(self, module: str, level: int) -> str:
		return f"{module}/lvl{level}.json"

	@abstractmethod
	def load(self, module: str, level: int) -> List[Item]:
		"""Strict read: raises ReferenceDataUnavailable if missing or corrupt."""

	@abstractmethod
	def write(self, module: str, level: int, items: List[Item]) -> None:
		"""Replace the partition; raises PartitionWriteFailure."""

	def read(self, module: str, level: int) -> List[Item]:
		try:
			return self.load(module, level)
		except ReferenceDataUnavailable as exc:
			logger.debug("Partition %s starts empty: %s", self.identifier(module, level), exc)
			return []


class JsonFileStore(PartitionStore):
	"""One pretty-printed JSON array per partition under ``root``."""

	def __init__(self, root: Path) -> None:
		self.root = Path(root)

	def path_for(self, module: str, level: int) -> Path:
		return self.root / module / f"lvl{level}.json"

	def load(self, module: str, level: int) -> List[Item]:
		path = self.path_for(module, level)
		try:
			data = json.loads(path.read_text(encoding="utf-8"))
		except FileNotFoundError as exc:
			raise ReferenceDataUnavailable(f"{self.identifier(module, level)} not found") from exc
		except (OSError, ValueError) as exc:
			logger.warning("Unreadable partition %s: %s", path, exc)
			raise ReferenceDataUnavailable(f"{self.identifier(module, level)} unreadable") from exc
		if not isinstance(data, list):
			logger.warning("Partition %s is not a JSON array", path)
			raise ReferenceDataUnavailable(f"{self.identifier(module, level)} is not a list")
		return data

	def write(self, module: str, level: int, items: List[Item]) -> None:
		path = self.path_for(module, level)
		tmp_name = None
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			# Write next to the target and swap it in, so readers never see half a file.
			with tempfile.NamedTemporaryFile(
				"w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
			) as fh:
				tmp_name = fh.name
				json.dump(items, fh, ensure_ascii=False, indent=2)
			os.replace(tmp_name, path)
		except (OSError, TypeError, ValueError) as exc:
			if tmp_name and os.path.exists(tmp_name):
				os.unlink(tmp_name)
			logger.error("Writing %s failed: %s", path, exc)
			raise PartitionWriteFailure(self.identifier(module, level), str(exc)) from exc


class InMemoryStore(PartitionStore):
	def __init__(self, initial: Dict[Tuple[str, int], List[Item]] | None = None) -> None:
		self.partitions: Dict[Tuple[str, int], List[Item]] = copy.deepcopy(initial or {})

	def load(self, module: str, level: int) -> List[Item]:
		if (module, level) not in self.partitions:
			raise ReferenceDataUnavailable(f"{self.identifier(module, level)} not found")
		data = self.partitions[(module, level)]
		if not isinstance(data, list):
			raise ReferenceDataUnavailable(f"{self.identifier(module, level)} is not a list")
		return copy.deepcopy(data)

	def write(self, module: str, level: int, items: List[Item]) -> None:
		self.partitions[(module, level)] = copy.deepcopy(items)
