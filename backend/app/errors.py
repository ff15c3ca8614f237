from __future__ import annotations


class ImportEngineError(Exception):
    """Base class for content import failures."""


class InvalidInput(ImportEngineError):
    """The submitted batch is missing, malformed or empty."""


class ReferenceDataUnavailable(ImportEngineError):
    """A wordlist or partition file is missing or corrupt.

    Readers raise it; loaders and stores recover by substituting an empty
    collection, so it never reaches the caller of an import.
    """


class PartitionWriteFailure(ImportEngineError):
    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"failed to write partition {identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class UnresolvableItem(ImportEngineError):
    """An item with no key field, no example and no exercise answer."""
