"""Identifier generation.

Roster imports, rubric enrichment and peer submissions all need fresh ids.
They receive an ``IdGenerator`` instead of calling ``uuid`` directly so tests
can supply predictable values.
"""

import uuid
from typing import Protocol


class IdGenerator(Protocol):
    """Produces unique string identifiers."""

    def new_id(self) -> str: ...


class UuidGenerator:
    """Random UUID4 identifiers."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class ShortIdGenerator:
    """Eight character upper-case ids, used for manually added students."""

    def new_id(self) -> str:
        return uuid.uuid4().hex[:8].upper()


class SequentialIdGenerator:
    """Deterministic ids: ``{prefix}1``, ``{prefix}2``, ..."""

    def __init__(self, prefix: str = "id-"):
        self.prefix = prefix
        self._counter = 0

    def new_id(self) -> str:
        self._counter += 1
        return f"{self.prefix}{self._counter}"


def unique_id(base_id: str, used_ids: set[str]) -> str:
    """Return ``base_id`` or the first free ``base_id-N`` suffix.

    Args:
        base_id: Preferred identifier
        used_ids: Identifiers already taken

    Returns:
        An identifier not present in ``used_ids``
    """
    candidate = base_id
    counter = 1
    while candidate in used_ids:
        candidate = f"{base_id}-{counter}"
        counter += 1
    return candidate
