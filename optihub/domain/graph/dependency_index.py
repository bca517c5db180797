"""
DependencyIndex - normalized, memoized view over the host's dependency query.

The content database answers ``dependencies(entity_id)`` with the transitive
set of referenced entities. This index enforces the contract the classifier
relies on:

* the entity itself is dropped (an entity inside its own closure is a cycle;
  it is logged and treated as a no-op self edge);
* duplicates are removed;
* the result is ordered by entity ID, so it is identical across runs no
  matter how the host orders its answer.

One index instance corresponds to one analysis pass: answers are memoized,
so the host is asked at most once per entity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from optihub.core.models.results import CycleRecord

if TYPE_CHECKING:
    from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)


class DependencyIndex:
    """Per-pass dependency lookups with normalized output."""

    def __init__(self, database: ContentDatabase) -> None:
        self._database = database
        self._memo: dict[str, tuple[str, ...]] = {}
        self._cycles: list[CycleRecord] = []

    def dependencies(self, entity_id: str) -> tuple[str, ...]:
        """Return the sorted transitive dependencies of ``entity_id``."""
        cached = self._memo.get(entity_id)
        if cached is not None:
            return cached

        raw = set(self._database.dependencies(entity_id))
        if entity_id in raw:
            raw.discard(entity_id)
            self._cycles.append(CycleRecord(path=(entity_id, entity_id)))
            logger.warning(f"'{entity_id}' depends on itself through a cycle; treated as a no-op self edge")

        result = tuple(sorted(raw))
        self._memo[entity_id] = result
        return result

    def closure(self, entity_ids: Iterable[str]) -> frozenset[str]:
        """Union of the dependencies of several entities."""
        found: set[str] = set()
        for entity_id in entity_ids:
            found.update(self.dependencies(entity_id))
        return frozenset(found)

    @property
    def cycles(self) -> tuple[CycleRecord, ...]:
        return tuple(self._cycles)

    def __len__(self) -> int:
        return len(self._memo)
