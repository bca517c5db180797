"""
Content database contract.

The analysis engine never touches files directly; every read and write goes
through a ContentDatabase supplied by the host (an editor integration, or
the in-memory snapshot database used by the CLI and tests).
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence, runtime_checkable

from optihub.core.models.entity import Entity, EntityKind


@runtime_checkable
class ContentDatabase(Protocol):
    """Protocol for hosts exposing the project's content graph.

    Reads must be deterministic within one analysis pass. Writes return
    False or raise on failure; callers treat both the same way.
    """

    def anchors(self) -> list[Entity]:
        """Anchor entities (scenes enabled in the build) in build order."""
        ...

    def find_entities(self, kinds: Optional[Iterable[EntityKind]] = None) -> list[Entity]:
        """All entities of the given kinds (all kinds when None), in stable order."""
        ...

    def get(self, entity_id: str) -> Optional[Entity]:
        """Look up one entity."""
        ...

    def dependencies(self, entity_id: str) -> Iterable[str]:
        """Transitive dependency IDs of an entity."""
        ...

    def current_group(self, entity_id: str) -> Optional[str]:
        """Group the entity is currently placed in, or None when ungrouped."""
        ...

    def entities_in_group(self, group: str) -> list[str]:
        """IDs of the entities currently placed in ``group``."""
        ...

    def move_to_group(self, entity_id: str, group: str) -> bool:
        ...

    def move_to_folder(self, entity_id: str, folder: str) -> bool:
        ...

    def update_settings(self, entity_id: str, changes: dict[str, Any]) -> bool:
        ...

    def delete_entity(self, entity_id: str) -> bool:
        ...

    def load_samples(self, entity_id: str) -> Sequence[float]:
        """Raw content samples of an audio entity.

        Raises:
            ContentReadFailure: If the content cannot be loaded
        """
        ...
