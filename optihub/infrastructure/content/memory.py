"""
In-memory content database backed by a NetworkX graph.

Entities are nodes (``entity`` attribute), "depends on" references are
directed edges. Group placement, audio samples and locked entities are kept
alongside the graph. Projects are loaded from JSON snapshots:

    {
      "build_order": ["scene_main", "scene_menu"],
      "entities": [
        {"id": "scene_main", "kind": "scene", "name": "Main"},
        {"id": "tex_logo", "kind": "texture", "name": "logo",
         "path": "Assets/Textures/logo.png", "group": "Group_Main",
         "settings": {"compression": "uncompressed"},
         "metadata": {"width": 512, "height": 512}},
        {"id": "sfx_click", "kind": "audio", "name": "click",
         "metadata": {"samples": 3, "channels": 1, "frequency": 44100},
         "samples": [0.0, 0.5, -0.5], "locked": true}
      ],
      "dependencies": {"scene_main": ["tex_logo", "sfx_click"]}
    }

Writes to a locked entity return False, mirroring a host that refuses to
move or modify read-only content.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import networkx as nx

from optihub.core.errors import ContentReadFailure
from optihub.core.models.entity import Entity, EntityKind
from optihub.domain.graph.traversal import walk_dependencies

logger = logging.getLogger(__name__)


class InMemoryContentDatabase:
    """ContentDatabase implementation over a ``networkx.DiGraph``.

    Usage:
        db = InMemoryContentDatabase.load_snapshot("project.json")
        for anchor in db.anchors():
            print(anchor.name, sorted(db.dependencies(anchor.id)))
    """

    def __init__(self) -> None:
        self._graph = nx.DiGraph()
        self._build_order: list[str] = []
        self._groups: dict[str, str] = {}
        self._samples: dict[str, list[float]] = {}
        self._locked: set[str] = set()

    # ========== Construction ==========

    def add_entity(
        self,
        entity: Entity,
        group: Optional[str] = None,
        samples: Optional[Sequence[float]] = None,
        locked: bool = False,
    ) -> None:
        """Add or replace an entity node."""
        self._graph.add_node(entity.id, entity=entity)
        if group:
            self._groups[entity.id] = group
        if samples is not None:
            self._samples[entity.id] = list(samples)
        if locked:
            self._locked.add(entity.id)

    def add_dependency(self, entity_id: str, dependency_id: str) -> None:
        """Record that ``entity_id`` references ``dependency_id``."""
        for node in (entity_id, dependency_id):
            if node not in self._graph:
                raise KeyError(f"Unknown entity: {node}")
        self._graph.add_edge(entity_id, dependency_id)

    def set_build_order(self, anchor_ids: Iterable[str]) -> None:
        """Set the enabled anchors, in build order."""
        self._build_order = list(anchor_ids)

    def lock(self, entity_id: str) -> None:
        self._locked.add(entity_id)

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    # ========== Reads ==========

    def anchors(self) -> list[Entity]:
        result = []
        for anchor_id in self._build_order:
            entity = self.get(anchor_id)
            if entity is None or entity.kind != EntityKind.SCENE:
                logger.warning(f"Build order entry '{anchor_id}' is not a scene in this project, skipped")
                continue
            result.append(entity)
        return result

    def find_entities(self, kinds: Optional[Iterable[EntityKind]] = None) -> list[Entity]:
        wanted = set(kinds) if kinds is not None else None
        return [
            data["entity"]
            for _, data in self._graph.nodes(data=True)
            if wanted is None or data["entity"].kind in wanted
        ]

    def get(self, entity_id: str) -> Optional[Entity]:
        if entity_id not in self._graph:
            return None
        return self._graph.nodes[entity_id]["entity"]

    def direct_dependencies(self, entity_id: str) -> list[str]:
        if entity_id not in self._graph:
            return []
        return list(self._graph.successors(entity_id))

    def dependencies(self, entity_id: str) -> list[str]:
        """Transitive dependencies; the entity itself is included only when it sits on a cycle."""
        if entity_id not in self._graph:
            return []
        walk = walk_dependencies(entity_id, self.direct_dependencies)
        result = list(walk.dependencies)
        if walk.root_in_cycle:
            result.append(entity_id)
        return result

    def current_group(self, entity_id: str) -> Optional[str]:
        return self._groups.get(entity_id)

    def entities_in_group(self, group: str) -> list[str]:
        return [entity_id for entity_id, g in self._groups.items() if g == group]

    def load_samples(self, entity_id: str) -> list[float]:
        if entity_id not in self._samples:
            raise ContentReadFailure(entity_id, "no sample data available")
        return self._samples[entity_id]

    # ========== Writes ==========

    def _writable(self, entity_id: str, action: str) -> bool:
        if entity_id not in self._graph:
            logger.debug(f"{action}: unknown entity '{entity_id}'")
            return False
        if entity_id in self._locked:
            logger.debug(f"{action}: '{entity_id}' is locked")
            return False
        return True

    def move_to_group(self, entity_id: str, group: str) -> bool:
        if not self._writable(entity_id, "move_to_group"):
            return False
        self._groups[entity_id] = group
        return True

    def move_to_folder(self, entity_id: str, folder: str) -> bool:
        if not self._writable(entity_id, "move_to_folder"):
            return False
        node = self._graph.nodes[entity_id]
        node["entity"] = node["entity"].moved_to(folder)
        return True

    def update_settings(self, entity_id: str, changes: dict[str, Any]) -> bool:
        if not self._writable(entity_id, "update_settings"):
            return False
        node = self._graph.nodes[entity_id]
        node["entity"] = node["entity"].with_settings(changes)
        return True

    def delete_entity(self, entity_id: str) -> bool:
        if not self._writable(entity_id, "delete_entity"):
            return False
        self._graph.remove_node(entity_id)
        self._groups.pop(entity_id, None)
        self._samples.pop(entity_id, None)
        if entity_id in self._build_order:
            self._build_order.remove(entity_id)
        return True

    # ========== Snapshots ==========

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryContentDatabase":
        """Create a database from parsed snapshot data."""
        db = cls()
        for item in data.get("entities", []):
            db.add_entity(
                Entity.from_snapshot_dict(item),
                group=item.get("group"),
                samples=item.get("samples"),
                locked=bool(item.get("locked", False)),
            )

        for source, targets in data.get("dependencies", {}).items():
            for target in targets:
                if source not in db._graph or target not in db._graph:
                    logger.warning(f"Dropping dependency {source} -> {target}: unknown entity")
                    continue
                db.add_dependency(source, target)

        db.set_build_order(data.get("build_order", []))
        logger.info(
            f"Loaded snapshot: {db._graph.number_of_nodes()} entities, "
            f"{db._graph.number_of_edges()} dependencies, {len(db._build_order)} anchors"
        )
        return db

    def to_dict(self) -> dict[str, Any]:
        """Convert the current state back to snapshot data."""
        entities = []
        for entity in self.find_entities():
            item = entity.to_snapshot_dict()
            if entity.id in self._groups:
                item["group"] = self._groups[entity.id]
            if entity.id in self._samples:
                item["samples"] = list(self._samples[entity.id])
            if entity.id in self._locked:
                item["locked"] = True
            entities.append(item)

        dependencies: dict[str, list[str]] = {}
        for source, target in self._graph.edges():
            dependencies.setdefault(source, []).append(target)

        return {
            "build_order": list(self._build_order),
            "entities": entities,
            "dependencies": dependencies,
        }

    @classmethod
    def load_snapshot(cls, path: str | Path) -> "InMemoryContentDatabase":
        """Load a database from a JSON snapshot file.

        Raises:
            FileNotFoundError: If the snapshot doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def save_snapshot(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return path
