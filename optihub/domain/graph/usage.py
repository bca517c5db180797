"""
Material and shader usage analyses.

A material's shader is the shader entity among its dependencies. A material
is used when some prefab or scene reaches it; a project shader is used when
some material reaches it. All lookups go through one DependencyIndex, so a
single pass asks the host at most once per entity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from optihub.core.models.entity import Entity, EntityKind
from optihub.domain.graph.dependency_index import DependencyIndex

if TYPE_CHECKING:
    from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)

MISSING_SHADER = "Missing Shader"
BUILTIN_SHADER_PREFIXES = ("Hidden/", "Legacy Shaders/", "Standard")
PROJECT_ROOT = "Assets/"


class MaterialUsage:
    """Usage queries over the materials and shaders of one database pass.

    Usage:
        usage = MaterialUsage(db)
        for material in usage.unused_materials():
            print(material.path)
    """

    def __init__(self, database: ContentDatabase, index: Optional[DependencyIndex] = None):
        self.database = database
        self.index = index if index is not None else DependencyIndex(database)

    def _materials(self) -> list[Entity]:
        return self.database.find_entities([EntityKind.MATERIAL])

    def shader_of(self, material: Entity) -> Optional[Entity]:
        """The shader a material uses, or None when it has none."""
        shaders = []
        for dep_id in self.index.dependencies(material.id):
            entity = self.database.get(dep_id)
            if entity is not None and entity.kind == EntityKind.SHADER:
                shaders.append(entity)
        if len(shaders) > 1:
            logger.warning(
                f"Material '{material.id}' reaches {len(shaders)} shaders; using '{shaders[0].id}'"
            )
        return shaders[0] if shaders else None

    def unused_materials(self) -> tuple[Entity, ...]:
        """Materials no prefab or scene depends on."""
        holders = self.database.find_entities([EntityKind.PREFAB, EntityKind.SCENE])
        referenced = self.index.closure(h.id for h in holders)
        return tuple(m for m in self._materials() if m.id not in referenced)

    def materials_missing_shader(self) -> tuple[Entity, ...]:
        return tuple(m for m in self._materials() if self.shader_of(m) is None)

    def materials_by_shader(self) -> dict[str, tuple[str, ...]]:
        """Material IDs per shader name, in first-seen order; shaderless ones under MISSING_SHADER."""
        groups: dict[str, list[str]] = {}
        for material in self._materials():
            shader = self.shader_of(material)
            name = shader.name if shader is not None else MISSING_SHADER
            groups.setdefault(name, []).append(material.id)
        return {name: tuple(ids) for name, ids in groups.items()}

    def unused_shaders(self) -> tuple[Entity, ...]:
        """Project shaders no material depends on.

        Built-in shaders (``Hidden/``, ``Legacy Shaders/``, ``Standard``) and
        shaders outside the project folder are never reported.
        """
        used = self.index.closure(m.id for m in self._materials())
        return tuple(
            shader
            for shader in self.database.find_entities([EntityKind.SHADER])
            if shader.id not in used
            and shader.path.startswith(PROJECT_ROOT)
            and not shader.name.startswith(BUILTIN_SHADER_PREFIXES)
        )
