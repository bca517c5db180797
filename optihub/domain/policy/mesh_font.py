"""
Mesh and font compression breakdowns.
"""

from __future__ import annotations

import logging
from typing import Iterable

from optihub.core.models.entity import Entity, EntityKind

logger = logging.getLogger(__name__)

MESH_COMPRESSION_LEVELS = ("off", "low", "medium", "high")


def group_meshes_by_compression(entities: Iterable[Entity]) -> dict[str, tuple[str, ...]]:
    """Mesh IDs per compression level. Every level is present, possibly empty."""
    groups: dict[str, list[str]] = {level: [] for level in MESH_COMPRESSION_LEVELS}
    for entity in entities:
        if entity.kind != EntityKind.MESH:
            continue
        level = entity.get_setting("mesh_compression", "off")
        if level not in groups:
            logger.warning(f"Mesh '{entity.id}' has unknown compression '{level}', counted as off")
            level = "off"
        groups[level].append(entity.id)
    return {level: tuple(ids) for level, ids in groups.items()}


def split_fonts_by_compression(entities: Iterable[Entity]) -> dict[str, tuple[str, ...]]:
    """Split fonts into ``compressed`` (custom character set) and ``uncompressed``."""
    compressed: list[str] = []
    uncompressed: list[str] = []
    for entity in entities:
        if entity.kind != EntityKind.FONT:
            continue
        if entity.get_setting("font_texture_case") == "custom_set":
            compressed.append(entity.id)
        else:
            uncompressed.append(entity.id)
    return {"compressed": tuple(compressed), "uncompressed": tuple(uncompressed)}
