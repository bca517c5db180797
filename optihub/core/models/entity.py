"""
Entity Models for OptiHub.

An Entity is any analyzable content item: a texture, an audio clip, a mesh,
a font, or a scene acting as an anchor. Entities are immutable snapshots; the
content database owns the mutable facts about them (current group, folder)
and hands out fresh copies after a write.

Import settings (how the item is encoded) live in ``settings``; structural
facts read from the content itself (sample count, pixel size) live in
``metadata``.
"""

from __future__ import annotations

import posixpath
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class EntityKind(str, Enum):
    """Classification for content items."""
    TEXTURE = "texture"
    AUDIO = "audio"
    MESH = "mesh"
    FONT = "font"
    SHADER = "shader"
    MATERIAL = "material"
    PREFAB = "prefab"
    ATLAS = "atlas"          # Sprite atlas packing a set of textures
    SCENE = "scene"          # Deployable unit, the anchor kind
    OTHER = "other"


# ============================================================================
# Entity Model
# ============================================================================


class Entity(BaseModel):
    """A content item in the dependency graph.

    Attributes:
        id: Stable identifier (GUID-like)
        kind: Content classification
        name: Display name, also used to derive anchor group names
        path: Project-relative path of the item
        settings: Import settings (compression, mipmaps, load type, ...)
        metadata: Structural facts (samples, channels, width, height, ...)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable entity ID")
    kind: EntityKind = Field(default=EntityKind.OTHER, description="Content classification")
    name: str = Field(default="", description="Display name")
    path: str = Field(default="", description="Project-relative path")
    settings: dict[str, Any] = Field(default_factory=dict, description="Import settings")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Structural metadata")

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.id == other.id

    def __str__(self) -> str:
        return f"Entity({self.name or self.id}, kind={self.kind.value})"

    def __repr__(self) -> str:
        return f"<Entity id={self.id} name={self.name!r} kind={self.kind.value}>"

    @property
    def file_name(self) -> str:
        """Last path component, or the name when no path is known."""
        return posixpath.basename(self.path) if self.path else self.name

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an import setting value."""
        return self.settings.get(key, default)

    def get_meta(self, key: str, default: Any = None) -> Any:
        """Get a structural metadata value."""
        return self.metadata.get(key, default)

    def with_settings(self, changes: dict[str, Any]) -> "Entity":
        """Return a copy with ``changes`` merged into the import settings."""
        return self.model_copy(update={"settings": {**self.settings, **changes}})

    def moved_to(self, folder: str) -> "Entity":
        """Return a copy whose path sits directly under ``folder``."""
        return self.model_copy(update={"path": posixpath.join(folder, self.file_name)})

    def to_snapshot_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for project snapshots."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "path": self.path,
            "settings": dict(self.settings),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_snapshot_dict(cls, data: dict[str, Any]) -> "Entity":
        """Create an Entity from snapshot data."""
        return cls(
            id=data["id"],
            kind=EntityKind(data.get("kind", "other")),
            name=data.get("name", ""),
            path=data.get("path", ""),
            settings=data.get("settings", {}),
            metadata=data.get("metadata", {}),
        )


# ============================================================================
# Kind-Specific Entity Helpers
# ============================================================================


def create_scene(entity_id: str, name: str, path: str = "", **kwargs: Any) -> Entity:
    """Create a scene (anchor) entity."""
    return Entity(
        id=entity_id,
        kind=EntityKind.SCENE,
        name=name,
        path=path or f"Assets/Scenes/{name}.unity",
        **kwargs,
    )


def create_texture(
    entity_id: str,
    name: str,
    path: str = "",
    width: int = 256,
    height: int = 256,
    settings: dict[str, Any] | None = None,
) -> Entity:
    """Create a texture entity with default sprite import settings."""
    defaults = {
        "texture_type": "sprite",
        "compression": "compressed",
        "crunched": False,
        "mipmaps": False,
        "readable": False,
        "max_size": 2048,
    }
    return Entity(
        id=entity_id,
        kind=EntityKind.TEXTURE,
        name=name,
        path=path or f"Assets/Textures/{name}.png",
        settings={**defaults, **(settings or {})},
        metadata={"width": width, "height": height},
    )


def create_audio_clip(
    entity_id: str,
    name: str,
    samples: int,
    channels: int = 1,
    frequency: int = 44100,
    path: str = "",
    settings: dict[str, Any] | None = None,
) -> Entity:
    """Create an audio clip entity.

    ``length`` (seconds) is derived from samples and frequency, matching how
    clip duration is reported by the host.
    """
    defaults = {
        "force_to_mono": True,
        "normalize": False,
        "load_in_background": True,
        "load_type": "decompress_on_load",
        "preload_audio_data": True,
        "compression_format": "vorbis",
        "quality": 0.2,
    }
    return Entity(
        id=entity_id,
        kind=EntityKind.AUDIO,
        name=name,
        path=path or f"Assets/Audio/{name}.wav",
        settings={**defaults, **(settings or {})},
        metadata={
            "samples": samples,
            "channels": channels,
            "frequency": frequency,
            "length": samples / frequency if frequency else 0.0,
        },
    )


def create_asset(entity_id: str, kind: EntityKind, name: str, path: str = "", **kwargs: Any) -> Entity:
    """Create any other kind of asset entity."""
    return Entity(id=entity_id, kind=kind, name=name, path=path, **kwargs)
