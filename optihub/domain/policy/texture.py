"""
Texture import-settings policy.

Flags uncompressed textures, compressed textures without crunch, textures
generating mipmaps, and sprites that are neither packed in an atlas nor
power-of-two sized (after clamping to their max import size).
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional

from optihub.core.models.entity import Entity, EntityKind
from optihub.core.models.results import ApplyReport
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.apply import run_apply
from optihub.infrastructure.content.database import ContentDatabase

UNCOMPRESSED = "uncompressed"
COMPRESSED = "compressed"
SPRITE = "sprite"


def effective_size(texture: Entity) -> tuple[int, int]:
    """Pixel size after the max import size clamp, keeping the aspect ratio."""
    width = int(texture.get_meta("width", 0))
    height = int(texture.get_meta("height", 0))
    max_size = texture.get_setting("max_size")
    if not max_size or width <= 0 or height <= 0:
        return width, height
    if width <= max_size and height <= max_size:
        return width, height

    aspect = width / height
    if width > height:
        return int(max_size), int(max_size / aspect)
    return int(max_size * aspect), int(max_size)


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def is_power_of_two_size(texture: Entity) -> bool:
    width, height = effective_size(texture)
    return _is_power_of_two(width) and _is_power_of_two(height)


def is_uncompressed(texture: Entity) -> bool:
    return texture.get_setting("compression") == UNCOMPRESSED


def is_compressed_not_crunched(texture: Entity) -> bool:
    return not is_uncompressed(texture) and not texture.get_setting("crunched", False)


def has_mipmaps(texture: Entity) -> bool:
    return bool(texture.get_setting("mipmaps", False))


def needs_atlas(texture: Entity, atlas_members: AbstractSet[str]) -> bool:
    """A sprite outside every atlas whose size is not power-of-two."""
    return (
        texture.id not in atlas_members
        and texture.get_setting("texture_type") == SPRITE
        and not is_power_of_two_size(texture)
    )


def _textures(entities: Iterable[Entity]) -> list[Entity]:
    return [e for e in entities if e.kind == EntityKind.TEXTURE]


def find_uncompressed(textures: Iterable[Entity]) -> tuple[Entity, ...]:
    return tuple(t for t in _textures(textures) if is_uncompressed(t))


def find_compressed_not_crunched(textures: Iterable[Entity]) -> tuple[Entity, ...]:
    return tuple(t for t in _textures(textures) if is_compressed_not_crunched(t))


def find_with_mipmaps(textures: Iterable[Entity]) -> tuple[Entity, ...]:
    return tuple(t for t in _textures(textures) if has_mipmaps(t))


def find_not_in_atlas(textures: Iterable[Entity], atlas_members: AbstractSet[str]) -> tuple[Entity, ...]:
    return tuple(t for t in _textures(textures) if needs_atlas(t, atlas_members))


def fix_texture_compression(
    database: ContentDatabase,
    texture_ids: Iterable[str],
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Switch each texture to crunched compression."""
    changes = {"compression": COMPRESSED, "crunched": True}
    return run_apply(
        "Fix texture compression",
        "update_settings",
        [(texture_id, COMPRESSED) for texture_id in texture_ids],
        lambda texture_id, _target: database.update_settings(texture_id, changes),
        token=token,
        progress=progress,
    )


def disable_mipmaps(
    database: ContentDatabase,
    texture_ids: Iterable[str],
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    return run_apply(
        "Disable mipmaps",
        "update_settings",
        [(texture_id, "mipmaps=off") for texture_id in texture_ids],
        lambda texture_id, _target: database.update_settings(texture_id, {"mipmaps": False}),
        token=token,
        progress=progress,
    )
