"""
Audio import-settings policy.

A clip is correctly configured when it is forced to mono, not normalized,
vorbis-encoded at the target quality, and loaded according to its length:
long clips stay compressed in memory and are not preloaded, short clips are
decompressed on load and preloaded.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from optihub.app.config import AudioPolicyConfig
from optihub.core.models.entity import Entity, EntityKind
from optihub.core.models.results import ApplyReport
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.apply import run_apply
from optihub.infrastructure.content.database import ContentDatabase

QUALITY_TOLERANCE = 1e-4

COMPRESSED_IN_MEMORY = "compressed_in_memory"
DECOMPRESS_ON_LOAD = "decompress_on_load"
VORBIS = "vorbis"


def is_long(clip: Entity, config: AudioPolicyConfig) -> bool:
    return float(clip.get_meta("length", 0.0)) >= config.long_audio_seconds


def optimal_settings(clip: Entity, config: AudioPolicyConfig) -> dict[str, Any]:
    """Import settings the policy expects for ``clip``."""
    long_clip = is_long(clip, config)
    return {
        "force_to_mono": True,
        "normalize": False,
        "load_type": COMPRESSED_IN_MEMORY if long_clip else DECOMPRESS_ON_LOAD,
        "preload_audio_data": not long_clip,
        "compression_format": VORBIS,
        "quality": config.target_quality,
    }


def compression_issues(clip: Entity, config: AudioPolicyConfig) -> list[str]:
    """Names of the settings that deviate from the policy."""
    expected = optimal_settings(clip, config)
    issues = []
    for key in ("force_to_mono", "normalize", "load_type", "preload_audio_data", "compression_format"):
        if clip.get_setting(key) != expected[key]:
            issues.append(key)

    quality = clip.get_setting("quality")
    if quality is None or abs(float(quality) - config.target_quality) > QUALITY_TOLERANCE:
        issues.append("quality")
    return issues


def is_wrong_compression(clip: Entity, config: AudioPolicyConfig) -> bool:
    return bool(compression_issues(clip, config))


def find_wrong_compression(clips: Iterable[Entity], config: AudioPolicyConfig) -> tuple[Entity, ...]:
    return tuple(
        clip for clip in clips
        if clip.kind == EntityKind.AUDIO and is_wrong_compression(clip, config)
    )


def fix_audio_compression(
    database: ContentDatabase,
    clips: Iterable[Entity],
    config: AudioPolicyConfig,
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Write the optimal settings to each clip. Report targets are load types."""
    settings = {clip.id: optimal_settings(clip, config) for clip in clips}
    plan = [(clip_id, s["load_type"]) for clip_id, s in settings.items()]
    return run_apply(
        "Fix audio compression",
        "update_settings",
        plan,
        lambda clip_id, _target: database.update_settings(clip_id, settings[clip_id]),
        token=token,
        progress=progress,
    )
