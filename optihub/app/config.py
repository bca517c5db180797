"""
OptiHub Configuration.

Configuration objects are immutable and passed explicitly to the components
that need them; there is no process-wide config instance.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal


CONFIG_ENV_VAR = "OPTIHUB_CONFIG"


# ============================================================================
# Configuration Classes
# ============================================================================


@dataclass(frozen=True)
class CacheConfig:
    """Configuration for the analysis result cache."""

    ttl_seconds: float = 300.0  # 5 minutes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheConfig":
        return cls(ttl_seconds=float(data.get("ttl_seconds", 300.0)))

    def to_dict(self) -> dict[str, Any]:
        return {"ttl_seconds": self.ttl_seconds}


@dataclass(frozen=True)
class OwnershipConfig:
    """Configuration for anchor ownership and atlas placement."""

    group_prefix: str = "Group_"
    catch_all_group: str = "NotInAnchorGroup"
    include_ungrouped: bool = True  # Ungrouped dependencies count as mis-owned
    atlas_root: str = "Assets/Sprites/BuildIn"

    def group_for(self, anchor_name: str) -> str:
        """Canonical group name of an anchor."""
        return f"{self.group_prefix}{anchor_name}"

    def atlas_folder_for(self, anchor_name: str) -> str:
        return f"{self.atlas_root.rstrip('/')}/{anchor_name}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OwnershipConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_prefix": self.group_prefix,
            "catch_all_group": self.catch_all_group,
            "include_ungrouped": self.include_ungrouped,
            "atlas_root": self.atlas_root,
        }


@dataclass(frozen=True)
class DuplicateConfig:
    """Configuration for content-equality duplicate detection."""

    epsilon: float = 1e-4  # Max per-sample difference for equal content
    match_fields: tuple[str, ...] = ("samples", "channels", "frequency")
    max_bucket_size: int = 200  # Buckets above this are compared but reported

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DuplicateConfig":
        return cls(
            epsilon=float(data.get("epsilon", 1e-4)),
            match_fields=tuple(data.get("match_fields", ("samples", "channels", "frequency"))),
            max_bucket_size=int(data.get("max_bucket_size", 200)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "epsilon": self.epsilon,
            "match_fields": list(self.match_fields),
            "max_bucket_size": self.max_bucket_size,
        }


@dataclass(frozen=True)
class AudioPolicyConfig:
    """Target audio import settings.

    Clips at least ``long_audio_seconds`` long are compressed in memory and
    not preloaded; shorter clips are decompressed on load.
    """

    target_quality: float = 0.2
    long_audio_seconds: float = 60.0

    PRESETS = {
        "low": (0.1, 30.0),
        "balanced": (0.2, 60.0),
        "high": (0.5, 90.0),
    }

    @classmethod
    def preset(cls, name: str) -> "AudioPolicyConfig":
        """Build a config from a named preset (low, balanced, high)."""
        try:
            quality, seconds = cls.PRESETS[name]
        except KeyError:
            raise ValueError(f"Unknown audio preset '{name}'. Choose from: {', '.join(cls.PRESETS)}") from None
        return cls(target_quality=quality, long_audio_seconds=seconds)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AudioPolicyConfig":
        if "preset" in data:
            return cls.preset(data["preset"])
        return cls(
            target_quality=float(data.get("target_quality", 0.2)),
            long_audio_seconds=float(data.get("long_audio_seconds", 60.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_quality": self.target_quality,
            "long_audio_seconds": self.long_audio_seconds,
        }


@dataclass(frozen=True)
class OptiHubConfig:
    """Main configuration for OptiHub.

    Aggregates all sub-configurations and provides loading from JSON.
    """

    cache: CacheConfig = field(default_factory=CacheConfig)
    ownership: OwnershipConfig = field(default_factory=OwnershipConfig)
    duplicates: DuplicateConfig = field(default_factory=DuplicateConfig)
    audio: AudioPolicyConfig = field(default_factory=AudioPolicyConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "OptiHubConfig":
        """Load configuration from a JSON file.

        Args:
            config_path: Path to config file. If None, uses $OPTIHUB_CONFIG
                when set. A missing file yields the defaults.

        Returns:
            OptiHubConfig instance
        """
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR)
            if not config_path:
                return cls()

        config_path = Path(config_path)

        if not config_path.exists():
            return cls()

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OptiHubConfig":
        """Create config from dictionary."""
        return cls(
            cache=CacheConfig.from_dict(data.get("cache", {})),
            ownership=OwnershipConfig.from_dict(data.get("ownership", {})),
            duplicates=DuplicateConfig.from_dict(data.get("duplicates", {})),
            audio=AudioPolicyConfig.from_dict(data.get("audio", {})),
            log_level=data.get("log_level", "INFO"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "cache": self.cache.to_dict(),
            "ownership": self.ownership.to_dict(),
            "duplicates": self.duplicates.to_dict(),
            "audio": self.audio.to_dict(),
            "log_level": self.log_level,
        }

    def with_overrides(self, **changes: Any) -> "OptiHubConfig":
        """Return a copy with top-level fields replaced."""
        return dataclasses.replace(self, **changes)
