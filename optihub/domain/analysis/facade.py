"""
AnalysisFacade - named, TTL-cached analyses over a content database.

Callers ask for an analysis by name; the facade returns the cached result
while it is valid and otherwise recomputes it from the live database. Each
analysis computes from the database directly and never reads another
analysis's cache entry, so entries can expire independently.

Apply methods perform corrective writes and invalidate the entries whose
results those writes make stale. Cache writes and apply phases are
serialized behind one writer lock.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Callable, Iterable, Optional

from optihub.app.config import OptiHubConfig
from optihub.core.models.entity import Entity, EntityKind
from optihub.core.models.results import (
    ApplyReport,
    AtlasPlacement,
    DuplicateScanResult,
    OwnershipClassification,
)
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.graph.dependency_index import DependencyIndex
from optihub.domain.graph.usage import MaterialUsage
from optihub.domain.ownership import atlas
from optihub.domain.ownership.regroup import regroup as regroup_entities
from optihub.domain.ownership.classifier import OwnershipClassifier
from optihub.domain.policy import audio, mesh_font, texture
from optihub.domain.resolution.dedup_apply import delete_duplicates as delete_duplicates_phase
from optihub.domain.resolution.duplicates import ContentEqualityDetector
from optihub.infrastructure.cache.ttl_cache import Clock, TTLCache
from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)


# ============================================================================
# Analysis Names
# ============================================================================

ALL_TEXTURE_INFOS = "AllTextureInfos"
TEXTURES_NOT_IN_ATLAS = "TexturesNotInAtlas"
UNCOMPRESSED_TEXTURES = "UncompressedTextures"
TEXTURES_WITH_MIPMAP = "TexturesWithMipMap"
COMPRESSED_NOT_CRUNCHED_TEXTURES = "CompressedNotCrunchedTextures"
ALL_AUDIO_INFOS = "AllAudioInfos"
AUDIO_WRONG_COMPRESSION = "AudioWrongCompression"
MESHES_BY_COMPRESSION = "MeshesByCompression"
FONTS_BY_COMPRESSION = "FontsByCompression"
OWNERSHIP_CLASSIFICATION = "OwnershipClassification"
MISPLACED_ATLAS_TEXTURES = "MisplacedAtlasTextures"
DUPLICATE_AUDIO = "DuplicateAudio"
UNUSED_MATERIALS = "UnusedMaterials"
MATERIALS_MISSING_SHADER = "MaterialsMissingShader"
MATERIALS_BY_SHADER = "MaterialsByShader"
UNUSED_SHADERS = "UnusedShaders"

TEXTURE_QUERIES = (
    ALL_TEXTURE_INFOS,
    TEXTURES_NOT_IN_ATLAS,
    UNCOMPRESSED_TEXTURES,
    TEXTURES_WITH_MIPMAP,
    COMPRESSED_NOT_CRUNCHED_TEXTURES,
)
AUDIO_QUERIES = (ALL_AUDIO_INFOS, AUDIO_WRONG_COMPRESSION, DUPLICATE_AUDIO)
GRAPH_QUERIES = (OWNERSHIP_CLASSIFICATION, MISPLACED_ATLAS_TEXTURES)
MATERIAL_QUERIES = (UNUSED_MATERIALS, MATERIALS_MISSING_SHADER, MATERIALS_BY_SHADER, UNUSED_SHADERS)

# Analysis = (token, progress) -> result
Analysis = Callable[[Optional[CancellationToken], Optional[ProgressCallback]], Any]

_MISSING = object()


def is_partial(result: Any) -> bool:
    """True for results cut short by cancellation; those are never cached."""
    if isinstance(result, (OwnershipClassification, AtlasPlacement)):
        return not result.complete
    if isinstance(result, DuplicateScanResult):
        return result.cancelled
    return False


class AnalysisFacade:
    """Single entry point for cached analyses and corrective apply phases.

    Usage:
        facade = AnalysisFacade(db, OptiHubConfig())
        textures = facade.get("UncompressedTextures")
        report = facade.fix_texture_compression()
        print(report.summary())
    """

    def __init__(
        self,
        database: ContentDatabase,
        config: Optional[OptiHubConfig] = None,
        cache: Optional[TTLCache] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize the facade.

        Args:
            database: Live content database
            config: Configuration; defaults when None
            cache: Result cache; a new one using ``clock`` when None
            clock: Time source for a newly created cache
        """
        self.database = database
        self.config = config or OptiHubConfig()
        self.cache = cache if cache is not None else TTLCache(clock=clock)
        self._lock = threading.RLock()

        self._analyses: dict[str, Analysis] = {
            ALL_TEXTURE_INFOS: lambda t, p: self._textures(),
            TEXTURES_NOT_IN_ATLAS: lambda t, p: texture.find_not_in_atlas(self._textures(), self._atlas_members()),
            UNCOMPRESSED_TEXTURES: lambda t, p: texture.find_uncompressed(self._textures()),
            TEXTURES_WITH_MIPMAP: lambda t, p: texture.find_with_mipmaps(self._textures()),
            COMPRESSED_NOT_CRUNCHED_TEXTURES: lambda t, p: texture.find_compressed_not_crunched(self._textures()),
            ALL_AUDIO_INFOS: lambda t, p: self._audio_clips(),
            AUDIO_WRONG_COMPRESSION: lambda t, p: audio.find_wrong_compression(self._audio_clips(), self.config.audio),
            MESHES_BY_COMPRESSION: lambda t, p: MappingProxyType(
                mesh_font.group_meshes_by_compression(self.database.find_entities([EntityKind.MESH]))
            ),
            FONTS_BY_COMPRESSION: lambda t, p: MappingProxyType(
                mesh_font.split_fonts_by_compression(self.database.find_entities([EntityKind.FONT]))
            ),
            OWNERSHIP_CLASSIFICATION: self._classify,
            MISPLACED_ATLAS_TEXTURES: self._misplaced_atlas_textures,
            DUPLICATE_AUDIO: self._duplicate_audio,
            UNUSED_MATERIALS: lambda t, p: MaterialUsage(self.database).unused_materials(),
            MATERIALS_MISSING_SHADER: lambda t, p: MaterialUsage(self.database).materials_missing_shader(),
            MATERIALS_BY_SHADER: lambda t, p: MappingProxyType(MaterialUsage(self.database).materials_by_shader()),
            UNUSED_SHADERS: lambda t, p: MaterialUsage(self.database).unused_shaders(),
        }

    # ========== Queries ==========

    @property
    def queries(self) -> tuple[str, ...]:
        """Names of every available analysis."""
        return tuple(self._analyses)

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.config.cache.ttl_seconds)

    def get(
        self,
        name: str,
        force_refresh: bool = False,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Return the named analysis, from cache when valid.

        Args:
            name: Analysis name, e.g. "OwnershipClassification"
            force_refresh: Recompute even when a valid entry exists
            token: Cancellation token for long analyses
            progress: Host progress callback

        Raises:
            KeyError: If ``name`` is not a known analysis
        """
        analysis = self._analyses.get(name)
        if analysis is None:
            raise KeyError(f"Unknown analysis '{name}'. Available: {', '.join(self._analyses)}")

        # Readers of a valid entry never wait on the writer lock
        if not force_refresh:
            cached = self.cache.try_get(name, _MISSING)
            if cached is not _MISSING:
                logger.debug(f"Cache hit for {name}")
                return cached

        with self._lock:
            if not force_refresh:
                # Another writer may have filled the entry while we waited
                cached = self.cache.try_get(name, _MISSING)
                if cached is not _MISSING:
                    return cached

            logger.info(f"Computing {name}")
            result = analysis(token, progress)
            if is_partial(result):
                logger.warning(f"{name} was cancelled; partial result not cached")
            else:
                self.cache.set(name, result, self.ttl)
            return result

    def peek(self, name: str) -> Any:
        """Return the cached value of ``name`` if valid, else None. Never computes."""
        if name not in self._analyses:
            raise KeyError(f"Unknown analysis '{name}'")
        return self.cache.try_get(name)

    def clear_cache(self) -> None:
        with self._lock:
            self.cache.clear()
        logger.info("Analysis cache cleared")

    def invalidate(self, *names: str) -> None:
        with self._lock:
            for name in names:
                self.cache.remove(name)
        logger.debug(f"Invalidated {', '.join(names)}")

    # ========== Analyses ==========

    def _textures(self) -> tuple[Entity, ...]:
        return tuple(self.database.find_entities([EntityKind.TEXTURE]))

    def _audio_clips(self) -> tuple[Entity, ...]:
        return tuple(self.database.find_entities([EntityKind.AUDIO]))

    def _atlas_members(self) -> frozenset[str]:
        atlases = self.database.find_entities([EntityKind.ATLAS])
        return DependencyIndex(self.database).closure(a.id for a in atlases)

    def _classify(
        self,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> OwnershipClassification:
        classifier = OwnershipClassifier(self.database, self.config.ownership)
        return classifier.classify(token=token, progress=progress)

    def _misplaced_atlas_textures(
        self,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> AtlasPlacement:
        classification = self._classify(token, progress)
        return atlas.find_misplaced_textures(self.database, classification, self.config.ownership)

    def _duplicate_audio(
        self,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> DuplicateScanResult:
        detector = ContentEqualityDetector(self.database, self.config.duplicates)
        return detector.find_duplicates(self._audio_clips(), token=token, progress=progress)

    # ========== Apply Phases ==========

    def regroup(
        self,
        classification: Optional[OwnershipClassification] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Move mis-owned entities to their anchor groups and orphans to the catch-all group."""
        with self._lock:
            if classification is None:
                classification = self.get(OWNERSHIP_CLASSIFICATION)
            report = regroup_entities(self.database, classification, token, progress)
            self.invalidate(*GRAPH_QUERIES)
            return report

    def move_misplaced_textures(
        self,
        placement: Optional[AtlasPlacement] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        with self._lock:
            if placement is None:
                placement = self.get(MISPLACED_ATLAS_TEXTURES)
            report = atlas.move_misplaced_textures(self.database, placement, token, progress)
            self.invalidate(*GRAPH_QUERIES, *TEXTURE_QUERIES)
            return report

    def fix_audio_compression(
        self,
        clips: Optional[Iterable[Entity]] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Write optimal import settings to clips (default: every wrongly compressed clip)."""
        with self._lock:
            if clips is None:
                clips = self.get(AUDIO_WRONG_COMPRESSION)
            report = audio.fix_audio_compression(self.database, clips, self.config.audio, token, progress)
            self.invalidate(ALL_AUDIO_INFOS, AUDIO_WRONG_COMPRESSION)
            return report

    def fix_texture_compression(
        self,
        texture_ids: Optional[Iterable[str]] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Crunch-compress textures (default: uncompressed plus compressed-not-crunched)."""
        with self._lock:
            if texture_ids is None:
                flagged = self.get(UNCOMPRESSED_TEXTURES) + self.get(COMPRESSED_NOT_CRUNCHED_TEXTURES)
                texture_ids = list(dict.fromkeys(t.id for t in flagged))
            report = texture.fix_texture_compression(self.database, texture_ids, token, progress)
            self.invalidate(*TEXTURE_QUERIES)
            return report

    def disable_mipmaps(
        self,
        texture_ids: Optional[Iterable[str]] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        with self._lock:
            if texture_ids is None:
                texture_ids = [t.id for t in self.get(TEXTURES_WITH_MIPMAP)]
            report = texture.disable_mipmaps(self.database, texture_ids, token, progress)
            self.invalidate(*TEXTURE_QUERIES)
            return report

    def delete_duplicates(
        self,
        scan: Optional[DuplicateScanResult] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Delete redundant duplicates, keeping each group's keeper."""
        with self._lock:
            if scan is None:
                scan = self.get(DUPLICATE_AUDIO)
            report = delete_duplicates_phase(self.database, scan, token, progress)
            self.invalidate(*AUDIO_QUERIES, *GRAPH_QUERIES)
            return report

