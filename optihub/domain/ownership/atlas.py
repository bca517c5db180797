"""
Atlas folder placement.

Textures owned by an anchor are expected under that anchor's atlas folder
(``<atlas_root>/<anchor name>/<file name>``) so they pack into the anchor's
sprite atlas. Ownership follows the same first-claim rule as grouping.
"""

from __future__ import annotations

import logging
from typing import Optional

from optihub.app.config import OwnershipConfig
from optihub.core.models.entity import EntityKind
from optihub.core.models.results import (
    ApplyReport,
    AtlasPlacement,
    MisplacedTextures,
    OwnershipClassification,
)
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.apply import run_apply
from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)


def find_misplaced_textures(
    database: ContentDatabase,
    classification: OwnershipClassification,
    config: Optional[OwnershipConfig] = None,
) -> AtlasPlacement:
    """Report claimed textures stored outside their anchor's atlas folder."""
    config = config or OwnershipConfig()
    reports: list[MisplacedTextures] = []

    for record in classification.anchors:
        anchor = database.get(record.anchor_id)
        if anchor is None:
            continue
        folder = config.atlas_folder_for(anchor.name)

        misplaced = []
        for entity_id in record.claimed:
            entity = database.get(entity_id)
            if entity is None or entity.kind != EntityKind.TEXTURE:
                continue
            if entity.path != f"{folder}/{entity.file_name}":
                misplaced.append(entity_id)

        if misplaced:
            reports.append(MisplacedTextures(anchor_id=anchor.id, folder=folder, textures=tuple(misplaced)))

    placement = AtlasPlacement(anchors=tuple(reports), complete=classification.complete)
    logger.info(f"Found {placement.total_misplaced} textures outside their atlas folder")
    return placement


def move_misplaced_textures(
    database: ContentDatabase,
    placement: AtlasPlacement,
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Move every misplaced texture into its anchor's atlas folder."""
    plan = [(texture_id, report.folder) for report in placement.anchors for texture_id in report.textures]
    return run_apply(
        "Move atlas textures",
        "move_to_folder",
        plan,
        database.move_to_folder,
        token=token,
        progress=progress,
    )
