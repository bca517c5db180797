"""
Duplicate removal apply phase.

Deletes every redundant member of each duplicate group, keeping the keeper.
"""

from __future__ import annotations

from typing import Optional

from optihub.core.models.results import ApplyReport, DuplicateScanResult
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.apply import run_apply
from optihub.infrastructure.content.database import ContentDatabase


def delete_duplicates(
    database: ContentDatabase,
    scan: DuplicateScanResult,
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Delete the removable members of every group in ``scan``.

    Each report item's target is the keeper the deleted entity duplicated.
    """
    plan = [(entity_id, group.keeper) for group in scan.groups for entity_id in group.removable]
    return run_apply(
        "Delete duplicates",
        "delete_entity",
        plan,
        lambda entity_id, _keeper: database.delete_entity(entity_id),
        token=token,
        progress=progress,
    )
