"""
Regroup apply phase.

Moves each mis-owned entity into its owning anchor's canonical group and
each orphan into the catch-all group.
"""

from __future__ import annotations

from typing import Optional

from optihub.core.models.results import ApplyReport, OwnershipClassification
from optihub.core.progress import CancellationToken, ProgressCallback
from optihub.domain.apply import run_apply
from optihub.infrastructure.content.database import ContentDatabase


def plan_regroup(classification: OwnershipClassification) -> list[tuple[str, str]]:
    """List the ``(entity_id, target_group)`` moves a regroup performs."""
    plan = [(entity_id, record.group) for record in classification.anchors for entity_id in record.misowned]
    plan.extend((entity_id, classification.catch_all_group) for entity_id in classification.orphans)
    return plan


def regroup(
    database: ContentDatabase,
    classification: OwnershipClassification,
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Move mis-owned and orphaned entities to their target groups."""
    return run_apply(
        "Regroup",
        "move_to_group",
        plan_regroup(classification),
        database.move_to_group,
        token=token,
        progress=progress,
    )
