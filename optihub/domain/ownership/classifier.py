"""
OwnershipClassifier - single-owner assignment of shared dependencies.

Anchors (scenes in build order) are processed in order. Each anchor claims
every dependency not already claimed by an earlier anchor, so a dependency
shared by several anchors belongs to the first of them. A claimed entity
whose current group is not the anchor's canonical group is mis-owned.
Entities sitting in some anchor group but referenced by no anchor at all are
orphans and belong to the catch-all group.
"""

from __future__ import annotations

import logging
from typing import Optional

from optihub.app.config import OwnershipConfig
from optihub.core.models.results import AnchorOwnership, OwnershipClassification
from optihub.core.progress import CancellationToken, ProgressCallback, ProgressTracker
from optihub.domain.graph.dependency_index import DependencyIndex
from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)


class OwnershipClassifier:
    """Computes an OwnershipClassification from the live content database.

    Usage:
        classifier = OwnershipClassifier(db, OwnershipConfig())
        result = classifier.classify()
        for record in result.anchors:
            print(record.group, record.misowned)
    """

    def __init__(self, database: ContentDatabase, config: Optional[OwnershipConfig] = None):
        self.database = database
        self.config = config or OwnershipConfig()

    def classify(
        self,
        index: Optional[DependencyIndex] = None,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> OwnershipClassification:
        """Classify every anchor dependency.

        Args:
            index: Dependency index for this pass; a fresh one when None
            token: Cancellation token, checked before each anchor
            progress: Host progress callback

        Returns:
            The classification; ``complete`` is False when cancelled
        """
        if index is None:
            index = DependencyIndex(self.database)
        anchors = self.database.anchors()
        tracker = ProgressTracker("Ownership classification", len(anchors), progress, token)

        claimed: set[str] = set()
        records: list[AnchorOwnership] = []

        for anchor in anchors:
            if tracker.should_stop():
                break

            group = self.config.group_for(anchor.name)
            deps = tuple(d for d in index.dependencies(anchor.id) if d not in claimed)
            misowned = tuple(d for d in deps if self._is_misowned(d, group))

            records.append(AnchorOwnership(
                anchor_id=anchor.id,
                group=group,
                claimed=deps,
                misowned=misowned,
            ))
            claimed.update(deps)
            tracker.increment(anchor.name)

        if tracker.stopped:
            return OwnershipClassification(
                anchors=tuple(records),
                catch_all_group=self.config.catch_all_group,
                complete=False,
                cycles=index.cycles,
            )

        # Every anchor ran, so ``claimed`` is the union of all full dependency sets
        in_anchor_groups: set[str] = set()
        for record in records:
            in_anchor_groups.update(self.database.entities_in_group(record.group))
        orphans = tuple(sorted(in_anchor_groups - claimed))

        result = OwnershipClassification(
            anchors=tuple(records),
            orphans=orphans,
            catch_all_group=self.config.catch_all_group,
            complete=True,
            cycles=index.cycles,
        )
        tracker.complete()
        logger.info(
            f"Classified {len(claimed)} dependencies across {len(records)} anchors: "
            f"{result.total_misowned} mis-owned, {len(orphans)} orphaned"
        )
        return result

    def _is_misowned(self, entity_id: str, group: str) -> bool:
        current = self.database.current_group(entity_id)
        if current == group:
            return False
        if current is None:
            return self.config.include_ungrouped
        return True
