"""
Result Models for OptiHub analyses and apply phases.

All results are frozen: an analysis produces a new result object that fully
replaces the previous one, nothing is patched in place.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from optihub.core.errors import PartialApplyFailure
from optihub.core.models.entity import EntityKind


# ============================================================================
# Ownership Classification
# ============================================================================


class AnchorOwnership(BaseModel):
    """Entities claimed by one anchor under first-claim ordering.

    Attributes:
        anchor_id: The anchor (scene) entity ID
        group: The anchor's canonical group name
        claimed: Dependencies attributed to this anchor (not claimed earlier)
        misowned: Subset of ``claimed`` not currently in ``group``
    """

    model_config = ConfigDict(frozen=True)

    anchor_id: str
    group: str
    claimed: tuple[str, ...] = ()
    misowned: tuple[str, ...] = ()

    @property
    def correctly_owned(self) -> tuple[str, ...]:
        misowned = set(self.misowned)
        return tuple(e for e in self.claimed if e not in misowned)


class CycleRecord(BaseModel):
    """A dependency cycle met (and skipped) while walking the graph."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...]


class OwnershipClassification(BaseModel):
    """Partition of all anchor dependencies into single-owner sets.

    ``complete`` is False when the run was cancelled; in that case
    ``anchors`` holds only the anchors processed before cancellation and
    ``orphans`` is empty, since orphans need every anchor's dependencies.
    """

    model_config = ConfigDict(frozen=True)

    anchors: tuple[AnchorOwnership, ...] = ()
    orphans: tuple[str, ...] = ()
    catch_all_group: str = ""
    complete: bool = True
    cycles: tuple[CycleRecord, ...] = ()

    def owner_of(self, entity_id: str) -> Optional[str]:
        """Return the anchor that claimed ``entity_id``, if any."""
        for record in self.anchors:
            if entity_id in record.claimed:
                return record.anchor_id
        return None

    def for_anchor(self, anchor_id: str) -> Optional[AnchorOwnership]:
        for record in self.anchors:
            if record.anchor_id == anchor_id:
                return record
        return None

    @property
    def total_misowned(self) -> int:
        return sum(len(r.misowned) for r in self.anchors)

    @property
    def total_misplaced(self) -> int:
        """Mis-owned plus orphaned entities, i.e. everything a regroup would move."""
        return self.total_misowned + len(self.orphans)


class MisplacedTextures(BaseModel):
    """Textures claimed by an anchor but stored outside its atlas folder."""

    model_config = ConfigDict(frozen=True)

    anchor_id: str
    folder: str
    textures: tuple[str, ...] = ()


class AtlasPlacement(BaseModel):
    """Per-anchor atlas folder placement report."""

    model_config = ConfigDict(frozen=True)

    anchors: tuple[MisplacedTextures, ...] = ()
    complete: bool = True

    @property
    def total_misplaced(self) -> int:
        return sum(len(a.textures) for a in self.anchors)


# ============================================================================
# Duplicate Detection
# ============================================================================


class DuplicateGroup(BaseModel):
    """An equivalence class of content-identical entities.

    The keeper is the first member in input pool order; the rest are
    removable, also in pool order.
    """

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    keeper: str
    removable: tuple[str, ...] = Field(min_length=1)

    @property
    def members(self) -> tuple[str, ...]:
        return (self.keeper, *self.removable)

    def __len__(self) -> int:
        return 1 + len(self.removable)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id == self.keeper or entity_id in self.removable


class ReadFailureRecord(BaseModel):
    """Content of one entity could not be loaded; it was left out of its bucket."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    reason: str


class OversizedBucket(BaseModel):
    """A metadata bucket whose size exceeded the comparison ceiling."""

    model_config = ConfigDict(frozen=True)

    signature: tuple
    size: int


class DuplicateScanResult(BaseModel):
    """Outcome of a duplicate scan over a candidate pool."""

    model_config = ConfigDict(frozen=True)

    groups: tuple[DuplicateGroup, ...] = ()
    read_failures: tuple[ReadFailureRecord, ...] = ()
    oversized_buckets: tuple[OversizedBucket, ...] = ()
    comparisons: int = 0
    cancelled: bool = False

    @property
    def redundant_count(self) -> int:
        return sum(len(g.removable) for g in self.groups)

    def group_of(self, entity_id: str) -> Optional[DuplicateGroup]:
        for group in self.groups:
            if entity_id in group:
                return group
        return None


# ============================================================================
# Apply Phase Reports
# ============================================================================


class ApplyItemResult(BaseModel):
    """Outcome of one write in an apply phase."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    action: str
    target: str = ""
    success: bool
    error: Optional[str] = None


class ApplyReport(BaseModel):
    """Full success/failure manifest of an apply phase.

    Apply phases are not transactional: successful writes stay in place even
    when other items fail.
    """

    model_config = ConfigDict(frozen=True)

    operation: str
    items: tuple[ApplyItemResult, ...] = ()
    cancelled: bool = False

    @property
    def succeeded(self) -> tuple[ApplyItemResult, ...]:
        return tuple(i for i in self.items if i.success)

    @property
    def failed(self) -> tuple[ApplyItemResult, ...]:
        return tuple(i for i in self.items if not i.success)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.cancelled

    def summary(self) -> str:
        status = "cancelled" if self.cancelled else "completed"
        if self.failed:
            return f"{self.operation} {status} with {len(self.failed)} failures ({len(self.succeeded)} succeeded)"
        return f"{self.operation} {status}: {len(self.succeeded)} succeeded"

    def failure(self) -> Optional[PartialApplyFailure]:
        """Describe the failed items as an exception object, or None."""
        if not self.failed:
            return None
        return PartialApplyFailure(
            self.operation,
            [i.entity_id for i in self.failed],
            len(self.items),
        )

    def raise_for_failures(self) -> None:
        """Raise PartialApplyFailure if any item failed."""
        failure = self.failure()
        if failure is not None:
            raise failure
