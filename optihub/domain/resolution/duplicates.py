"""
ContentEqualityDetector - finds value-equal content under distinct identities.

Candidates are first bucketed by an exact metadata signature (for audio:
sample count, channel count, frequency), so only plausible pairs have their
content loaded and compared. Two items are equal when their sample arrays
have the same length and no sample differs by more than ``epsilon``.
Equal pairs are merged with a union-find into equivalence classes; the
first member in pool order is kept, the rest are redundant.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Iterator, Optional, Sequence

import numpy as np
from networkx.utils import UnionFind

from optihub.app.config import DuplicateConfig
from optihub.core.errors import ContentReadFailure
from optihub.core.models.entity import Entity
from optihub.core.models.results import (
    DuplicateGroup,
    DuplicateScanResult,
    OversizedBucket,
    ReadFailureRecord,
)
from optihub.core.progress import CancellationToken, ProgressCallback, ProgressTracker
from optihub.infrastructure.content.database import ContentDatabase

logger = logging.getLogger(__name__)


def samples_equal(a: np.ndarray, b: np.ndarray, epsilon: float) -> bool:
    """True when both arrays have the same shape and differ by at most ``epsilon`` everywhere."""
    if a.shape != b.shape:
        return False
    return bool(np.all(np.abs(a - b) <= epsilon))


class ContentEqualityDetector:
    """Duplicate detection over a pool of entities of one kind.

    Usage:
        detector = ContentEqualityDetector(db, DuplicateConfig())
        scan = detector.find_duplicates(db.find_entities([EntityKind.AUDIO]))
        for group in scan.groups:
            print(group.keeper, "<-", group.removable)
    """

    def __init__(self, database: ContentDatabase, config: Optional[DuplicateConfig] = None):
        self.database = database
        self.config = config or DuplicateConfig()

    def signature(self, entity: Entity) -> Optional[tuple]:
        """Bucket key ``(kind, *match_fields)``, or None when any matched field is missing."""
        values = tuple(entity.get_meta(name) for name in self.config.match_fields)
        if any(v is None for v in values):
            return None
        return (entity.kind, *values)

    def find_duplicates(
        self,
        pool: Sequence[Entity],
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> DuplicateScanResult:
        """Group content-identical entities of ``pool``.

        Args:
            pool: Candidate entities; their order decides keepers
            token: Cancellation token, checked before each content load and
                each pairwise comparison
            progress: Host progress callback, one step per load and per comparison

        Returns:
            Scan result; when cancelled, groups cover the pairs compared so far
        """
        position: dict[str, int] = {}
        entities: dict[str, Entity] = {}
        for entity in pool:
            if entity.id not in position:
                position[entity.id] = len(position)
                entities[entity.id] = entity

        buckets: dict[tuple, list[str]] = {}
        for entity_id, entity in entities.items():
            sig = self.signature(entity)
            if sig is not None:
                buckets.setdefault(sig, []).append(entity_id)
        candidates = {sig: members for sig, members in buckets.items() if len(members) >= 2}

        # Pair count is an upper bound until read failures are known
        loads = sum(len(members) for members in candidates.values())
        tracker = ProgressTracker(
            "Duplicate scan",
            loads + sum(len(m) * (len(m) - 1) // 2 for m in candidates.values()),
            progress,
            token,
        )

        read_failures: list[ReadFailureRecord] = []
        oversized: list[OversizedBucket] = []
        loaded: list[list[tuple[str, np.ndarray]]] = []

        for sig, members in candidates.items():
            if tracker.should_stop():
                break
            if len(members) > self.config.max_bucket_size:
                oversized.append(OversizedBucket(signature=sig, size=len(members)))
                logger.warning(
                    f"Bucket {sig} holds {len(members)} candidates "
                    f"(ceiling {self.config.max_bucket_size}); comparing all pairs anyway"
                )

            contents = []
            for entity_id in members:
                if tracker.should_stop():
                    break
                try:
                    contents.append((entity_id, np.asarray(self.database.load_samples(entity_id), dtype=np.float64)))
                except ContentReadFailure as e:
                    read_failures.append(ReadFailureRecord(entity_id=entity_id, reason=e.reason))
                    logger.warning(str(e))
                except Exception as e:
                    read_failures.append(ReadFailureRecord(entity_id=entity_id, reason=str(e)))
                    logger.warning(f"Could not read content of '{entity_id}': {e}")
                tracker.increment(entity_id)
            if len(contents) >= 2:
                loaded.append(contents)

        if not tracker.stopped:
            tracker.total = tracker.current + sum(len(c) * (len(c) - 1) // 2 for c in loaded)
        uf = UnionFind()
        comparisons = 0

        for (a_id, a), (b_id, b) in self._pairs(loaded):
            if tracker.should_stop():
                break
            if not (a_id in uf.parents and b_id in uf.parents and uf[a_id] == uf[b_id]):
                comparisons += 1
                if samples_equal(a, b, self.config.epsilon):
                    uf.union(a_id, b_id)
            tracker.increment(f"{a_id} ~ {b_id}")

        groups = []
        for members in uf.to_sets():
            if len(members) < 2:
                continue
            ordered = sorted(members, key=position.__getitem__)
            groups.append(DuplicateGroup(
                kind=entities[ordered[0]].kind,
                keeper=ordered[0],
                removable=tuple(ordered[1:]),
            ))
        groups.sort(key=lambda g: position[g.keeper])

        result = DuplicateScanResult(
            groups=tuple(groups),
            read_failures=tuple(read_failures),
            oversized_buckets=tuple(oversized),
            comparisons=comparisons,
            cancelled=tracker.stopped,
        )
        tracker.complete()
        logger.info(
            f"Duplicate scan over {len(entities)} entities: {len(groups)} groups, "
            f"{result.redundant_count} redundant, {comparisons} comparisons"
        )
        return result

    @staticmethod
    def _pairs(loaded: list[list[tuple[str, np.ndarray]]]) -> Iterator[tuple[tuple[str, np.ndarray], tuple[str, np.ndarray]]]:
        for contents in loaded:
            yield from combinations(contents, 2)
