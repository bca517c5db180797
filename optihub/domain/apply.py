"""
Shared loop for bulk corrective writes.

Every apply phase tries each planned write, records the outcome per item and
keeps going on failure. Nothing is rolled back: the returned ApplyReport is
the manifest of what changed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from optihub.core.models.results import ApplyItemResult, ApplyReport
from optihub.core.progress import CancellationToken, ProgressCallback, ProgressTracker
from optihub.utils.logging import log_error

logger = logging.getLogger(__name__)

# (entity_id, target) -> success
Write = Callable[[str, str], bool]


def run_apply(
    operation: str,
    action: str,
    plan: Sequence[tuple[str, str]],
    write: Write,
    token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyReport:
    """Execute ``write`` for each ``(entity_id, target)`` in ``plan``.

    A write that returns False or raises counts as a failure for that item.
    Cancellation is checked before each item; items not reached are left
    out of the report.
    """
    tracker = ProgressTracker(operation, len(plan), progress, token)
    items: list[ApplyItemResult] = []

    for entity_id, target in plan:
        if tracker.should_stop():
            break
        error: Optional[str] = None
        try:
            success = bool(write(entity_id, target))
            if not success:
                error = "host rejected the write"
        except Exception as e:
            success = False
            error = str(e) or type(e).__name__
            log_error(logger, f"{operation}: {action}", e, {"entity_id": entity_id, "target": target})

        items.append(ApplyItemResult(
            entity_id=entity_id,
            action=action,
            target=target,
            success=success,
            error=error,
        ))
        tracker.increment(entity_id)

    report = ApplyReport(operation=operation, items=tuple(items), cancelled=tracker.stopped)
    tracker.complete()
    if report.failed:
        logger.warning(report.summary())
    else:
        logger.info(report.summary())
    return report
