"""
Cycle-safe dependency traversal.

Computes the transitive dependencies of one entity from a direct-edge
function using an explicit stack and a visited set, so traversal terminates
on any graph. An edge leading back to an entity on the current path is a
cycle: it is recorded, logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from optihub.core.errors import DependencyCycleDetected

logger = logging.getLogger(__name__)

DirectDependencies = Callable[[str], Iterable[str]]


@dataclass(frozen=True)
class Walk:
    """Result of walking one entity's dependencies.

    Attributes:
        root: The entity the walk started from
        dependencies: Reachable entities in depth-first preorder, root excluded
        cycles: Cycles met along the way
    """

    root: str
    dependencies: tuple[str, ...] = ()
    cycles: tuple[DependencyCycleDetected, ...] = field(default=())

    @property
    def root_in_cycle(self) -> bool:
        """True when some path leads back to the root."""
        return any(c.entity_id == self.root for c in self.cycles)


def walk_dependencies(root: str, direct: DirectDependencies) -> Walk:
    """Walk every entity reachable from ``root``.

    Args:
        root: Starting entity ID
        direct: Returns the direct dependencies of an entity ID

    Returns:
        Walk with dependencies in preorder and any cycles detected
    """
    visited: set[str] = {root}
    order: list[str] = []
    cycles: list[DependencyCycleDetected] = []

    path: list[str] = [root]
    on_path: set[str] = {root}
    stack: list[Iterator[str]] = [iter(direct(root))]

    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            on_path.discard(path.pop())
            continue

        if child in on_path:
            cycle = DependencyCycleDetected([*path[path.index(child):], child])
            cycles.append(cycle)
            logger.warning(f"{cycle} (edge {path[-1]} -> {child} skipped)")
            continue
        if child in visited:
            continue

        visited.add(child)
        order.append(child)
        path.append(child)
        on_path.add(child)
        stack.append(iter(direct(child)))

    return Walk(root=root, dependencies=tuple(order), cycles=tuple(cycles))
