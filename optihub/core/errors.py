"""
Error types for OptiHub.

Only programmer-contract violations (``CacheMissError``) are raised during
normal analysis. The other types describe per-item failures; they are
collected into aggregate results and logged rather than propagated.
"""

from __future__ import annotations

from typing import Sequence


# ============================================================================
# Exceptions
# ============================================================================


class OptiHubError(Exception):
    """Base exception for OptiHub errors."""
    pass


class CacheMissError(OptiHubError, KeyError):
    """A cache key was read without being valid (absent or expired)."""

    def __init__(self, key: str):
        super().__init__(f"Cache key '{key}' is missing or expired. Call is_valid() or try_get() first!")
        self.key = key

    def __str__(self) -> str:
        return self.args[0]


class DependencyCycleDetected(OptiHubError):
    """A dependency walk reached an entity already on the current path."""

    def __init__(self, path: Sequence[str]):
        self.path = tuple(path)
        super().__init__("Dependency cycle: " + " -> ".join(self.path))

    @property
    def entity_id(self) -> str:
        """The entity that closes the cycle."""
        return self.path[-1]


class ContentReadFailure(OptiHubError):
    """Content for a single entity could not be loaded for comparison."""

    def __init__(self, entity_id: str, reason: str):
        super().__init__(f"Could not read content of '{entity_id}': {reason}")
        self.entity_id = entity_id
        self.reason = reason


class PartialApplyFailure(OptiHubError):
    """One or more writes of an apply phase failed. Successful writes are kept."""

    def __init__(self, operation: str, failed_ids: Sequence[str], total: int):
        self.operation = operation
        self.failed_ids = tuple(failed_ids)
        self.total = total
        super().__init__(
            f"{operation} completed with {len(self.failed_ids)} failure(s) out of {total} item(s)"
        )
