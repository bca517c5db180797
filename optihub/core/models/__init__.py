"""
Core Models - Entities and analysis results.
"""

from optihub.core.models.entity import Entity, EntityKind
from optihub.core.models.results import (
    AnchorOwnership,
    ApplyItemResult,
    ApplyReport,
    AtlasPlacement,
    DuplicateGroup,
    DuplicateScanResult,
    OwnershipClassification,
)

__all__ = [
    "Entity",
    "EntityKind",
    "AnchorOwnership",
    "OwnershipClassification",
    "AtlasPlacement",
    "DuplicateGroup",
    "DuplicateScanResult",
    "ApplyItemResult",
    "ApplyReport",
]
