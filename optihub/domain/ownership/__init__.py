"""
Ownership - Anchor grouping and atlas placement.
"""

from optihub.domain.ownership.atlas import find_misplaced_textures, move_misplaced_textures
from optihub.domain.ownership.classifier import OwnershipClassifier
from optihub.domain.ownership.regroup import plan_regroup, regroup

__all__ = [
    "OwnershipClassifier",
    "plan_regroup",
    "regroup",
    "find_misplaced_textures",
    "move_misplaced_textures",
]
