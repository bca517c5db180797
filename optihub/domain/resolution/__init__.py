"""
Resolution - Content-equality duplicate detection and removal.
"""

from optihub.domain.resolution.dedup_apply import delete_duplicates
from optihub.domain.resolution.duplicates import ContentEqualityDetector, samples_equal

__all__ = [
    "ContentEqualityDetector",
    "samples_equal",
    "delete_duplicates",
]
