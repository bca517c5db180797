"""
Content Database - Host contract and the in-memory snapshot implementation.
"""

from optihub.infrastructure.content.database import ContentDatabase
from optihub.infrastructure.content.memory import InMemoryContentDatabase

__all__ = [
    "ContentDatabase",
    "InMemoryContentDatabase",
]
