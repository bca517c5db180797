"""
Dependency graph traversal, indexing and usage analyses.
"""

from optihub.domain.graph.dependency_index import DependencyIndex
from optihub.domain.graph.traversal import Walk, walk_dependencies
from optihub.domain.graph.usage import MaterialUsage

__all__ = ["DependencyIndex", "MaterialUsage", "Walk", "walk_dependencies"]
