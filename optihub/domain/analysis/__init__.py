"""
Analysis - The cached analysis facade.
"""

from optihub.domain.analysis.facade import AnalysisFacade

__all__ = ["AnalysisFacade"]
