"""Fragment and hybrid analysis orchestration."""

from sandscan.analysis.ops import AnalysisOps

__all__ = ["AnalysisOps"]
