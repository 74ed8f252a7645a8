"""
AI narrative analysis for a symbol and its current quote.
"""

from analysis.analyst import MOCK_ANALYSIS, Analyst, MockAnalyst, build_analyst

__all__ = ["Analyst", "MOCK_ANALYSIS", "MockAnalyst", "build_analyst"]
