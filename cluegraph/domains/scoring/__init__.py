"""
Scoring Domain - Confidence of validated solutions.
"""

from .contracts import Scorer
from .scorer import SolutionScorer

__all__ = [
    "Scorer",
    "SolutionScorer",
]
