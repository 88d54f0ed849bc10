"""
Orchestration Domain - Clue solving state machine.

This domain handles:
- Phase sequencing and timeouts
- Ranking and report formatting
- Progress notification of the caller
"""

from .contracts import NullProgressListener, ProgressListener
from .models import (
    TERMINAL_STATES,
    PipelineState,
    RankedSolution,
    SolveOutcome,
    SolveReport,
)
from .pipeline import SolvePipeline, rank_solutions

__all__ = [
    # Contracts
    "ProgressListener",
    "NullProgressListener",
    # Models
    "PipelineState",
    "TERMINAL_STATES",
    "RankedSolution",
    "SolveReport",
    "SolveOutcome",
    # Implementations
    "SolvePipeline",
    "rank_solutions",
]
