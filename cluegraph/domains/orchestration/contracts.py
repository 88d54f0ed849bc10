"""
Orchestration Contracts - Caller surface of the solve pipeline.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import PipelineState, SolveReport


@runtime_checkable
class ProgressListener(Protocol):
    """Receives progress and results from a running solve."""

    def on_progress(self, phase: PipelineState, percent: int) -> None:
        """
        Report progress within a phase.

        Args:
            phase: Current pipeline state
            percent: Completion of that phase, 0-100
        """
        ...

    def on_result(self, report: SolveReport) -> None:
        """Deliver the final report."""
        ...

    def on_ready(self) -> None:
        """The pipeline can accept another clue."""
        ...


class NullProgressListener:
    """Listener that ignores every notification."""

    def on_progress(self, phase: PipelineState, percent: int) -> None:
        pass

    def on_result(self, report: SolveReport) -> None:
        pass

    def on_ready(self) -> None:
        pass
