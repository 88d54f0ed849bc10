"""
ClueGraph - Knowledge graph crossword clue solver.

Example:
    >>> from cluegraph.domains.orchestration import SolvePipeline
    >>> pipeline = SolvePipeline.from_settings()
    >>> outcome = await pipeline.solve("Capital of France [5]")
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
