"""
CLI Interface - Command-line tools for ClueGraph.

Provides commands for:
- Solving clues
- Looking up learned solutions
- Knowledge base statistics
"""

from .main import app, main

__all__ = ["app", "main"]
