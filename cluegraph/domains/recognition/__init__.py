"""
Recognition Domain - Entity recognition against the remote knowledge graph.
"""

from .contracts import Recognizer
from .recognizer import EntityRecognizer
from .stopwords import STOP_WORDS

__all__ = [
    # Contracts
    "Recognizer",
    # Implementations
    "EntityRecognizer",
    "STOP_WORDS",
]
