"""
Extraction Domain - Candidate answers from resource neighbourhoods.

This domain handles:
- Loading the domain ontology and its OWL-RL closure
- Binding fetched subgraphs to the ontology
- Turning relational triples into raw candidates
"""

from .contracts import Extractor
from .extractor import CandidateExtractor
from .ontology import DomainOntology, SubsumptionReasoner

__all__ = [
    # Contracts
    "Extractor",
    # Implementations
    "CandidateExtractor",
    "DomainOntology",
    "SubsumptionReasoner",
]
