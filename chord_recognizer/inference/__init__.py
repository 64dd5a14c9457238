"""Inference layer - Chord understanding from pitch-class profiles.

This layer names the chord in a window:
- Chord catalog (qualities, templates, notation)
- Heuristic template matching (cosine similarity)
- Learned scoring from a frozen model artifact
- Decision combining (blend, tie-break, fallback)

Pipeline: Profile → [Heuristic, Learned] → Decision
"""

from .chords import (
    ChordQuality,
    ChordTemplate,
    ChordCatalog,
    QUALITIES,
    default_catalog,
    parse_chord,
    format_chord,
)
from .matcher import ChordScorer, HeuristicMatcher, Candidate, rank_scores
from .model import ModelArtifact, extract_features
from .adapter import InferenceAdapter
from .combiner import DecisionCombiner, CombinerConfig, Decision

__all__ = [
    # Catalog
    "ChordQuality",
    "ChordTemplate",
    "ChordCatalog",
    "QUALITIES",
    "default_catalog",
    "parse_chord",
    "format_chord",
    # Scoring
    "ChordScorer",
    "HeuristicMatcher",
    "Candidate",
    "rank_scores",
    # Learned path
    "ModelArtifact",
    "extract_features",
    "InferenceAdapter",
    # Decision
    "DecisionCombiner",
    "CombinerConfig",
    "Decision",
]
