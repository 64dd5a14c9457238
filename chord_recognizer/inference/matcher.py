"""Heuristic chord matching - template similarity scoring.

Scores every catalog template against an observed pitch-class profile
using cosine similarity, which is scale-invariant and bounded in [0, 1]
for non-negative profiles, so chords with more notes are not favoured.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..analysis.profile import PitchClassProfile
from ..analysis.spectrum import Spectrum
from .chords import ChordCatalog, ChordTemplate

# Scores closer than this are treated as tied
SCORE_DECIMALS = 9


@dataclass(frozen=True)
class Candidate:
    """A chord template with its score (similarity, probability or confidence)."""

    template: ChordTemplate
    score: float

    @property
    def name(self) -> str:
        return self.template.name

    def as_tuple(self):
        return (self.template.name, self.score)


def candidate_sort_key(template: ChordTemplate, score: float):
    """Descending score, then fewer notes, then earlier root, then catalog order."""
    return (-round(float(score), SCORE_DECIMALS), template.size, template.root.value, template.index)


def rank_scores(
    catalog: ChordCatalog,
    scores: np.ndarray,
    top_k: Optional[int] = None,
) -> List[Candidate]:
    """
    Turn a per-template score vector into ranked candidates.

    Args:
        catalog: Catalog the scores are indexed by
        scores: One score per template, in catalog order
        top_k: Keep only the best k candidates (None keeps all)
    """
    if len(scores) != len(catalog):
        raise ValueError(f"Expected {len(catalog)} scores, got {len(scores)}")

    order = sorted(range(len(catalog)), key=lambda i: candidate_sort_key(catalog[i], scores[i]))
    if top_k is not None:
        order = order[:top_k]
    return [Candidate(catalog[i], float(scores[i])) for i in order]


class ChordScorer(ABC):
    """Strategy interface: score a profile against every catalog template."""

    catalog: ChordCatalog

    @property
    def available(self) -> bool:
        """Whether this scorer can currently produce scores."""
        return True

    @abstractmethod
    def score(
        self,
        profile: PitchClassProfile,
        spectrum: Optional[Spectrum] = None,
    ) -> np.ndarray:
        """
        Score a profile.

        Args:
            profile: Observed pitch-class profile
            spectrum: Magnitude spectrum of the same window, for scorers
                that need richer features

        Returns:
            Array of scores indexed by catalog order
        """
        pass

    def rank(
        self,
        profile: PitchClassProfile,
        spectrum: Optional[Spectrum] = None,
        top_k: Optional[int] = None,
    ) -> List[Candidate]:
        """Ranked candidates for a profile; empty when the profile has no energy."""
        if profile.is_empty:
            return []
        return rank_scores(self.catalog, self.score(profile, spectrum), top_k)


class HeuristicMatcher(ChordScorer):
    """Deterministic cosine-similarity matcher. No training, no history."""

    def __init__(self, catalog: ChordCatalog):
        self.catalog = catalog

    def score(
        self,
        profile: PitchClassProfile,
        spectrum: Optional[Spectrum] = None,
    ) -> np.ndarray:
        """Cosine similarity between the profile and each template's ideal profile."""
        norm = np.linalg.norm(profile.bins)
        if norm == 0:
            return np.zeros(len(self.catalog))
        scores = self.catalog.template_matrix @ (profile.bins / norm)
        return np.clip(scores, 0.0, 1.0)

    def best(self, profile: PitchClassProfile) -> Optional[Candidate]:
        """Top candidate, or None for an empty profile."""
        ranked = self.rank(profile, top_k=1)
        return ranked[0] if ranked else None
