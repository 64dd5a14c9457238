"""Decision combiner - merges heuristic and learned rankings.

Both paths already score in [0, 1]: the heuristic path with cosine
similarity, the learned path with class probability. The final confidence
is a weighted blend of the two, aligned by template identity.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..core.constants import DEFAULT_HEURISTIC_WEIGHT, DEFAULT_LEARNED_WEIGHT, DEFAULT_TOP_K
from .chords import ChordCatalog
from .matcher import Candidate, candidate_sort_key, rank_scores

SOURCE_HEURISTIC = "heuristic"
SOURCE_COMBINED = "combined"


@dataclass
class CombinerConfig:
    """Configuration for the decision combiner.

    Attributes:
        heuristic_weight: Weight of the cosine-similarity score (default: 0.5)
        learned_weight: Weight of the model probability (default: 0.5)
        top_k: Number of chords kept in a decision (default: 5)
    """

    heuristic_weight: float = DEFAULT_HEURISTIC_WEIGHT
    learned_weight: float = DEFAULT_LEARNED_WEIGHT
    top_k: int = DEFAULT_TOP_K

    def __post_init__(self):
        if self.heuristic_weight < 0 or self.learned_weight < 0:
            raise ValueError("Combiner weights must be non-negative")
        if self.heuristic_weight + self.learned_weight == 0:
            raise ValueError("At least one combiner weight must be positive")
        if self.top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {self.top_k}")

    @property
    def normalized_weights(self) -> Tuple[float, float]:
        total = self.heuristic_weight + self.learned_weight
        return self.heuristic_weight / total, self.learned_weight / total


@dataclass
class Decision:
    """Final ranked answer for one window."""

    candidates: List[Candidate] = field(default_factory=list)
    source: str = SOURCE_HEURISTIC

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    @property
    def best(self) -> Optional[Candidate]:
        """Highest-confidence chord, or None when nothing was recognized."""
        return self.candidates[0] if self.candidates else None

    @property
    def runners_up(self) -> List[Candidate]:
        return self.candidates[1:]

    @property
    def confidence(self) -> float:
        return self.best.score if self.best else 0.0

    def ranked(self) -> List[Tuple[str, float]]:
        """Downstream view: (chord name, confidence) pairs, best first."""
        return [c.as_tuple() for c in self.candidates]


class DecisionCombiner:
    """Blends heuristic candidates with a learned distribution."""

    def __init__(self, catalog: ChordCatalog, config: CombinerConfig = None):
        self.catalog = catalog
        self.config = config or CombinerConfig()

    def combine(
        self,
        heuristic: List[Candidate],
        learned: Optional[np.ndarray] = None,
    ) -> Decision:
        """
        Merge the two decision paths.

        Args:
            heuristic: Heuristic candidates, best first (top-K or full ranking)
            learned: Probability per catalog template, or None when the
                learned path is unavailable

        Returns:
            Decision with at most top_k candidates. Without a learned
            distribution it is exactly the heuristic top_k.
        """
        top_k = self.config.top_k

        if learned is None:
            return Decision(list(heuristic[:top_k]), SOURCE_HEURISTIC)

        learned = np.asarray(learned, dtype=np.float64)
        if learned.shape != (len(self.catalog),):
            raise ValueError(
                f"Learned distribution has shape {learned.shape}, "
                f"expected ({len(self.catalog)},)"
            )

        w_heuristic, w_learned = self.config.normalized_weights

        heuristic_scores = {c.template.index: c.score for c in heuristic[:top_k]}
        indices = list(heuristic_scores)
        for candidate in rank_scores(self.catalog, learned, top_k):
            if candidate.template.index not in heuristic_scores:
                indices.append(candidate.template.index)

        blended = []
        for i in indices:
            confidence = w_heuristic * heuristic_scores.get(i, 0.0) + w_learned * float(learned[i])
            blended.append(Candidate(self.catalog[i], float(np.clip(confidence, 0.0, 1.0))))

        blended.sort(key=lambda c: candidate_sort_key(c.template, c.score))
        return Decision(blended[:top_k], SOURCE_COMBINED)
