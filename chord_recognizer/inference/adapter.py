"""Inference adapter - the learned scoring path behind the ChordScorer contract.

Wraps a frozen ModelArtifact and returns a probability distribution over
the chord catalog. The artifact's output ordering must match the live
catalog exactly; this is checked once, at construction.
"""

import logging
import warnings
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..analysis.profile import PitchClassProfile
from ..analysis.spectrum import Spectrum
from ..core.errors import ModelCatalogMismatch, ModelLoadError, ModelUnavailableError
from .chords import ChordCatalog
from .matcher import ChordScorer
from .model import ModelArtifact, extract_features

logger = logging.getLogger(__name__)


class InferenceAdapter(ChordScorer):
    """Learned chord scorer.

    An adapter constructed without an artifact is *unavailable*: it keeps
    the reason and refuses to score, and the decision combiner falls back
    to the heuristic path.
    """

    def __init__(
        self,
        artifact: Optional[ModelArtifact],
        catalog: ChordCatalog,
        reason: Optional[str] = None,
    ):
        """
        Initialize InferenceAdapter.

        Args:
            artifact: Loaded model artifact, or None for an unavailable adapter
            catalog: Live chord catalog the outputs are indexed by
            reason: Why no artifact is available (informational)

        Raises:
            ModelCatalogMismatch: If the artifact was trained on a different catalog
        """
        self.catalog = catalog
        self.artifact = artifact
        self.reason = reason

        if artifact is None:
            if self.reason is None:
                self.reason = "no model artifact loaded"
            return

        if artifact.catalog_size != len(catalog):
            raise ModelCatalogMismatch(
                f"Model was trained on a catalog of {artifact.catalog_size} chords, "
                f"live catalog has {len(catalog)}",
                expected_size=len(catalog),
                actual_size=artifact.catalog_size,
            )
        if artifact.catalog_checksum != catalog.checksum:
            raise ModelCatalogMismatch(
                "Model catalog ordering does not match the live catalog",
                expected_size=len(catalog),
                actual_size=artifact.catalog_size,
            )

    @classmethod
    def unavailable(cls, catalog: ChordCatalog, reason: str) -> "InferenceAdapter":
        return cls(None, catalog, reason=reason)

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        catalog: ChordCatalog,
    ) -> "InferenceAdapter":
        """
        Load an artifact, degrading to an unavailable adapter on failure.

        Load and catalog-mismatch failures are not retried; they are
        reported with a warning and the adapter stays unavailable.
        """
        try:
            artifact = ModelArtifact.load(path)
            adapter = cls(artifact, catalog)
        except ModelLoadError as e:
            message = f"Learned model unavailable, using heuristic matching only: {e}"
            logger.warning(message)
            warnings.warn(message)
            return cls.unavailable(catalog, str(e))

        logger.info(
            "Loaded model artifact %s (feature version %d, %d layers)",
            path,
            artifact.feature_version,
            artifact.n_layers,
        )
        return adapter

    @property
    def available(self) -> bool:
        return self.artifact is not None

    @property
    def feature_version(self) -> Optional[int]:
        return self.artifact.feature_version if self.artifact else None

    def score(
        self,
        profile: PitchClassProfile,
        spectrum: Optional[Spectrum] = None,
    ) -> np.ndarray:
        """
        Probability per catalog template.

        Raises:
            ModelUnavailableError: If no artifact is loaded
        """
        if self.artifact is None:
            raise ModelUnavailableError(self.reason)
        features = extract_features(profile, spectrum, self.artifact.feature_version)
        return self.artifact.forward(features)
