"""Shared fixtures: synthetic audio, catalog and model artifacts."""

from typing import List, Optional

import numpy as np
import pytest

from chord_recognizer.inference.chords import ChordCatalog, default_catalog
from chord_recognizer.inference.model import FEATURE_PROFILE, FEATURE_SIZES, ModelArtifact
from chord_recognizer.input.window import AnalysisWindow

C4, E4, G4 = 261.63, 329.63, 392.00


def generate_sine_wave(freq: float, n_samples: int, sr: int = 44100, amplitude: float = 1.0) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.arange(n_samples) / sr
    return amplitude * np.sin(2 * np.pi * freq * t)


def generate_chord(frequencies: List[float], n_samples: int, sr: int = 44100) -> np.ndarray:
    """Sum equal-amplitude sines, scaled to avoid clipping."""
    voices = [generate_sine_wave(f, n_samples, sr) for f in frequencies]
    return np.sum(voices, axis=0) / len(voices)


def make_artifact(
    catalog: ChordCatalog,
    scale: float = 50.0,
    feature_version: int = FEATURE_PROFILE,
    hidden: Optional[int] = None,
) -> ModelArtifact:
    """
    Build a model whose logits are scaled template similarities.

    With one layer the model ranks like the heuristic matcher; a hidden
    layer of at least the input size is an identity block.
    """
    n_in = FEATURE_SIZES[feature_version]
    templates = np.zeros((n_in, len(catalog)))
    templates[:12, :] = catalog.template_matrix.T * scale

    if hidden is None:
        weights = [templates]
        biases = [np.zeros(len(catalog))]
    else:
        # Features are non-negative, so an identity layer passes ReLU unchanged
        assert hidden >= n_in
        second = np.zeros((hidden, len(catalog)))
        second[:n_in, :] = templates
        weights = [np.eye(n_in, hidden), second]
        biases = [np.zeros(hidden), np.zeros(len(catalog))]

    return ModelArtifact.for_catalog(catalog, weights, biases, feature_version=feature_version)


@pytest.fixture
def sample_rate():
    return 44100


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def c_major_window(sample_rate):
    """C4 + E4 + G4 sines, 8192 samples at 44.1 kHz."""
    return AnalysisWindow(generate_chord([C4, E4, G4], 8192, sample_rate), sample_rate)


@pytest.fixture
def silent_window(sample_rate):
    return AnalysisWindow(np.zeros(8192), sample_rate)


@pytest.fixture
def artifact(catalog):
    return make_artifact(catalog)


@pytest.fixture
def artifact_path(tmp_path, artifact):
    return artifact.save(tmp_path / "model.npz")
