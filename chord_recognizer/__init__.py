"""Chord Recognizer - Audio to Chord Name Recognition Engine.

Architecture Layers:
    1. core/       - Pitch model, constants, errors, logging
    2. input/      - Audio loading and analysis windows
    3. analysis/   - Spectrum, peaks, pitch-class profiles
    4. inference/  - Chord catalog, heuristic and learned scoring, decisions
    5. pipeline    - Per-window recognition (sequential or parallel)
    6. cli         - Command-line presentation
"""

__version__ = "0.1.0"

# Core types
from .core import PitchClass, Note, Interval

# Input layer
from .input import AudioLoader, AnalysisWindow, iter_windows

# Analysis layer
from .analysis import (
    SpectralAnalyzer,
    PeakExtractor,
    ProfileBuilder,
    PitchClassProfile,
)

# Inference layer
from .inference import (
    ChordCatalog,
    ChordTemplate,
    HeuristicMatcher,
    InferenceAdapter,
    ModelArtifact,
    DecisionCombiner,
    Decision,
    default_catalog,
    parse_chord,
)

# Pipeline
from .config import RecognizerConfig
from .pipeline import ChordRecognizer, Recognition

__all__ = [
    # Core
    "PitchClass",
    "Note",
    "Interval",
    # Input
    "AudioLoader",
    "AnalysisWindow",
    "iter_windows",
    # Analysis
    "SpectralAnalyzer",
    "PeakExtractor",
    "ProfileBuilder",
    "PitchClassProfile",
    # Inference
    "ChordCatalog",
    "ChordTemplate",
    "HeuristicMatcher",
    "InferenceAdapter",
    "ModelArtifact",
    "DecisionCombiner",
    "Decision",
    "default_catalog",
    "parse_chord",
    # Pipeline
    "RecognizerConfig",
    "ChordRecognizer",
    "Recognition",
]
