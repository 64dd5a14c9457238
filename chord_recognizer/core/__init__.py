"""Core types and constants for Chord Recognizer."""

from .pitch import PitchClass, Note, Interval
from .constants import (
    PITCH_NAMES,
    A4_FREQUENCY,
    DEFAULT_SR,
    DEFAULT_WINDOW_SIZE,
)
from .errors import (
    ChordRecognizerError,
    InvalidWindowSize,
    ChordParseError,
    EmptyCatalog,
    ModelLoadError,
    ModelCatalogMismatch,
    ModelUnavailableError,
)

__all__ = [
    "PitchClass",
    "Note",
    "Interval",
    "PITCH_NAMES",
    "A4_FREQUENCY",
    "DEFAULT_SR",
    "DEFAULT_WINDOW_SIZE",
    "ChordRecognizerError",
    "InvalidWindowSize",
    "ChordParseError",
    "EmptyCatalog",
    "ModelLoadError",
    "ModelCatalogMismatch",
    "ModelUnavailableError",
]
