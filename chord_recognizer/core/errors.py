"""Error taxonomy for Chord Recognizer.

Caller contract violations derive from ValueError so they can be caught
generically; model failures share ModelLoadError so the pipeline can
degrade to the heuristic path with a single except clause.
"""


class ChordRecognizerError(Exception):
    """Base class for all chord recognizer errors."""


class InvalidWindowSize(ChordRecognizerError, ValueError):
    """Analysis window length is not a supported power of two."""

    def __init__(self, size: int, min_size: int, max_size: int):
        self.size = size
        self.min_size = min_size
        self.max_size = max_size
        super().__init__(
            f"Window size {size} is not supported: expected a power of two "
            f"between {min_size} and {max_size}"
        )


class ChordParseError(ChordRecognizerError, ValueError):
    """Chord notation string could not be parsed."""


class EmptyCatalog(ChordRecognizerError):
    """Chord catalog generation produced no templates."""


class ModelLoadError(ChordRecognizerError):
    """Model artifact is missing, truncated or corrupt."""


class ModelCatalogMismatch(ModelLoadError):
    """Model artifact was trained against a different chord catalog."""

    def __init__(self, message: str, expected_size: int = 0, actual_size: int = 0):
        self.expected_size = expected_size
        self.actual_size = actual_size
        super().__init__(message)


class ModelUnavailableError(ChordRecognizerError):
    """Scoring was requested from an inference adapter with no model."""
