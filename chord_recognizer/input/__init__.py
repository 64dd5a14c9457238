"""Input layer - Audio loading and analysis window framing."""

from .window import AnalysisWindow, iter_windows, pad_to_power_of_two
from .loader import AudioLoader

__all__ = [
    "AnalysisWindow",
    "iter_windows",
    "pad_to_power_of_two",
    "AudioLoader",
]
