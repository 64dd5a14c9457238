"""Analysis layer - Low-level signal analysis.

This layer turns one analysis window into a pitch-class summary:
- Spectral analysis (windowed FFT magnitude spectrum)
- Peak extraction (noise floor, separation, sub-bin refinement)
- Pitch-class profile building (octave folding, overtone folding)
"""

from .spectrum import SpectralAnalyzer, Spectrum
from .peaks import PeakExtractor, PeakConfig, Peak, detect_notes
from .profile import ProfileBuilder, ProfileConfig, PitchClassProfile

__all__ = [
    "SpectralAnalyzer",
    "Spectrum",
    "PeakExtractor",
    "PeakConfig",
    "Peak",
    "detect_notes",
    "ProfileBuilder",
    "ProfileConfig",
    "PitchClassProfile",
]
