"""Peak extraction - locally dominant frequency peaks above a noise floor."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np
from scipy.signal import find_peaks

from ..core.constants import (
    A4_FREQUENCY,
    A4_MIDI,
    DEFAULT_MAX_PEAKS,
    DEFAULT_MIN_SEPARATION_HZ,
    DEFAULT_NOISE_FLOOR,
)
from ..core.pitch import Note
from .spectrum import Spectrum


@dataclass(frozen=True)
class Peak:
    """A spectral peak with sub-bin frequency estimate."""

    frequency: float  # Hz
    magnitude: float

    @property
    def midi(self) -> float:
        """Fractional MIDI pitch of the peak."""
        return A4_MIDI + 12 * np.log2(self.frequency / A4_FREQUENCY)

    def note(self, a4: float = A4_FREQUENCY) -> Note:
        """Nearest note to the peak frequency."""
        return Note.from_frequency(self.frequency, a4)

    def cents_offset(self, a4: float = A4_FREQUENCY) -> float:
        """Deviation from the nearest equal-tempered note in cents."""
        semitones = A4_MIDI + 12 * np.log2(self.frequency / a4)
        return float(100 * (semitones - round(semitones)))


@dataclass
class PeakConfig:
    """Configuration for peak extraction.

    Attributes:
        noise_floor: Minimum peak height as a fraction of the spectrum maximum (default: 0.1)
        min_separation_hz: Peaks closer than this are merged, keeping the taller (default: 10.0)
        max_peaks: Maximum number of peaks returned (default: 12)
        min_frequency: Peaks below this frequency in Hz are dropped (default: 0.0)
        max_frequency: Peaks above this frequency in Hz are dropped (default: no limit)
    """

    noise_floor: float = DEFAULT_NOISE_FLOOR
    min_separation_hz: float = DEFAULT_MIN_SEPARATION_HZ
    max_peaks: int = DEFAULT_MAX_PEAKS
    min_frequency: float = 0.0
    max_frequency: Optional[float] = None

    def __post_init__(self):
        if not 0.0 <= self.noise_floor < 1.0:
            raise ValueError(f"noise_floor must be in [0, 1), got {self.noise_floor}")
        if self.min_separation_hz < 0:
            raise ValueError(f"min_separation_hz must be >= 0, got {self.min_separation_hz}")
        if self.max_peaks < 1:
            raise ValueError(f"max_peaks must be >= 1, got {self.max_peaks}")
        if self.min_frequency < 0:
            raise ValueError(f"min_frequency must be >= 0, got {self.min_frequency}")
        if self.max_frequency is not None and self.max_frequency <= self.min_frequency:
            raise ValueError("max_frequency must be above min_frequency")


class PeakExtractor:
    """Finds the strongest spectral peaks in a magnitude spectrum."""

    def __init__(self, config: PeakConfig = None):
        self.config = config or PeakConfig()

    def extract(self, spectrum: Spectrum) -> List[Peak]:
        """
        Extract peaks from a spectrum.

        Args:
            spectrum: Magnitude spectrum

        Returns:
            Peaks sorted by descending magnitude, at most max_peaks.
            Empty when the spectrum is silent or has no local maxima.
        """
        magnitudes = spectrum.magnitudes
        max_magnitude = spectrum.max_magnitude
        if max_magnitude <= 0:
            return []

        distance = None
        if self.config.min_separation_hz > 0:
            distance = max(1, int(np.ceil(self.config.min_separation_hz / spectrum.resolution)))

        indices, _ = find_peaks(
            magnitudes,
            height=max_magnitude * self.config.noise_floor,
            distance=distance,
        )

        peaks = [self._refine(magnitudes, int(k), spectrum.resolution) for k in indices]
        peaks = [p for p in peaks if self._in_band(p.frequency)]
        peaks.sort(key=lambda p: (-p.magnitude, p.frequency))
        return peaks[: self.config.max_peaks]

    def _in_band(self, freq: float) -> bool:
        cfg = self.config
        if freq < cfg.min_frequency:
            return False
        return cfg.max_frequency is None or freq <= cfg.max_frequency

    @staticmethod
    def _refine(magnitudes: np.ndarray, k: int, resolution: float) -> Peak:
        """Parabolic interpolation across the peak bin and its neighbours."""
        left, center, right = magnitudes[k - 1], magnitudes[k], magnitudes[k + 1]

        # Quadratic fit on log magnitude is closer to the window's main lobe shape
        use_log = left > 0 and right > 0
        if use_log:
            left, center, right = np.log(left), np.log(center), np.log(right)

        denom = left - 2 * center + right
        offset = 0.0 if denom == 0 else 0.5 * (left - right) / denom
        offset = float(np.clip(offset, -0.5, 0.5))

        height = center - 0.25 * (left - right) * offset
        if use_log:
            height = np.exp(height)

        return Peak(
            frequency=(k + offset) * resolution,
            magnitude=float(height),
        )


def detect_notes(peaks: Iterable[Peak], a4: float = A4_FREQUENCY) -> List[Note]:
    """Distinct notes (octave-aware) the peaks correspond to, lowest first."""
    return sorted({peak.note(a4) for peak in peaks if peak.frequency > 0})
