"""Spectral analysis - windowed magnitude spectrum of one analysis window."""

from dataclasses import dataclass

import librosa
import numpy as np
from scipy.signal import get_window

from ..core.constants import DEFAULT_WINDOW_FUNCTION, MAX_WINDOW_SIZE, MIN_WINDOW_SIZE
from ..core.errors import InvalidWindowSize
from ..input.window import AnalysisWindow


@dataclass(frozen=True)
class Spectrum:
    """Read-only magnitude spectrum covering [0, sample_rate / 2)."""

    magnitudes: np.ndarray  # size // 2 bins
    sample_rate: int
    size: int  # FFT length (window size)

    @property
    def resolution(self) -> float:
        """Frequency resolution in Hz per bin."""
        return self.sample_rate / self.size

    @property
    def n_bins(self) -> int:
        return len(self.magnitudes)

    @property
    def frequencies(self) -> np.ndarray:
        """Center frequency of each bin in Hz."""
        return librosa.fft_frequencies(sr=self.sample_rate, n_fft=self.size)[: self.n_bins]

    @property
    def max_magnitude(self) -> float:
        return float(self.magnitudes.max()) if self.n_bins else 0.0

    def bin_to_frequency(self, bin_index: float) -> float:
        return float(bin_index) * self.resolution

    def frequency_to_bin(self, freq: float) -> int:
        """Nearest bin index for a frequency."""
        return int(round(freq / self.resolution))


class SpectralAnalyzer:
    """Converts analysis windows into magnitude spectra.

    The window function reduces spectral leakage; magnitudes are scaled so
    that a sine of amplitude A peaks at roughly A regardless of window size.
    """

    def __init__(
        self,
        window: str = DEFAULT_WINDOW_FUNCTION,
        min_size: int = MIN_WINDOW_SIZE,
        max_size: int = MAX_WINDOW_SIZE,
    ):
        """
        Initialize SpectralAnalyzer.

        Args:
            window: Window function name understood by scipy.signal.get_window
            min_size: Smallest supported window length
            max_size: Largest supported window length
        """
        # Fail early on unknown window names
        get_window(window, 8)
        self.window = window
        self.min_size = min_size
        self.max_size = max_size

    def is_supported(self, size: int) -> bool:
        """Check whether a window length is a supported power of two."""
        return (
            self.min_size <= size <= self.max_size
            and (size & (size - 1)) == 0
        )

    def analyze(self, window: AnalysisWindow) -> Spectrum:
        """
        Compute the magnitude spectrum of one window.

        Args:
            window: Analysis window with a power-of-two number of samples

        Returns:
            Spectrum with size // 2 magnitude bins

        Raises:
            InvalidWindowSize: If the window length is not supported
        """
        n = window.size
        if not self.is_supported(n):
            raise InvalidWindowSize(n, self.min_size, self.max_size)

        taper = get_window(self.window, n, fftbins=True)
        spectrum = np.fft.rfft(window.samples * taper)

        magnitudes = np.abs(spectrum[: n // 2]) * (2.0 / taper.sum())
        magnitudes.setflags(write=False)

        return Spectrum(
            magnitudes=magnitudes,
            sample_rate=window.sample_rate,
            size=n,
        )
