"""Analysis windows - the unit of work for one recognition cycle."""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Union

import librosa
import numpy as np

SampleBuffer = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class AnalysisWindow:
    """A fixed-length slice of audio samples plus its sample rate.

    Samples are stored as a read-only float64 array so a window can be
    shared across threads without copying.
    """

    samples: np.ndarray
    sample_rate: int
    start: float = 0.0  # Position of the first sample in the source clip (seconds)

    def __post_init__(self):
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, (int, np.integer)):
            raise ValueError(f"Sample rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

        samples = np.array(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"Samples must be one-dimensional, got shape {samples.shape}")
        if not np.all(np.isfinite(samples)):
            raise ValueError("Samples contain NaN or infinite values")
        samples.setflags(write=False)

        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def size(self) -> int:
        """Number of samples."""
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Window duration in seconds."""
        return self.size / self.sample_rate

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def is_power_of_two(self) -> bool:
        return self.size > 0 and (self.size & (self.size - 1)) == 0

    @property
    def rms(self) -> float:
        """RMS energy of the window."""
        if self.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(self.samples**2)))


def iter_windows(
    samples: SampleBuffer,
    sample_rate: int,
    window_size: int,
    hop_length: Optional[int] = None,
) -> Iterator[AnalysisWindow]:
    """
    Slice a materialized buffer into consecutive analysis windows.

    Windows are produced lazily so a streaming caller only ever holds one
    window's buffers. The final partial window is zero-padded to
    ``window_size``.

    Args:
        samples: Mono audio samples
        sample_rate: Sample rate in Hz
        window_size: Samples per window
        hop_length: Samples between window starts (default: window_size)

    Yields:
        AnalysisWindow objects in time order
    """
    if window_size <= 0:
        raise ValueError(f"Window size must be positive, got {window_size}")
    hop_length = hop_length or window_size
    if hop_length <= 0:
        raise ValueError(f"Hop length must be positive, got {hop_length}")

    audio = np.asarray(samples, dtype=np.float64)
    if audio.ndim != 1:
        raise ValueError(f"Samples must be one-dimensional, got shape {audio.shape}")
    if len(audio) == 0:
        return

    # Pad so every sample lands in at least one full window
    if len(audio) <= window_size:
        n_frames = 1
    else:
        n_frames = 1 + int(np.ceil((len(audio) - window_size) / hop_length))
    padded_length = (n_frames - 1) * hop_length + window_size
    audio = librosa.util.fix_length(audio, size=padded_length)

    frames = librosa.util.frame(audio, frame_length=window_size, hop_length=hop_length, axis=0)
    for i, frame in enumerate(frames):
        yield AnalysisWindow(
            samples=frame,
            sample_rate=sample_rate,
            start=i * hop_length / sample_rate,
        )


def pad_to_power_of_two(samples: SampleBuffer) -> np.ndarray:
    """Zero-pad samples up to the next power of two length."""
    audio = np.asarray(samples, dtype=np.float64)
    if len(audio) == 0:
        return audio
    target = 1 << (len(audio) - 1).bit_length()
    return librosa.util.fix_length(audio, size=target)
