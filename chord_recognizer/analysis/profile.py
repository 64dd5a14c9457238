"""Pitch-class profile - 12-bin energy summary of one analysis window.

Spectral peaks are folded into pitch classes (octave-equivalent bins).
Each peak also contributes a decaying share of its magnitude to the pitch
classes of its first overtones, so that overtone energy produced by the
instrument's timbre is accounted for consistently across roots.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.constants import (
    A4_FREQUENCY,
    A4_MIDI,
    DEFAULT_HARMONIC_DECAY,
    DEFAULT_HARMONICS,
    DEFAULT_MAX_DEVIATION,
    NUM_PITCH_CLASSES,
)
from ..core.pitch import Note, PitchClass
from .peaks import Peak


@dataclass(frozen=True)
class PitchClassProfile:
    """Immutable 12-bin energy vector, one bin per pitch class (0 = C)."""

    bins: np.ndarray

    def __post_init__(self):
        bins = np.array(self.bins, dtype=np.float64)
        if bins.shape != (NUM_PITCH_CLASSES,):
            raise ValueError(f"Profile must have 12 bins, got shape {bins.shape}")
        if not np.all(np.isfinite(bins)):
            raise ValueError("Profile bins must be finite")
        if np.any(bins < 0):
            raise ValueError("Profile bins must be non-negative")
        bins.setflags(write=False)
        object.__setattr__(self, "bins", bins)

    @classmethod
    def empty(cls) -> "PitchClassProfile":
        return cls(np.zeros(NUM_PITCH_CLASSES))

    @classmethod
    def from_pitch_classes(
        cls,
        pitch_classes: Iterable,
        weights: Optional[Sequence[float]] = None,
        normalize: bool = True,
    ) -> "PitchClassProfile":
        """
        Build a synthetic profile with energy on the given pitch classes.

        Args:
            pitch_classes: PitchClass objects or integers 0-11
            weights: Optional energy per pitch class (default: equal energy)
            normalize: Scale bins to sum to 1
        """
        pitch_classes = list(pitch_classes)
        if weights is None:
            weights = [1.0] * len(pitch_classes)
        if len(weights) != len(pitch_classes):
            raise ValueError("weights must match pitch_classes in length")

        bins = np.zeros(NUM_PITCH_CLASSES)
        for pc, weight in zip(pitch_classes, weights):
            bins[int(pc) % NUM_PITCH_CLASSES] += weight

        profile = cls(bins)
        return profile.normalized() if normalize else profile

    @classmethod
    def from_notes(cls, notes: Iterable[Note]) -> "PitchClassProfile":
        """Profile of a symbolic note collection (one unit of energy per note)."""
        return cls.from_pitch_classes([note.pitch_class for note in notes])

    @property
    def total(self) -> float:
        return float(self.bins.sum())

    @property
    def is_empty(self) -> bool:
        """True when no energy was accumulated."""
        return self.total == 0.0

    def normalized(self) -> "PitchClassProfile":
        """Copy scaled so the bins sum to 1 (empty profiles stay empty)."""
        total = self.total
        if total == 0.0:
            return self
        return PitchClassProfile(self.bins / total)

    def dominant(self, n: int = 3) -> List[PitchClass]:
        """The n strongest pitch classes with non-zero energy, strongest first."""
        order = sorted(range(NUM_PITCH_CLASSES), key=lambda i: (-self.bins[i], i))
        return [PitchClass(i) for i in order[:n] if self.bins[i] > 0]

    def __getitem__(self, pitch_class) -> float:
        return float(self.bins[int(pitch_class)])

    def __len__(self) -> int:
        return NUM_PITCH_CLASSES


@dataclass
class ProfileConfig:
    """Configuration for pitch-class profile building.

    Attributes:
        a4_frequency: Tuning reference in Hz (default: 440.0)
        harmonic_decay: Share of a peak's magnitude folded into its k-th
            overtone's pitch class is harmonic_decay ** k (default: 0.5)
        harmonics: Overtone frequency ratios to fold (default: (2, 3))
        max_deviation: Peaks further than this many semitones from the
            nearest pitch class are discarded (default: 0.5)
    """

    a4_frequency: float = A4_FREQUENCY
    harmonic_decay: float = DEFAULT_HARMONIC_DECAY
    harmonics: Tuple[int, ...] = DEFAULT_HARMONICS
    max_deviation: float = DEFAULT_MAX_DEVIATION

    def __post_init__(self):
        self.harmonics = tuple(self.harmonics)
        if self.a4_frequency <= 0:
            raise ValueError(f"a4_frequency must be positive, got {self.a4_frequency}")
        if not 0.0 <= self.harmonic_decay <= 1.0:
            raise ValueError(f"harmonic_decay must be in [0, 1], got {self.harmonic_decay}")
        if any(h < 2 for h in self.harmonics):
            raise ValueError(f"harmonic ratios must be >= 2, got {self.harmonics}")
        if not 0.0 < self.max_deviation <= 0.5:
            raise ValueError(f"max_deviation must be in (0, 0.5], got {self.max_deviation}")

    @property
    def reference_frequency(self) -> float:
        """Frequency of C0, the pitch-class 0 reference."""
        return self.a4_frequency * 2 ** (-A4_MIDI / 12.0 + 1)


class ProfileBuilder:
    """Folds spectral peaks into a normalized pitch-class profile."""

    def __init__(self, config: ProfileConfig = None):
        self.config = config or ProfileConfig()

    def pitch_class_of(self, freq: float) -> Optional[int]:
        """
        Map a frequency to its pitch class.

        Returns:
            Pitch class 0-11, or None if the frequency is not positive or is
            too far from any equal-tempered pitch.
        """
        cfg = self.config
        if freq <= 0:
            return None

        semitones = 12 * np.log2(freq / cfg.reference_frequency)
        nearest = int(round(semitones))
        if abs(semitones - nearest) > cfg.max_deviation:
            return None
        return nearest % 12

    def build(self, peaks: Iterable[Peak]) -> PitchClassProfile:
        """
        Build the profile for one window's peaks.

        Args:
            peaks: Spectral peaks (any order)

        Returns:
            Profile whose bins sum to 1, or an all-zero profile when no
            peak could be mapped to a pitch class.
        """
        bins = np.zeros(NUM_PITCH_CLASSES)
        cfg = self.config

        for peak in peaks:
            pc = self.pitch_class_of(peak.frequency)
            if pc is None:
                continue
            bins[pc] += peak.magnitude

            for k, ratio in enumerate(cfg.harmonics, start=1):
                # Overtone pitch class is relative to the snapped fundamental
                offset = int(round(12 * np.log2(ratio)))
                bins[(pc + offset) % NUM_PITCH_CLASSES] += peak.magnitude * cfg.harmonic_decay**k

        return PitchClassProfile(bins).normalized()
