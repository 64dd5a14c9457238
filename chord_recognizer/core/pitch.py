"""Pitch model - pitch classes, notes and intervals.

Everything above the signal layer speaks in these value types: the chord
catalog builds templates from PitchClass offsets, the profile builder bins
spectral peaks into pitch classes, and the text path parses note names.
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import List

import numpy as np

from .constants import (
    A4_FREQUENCY,
    A4_MIDI,
    FLAT_NAMES,
    NUM_PITCH_CLASSES,
    PITCH_NAMES,
)

# Natural letters and their pitch classes
LETTER_VALUES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
ACCIDENTAL_VALUES = {"#": 1, "♯": 1, "b": -1, "♭": -1}

_PITCH_RE = re.compile(r"^([A-G])([#b♯♭]*)$")
_NOTE_RE = re.compile(r"^([A-G])([#b♯♭]*)(-?\d+)$")


def _spelling_offset(letter: str, accidentals: str) -> int:
    """Semitone value of a spelled pitch, not reduced mod 12."""
    return LETTER_VALUES[letter] + sum(ACCIDENTAL_VALUES[a] for a in accidentals)


@dataclass(frozen=True, order=True)
class PitchClass:
    """One of the 12 octave-equivalence classes (0 = C)."""

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, np.integer)):
            raise TypeError(f"Pitch class must be an integer, got {self.value!r}")
        if not 0 <= self.value < NUM_PITCH_CLASSES:
            raise ValueError(f"Pitch class must be in [0, 12), got {self.value}")
        object.__setattr__(self, "value", int(self.value))

    @classmethod
    def parse(cls, name: str) -> "PitchClass":
        """Parse a spelled pitch name (e.g. 'C', 'F#', 'Db', 'Cb')."""
        match = _PITCH_RE.match(name.strip())
        if not match:
            raise ValueError(f"Invalid pitch name: {name!r}")
        letter, accidentals = match.groups()
        return cls(_spelling_offset(letter, accidentals) % NUM_PITCH_CLASSES)

    @classmethod
    def all(cls) -> List["PitchClass"]:
        """All 12 pitch classes in ascending order from C."""
        return [cls(i) for i in range(NUM_PITCH_CLASSES)]

    @property
    def name(self) -> str:
        """Canonical (sharp) spelling."""
        return PITCH_NAMES[self.value]

    def spell(self, flats: bool = False) -> str:
        """Spell the pitch class, choosing flats when the context asks for them."""
        return FLAT_NAMES[self.value] if flats else PITCH_NAMES[self.value]

    def transpose(self, semitones: int) -> "PitchClass":
        return PitchClass((self.value + semitones) % NUM_PITCH_CLASSES)

    def __add__(self, semitones: int) -> "PitchClass":
        if not isinstance(semitones, int):
            return NotImplemented
        return self.transpose(semitones)

    def __sub__(self, other):
        if isinstance(other, PitchClass):
            # Upward distance from other to self
            return (self.value - other.value) % NUM_PITCH_CLASSES
        if isinstance(other, int):
            return self.transpose(-other)
        return NotImplemented

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.name


@total_ordering
@dataclass(frozen=True, eq=True)
class Note:
    """A pitch class in a specific octave (scientific pitch notation, C4 = MIDI 60)."""

    pitch_class: PitchClass
    octave: int

    @classmethod
    def from_midi(cls, midi: int) -> "Note":
        midi = int(midi)
        return cls(PitchClass(midi % NUM_PITCH_CLASSES), midi // NUM_PITCH_CLASSES - 1)

    @classmethod
    def from_frequency(cls, freq: float, a4: float = A4_FREQUENCY) -> "Note":
        """Nearest note to a frequency in Hz."""
        if freq <= 0:
            raise ValueError(f"Frequency must be positive, got {freq}")
        return cls.from_midi(cls.freq_to_midi(freq, a4))

    @classmethod
    def parse(cls, name: str) -> "Note":
        """Parse a note name with octave (e.g. 'C4', 'Eb3', 'F#-1')."""
        match = _NOTE_RE.match(name.strip())
        if not match:
            raise ValueError(f"Invalid note name: {name!r}")
        letter, accidentals, octave = match.groups()
        midi = (int(octave) + 1) * NUM_PITCH_CLASSES + _spelling_offset(letter, accidentals)
        return cls.from_midi(midi)

    @property
    def midi(self) -> int:
        """MIDI note number (semitone distance from C-1)."""
        return (self.octave + 1) * NUM_PITCH_CLASSES + self.pitch_class.value

    @property
    def name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        return f"{self.pitch_class.name}{self.octave}"

    def frequency(self, a4: float = A4_FREQUENCY) -> float:
        return self.midi_to_freq(self.midi, a4)

    def transpose(self, semitones: int) -> "Note":
        return Note.from_midi(self.midi + semitones)

    def __lt__(self, other: "Note") -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self.midi < other.midi

    def __str__(self) -> str:
        return self.name

    @staticmethod
    def freq_to_midi(freq: float, a4: float = A4_FREQUENCY) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return int(round(A4_MIDI + 12 * np.log2(freq / a4)))

    @staticmethod
    def midi_to_freq(midi: int, a4: float = A4_FREQUENCY) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return a4 * (2 ** ((midi - A4_MIDI) / 12.0))


SIMPLE_INTERVAL_NAMES = [
    "unison",
    "minor second",
    "major second",
    "minor third",
    "major third",
    "perfect fourth",
    "tritone",
    "perfect fifth",
    "minor sixth",
    "major sixth",
    "minor seventh",
    "major seventh",
]

# Compound intervals are named by their extension degree, not the simple one
COMPOUND_INTERVAL_NAMES = [
    "octave",
    "minor ninth",
    "major ninth",
    "minor tenth",
    "major tenth",
    "perfect eleventh",
    "augmented eleventh",
    "perfect twelfth",
    "minor thirteenth",
    "major thirteenth",
    "minor fourteenth",
    "major fourteenth",
]

SIMPLE_INTERVAL_SHORT = ["P1", "m2", "M2", "m3", "M3", "P4", "TT", "P5", "m6", "M6", "m7", "M7"]
COMPOUND_INTERVAL_SHORT = ["P8", "m9", "M9", "m10", "M10", "P11", "#11", "P12", "b13", "M13", "m14", "M14"]


@dataclass(frozen=True, order=True)
class Interval:
    """Signed semitone distance between two notes."""

    semitones: int

    @classmethod
    def between(cls, lower: Note, upper: Note) -> "Interval":
        return cls(upper.midi - lower.midi)

    @property
    def size(self) -> int:
        """Unsigned semitone count."""
        return abs(self.semitones)

    @property
    def simple(self) -> int:
        """Semitones reduced to within one octave (0-11)."""
        return self.size % NUM_PITCH_CLASSES

    @property
    def octaves(self) -> int:
        return self.size // NUM_PITCH_CLASSES

    @property
    def is_compound(self) -> bool:
        """True from the octave upward."""
        return self.octaves > 0

    @property
    def is_descending(self) -> bool:
        return self.semitones < 0

    @property
    def quality(self) -> str:
        """Interval label, e.g. 'perfect fifth' or 'major ninth'."""
        if self.octaves == 0:
            return SIMPLE_INTERVAL_NAMES[self.simple]
        if self.octaves == 1:
            return COMPOUND_INTERVAL_NAMES[self.simple]
        if self.simple == 0:
            return f"{self.octaves} octaves"
        return f"{SIMPLE_INTERVAL_NAMES[self.simple]} plus {self.octaves} octaves"

    @property
    def short_name(self) -> str:
        if self.octaves == 0:
            return SIMPLE_INTERVAL_SHORT[self.simple]
        if self.octaves == 1:
            return COMPOUND_INTERVAL_SHORT[self.simple]
        return f"{SIMPLE_INTERVAL_SHORT[self.simple]}+{self.octaves}P8"

    def __neg__(self) -> "Interval":
        return Interval(-self.semitones)

    def __str__(self) -> str:
        prefix = "descending " if self.is_descending else ""
        return f"{prefix}{self.quality}"
