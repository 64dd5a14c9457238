"""Chord catalog - chord qualities, templates and chord notation.

The catalog is every quality transposed to all 12 roots, generated in a
fixed order. That order is shared with the learned model: a model's output
index i always refers to catalog[i], so the catalog must be generated
deterministically and never mutated.
"""

import hashlib
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..analysis.profile import PitchClassProfile
from ..core.constants import NUM_PITCH_CLASSES
from ..core.errors import ChordParseError, EmptyCatalog
from ..core.pitch import Note, PitchClass


@dataclass(frozen=True)
class ChordQuality:
    """A chord quality: interval offsets from the root plus its notation."""

    name: str  # e.g. "major", "dominant7"
    suffix: str  # canonical notation suffix, e.g. "", "m", "7"
    intervals: Tuple[int, ...]  # semitones above the root, ascending
    aliases: Tuple[str, ...] = ()

    def __post_init__(self):
        intervals = tuple(int(i) for i in self.intervals)
        object.__setattr__(self, "intervals", intervals)
        object.__setattr__(self, "aliases", tuple(self.aliases))

        if not intervals or intervals[0] != 0:
            raise ValueError(f"{self.name}: intervals must start at the root (0)")
        if list(intervals) != sorted(set(intervals)):
            raise ValueError(f"{self.name}: intervals must be unique and ascending")
        if len({i % NUM_PITCH_CLASSES for i in intervals}) != len(intervals):
            raise ValueError(f"{self.name}: intervals collapse onto the same pitch class")
        if intervals[-1] - intervals[0] >= 24:
            raise ValueError(f"{self.name}: intervals must span less than two octaves")

    @property
    def size(self) -> int:
        """Number of distinct pitch classes."""
        return len(self.intervals)

    @property
    def symbols(self) -> Tuple[str, ...]:
        """Canonical suffix followed by every accepted alias."""
        return (self.suffix,) + tuple(a for a in self.aliases if a != self.suffix)


# Ordered by family; this order is part of the model contract
QUALITIES: Tuple[ChordQuality, ...] = (
    # Triads
    ChordQuality("major", "", (0, 4, 7), ("maj", "M", "major")),
    ChordQuality("minor", "m", (0, 3, 7), ("min", "-", "minor")),
    ChordQuality("diminished", "dim", (0, 3, 6), ("°", "o")),
    ChordQuality("augmented", "aug", (0, 4, 8), ("+",)),
    ChordQuality("sus2", "sus2", (0, 2, 7)),
    ChordQuality("sus4", "sus4", (0, 5, 7), ("sus",)),
    ChordQuality("power", "5", (0, 7)),
    # Sixths
    ChordQuality("6", "6", (0, 4, 7, 9), ("maj6", "M6")),
    ChordQuality("minor6", "m6", (0, 3, 7, 9), ("min6", "-6")),
    # Seventh chords
    ChordQuality("dominant7", "7", (0, 4, 7, 10), ("dom7",)),
    ChordQuality("major7", "maj7", (0, 4, 7, 11), ("M7", "Δ", "Δ7", "ma7")),
    ChordQuality("minor7", "m7", (0, 3, 7, 10), ("min7", "-7")),
    ChordQuality("minor_major7", "m(maj7)", (0, 3, 7, 11), ("mMaj7", "mM7", "minmaj7", "m(M7)", "-Δ7")),
    ChordQuality("diminished7", "dim7", (0, 3, 6, 9), ("°7", "o7")),
    ChordQuality("half_diminished7", "m7b5", (0, 3, 6, 10), ("ø", "ø7", "min7b5", "-7b5", "m7(b5)")),
    ChordQuality("augmented7", "aug7", (0, 4, 8, 10), ("+7", "7#5", "7(#5)")),
    ChordQuality("dominant7sus4", "7sus4", (0, 5, 7, 10), ("7sus",)),
    # Extended
    ChordQuality("add9", "add9", (0, 4, 7, 14), ("add2",)),
    ChordQuality("dominant9", "9", (0, 4, 7, 10, 14)),
    ChordQuality("major9", "maj9", (0, 4, 7, 11, 14), ("M9", "Δ9")),
    ChordQuality("minor9", "m9", (0, 3, 7, 10, 14), ("min9", "-9")),
)


@dataclass(frozen=True)
class ChordTemplate:
    """A root pitch class plus a chord quality.

    Identity is (root, quality); index records the template's position in
    the catalog that generated it.
    """

    root: PitchClass
    quality: ChordQuality
    index: int = field(default=-1, compare=False)

    @property
    def intervals(self) -> Tuple[int, ...]:
        return self.quality.intervals

    @property
    def pitch_classes(self) -> Tuple[PitchClass, ...]:
        """Member pitch classes in interval order (root first)."""
        return tuple(self.root + i for i in self.intervals)

    @property
    def pitch_class_set(self) -> frozenset:
        """Member pitch classes as integers."""
        return frozenset(pc.value for pc in self.pitch_classes)

    @property
    def size(self) -> int:
        return self.quality.size

    @property
    def name(self) -> str:
        """Canonical chord symbol with a sharp-spelled root (e.g. 'C', 'F#m7')."""
        return f"{self.root.name}{self.quality.suffix}"

    def spelled(self, flats: bool = False) -> str:
        """Chord symbol with the root spelled for the given context."""
        return f"{self.root.spell(flats)}{self.quality.suffix}"

    def ideal_profile(self) -> PitchClassProfile:
        """Equal energy on each member pitch class, zero elsewhere."""
        return PitchClassProfile.from_pitch_classes(self.pitch_classes)

    def notes(self, octave: int = 4) -> List[Note]:
        """Close voicing with the root in the given octave."""
        root = Note(self.root, octave)
        return [root.transpose(i) for i in self.intervals]

    def __str__(self) -> str:
        return self.name


_CHORD_RE = re.compile(r"^([A-G][#b♯♭]*)(.*)$")


class ChordCatalog:
    """Every chord quality transposed to all 12 roots, in a fixed order.

    Ordering is root-major: all qualities on C, then all on C#, and so on.
    Instances are immutable and safe to share between threads.
    """

    def __init__(self, qualities: Sequence[ChordQuality] = QUALITIES):
        qualities = tuple(qualities)

        names = [q.name for q in qualities]
        if len(set(names)) != len(names):
            raise ValueError("Chord quality names must be unique")

        self._qualities = qualities
        self._symbols = self._build_symbol_table(qualities)

        templates = []
        for root in PitchClass.all():
            for quality in qualities:
                templates.append(ChordTemplate(root, quality, index=len(templates)))

        if not templates:
            raise EmptyCatalog("Chord catalog generation produced no templates")

        self._templates: Tuple[ChordTemplate, ...] = tuple(templates)
        self._by_key: Dict[Tuple[int, str], ChordTemplate] = {
            (t.root.value, t.quality.name): t for t in templates
        }

        matrix = np.array([t.ideal_profile().bins for t in templates])
        matrix /= np.linalg.norm(matrix, axis=1, keepdims=True)
        matrix.setflags(write=False)
        self._matrix = matrix

        digest = hashlib.sha256()
        for t in templates:
            digest.update(f"{t.index}:{t.name}:{t.intervals}\n".encode("utf-8"))
        self._checksum = digest.hexdigest()

    @staticmethod
    def _build_symbol_table(qualities: Sequence[ChordQuality]) -> Dict[str, ChordQuality]:
        table: Dict[str, ChordQuality] = {}
        for quality in qualities:
            for symbol in quality.symbols:
                if symbol in table and table[symbol] is not quality:
                    raise ValueError(
                        f"Chord symbol {symbol!r} is ambiguous: "
                        f"{table[symbol].name} / {quality.name}"
                    )
                table[symbol] = quality
        return table

    # Container protocol

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[ChordTemplate]:
        return iter(self._templates)

    def __getitem__(self, index: int) -> ChordTemplate:
        return self._templates[index]

    def __contains__(self, template: object) -> bool:
        if not isinstance(template, ChordTemplate):
            return False
        return (template.root.value, template.quality.name) in self._by_key

    @property
    def qualities(self) -> Tuple[ChordQuality, ...]:
        return self._qualities

    @property
    def names(self) -> List[str]:
        """Canonical names in catalog order."""
        return [t.name for t in self._templates]

    @property
    def template_matrix(self) -> np.ndarray:
        """Unit-length ideal profiles, shape (len(catalog), 12), read-only."""
        return self._matrix

    @property
    def checksum(self) -> str:
        """Digest of the catalog ordering shared with trained models."""
        return self._checksum

    def find(self, root, quality: str) -> ChordTemplate:
        """
        Look up a template by root and quality name.

        Args:
            root: PitchClass, integer 0-11 or pitch name
            quality: Quality name (e.g. "minor7")

        Raises:
            KeyError: If the quality is not in this catalog
        """
        if isinstance(root, str):
            root = PitchClass.parse(root)
        key = (int(root), quality)
        if key not in self._by_key:
            raise KeyError(f"No chord quality {quality!r} in catalog")
        return self._by_key[key]

    def index_of(self, name: str) -> int:
        """Catalog index of a chord given in notation."""
        return self.parse(name).index

    # Text interface

    def parse(self, text: str) -> ChordTemplate:
        """
        Parse chord notation into a template of this catalog.

        Accepts the canonical suffix or any alias of a quality, with the
        root in any enharmonic spelling (e.g. 'Db7', 'C#7', 'Bbø').

        Raises:
            ChordParseError: If the text is not a chord in this catalog
        """
        if not isinstance(text, str):
            raise ChordParseError(f"Chord notation must be a string, got {type(text).__name__}")

        match = _CHORD_RE.match(text.strip())
        if not match:
            raise ChordParseError(f"Invalid chord root in {text!r}")
        root_str, suffix = match.groups()

        quality = self._symbols.get(suffix.strip())
        if quality is None:
            raise ChordParseError(f"Unknown chord quality {suffix!r} in {text!r}")

        return self._by_key[(PitchClass.parse(root_str).value, quality.name)]

    def format(self, template: ChordTemplate, flats: bool = False) -> str:
        """Canonical notation for a template."""
        return template.spelled(flats)

    def identify(self, notes: Iterable[Note], top_k: Optional[int] = 5) -> list:
        """
        Name the chords that best explain a collection of notes.

        Returns:
            Candidates ranked by the heuristic matcher
        """
        from .matcher import HeuristicMatcher

        profile = PitchClassProfile.from_notes(notes)
        return HeuristicMatcher(self).rank(profile, top_k=top_k)


@lru_cache(maxsize=None)
def default_catalog() -> ChordCatalog:
    """Process-wide catalog, built once on first use."""
    return ChordCatalog()


def parse_chord(text: str, catalog: Optional[ChordCatalog] = None) -> ChordTemplate:
    """Parse chord notation using the given (or default) catalog."""
    return (catalog or default_catalog()).parse(text)


def format_chord(template: ChordTemplate, flats: bool = False) -> str:
    """Canonical notation for a chord template."""
    return template.spelled(flats)
