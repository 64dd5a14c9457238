"""Tests for the pitch model."""

import pytest

from chord_recognizer.core import Interval, Note, PitchClass


class TestPitchClass:
    """Tests for PitchClass."""

    def test_names_use_sharps(self):
        assert [pc.name for pc in PitchClass.all()] == [
            "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"
        ]

    def test_flat_spelling(self):
        assert PitchClass(1).spell(flats=True) == "Db"
        assert PitchClass(10).spell(flats=True) == "Bb"
        assert PitchClass(4).spell(flats=True) == "E"

    @pytest.mark.parametrize("name,value", [
        ("C", 0), ("C#", 1), ("Db", 1), ("D♭", 1), ("F♯", 6),
        ("B#", 0), ("Cb", 11), ("Fb", 4), ("Gbb", 5), ("A##", 11),
    ])
    def test_parse_enharmonics(self, name, value):
        assert PitchClass.parse(name).value == value

    @pytest.mark.parametrize("name", ["H", "c", "C#x", "", "4"])
    def test_parse_invalid(self, name):
        with pytest.raises(ValueError):
            PitchClass.parse(name)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            PitchClass(12)
        with pytest.raises(ValueError):
            PitchClass(-1)
        with pytest.raises(TypeError):
            PitchClass(1.5)

    def test_transpose_wraps(self):
        assert PitchClass(11) + 1 == PitchClass(0)
        assert PitchClass(0) - 1 == PitchClass(11)
        assert PitchClass(7).transpose(-19) == PitchClass(0)

    def test_distance(self):
        # Upward distance, always 0-11
        assert PitchClass(7) - PitchClass(0) == 7
        assert PitchClass(0) - PitchClass(7) == 5

    def test_usable_as_index(self):
        names = ["a"] * 12
        names[PitchClass(3)] = "b"
        assert names[3] == "b"


class TestNote:
    """Tests for Note."""

    def test_midi_round_trip(self):
        for midi in range(0, 128):
            assert Note.from_midi(midi).midi == midi

    def test_names(self):
        assert Note.from_midi(60).name == "C4"
        assert Note.from_midi(69).name == "A4"
        assert Note.from_midi(61).name == "C#4"

    def test_parse(self):
        assert Note.parse("A4").midi == 69
        assert Note.parse("Eb3") == Note(PitchClass(3), 3)
        # Cb4 is spelled in octave 4 but sounds as B3
        assert Note.parse("Cb4") == Note(PitchClass(11), 3)
        assert Note.parse("C-1").midi == 0

    def test_from_frequency(self):
        assert Note.from_frequency(440.0).name == "A4"
        assert Note.from_frequency(261.63).name == "C4"
        assert Note.from_frequency(16.35).name == "C0"
        # Detuned by a quarter tone still rounds to the nearest note
        assert Note.from_frequency(440.0 * 2 ** (0.24 / 12)).name == "A4"

    def test_from_frequency_rejects_non_positive(self):
        with pytest.raises(ValueError):
            Note.from_frequency(0.0)

    def test_frequency(self):
        assert Note.parse("A4").frequency() == 440.0
        assert Note.parse("C4").frequency() == pytest.approx(261.63, abs=0.01)
        assert Note.parse("A4").frequency(a4=432.0) == 432.0

    def test_ordering(self):
        notes = [Note.parse(n) for n in ["G4", "C4", "E4", "B3"]]
        assert [n.name for n in sorted(notes)] == ["B3", "C4", "E4", "G4"]


class TestInterval:
    """Tests for Interval."""

    def test_between(self):
        assert Interval.between(Note.parse("C4"), Note.parse("G4")).semitones == 7
        assert Interval.between(Note.parse("G4"), Note.parse("C4")).is_descending

    @pytest.mark.parametrize("semitones,quality,short", [
        (0, "unison", "P1"),
        (4, "major third", "M3"),
        (7, "perfect fifth", "P5"),
        (12, "octave", "P8"),
        (14, "major ninth", "M9"),
        (17, "perfect eleventh", "P11"),
        (21, "major thirteenth", "M13"),
    ])
    def test_names(self, semitones, quality, short):
        interval = Interval(semitones)
        assert interval.quality == quality
        assert interval.short_name == short

    def test_compound(self):
        assert not Interval(11).is_compound
        assert Interval(12).is_compound
        assert Interval(-12).is_compound
        assert Interval(14).is_compound
        assert Interval(14).simple == 2
        assert Interval(26).quality == "major second plus 2 octaves"

    def test_descending_str(self):
        assert str(-Interval(7)) == "descending perfect fifth"
