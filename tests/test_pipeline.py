"""End-to-end tests for the recognition pipeline."""

import logging

import numpy as np
import pytest
from scipy.io import wavfile

from chord_recognizer import ChordRecognizer, RecognizerConfig
from chord_recognizer.core import InvalidWindowSize, ModelCatalogMismatch, Note
from chord_recognizer.inference import ChordCatalog, InferenceAdapter, QUALITIES
from chord_recognizer.input import AnalysisWindow, iter_windows

from conftest import C4, E4, G4, generate_chord, generate_sine_wave, make_artifact

A3 = 220.00


@pytest.fixture
def recognizer():
    return ChordRecognizer()


class TestRecognize:
    """Tests for single-window recognition."""

    def test_c_major_sines(self, recognizer, c_major_window):
        recognition = recognizer.recognize(c_major_window)

        assert recognition.best.name == "C", f"Got {recognition.ranked()}"
        assert recognition.best.score > 0.9
        assert recognition.decision.source == "heuristic"
        assert len(recognition.peaks) == 3
        assert recognition.profile.total == pytest.approx(1.0)

    def test_a_minor_sines(self, recognizer, sample_rate):
        window = AnalysisWindow(generate_chord([A3, C4, E4], 8192, sample_rate), sample_rate)
        assert recognizer.recognize(window).best.name == "Am"

    def test_ranked_output(self, recognizer, c_major_window):
        ranked = recognizer.recognize(c_major_window).ranked()
        assert len(ranked) == 5
        names = [name for name, _ in ranked]
        assert names[0] == "C"
        assert "Cmaj7" in names
        confidences = [c for _, c in ranked]
        assert confidences == sorted(confidences, reverse=True)

    def test_silence(self, recognizer, silent_window):
        recognition = recognizer.recognize(silent_window)
        assert recognition.peaks == ()
        assert recognition.profile.is_empty
        assert recognition.decision.is_empty
        assert recognition.ranked() == []

    def test_high_note_fills_profile(self, recognizer, sample_rate):
        # D#8 sits above the piano range but is still a detected peak
        window = AnalysisWindow(generate_sine_wave(4978.03, 8192, sample_rate), sample_rate)
        recognition = recognizer.recognize(window)
        assert len(recognition.peaks) == 1
        assert recognition.profile.total == pytest.approx(1.0)
        assert not recognition.decision.is_empty

    def test_invalid_window_length(self, recognizer):
        with pytest.raises(InvalidWindowSize):
            recognizer.recognize(AnalysisWindow(np.zeros(100), 44100))

    def test_transposed_chord(self, recognizer, sample_rate):
        # D major: D4, F#4, A4
        freqs = [Note.parse(n).frequency() for n in ["D4", "F#4", "A4"]]
        window = AnalysisWindow(generate_chord(freqs, 8192, sample_rate), sample_rate)
        assert recognizer.recognize(window).best.name == "D"

    def test_smaller_window(self, sample_rate):
        recognizer = ChordRecognizer(config=RecognizerConfig(window_size=4096))
        freqs = [Note.parse(n).frequency() for n in ["G3", "B3", "D4"]]
        window = AnalysisWindow(generate_chord(freqs, 4096, sample_rate), sample_rate)
        assert recognizer.recognize(window).best.name == "G"

    def test_debug_log_per_window(self, recognizer, c_major_window, caplog):
        with caplog.at_level(logging.DEBUG, logger="chord_recognizer"):
            recognizer.recognize(c_major_window)
        assert any("3 peaks" in r.getMessage() for r in caplog.records)


class TestLearnedPath:
    """Tests for recognition with a model artifact."""

    def test_combined(self, catalog, artifact, c_major_window):
        recognizer = ChordRecognizer(catalog=catalog, adapter=InferenceAdapter(artifact, catalog))
        assert recognizer.uses_model

        recognition = recognizer.recognize(c_major_window)
        assert recognition.decision.source == "combined"
        assert recognition.best.name == "C"

    def test_from_config_loads_model(self, artifact_path, c_major_window):
        recognizer = ChordRecognizer.from_config(RecognizerConfig(model_path=str(artifact_path)))
        assert recognizer.uses_model
        assert recognizer.recognize(c_major_window).decision.source == "combined"

    def test_from_config_degrades_on_mismatch(self, tmp_path, c_major_window):
        small = ChordCatalog(qualities=QUALITIES[:3])
        path = make_artifact(small).save(tmp_path / "small.npz")

        with pytest.warns(UserWarning):
            recognizer = ChordRecognizer.from_config(RecognizerConfig(model_path=str(path)))
        assert not recognizer.uses_model

        heuristic_only = ChordRecognizer()
        a = recognizer.recognize(c_major_window)
        b = heuristic_only.recognize(c_major_window)
        assert a.decision.source == "heuristic"
        assert a.ranked() == b.ranked()

    def test_adapter_for_other_catalog_rejected(self):
        small = ChordCatalog(qualities=QUALITIES[:3])
        adapter = InferenceAdapter(make_artifact(small), small)
        with pytest.raises(ModelCatalogMismatch):
            ChordRecognizer(adapter=adapter)


class TestStreaming:
    """Tests for multi-window recognition."""

    @pytest.fixture
    def progression(self, sample_rate):
        # C major then A minor, one window each
        c_major = generate_chord([C4, E4, G4], 8192, sample_rate)
        a_minor = generate_chord([A3, C4, E4], 8192, sample_rate)
        return np.concatenate([c_major, a_minor])

    def test_recognize_samples(self, recognizer, progression, sample_rate):
        results = list(recognizer.recognize_samples(progression, sample_rate))
        assert [r.best.name for r in results] == ["C", "Am"]
        assert results[1].start == pytest.approx(8192 / sample_rate)

    def test_recognize_stream_is_lazy(self, recognizer, progression, sample_rate):
        stream = recognizer.recognize_stream(iter_windows(progression, sample_rate, 8192))
        assert next(stream).best.name == "C"

    def test_recognize_many_preserves_order(self, recognizer, progression, sample_rate):
        windows = list(iter_windows(progression, sample_rate, 8192)) * 4
        results = recognizer.recognize_many(windows, max_workers=4)
        assert [r.best.name for r in results] == ["C", "Am"] * 4

    def test_recognize_many_matches_sequential(self, recognizer, progression, sample_rate):
        windows = list(iter_windows(progression, sample_rate, 8192))
        parallel = recognizer.recognize_many(windows)
        sequential = list(recognizer.recognize_stream(windows))
        assert [r.ranked() for r in parallel] == [r.ranked() for r in sequential]

    def test_recognize_many_empty(self, recognizer):
        assert recognizer.recognize_many([]) == []

    def test_recognize_file(self, recognizer, tmp_path, progression, sample_rate):
        path = tmp_path / "progression.wav"
        wavfile.write(str(path), sample_rate, (progression * 32767).astype(np.int16))

        results = recognizer.recognize_file(path)
        assert [r.best.name for r in results] == ["C", "Am"]


class TestTextAndNotes:
    """Tests for the symbolic paths."""

    def test_detect_notes(self, recognizer, c_major_window):
        assert [n.name for n in recognizer.detect_notes(c_major_window)] == ["C4", "E4", "G4"]

    def test_identify_text(self, recognizer):
        template = recognizer.identify_text("Ebm7")
        assert template.name == "D#m7"
        assert [pc.name for pc in template.pitch_classes] == ["D#", "F#", "A#", "C#"]

    def test_identify_notes(self, recognizer):
        notes = [Note.parse(n) for n in ["G3", "B3", "D4", "F4"]]
        ranked = recognizer.identify_notes(notes)
        assert ranked[0].name == "G7"
        assert len(ranked) == 5
