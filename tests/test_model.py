"""Tests for model artifacts and feature extraction."""

import numpy as np
import pytest

from chord_recognizer.analysis import PitchClassProfile, SpectralAnalyzer
from chord_recognizer.core import ModelLoadError
from chord_recognizer.inference.model import (
    FEATURE_PROFILE,
    FEATURE_PROFILE_SPECTRUM,
    FEATURE_SIZES,
    N_SEMITONE_BINS,
    ModelArtifact,
    extract_features,
    semitone_spectrum,
)

from conftest import make_artifact


class TestFeatures:
    """Tests for model input features."""

    def test_profile_features(self):
        profile = PitchClassProfile.from_pitch_classes([0, 4, 7])
        features = extract_features(profile, None, FEATURE_PROFILE)
        np.testing.assert_array_equal(features, profile.bins)

    def test_profile_spectrum_features(self, c_major_window):
        spectrum = SpectralAnalyzer().analyze(c_major_window)
        profile = PitchClassProfile.from_pitch_classes([0, 4, 7])
        features = extract_features(profile, spectrum, FEATURE_PROFILE_SPECTRUM)
        assert features.shape == (FEATURE_SIZES[FEATURE_PROFILE_SPECTRUM],)

    def test_spectrum_required(self):
        with pytest.raises(ValueError):
            extract_features(PitchClassProfile.empty(), None, FEATURE_PROFILE_SPECTRUM)

    def test_unknown_version(self):
        with pytest.raises(ValueError):
            extract_features(PitchClassProfile.empty(), None, 99)

    def test_semitone_spectrum(self, c_major_window):
        energies = semitone_spectrum(SpectralAnalyzer().analyze(c_major_window))
        assert energies.shape == (N_SEMITONE_BINS,)
        # C4 = MIDI 60, A0 = MIDI 21
        strongest = set(np.argsort(energies)[-3:] + 21)
        assert strongest == {60, 64, 67}
        assert energies.max() == pytest.approx(np.log(2))

    def test_semitone_spectrum_silence(self, silent_window):
        energies = semitone_spectrum(SpectralAnalyzer().analyze(silent_window))
        assert np.all(energies == 0.0)


class TestModelArtifact:
    """Tests for ModelArtifact."""

    def test_forward_is_distribution(self, artifact):
        profile = PitchClassProfile.from_pitch_classes([0, 4, 7])
        probs = artifact.forward(profile.bins)
        assert probs.shape == (artifact.catalog_size,)
        assert probs.sum() == pytest.approx(1.0)
        assert np.all(probs >= 0.0)

    def test_forward_ranks_like_templates(self, catalog, artifact):
        profile = catalog.parse("F#m").ideal_profile()
        probs = artifact.forward(profile.bins)
        assert catalog[int(np.argmax(probs))].name == "F#m"

    def test_forward_with_hidden_layer(self, catalog):
        artifact = make_artifact(catalog, hidden=16)
        assert artifact.n_layers == 2
        probs = artifact.forward(catalog.parse("Bb7").ideal_profile().bins)
        assert catalog[int(np.argmax(probs))].name == "A#7"

    def test_forward_rejects_wrong_size(self, artifact):
        with pytest.raises(ValueError):
            artifact.forward(np.zeros(5))

    def test_shape_validation(self, catalog):
        with pytest.raises(ModelLoadError):
            ModelArtifact.for_catalog(catalog, [np.zeros((13, len(catalog)))], [np.zeros(len(catalog))])
        with pytest.raises(ModelLoadError):
            ModelArtifact.for_catalog(catalog, [np.zeros((12, len(catalog)))], [np.zeros(3)])
        with pytest.raises(ModelLoadError):
            ModelArtifact.for_catalog(catalog, [], [])

    def test_output_must_match_catalog_size(self, catalog):
        with pytest.raises(ModelLoadError):
            ModelArtifact(
                weights=[np.zeros((12, 36))],
                biases=[np.zeros(36)],
                catalog_size=len(catalog),
                catalog_checksum=catalog.checksum,
            )

    def test_non_finite_parameters(self, catalog):
        weights = np.zeros((12, len(catalog)))
        weights[0, 0] = np.inf
        with pytest.raises(ModelLoadError):
            ModelArtifact.for_catalog(catalog, [weights], [np.zeros(len(catalog))])

    def test_unknown_versions(self, catalog):
        kwargs = dict(
            weights=[np.zeros((12, len(catalog)))],
            biases=[np.zeros(len(catalog))],
            catalog_size=len(catalog),
            catalog_checksum=catalog.checksum,
        )
        with pytest.raises(ModelLoadError):
            ModelArtifact(format_version=2, **kwargs)
        with pytest.raises(ModelLoadError):
            ModelArtifact(feature_version=7, **kwargs)


class TestArtifactPersistence:
    """Tests for saving and loading artifacts."""

    def test_save_load(self, tmp_path, catalog):
        artifact = make_artifact(catalog, hidden=16)
        artifact.metadata["trained_on"] = "synthetic"
        path = artifact.save(tmp_path / "model.npz")

        loaded = ModelArtifact.load(path)
        assert loaded.catalog_size == artifact.catalog_size
        assert loaded.catalog_checksum == artifact.catalog_checksum
        assert loaded.feature_version == artifact.feature_version
        assert loaded.n_layers == 2
        assert loaded.metadata == {"trained_on": "synthetic"}
        assert loaded.payload_checksum() == artifact.payload_checksum()

        profile = catalog.parse("Dm7").ideal_profile()
        np.testing.assert_allclose(loaded.forward(profile.bins), artifact.forward(profile.bins))

    def test_save_keeps_file_name(self, tmp_path, artifact):
        path = artifact.save(tmp_path / "model.bin")
        assert path.exists()
        assert path.name == "model.bin"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ModelLoadError, match="not found"):
            ModelArtifact.load(tmp_path / "missing.npz")

    def test_truncated_file(self, tmp_path, artifact_path):
        data = artifact_path.read_bytes()
        truncated = tmp_path / "truncated.npz"
        truncated.write_bytes(data[: len(data) // 2])
        with pytest.raises(ModelLoadError):
            ModelArtifact.load(truncated)

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "garbage.npz"
        path.write_bytes(b"this is not a model")
        with pytest.raises(ModelLoadError):
            ModelArtifact.load(path)

    def test_single_array_file(self, tmp_path):
        path = tmp_path / "model.npz"
        with open(path, "wb") as f:
            np.save(f, np.zeros(3))
        with pytest.raises(ModelLoadError, match="not an .npz archive"):
            ModelArtifact.load(path)

    def test_malformed_layer_count(self, tmp_path, artifact):
        path = tmp_path / "layers.npz"
        with open(path, "wb") as f:
            np.savez(f, n_layers=np.array([1, 2]), W0=artifact.weights[0], b0=artifact.biases[0])
        with pytest.raises(ModelLoadError):
            ModelArtifact.load(path)

    def test_missing_keys(self, tmp_path):
        path = tmp_path / "partial.npz"
        with open(path, "wb") as f:
            np.savez(f, n_layers=np.array(1))
        with pytest.raises(ModelLoadError):
            ModelArtifact.load(path)

    def test_payload_checksum_mismatch(self, tmp_path, catalog, artifact):
        path = tmp_path / "tampered.npz"
        arrays = {
            "format_version": np.array(artifact.format_version),
            "feature_version": np.array(artifact.feature_version),
            "catalog_size": np.array(artifact.catalog_size),
            "catalog_checksum": np.array(artifact.catalog_checksum),
            "payload_checksum": np.array("0" * 64),
            "n_layers": np.array(1),
            "metadata_keys": np.array([], dtype=str),
            "metadata_values": np.array([], dtype=str),
            "W0": artifact.weights[0],
            "b0": artifact.biases[0],
        }
        with open(path, "wb") as f:
            np.savez(f, **arrays)

        with pytest.raises(ModelLoadError, match="checksum"):
            ModelArtifact.load(path)
