"""Model artifact - frozen classifier weights for the learned scoring path.

An artifact is a numpy ``.npz`` archive (no pickled objects) holding:

- ``format_version``: layout version of the archive itself
- ``feature_version``: which feature vector the model consumes
  (1 = 12-bin pitch-class profile, 2 = profile + 88-bin log semitone spectrum)
- ``catalog_size`` / ``catalog_checksum``: the chord catalog ordering the
  output layer was trained against
- ``n_layers`` and ``W{i}`` / ``b{i}``: dense layer weights and biases
  (ReLU between layers, softmax on the output)
- ``payload_checksum``: sha256 over the layer arrays, detects corruption

Artifacts are produced by the offline training job; this module only
reads, validates, evaluates and (for tooling and tests) writes them.
"""

import hashlib
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import librosa
import numpy as np

from ..analysis.profile import PitchClassProfile
from ..analysis.spectrum import Spectrum
from ..core.constants import NUM_PITCH_CLASSES, PIANO_MAX, PIANO_MIN
from ..core.errors import ModelLoadError
from .chords import ChordCatalog

FORMAT_VERSION = 1

FEATURE_PROFILE = 1
FEATURE_PROFILE_SPECTRUM = 2

N_SEMITONE_BINS = PIANO_MAX - PIANO_MIN + 1  # A0..C8

FEATURE_SIZES: Dict[int, int] = {
    FEATURE_PROFILE: NUM_PITCH_CLASSES,
    FEATURE_PROFILE_SPECTRUM: NUM_PITCH_CLASSES + N_SEMITONE_BINS,
}


def semitone_spectrum(spectrum: Spectrum) -> np.ndarray:
    """
    Fold a magnitude spectrum into 88 piano-key bins.

    Returns:
        Log-compressed energy per semitone (A0..C8), scaled to a max of log(2)
    """
    energies = np.zeros(N_SEMITONE_BINS)
    freqs = spectrum.frequencies
    mask = freqs > 0
    if not np.any(mask):
        return energies

    midi = np.round(librosa.hz_to_midi(freqs[mask])).astype(int)
    magnitudes = spectrum.magnitudes[mask]
    in_range = (midi >= PIANO_MIN) & (midi <= PIANO_MAX)
    np.add.at(energies, midi[in_range] - PIANO_MIN, magnitudes[in_range])

    peak = energies.max()
    if peak > 0:
        energies = np.log1p(energies / peak)
    return energies


def extract_features(
    profile: PitchClassProfile,
    spectrum: Optional[Spectrum],
    feature_version: int,
) -> np.ndarray:
    """
    Build the model input vector for a feature version.

    Raises:
        ValueError: If the version needs a spectrum and none was given
    """
    if feature_version == FEATURE_PROFILE:
        return np.array(profile.bins)
    if feature_version == FEATURE_PROFILE_SPECTRUM:
        if spectrum is None:
            raise ValueError("Feature version 2 requires the window's spectrum")
        return np.concatenate([profile.bins, semitone_spectrum(spectrum)])
    raise ValueError(f"Unknown feature version: {feature_version}")


def _softmax(logits: np.ndarray) -> np.ndarray:
    shifted = logits - logits.max()
    exp = np.exp(shifted)
    return exp / exp.sum()


@dataclass
class ModelArtifact:
    """Frozen dense classifier plus the catalog contract it was trained on."""

    weights: List[np.ndarray]
    biases: List[np.ndarray]
    catalog_size: int
    catalog_checksum: str
    feature_version: int = FEATURE_PROFILE
    format_version: int = FORMAT_VERSION
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.weights = [np.asarray(w, dtype=np.float32) for w in self.weights]
        self.biases = [np.asarray(b, dtype=np.float32) for b in self.biases]
        self.validate()

    @classmethod
    def for_catalog(
        cls,
        catalog: ChordCatalog,
        weights: List[np.ndarray],
        biases: List[np.ndarray],
        feature_version: int = FEATURE_PROFILE,
    ) -> "ModelArtifact":
        """Create an artifact bound to a catalog's size and ordering."""
        return cls(
            weights=weights,
            biases=biases,
            catalog_size=len(catalog),
            catalog_checksum=catalog.checksum,
            feature_version=feature_version,
        )

    @property
    def input_size(self) -> int:
        return FEATURE_SIZES[self.feature_version]

    @property
    def output_size(self) -> int:
        return int(self.weights[-1].shape[1])

    @property
    def n_layers(self) -> int:
        return len(self.weights)

    def payload_checksum(self) -> str:
        """sha256 over layer shapes and little-endian float32 values."""
        digest = hashlib.sha256()
        for w, b in zip(self.weights, self.biases):
            for array in (w, b):
                digest.update(str(array.shape).encode("utf-8"))
                digest.update(np.ascontiguousarray(array, dtype="<f4").tobytes())
        return digest.hexdigest()

    def validate(self) -> None:
        """
        Check internal consistency.

        Raises:
            ModelLoadError: On unknown versions or inconsistent layer shapes
        """
        if self.format_version != FORMAT_VERSION:
            raise ModelLoadError(f"Unsupported model format version: {self.format_version}")
        if self.feature_version not in FEATURE_SIZES:
            raise ModelLoadError(f"Unsupported feature version: {self.feature_version}")
        if not self.weights or len(self.weights) != len(self.biases):
            raise ModelLoadError("Model must have matching, non-empty weight and bias lists")

        expected_in = self.input_size
        for i, (w, b) in enumerate(zip(self.weights, self.biases)):
            if w.ndim != 2 or b.ndim != 1:
                raise ModelLoadError(f"Layer {i}: weights must be 2-D and biases 1-D")
            if w.shape[0] != expected_in:
                raise ModelLoadError(
                    f"Layer {i}: expected {expected_in} inputs, got {w.shape[0]}"
                )
            if b.shape[0] != w.shape[1]:
                raise ModelLoadError(f"Layer {i}: bias size {b.shape[0]} != {w.shape[1]} outputs")
            if not (np.all(np.isfinite(w)) and np.all(np.isfinite(b))):
                raise ModelLoadError(f"Layer {i}: non-finite parameters")
            expected_in = w.shape[1]

        if self.output_size != self.catalog_size:
            raise ModelLoadError(
                f"Output layer has {self.output_size} classes but artifact declares "
                f"catalog size {self.catalog_size}"
            )

    def forward(self, features: np.ndarray) -> np.ndarray:
        """
        Evaluate the network.

        Args:
            features: Input vector of length input_size

        Returns:
            Probability per catalog template (sums to 1)
        """
        x = np.asarray(features, dtype=np.float64)
        if x.shape != (self.input_size,):
            raise ValueError(f"Expected {self.input_size} features, got shape {x.shape}")

        last = self.n_layers - 1
        for i, (w, b) in enumerate(zip(self.weights, self.biases)):
            x = x @ w.astype(np.float64) + b.astype(np.float64)
            if i < last:
                x = np.maximum(x, 0.0)
        return _softmax(x)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the artifact to disk."""
        path = Path(path)
        arrays = {
            "format_version": np.array(self.format_version),
            "feature_version": np.array(self.feature_version),
            "catalog_size": np.array(self.catalog_size),
            "catalog_checksum": np.array(self.catalog_checksum),
            "payload_checksum": np.array(self.payload_checksum()),
            "n_layers": np.array(self.n_layers),
            "metadata_keys": np.array(sorted(self.metadata), dtype=str),
            "metadata_values": np.array([self.metadata[k] for k in sorted(self.metadata)], dtype=str),
        }
        for i, (w, b) in enumerate(zip(self.weights, self.biases)):
            arrays[f"W{i}"] = w
            arrays[f"b{i}"] = b

        # A file handle keeps numpy from appending ".npz" to the name
        with open(path, "wb") as f:
            np.savez(f, **arrays)
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ModelArtifact":
        """
        Read and verify an artifact.

        Raises:
            ModelLoadError: If the file is missing, truncated, corrupt,
                of an unknown version, or fails its payload checksum
        """
        path = Path(path)
        if not path.is_file():
            raise ModelLoadError(f"Model artifact not found: {path}")

        try:
            data = np.load(path, allow_pickle=False)
        except (OSError, EOFError, ValueError, zipfile.BadZipFile) as e:
            raise ModelLoadError(f"Failed to read model artifact {path}: {e}") from e
        if not isinstance(data, np.lib.npyio.NpzFile):
            raise ModelLoadError(f"Model artifact {path} is not an .npz archive")

        try:
            with data:
                n_layers = int(data["n_layers"])
                artifact = cls(
                    weights=[data[f"W{i}"] for i in range(n_layers)],
                    biases=[data[f"b{i}"] for i in range(n_layers)],
                    catalog_size=int(data["catalog_size"]),
                    catalog_checksum=str(data["catalog_checksum"]),
                    feature_version=int(data["feature_version"]),
                    format_version=int(data["format_version"]),
                    metadata=dict(
                        zip(
                            (str(k) for k in data["metadata_keys"]),
                            (str(v) for v in data["metadata_values"]),
                        )
                    ),
                )
                stored_checksum = str(data["payload_checksum"])
        except ModelLoadError:
            raise
        except (OSError, EOFError, KeyError, TypeError, ValueError, zipfile.BadZipFile) as e:
            raise ModelLoadError(f"Failed to read model artifact {path}: {e}") from e

        if artifact.payload_checksum() != stored_checksum:
            raise ModelLoadError(f"Model artifact {path} failed its payload checksum")

        return artifact
