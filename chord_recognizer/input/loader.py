"""Audio loading - decodes files into mono sample buffers for the recognizer."""

import numpy as np
import librosa
from pathlib import Path
from typing import Iterator, Optional, Tuple

from .window import AnalysisWindow, iter_windows


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        target_sr: Optional[int] = 44100,
        normalize: bool = True,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps the native rate)
            normalize: Normalize audio amplitude if True
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load audio file as mono samples.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)

        if self.normalize:
            audio = self._normalize(audio)

        return audio, int(sr)

    def windows(
        self,
        path: str,
        window_size: int,
        hop_length: Optional[int] = None,
    ) -> Iterator[AnalysisWindow]:
        """Load a file and yield its analysis windows in order."""
        audio, sr = self.load(path)
        return iter_windows(audio, sr, window_size, hop_length)

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max() if len(audio) else 0.0
        if peak > 0:
            audio = audio / peak
        return audio

    def get_duration(self, audio: np.ndarray, sr: Optional[int] = None) -> float:
        """Get duration in seconds."""
        sr = sr or self.target_sr
        return len(audio) / sr
