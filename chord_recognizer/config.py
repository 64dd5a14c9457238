"""Recognizer configuration - aggregates the per-component configs."""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from scipy.signal import get_window

from .analysis.peaks import PeakConfig
from .analysis.profile import ProfileConfig
from .core.constants import DEFAULT_WINDOW_FUNCTION, DEFAULT_WINDOW_SIZE, MAX_WINDOW_SIZE, MIN_WINDOW_SIZE
from .core.errors import InvalidWindowSize
from .inference.combiner import CombinerConfig

_SECTIONS = {
    "peaks": PeakConfig,
    "profile": ProfileConfig,
    "combiner": CombinerConfig,
}


def _known_keys(cls) -> set:
    return {f.name for f in fields(cls)}


def _check_keys(data: Dict[str, Any], cls, where: str) -> None:
    unknown = set(data) - _known_keys(cls)
    if unknown:
        raise ValueError(f"Unknown {where} config keys: {', '.join(sorted(unknown))}")


@dataclass
class RecognizerConfig:
    """Configuration for a ChordRecognizer.

    Attributes:
        window_size: Samples per analysis window, a power of two (default: 8192)
        hop_length: Samples between window starts (default: window_size)
        window_function: scipy window name for spectral tapering (default: "hann")
        peaks: Peak extraction settings
        profile: Pitch-class profile settings
        combiner: Decision combining settings
        model_path: Optional learned model artifact (default: heuristic only)
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    hop_length: Optional[int] = None
    window_function: str = DEFAULT_WINDOW_FUNCTION
    peaks: PeakConfig = field(default_factory=PeakConfig)
    profile: ProfileConfig = field(default_factory=ProfileConfig)
    combiner: CombinerConfig = field(default_factory=CombinerConfig)
    model_path: Optional[str] = None

    def __post_init__(self):
        size = self.window_size
        if size < MIN_WINDOW_SIZE or size > MAX_WINDOW_SIZE or size & (size - 1):
            raise InvalidWindowSize(size, MIN_WINDOW_SIZE, MAX_WINDOW_SIZE)
        if self.hop_length is not None and self.hop_length <= 0:
            raise ValueError(f"hop_length must be positive, got {self.hop_length}")
        try:
            get_window(self.window_function, 8)
        except ValueError as e:
            raise ValueError(f"Unknown window function {self.window_function!r}: {e}") from e
        if self.model_path is not None:
            self.model_path = str(self.model_path)

    @property
    def effective_hop(self) -> int:
        return self.hop_length or self.window_size

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecognizerConfig":
        """
        Build a config from a plain dictionary (e.g. parsed JSON).

        Nested sections ("peaks", "profile", "combiner") may be partial;
        missing keys take their defaults.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        data = dict(data)
        _check_keys(data, cls, "recognizer")

        for name, section_cls in _SECTIONS.items():
            section = data.get(name)
            if section is None:
                continue
            if isinstance(section, section_cls):
                continue
            if not isinstance(section, dict):
                raise ValueError(f"Config section {name!r} must be a mapping")
            _check_keys(section, section_cls, name)
            data[name] = section_cls(**section)

        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RecognizerConfig":
        """Load a JSON config file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = asdict(self)
        data["profile"]["harmonics"] = list(self.profile.harmonics)
        return data

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path
