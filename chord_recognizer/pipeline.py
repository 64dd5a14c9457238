"""Recognition pipeline - window → spectrum → peaks → profile → decision.

Each window is processed independently. The catalog and the inference
adapter are read-only after construction, so windows can be recognized
concurrently without locking.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .analysis.peaks import Peak, PeakExtractor, detect_notes
from .analysis.profile import PitchClassProfile, ProfileBuilder
from .analysis.spectrum import SpectralAnalyzer, Spectrum
from .config import RecognizerConfig
from .core.errors import ModelCatalogMismatch
from .core.pitch import Note
from .inference.adapter import InferenceAdapter
from .inference.chords import ChordCatalog, ChordTemplate, default_catalog
from .inference.combiner import Decision, DecisionCombiner
from .inference.matcher import Candidate, HeuristicMatcher
from .input.loader import AudioLoader
from .input.window import AnalysisWindow, SampleBuffer, iter_windows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recognition:
    """Everything the pipeline derived from one analysis window."""

    window: AnalysisWindow
    spectrum: Spectrum
    peaks: Tuple[Peak, ...]
    profile: PitchClassProfile
    decision: Decision

    @property
    def start(self) -> float:
        return self.window.start

    @property
    def end(self) -> float:
        return self.window.end

    @property
    def best(self) -> Optional[Candidate]:
        return self.decision.best

    def ranked(self) -> List[Tuple[str, float]]:
        """(chord name, confidence) pairs, best first; empty for silence."""
        return self.decision.ranked()


class ChordRecognizer:
    """Recognizes chords in audio windows.

    Runs the heuristic matcher on every window and, when a model artifact
    is loaded, blends in the learned path.
    """

    def __init__(
        self,
        catalog: Optional[ChordCatalog] = None,
        config: Optional[RecognizerConfig] = None,
        adapter: Optional[InferenceAdapter] = None,
    ):
        """
        Initialize ChordRecognizer.

        Args:
            catalog: Chord catalog (default: the process-wide catalog)
            config: Recognizer configuration (default: RecognizerConfig())
            adapter: Learned scorer (default: heuristic matching only)

        Raises:
            ModelCatalogMismatch: If the adapter was built for another catalog
        """
        self.config = config or RecognizerConfig()
        self.catalog = catalog or default_catalog()

        if adapter is None:
            adapter = InferenceAdapter.unavailable(self.catalog, "no model artifact configured")
        elif adapter.catalog.checksum != self.catalog.checksum:
            raise ModelCatalogMismatch(
                "Inference adapter was built for a different chord catalog",
                expected_size=len(self.catalog),
                actual_size=len(adapter.catalog),
            )
        self.adapter = adapter

        self.analyzer = SpectralAnalyzer(window=self.config.window_function)
        self.peak_extractor = PeakExtractor(self.config.peaks)
        self.profile_builder = ProfileBuilder(self.config.profile)
        self.matcher = HeuristicMatcher(self.catalog)
        self.combiner = DecisionCombiner(self.catalog, self.config.combiner)

    @classmethod
    def from_config(
        cls,
        config: RecognizerConfig,
        catalog: Optional[ChordCatalog] = None,
    ) -> "ChordRecognizer":
        """Build a recognizer, loading the configured model if any."""
        catalog = catalog or default_catalog()
        adapter = None
        if config.model_path:
            adapter = InferenceAdapter.load(config.model_path, catalog)
        return cls(catalog=catalog, config=config, adapter=adapter)

    @property
    def uses_model(self) -> bool:
        return self.adapter.available

    def recognize(self, window: AnalysisWindow) -> Recognition:
        """
        Recognize the chord in one analysis window.

        Raises:
            InvalidWindowSize: If the window length is not a supported power of two
        """
        spectrum = self.analyzer.analyze(window)
        peaks = self.peak_extractor.extract(spectrum)
        profile = self.profile_builder.build(peaks)

        if profile.is_empty:
            decision = Decision()
        else:
            top_k = self.config.combiner.top_k
            heuristic = self.matcher.rank(profile, spectrum, top_k=top_k)
            learned = self.adapter.score(profile, spectrum) if self.adapter.available else None
            decision = self.combiner.combine(heuristic, learned)

        logger.debug(
            "Window %.3fs: %d peaks, best=%s",
            window.start,
            len(peaks),
            decision.best.name if decision.best else None,
        )

        return Recognition(
            window=window,
            spectrum=spectrum,
            peaks=tuple(peaks),
            profile=profile,
            decision=decision,
        )

    def recognize_stream(self, windows: Iterable[AnalysisWindow]) -> Iterator[Recognition]:
        """Recognize windows one at a time, in order."""
        for window in windows:
            yield self.recognize(window)

    def recognize_many(
        self,
        windows: Iterable[AnalysisWindow],
        max_workers: Optional[int] = None,
    ) -> List[Recognition]:
        """
        Recognize independent windows in parallel.

        Returns:
            Recognitions in the same order as the input windows
        """
        windows = list(windows)
        if not windows:
            return []
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.recognize, windows))

    def recognize_samples(
        self,
        samples: SampleBuffer,
        sample_rate: int,
    ) -> Iterator[Recognition]:
        """Frame a mono clip with the configured window size and hop, then recognize it."""
        windows = iter_windows(
            samples,
            sample_rate,
            self.config.window_size,
            self.config.hop_length,
        )
        return self.recognize_stream(windows)

    def recognize_file(
        self,
        path: Union[str, Path],
        loader: Optional[AudioLoader] = None,
    ) -> List[Recognition]:
        """Load an audio file and recognize every window."""
        loader = loader or AudioLoader()
        audio, sr = loader.load(str(path))
        logger.info("Loaded %s: %.2fs at %d Hz", path, loader.get_duration(audio, sr), sr)
        return list(self.recognize_samples(audio, sr))

    def detect_notes(self, window: AnalysisWindow) -> List[Note]:
        """Distinct notes sounding in a window, lowest first."""
        spectrum = self.analyzer.analyze(window)
        peaks = self.peak_extractor.extract(spectrum)
        return detect_notes(peaks, self.config.profile.a4_frequency)

    def identify_text(self, text: str) -> ChordTemplate:
        """Parse chord notation against this recognizer's catalog."""
        return self.catalog.parse(text)

    def identify_notes(self, notes: Iterable[Note], top_k: Optional[int] = None) -> List[Candidate]:
        """Rank chords for a symbolic set of notes."""
        top_k = top_k or self.config.combiner.top_k
        return self.catalog.identify(notes, top_k=top_k)
