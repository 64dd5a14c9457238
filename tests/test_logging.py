"""Tests for logging setup."""

import logging

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from chord_recognizer.cli import app
from chord_recognizer.core.logging import LOGGER_NAME, setup_logging

from conftest import C4, E4, G4, generate_chord


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level(self):
        logger = setup_logging("debug")
        assert logger.name == "chord_recognizer"
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

    def test_single_handler(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_warning(self):
        assert setup_logging("chatty").level == logging.WARNING

    def test_module_loggers_inherit_level(self):
        setup_logging("DEBUG")
        child = logging.getLogger("chord_recognizer.pipeline")
        assert child.getEffectiveLevel() == logging.DEBUG


class TestVerboseFlag:
    """Tests for `analyze --verbose`."""

    def test_verbose_emits_debug_records(self, tmp_path, sample_rate, caplog):
        path = tmp_path / "c_major.wav"
        sf.write(str(path), generate_chord([C4, E4, G4], 8192, sample_rate), sample_rate)

        result = CliRunner().invoke(app, ["analyze", str(path), "--verbose"])
        assert result.exit_code == 0, result.output

        debug = [r for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("peaks" in r.getMessage() for r in debug)

    def test_quiet_by_default(self, tmp_path, sample_rate, caplog):
        path = tmp_path / "silence.wav"
        sf.write(str(path), np.zeros(8192), sample_rate)

        result = CliRunner().invoke(app, ["analyze", str(path)])
        assert result.exit_code == 0, result.output
        assert not any(r.levelno == logging.DEBUG for r in caplog.records)
