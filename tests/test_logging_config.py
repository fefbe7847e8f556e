"""
Tests for logging configuration — level resolution and handler setup.
"""

import logging
from pathlib import Path

import pytest

from selector_audit.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    ENV_LEVEL,
    _parse_level,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_debug_wins(self):
        assert resolve_level(debug=True, verbose=True, quiet=True) == logging.DEBUG

    def test_verbose(self):
        assert resolve_level(verbose=True, quiet=True) == logging.INFO

    def test_quiet(self):
        assert resolve_level(quiet=True) == logging.ERROR

    def test_flag_beats_env(self):
        assert resolve_level(quiet=True, env_level="DEBUG") == logging.ERROR

    def test_env_fallback(self):
        assert resolve_level(env_level="info") == logging.INFO

    def test_default(self):
        assert resolve_level() == logging.WARNING


class TestParseLevel:
    @pytest.mark.parametrize("name,expected", [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        (" error ", logging.ERROR),
        ("nonsense", logging.WARNING),
        (None, logging.WARNING),
        ("", logging.WARNING),
    ])
    def test_levels(self, name, expected):
        assert _parse_level(name) == expected

    def test_custom_default(self):
        assert _parse_level("nonsense", default=logging.INFO) == logging.INFO


class TestSetupLogging:
    def test_single_console_handler(self):
        assert setup_logging(verbose=True, environ={}) == logging.INFO
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_env_level(self):
        assert setup_logging(environ={ENV_LEVEL: "ERROR"}) == logging.ERROR
        assert logging.getLogger().level == logging.ERROR

    def test_plain_format_by_default(self):
        setup_logging(environ={})
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "kubectl slow", None, None)
        assert logging.getLogger().handlers[0].format(record) == "selaudit: WARNING: kubectl slow"

    def test_debug_format_names_the_module(self):
        setup_logging(debug=True, environ={})
        record = logging.LogRecord(
            "selector_audit.core.use_cases.audit", logging.DEBUG, __file__, 42, "collision", None, None,
        )
        line = logging.getLogger().handlers[0].format(record)
        assert "selector_audit.core.use_cases.audit:42 collision" in line

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "audit.log"
        setup_logging(environ={ENV_FILE: str(log_file), ENV_FILE_LEVEL: "DEBUG"})
        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert root.level == logging.DEBUG
        # console stays at the default level
        assert root.handlers[0].level == logging.WARNING

        logging.getLogger("selector_audit.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert "hello file" in log_file.read_text()

    def test_file_level_defaults_to_console_level(self, tmp_path: Path):
        setup_logging(verbose=True, environ={ENV_FILE: str(tmp_path / "audit.log")})
        assert logging.getLogger().handlers[1].level == logging.INFO
