"""
Logging for the selaudit CLI.

Collision lines and the summary are command output and go to stdout
through click. Logging carries diagnostics only, on stderr:

    -q        errors
    default   warnings (kubectl trouble, skipped files)
    -v        + listing counts and the audit summary, timestamped
    --debug   + every collision as it is recorded, with module:line

Without a flag, SELAUDIT_LOG_LEVEL picks the console level.
SELAUDIT_LOG_FILE adds a file handler at SELAUDIT_LOG_FILE_LEVEL
(default: the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "SELAUDIT_LOG_LEVEL"
ENV_FILE = "SELAUDIT_LOG_FILE"
ENV_FILE_LEVEL = "SELAUDIT_LOG_FILE_LEVEL"

# Console formats by the most verbose level they serve
_CONSOLE_FORMATS: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s %(levelname)-5s %(message)s", "%H:%M:%S"),
}
_FMT_PLAIN = "selaudit: %(levelname)s: %(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def _parse_level(level: str | None, default: int = logging.WARNING) -> int:
    """Convert a level name to its numeric constant; unknown names give ``default``."""
    if not level:
        return default
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else default


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> int:
    """Pick the console level: --debug > --verbose > --quiet > env > WARNING."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    return _parse_level(env_level)


def _console_formatter(level: int) -> logging.Formatter:
    for threshold in (logging.DEBUG, logging.INFO):
        if level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_FMT_PLAIN)


def setup_logging(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Configure the root logger for one selaudit invocation.

    Args:
        debug, verbose, quiet: The global CLI flags.
        environ: Where the SELAUDIT_LOG_* variables are read
            (default: ``os.environ``).

    Returns:
        The console level in effect.
    """
    environ = os.environ if environ is None else environ
    level = resolve_level(
        debug=debug,
        verbose=verbose,
        quiet=quiet,
        env_level=environ.get(ENV_LEVEL),
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_console_formatter(level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    root_level = level
    log_file = environ.get(ENV_FILE)
    if log_file:
        file_level = _parse_level(environ.get(ENV_FILE_LEVEL), default=level)
        root_level = min(root_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(root_level)

    # A closed console stream must not turn a log call into a crash
    logging.raiseExceptions = False
    return level
