"""
Configuration loader — reads selaudit.yml into an AuditConfig.

The config file is optional. Without one the audit runs against the
current kubectl context across all namespaces.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from selector_audit.core.models.config import AuditConfig

logger = logging.getLogger(__name__)

# Default config filename
AUDIT_CONFIG_FILE = "selaudit.yml"


class ConfigError(Exception):
    """Raised when audit configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for selaudit.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to selaudit.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / AUDIT_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> AuditConfig:
    """Load and validate audit configuration.

    Args:
        path: Explicit path to selaudit.yml. If None, searches upward;
            when nothing is found the defaults are returned.

    Returns:
        Validated AuditConfig model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", AUDIT_CONFIG_FILE)
            return AuditConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading audit config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return AuditConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "audit" key or be flat
    audit_data = data.get("audit", data)

    try:
        config = AuditConfig.model_validate(audit_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid audit configuration: {e}") from e

    logger.info(
        "Loaded audit config (%s namespaces, %d excluded)",
        len(config.namespaces) or "all",
        len(config.exclude_namespaces),
    )
    return config
