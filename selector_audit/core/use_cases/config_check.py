"""
Config check use case — validate selaudit.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from selector_audit.core.config.loader import ConfigError, find_config_file, load_config
from selector_audit.core.models.config import AuditConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: AuditConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "config": self.config.model_dump() if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate audit configuration and report issues.

    Args:
        config_path: Optional explicit path to selaudit.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    result.config_path = config_path

    if config_path is None:
        result.warnings.append("No selaudit.yml found. Defaults apply.")

    try:
        config = load_config(config_path) if config_path else AuditConfig()
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    # Semantic checks
    overlap = sorted(set(config.namespaces) & set(config.exclude_namespaces))
    if overlap:
        result.errors.append(
            f"Namespaces both included and excluded: {', '.join(overlap)}"
        )

    dupes = sorted({n for n in config.namespaces if config.namespaces.count(n) > 1})
    if dupes:
        result.warnings.append(
            f"Duplicate namespaces: {', '.join(dupes)}. Each is audited once."
        )

    if config.manifest_dirs and config_path is not None:
        root = config_path.parent
        for d in config.manifest_dirs:
            if not (root / d).is_dir():
                result.warnings.append(f"Manifest dir does not exist: {d}")

    result.valid = len(result.errors) == 0
    return result
