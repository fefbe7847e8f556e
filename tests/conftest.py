"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from selector_audit.core.services.registry import NamespaceRegistry


@pytest.fixture
def registry() -> NamespaceRegistry:
    """A fresh registry per test."""
    return NamespaceRegistry()


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Write a dedented YAML file under tmp_path and return its path."""

    def _write(rel_path: str, content: str) -> Path:
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
        return path

    return _write
