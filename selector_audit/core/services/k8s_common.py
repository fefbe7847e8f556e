"""
K8s shared constants and low-level helpers.

Imported by the source modules. Must NOT import from any sibling
source module to avoid circular imports.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

import yaml

from selector_audit.core.models.config import AuditConfig

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Constants
# ═══════════════════════════════════════════════════════════════════


_SKIP_DIRS = frozenset({
    ".git", ".venv", "venv", "node_modules", "__pycache__",
    ".mypy_cache", ".ruff_cache", ".pytest_cache", ".tox",
    "dist", "build", ".eggs", "htmlcov",
})

# kubectl resource name → feed kind
_SERVICE_RESOURCE = "services"
_OWNER_RESOURCES: dict[str, str] = {
    "deployments": "deployment",
    "statefulsets": "statefulset",
}

# manifest ``kind:`` → feed kind
_MANIFEST_KINDS: dict[str, str] = {
    "Service": "service",
    "Deployment": "deployment",
    "StatefulSet": "statefulset",
}


# ═══════════════════════════════════════════════════════════════════
#  Shared Helpers
# ═══════════════════════════════════════════════════════════════════


def _run_kubectl(
    *args: str,
    timeout: int = 15,
) -> subprocess.CompletedProcess[str]:
    """Run a kubectl command and return the result."""
    return subprocess.run(
        ["kubectl", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def _kubectl_available() -> dict:
    """Check if kubectl is available and configured.

    Uses ``kubectl version --client -o json`` (the ``--short`` flag
    was removed in kubectl v1.28+).
    """
    try:
        result = _run_kubectl("version", "--client", "-o", "json")
        if result.returncode == 0:
            try:
                data = json.loads(result.stdout)
                version = data.get("clientVersion", {}).get("gitVersion", "")
            except (ValueError, AttributeError):
                # Fall back to raw output
                version = result.stdout.strip()
            return {"available": True, "version": version}
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return {"available": False, "version": None}


def _kubectl_base_args(config: AuditConfig) -> list[str]:
    """Global kubectl flags derived from the audit config."""
    args: list[str] = []
    if config.kubeconfig:
        args.extend(["--kubeconfig", config.kubeconfig])
    if config.context:
        args.extend(["--context", config.context])
    return args


def _parse_k8s_yaml(path: Path) -> list[dict]:
    """Parse a YAML file and return K8s resource dicts.

    ``kind: List`` documents are expanded into their items.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return []

    resources: list[dict] = []
    try:
        for doc in yaml.safe_load_all(content):
            if not doc or not isinstance(doc, dict):
                continue
            if doc.get("kind") == "List" and isinstance(doc.get("items"), list):
                resources.extend(i for i in doc["items"] if isinstance(i, dict) and "kind" in i)
            elif "kind" in doc and "apiVersion" in doc:
                resources.append(doc)
    except yaml.YAMLError as e:
        logger.debug("Skipping invalid YAML %s: %s", path, e)
        return []

    return resources


def _collect_yaml_files(root: Path, dirs: list[str] | None = None) -> list[Path]:
    """Collect YAML files under ``root`` (or ``root/<dir>`` for each dir), sorted."""
    files: set[Path] = set()

    search_dirs = [root / d for d in dirs] if dirs else [root]

    for search_dir in search_dirs:
        if not search_dir.is_dir():
            logger.debug("Manifest dir %s does not exist", search_dir)
            continue
        for ext in ("*.yaml", "*.yml"):
            for f in search_dir.rglob(ext):
                if any(part in _SKIP_DIRS for part in f.relative_to(search_dir).parts):
                    continue
                files.add(f)

    return sorted(files)
