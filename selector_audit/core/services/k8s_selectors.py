"""K8s selector sources — the service and owner feeds of an audit.

Two sources produce the same shape:

    {"ok": True, "services": [ServiceSelector, ...], "owners": [OwnerSelector, ...]}
    {"ok": False, "error": "..."}

- Cluster: ``kubectl get <resource> -o json`` for services, then
  deployments, then statefulsets.
- Manifests: ``*.yaml`` / ``*.yml`` files on disk, offline.

Items keep the order they were listed or read in; the registry decides
ownership by that order.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from selector_audit.core.models.config import AuditConfig
from selector_audit.core.models.resources import OwnerSelector, ServiceSelector
from selector_audit.core.services.k8s_common import (
    _MANIFEST_KINDS,
    _OWNER_RESOURCES,
    _SERVICE_RESOURCE,
    _collect_yaml_files,
    _kubectl_available,
    _kubectl_base_args,
    _parse_k8s_yaml,
    _run_kubectl,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Item parsing (pure)
# ═══════════════════════════════════════════════════════════════════


def _selector_labels(raw: Any) -> dict[str, str]:
    """Coerce a raw selector mapping to ``dict[str, str]``.

    Manifest YAML may hold unquoted numbers or booleans; ``None``
    values become ``""`` so canonicalization drops them.
    """
    if not isinstance(raw, dict):
        return {}
    labels: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = "true" if value else "false"
        labels[str(key)] = str(value)
    return labels


def _mapping(value: Any) -> dict:
    """``value`` if it is a mapping, else ``{}`` (hand-written YAML may hold anything)."""
    return value if isinstance(value, dict) else {}


def _metadata(item: dict) -> tuple[str, str]:
    """(namespace, name) of a resource dict; namespace defaults to ``default``.

    Unquoted YAML like ``name: 2024`` arrives as an int, so both are coerced.
    """
    metadata = _mapping(item.get("metadata"))
    namespace = metadata.get("namespace")
    name = metadata.get("name")
    return (
        "default" if namespace is None or namespace == "" else str(namespace),
        "" if name is None else str(name),
    )


def _service_from_item(item: dict) -> ServiceSelector:
    """Service selector lives at ``spec.selector``."""
    namespace, name = _metadata(item)
    spec = _mapping(item.get("spec"))
    return ServiceSelector(
        namespace=namespace,
        name=name,
        selector=_selector_labels(spec.get("selector")),
    )


def _owner_from_item(kind: str, item: dict) -> OwnerSelector:
    """Owner selector is ``spec.selector.matchLabels``; matchExpressions are ignored."""
    namespace, name = _metadata(item)
    selector = _mapping(_mapping(item.get("spec")).get("selector"))
    return OwnerSelector(
        namespace=namespace,
        kind=kind,
        name=name,
        selector=_selector_labels(selector.get("matchLabels")),
    )


def _feeds_from_resources(
    resources: list[dict],
    config: AuditConfig,
) -> tuple[list[ServiceSelector], list[OwnerSelector]]:
    """Split mixed resource dicts into the two feeds, honoring namespace filters."""
    services: list[ServiceSelector] = []
    owners: list[OwnerSelector] = []

    for res in resources:
        kind_name = res.get("kind")
        kind = _MANIFEST_KINDS.get(kind_name) if isinstance(kind_name, str) else None
        if kind is None:
            continue
        namespace, _ = _metadata(res)
        if not _namespace_wanted(namespace, config):
            continue
        if kind == "service":
            services.append(_service_from_item(res))
        else:
            owners.append(_owner_from_item(kind, res))

    return services, owners


def _namespace_wanted(namespace: str, config: AuditConfig) -> bool:
    if config.is_excluded(namespace):
        return False
    return not config.namespaces or namespace in config.namespaces


# ═══════════════════════════════════════════════════════════════════
#  Cluster source (online)
# ═══════════════════════════════════════════════════════════════════


def list_cluster_items(
    resource: str,
    config: AuditConfig | None = None,
    *,
    namespace: str | None = None,
) -> dict:
    """List raw resource dicts from the cluster.

    Args:
        resource: kubectl resource name (``services``, ``deployments``...).
        namespace: Single namespace, or None for all namespaces.

    Returns:
        {"ok": True, "items": [...]} or {"ok": False, "error": "..."}
    """
    config = config or AuditConfig()
    args = [*_kubectl_base_args(config), "get", resource]
    args.extend(["-n", namespace] if namespace else ["-A"])
    args.extend(["-o", "json"])

    try:
        result = _run_kubectl(*args, timeout=config.timeout)
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"kubectl get {resource} timed out after {config.timeout}s"}
    except FileNotFoundError:
        return {"ok": False, "error": "kubectl not available"}

    if result.returncode != 0:
        return {"ok": False, "error": result.stderr.strip() or f"kubectl get {resource} failed"}

    try:
        data = json.loads(result.stdout)
    except ValueError as e:
        return {"ok": False, "error": f"Invalid JSON from kubectl get {resource}: {e}"}

    items = data.get("items", []) if isinstance(data, dict) else []
    logger.info("Listed %d %s%s", len(items), resource, f" in {namespace}" if namespace else "")
    return {"ok": True, "items": items}


def fetch_cluster_selectors(config: AuditConfig | None = None) -> dict:
    """Build both feeds from the live cluster.

    Services are listed first, then deployments, then statefulsets,
    each namespace in configured order (or all namespaces at once).

    Returns:
        {"ok": True, "services": [...], "owners": [...]} or {"ok": False, "error": "..."}
    """
    config = config or AuditConfig()

    kubectl = _kubectl_available()
    if not kubectl.get("available"):
        return {"ok": False, "error": "kubectl not available"}

    scopes: list[str | None] = list(dict.fromkeys(config.namespaces)) or [None]

    services: list[ServiceSelector] = []
    for scope in scopes:
        listed = list_cluster_items(_SERVICE_RESOURCE, config, namespace=scope)
        if not listed["ok"]:
            return listed
        services.extend(
            _service_from_item(item) for item in listed["items"]
            if not config.is_excluded(_metadata(item)[0])
        )

    owners: list[OwnerSelector] = []
    for resource, kind in _OWNER_RESOURCES.items():
        for scope in scopes:
            listed = list_cluster_items(resource, config, namespace=scope)
            if not listed["ok"]:
                return listed
            owners.extend(
                _owner_from_item(kind, item) for item in listed["items"]
                if not config.is_excluded(_metadata(item)[0])
            )

    return {"ok": True, "services": services, "owners": owners}


# ═══════════════════════════════════════════════════════════════════
#  Manifest source (offline)
# ═══════════════════════════════════════════════════════════════════


def scan_manifests(
    root: Path,
    config: AuditConfig | None = None,
    *,
    dirs: list[str] | None = None,
) -> dict:
    """Build both feeds from manifest files on disk.

    Args:
        root: A manifest file, or a directory searched recursively.
        dirs: Subdirectories of ``root`` to search instead of all of it
            (``manifest_dirs`` from selaudit.yml). Each must exist.

    Returns:
        {"ok": True, "services": [...], "owners": [...], "files": [...]}
        or {"ok": False, "error": "..."}
    """
    config = config or AuditConfig()

    if root.is_file():
        files = [root]
    elif root.is_dir():
        missing = [d for d in dirs or [] if not (root / d).is_dir()]
        if missing:
            return {"ok": False, "error": f"Manifest dir not found: {', '.join(missing)} (under {root})"}
        files = _collect_yaml_files(root, dirs)
    else:
        return {"ok": False, "error": f"Path not found: {root}"}

    resources: list[dict] = []
    for path in files:
        resources.extend(_parse_k8s_yaml(path))

    services, owners = _feeds_from_resources(resources, config)
    logger.info(
        "Scanned %d manifest files: %d services, %d owners",
        len(files), len(services), len(owners),
    )
    return {
        "ok": True,
        "services": services,
        "owners": owners,
        "files": [str(f) for f in files],
    }
