"""
Audit use case — push both feeds through a NamespaceRegistry.

Services are registered first, then owners, each in the order the
source produced them. A collision is logged and recorded; it never
stops the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from selector_audit.core.models.config import AuditConfig
from selector_audit.core.models.registration import Registration, SelectorCollision, SelectorRole
from selector_audit.core.models.resources import OwnerSelector, ServiceSelector
from selector_audit.core.services.registry import NamespaceRegistry

logger = logging.getLogger(__name__)


@dataclass
class CollisionReport:
    """A collision plus the resource that triggered it."""

    collision: SelectorCollision
    kind: str
    name: str

    @property
    def line(self) -> str:
        return self.collision.render(self.kind, self.name)

    def to_dict(self) -> dict:
        return {
            "namespace": self.collision.namespace,
            "role": self.collision.role.value,
            "identity": self.collision.identity,
            "kind": self.kind,
            "name": self.name,
            "owner": self.collision.owner,
            "existing_owner": self.collision.existing_owner,
            "message": self.line,
        }


@dataclass
class AuditResult:
    """Outcome of one audit run."""

    registry: NamespaceRegistry = field(default_factory=NamespaceRegistry)
    collisions: list[CollisionReport] = field(default_factory=list)
    source: str = ""
    error: str | None = None

    # Summary counts
    services_seen: int = 0
    owners_seen: int = 0
    registered: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        if self.error:
            return {"ok": False, "source": self.source, "error": self.error}
        return {
            "ok": True,
            "source": self.source,
            "summary": {
                "namespaces": len(self.registry),
                "services": self.services_seen,
                "owners": self.owners_seen,
                "registered": self.registered,
                "skipped": self.skipped,
                "collisions": len(self.collisions),
            },
            "collisions": [c.to_dict() for c in self.collisions],
            "namespaces": self.registry.to_dict(),
        }

    def record(self, registration: Registration, kind: str, name: str) -> None:
        if registration.skipped:
            self.skipped += 1
            return
        if registration.collision is None:
            self.registered += 1
            return
        report = CollisionReport(collision=registration.collision, kind=kind, name=name)
        logger.debug("collision: %s", report.line)
        self.collisions.append(report)


def run_audit(
    services: Iterable[ServiceSelector],
    owners: Iterable[OwnerSelector],
    registry: NamespaceRegistry | None = None,
    *,
    source: str = "",
) -> AuditResult:
    """Register every service selector, then every owner selector.

    Args:
        services: Feed A, in stream order.
        owners: Feed B, in stream order.
        registry: Registry to fill. A fresh one is created when omitted.

    Returns:
        AuditResult holding the registry and every collision found.
    """
    result = AuditResult(registry=registry if registry is not None else NamespaceRegistry(), source=source)

    for svc in services:
        result.services_seen += 1
        record = result.registry.find_or_create(svc.namespace)
        registration = record.register(SelectorRole.SERVICE, svc.selector, svc.owner_label)
        result.record(registration, "service", svc.name)

    for owner in owners:
        result.owners_seen += 1
        record = result.registry.find_or_create(owner.namespace)
        registration = record.register(SelectorRole.APP, owner.selector, owner.owner_label)
        result.record(registration, owner.kind, owner.name)

    logger.info(
        "Audited %d services and %d owners across %d namespaces: %d collisions",
        result.services_seen, result.owners_seen, len(result.registry), len(result.collisions),
    )
    return result


def audit_cluster(config: AuditConfig | None = None) -> AuditResult:
    """Audit the live cluster reachable through kubectl."""
    from selector_audit.core.services.k8s_selectors import fetch_cluster_selectors

    feeds = fetch_cluster_selectors(config)
    if not feeds.get("ok"):
        return AuditResult(source="cluster", error=feeds.get("error", "unknown error"))
    return run_audit(feeds["services"], feeds["owners"], source="cluster")


def audit_manifests(
    root: Path,
    config: AuditConfig | None = None,
    *,
    dirs: list[str] | None = None,
) -> AuditResult:
    """Audit manifest files under ``root`` (or its ``dirs``) without touching a cluster."""
    from selector_audit.core.services.k8s_selectors import scan_manifests

    feeds = scan_manifests(root, config, dirs=dirs)
    if not feeds.get("ok"):
        return AuditResult(source=str(root), error=feeds.get("error", "unknown error"))
    return run_audit(feeds["services"], feeds["owners"], source=str(root))
