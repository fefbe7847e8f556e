"""
Namespace registry — per-namespace, per-role selector ownership.

Each NamespaceRecord keeps one ``identity → owner`` map per
SelectorRole. The first resource to register an identity owns it;
every later resource with the same identity and role gets a
``collision`` Registration naming that owner, and the map is left
untouched.

Thread safety model
───────────────────
- ``NamespaceRegistry._lock`` guards get-or-create of records.
- ``NamespaceRecord._lock`` guards both role maps of that record, so
  check-then-insert is atomic per namespace.
- Canonicalization runs outside any lock (pure function).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from selector_audit.core.models.registration import Registration, SelectorRole
from selector_audit.core.services.labels import canonicalize

logger = logging.getLogger(__name__)


@dataclass
class NamespaceRecord:
    """Selector identities claimed inside one namespace."""

    namespace: str
    service_selectors: dict[str, str] = field(default_factory=dict)
    app_selectors: dict[str, str] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def selectors(self, role: SelectorRole) -> dict[str, str]:
        """The ``identity → owner`` map for ``role``."""
        if role == SelectorRole.SERVICE:
            return self.service_selectors
        return self.app_selectors

    def register(
        self,
        role: SelectorRole,
        labels: Mapping[str, str] | None,
        owner: str,
    ) -> Registration:
        """Claim the identity of ``labels`` for ``owner`` under ``role``."""
        identity = canonicalize(labels)
        if not identity:
            logger.debug("%s: %s %s has no selector, skipped", self.namespace, role.value, owner)
            return Registration.skip(self.namespace, role, owner)

        with self._lock:
            selectors = self.selectors(role)
            existing = selectors.get(identity)
            if existing is None:
                selectors[identity] = owner
        if existing is not None:
            return Registration.collided(self.namespace, role, owner, identity, existing)

        logger.debug("%s: %s %s -> %s", self.namespace, role.value, identity, owner)
        return Registration.recorded(self.namespace, role, owner, identity)

    def register_service_selector(
        self, labels: Mapping[str, str] | None, owner: str,
    ) -> Registration:
        return self.register(SelectorRole.SERVICE, labels, owner)

    def register_app_selector(
        self, labels: Mapping[str, str] | None, owner: str,
    ) -> Registration:
        return self.register(SelectorRole.APP, labels, owner)

    def owner_of(self, role: SelectorRole, labels: Mapping[str, str] | None) -> str | None:
        """Owner recorded for the identity of ``labels``, if any."""
        identity = canonicalize(labels)
        if not identity:
            return None
        with self._lock:
            return self.selectors(role).get(identity)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "namespace": self.namespace,
                "service_selectors": dict(self.service_selectors),
                "app_selectors": dict(self.app_selectors),
            }


class NamespaceRegistry:
    """All NamespaceRecords of one audit run.

    Construct one per run and pass it to whatever does the
    registering. Records are created on first reference and never
    removed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, NamespaceRecord] = {}

    def find_or_create(self, namespace: str) -> NamespaceRecord:
        """Get or create the record for ``namespace``."""
        with self._lock:
            record = self._records.get(namespace)
            if record is None:
                record = NamespaceRecord(namespace=namespace)
                self._records[namespace] = record
            return record

    def get(self, namespace: str) -> NamespaceRecord | None:
        """Existing record for ``namespace``, without creating one."""
        with self._lock:
            return self._records.get(namespace)

    def register(
        self,
        namespace: str,
        role: SelectorRole,
        labels: Mapping[str, str] | None,
        owner: str,
    ) -> Registration:
        """Shorthand for ``find_or_create(namespace).register(...)``."""
        return self.find_or_create(namespace).register(role, labels, owner)

    def namespaces(self) -> list[str]:
        with self._lock:
            return sorted(self._records)

    def __contains__(self, namespace: object) -> bool:
        with self._lock:
            return namespace in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[NamespaceRecord]:
        with self._lock:
            records = list(self._records.values())
        return iter(records)

    def to_dict(self) -> dict[str, Any]:
        """Serialize every record, keyed by namespace (sorted)."""
        records = sorted(self, key=lambda r: r.namespace)
        return {r.namespace: r.to_dict() for r in records}
