"""
Registration and SelectorCollision models — the registry contract.

The namespace registry answers every registration with a Registration.
A duplicate selector is an expected finding, not a program fault, so
it comes back as a ``collision`` Registration carrying a
SelectorCollision. The registry never raises for it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel


class SelectorRole(StrEnum):
    """The two independently tracked selector registries."""

    SERVICE = "service"   # Service.spec.selector
    APP = "app"           # Deployment/StatefulSet .spec.selector.matchLabels


class SelectorCollision(BaseModel):
    """Two resources of one role in one namespace share a selector."""

    namespace: str
    role: SelectorRole
    identity: str           # canonical key=value,... form
    owner: str              # incoming resource that lost
    existing_owner: str     # resource that registered first

    def render(self, kind: str = "", name: str = "") -> str:
        """Render as a single diagnostic line.

        ``kind`` and ``name`` describe the incoming resource. When
        omitted the owner label is used as-is.
        """
        subject = f"{kind} {name}" if kind else self.owner
        return (
            f"{self.namespace}: {subject}: {self.role.value} already existed: "
            f"{self.identity} -> {self.existing_owner}"
        )


class Registration(BaseModel):
    """Outcome of one register call."""

    namespace: str
    role: SelectorRole
    owner: str
    identity: str = ""
    status: Literal["ok", "skipped", "collision"] = "ok"
    collision: SelectorCollision | None = None

    @property
    def ok(self) -> bool:
        """Whether the identity was recorded or skipped (nothing to report)."""
        return self.status != "collision"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def recorded(cls, namespace: str, role: SelectorRole, owner: str, identity: str) -> Registration:
        """Create a success registration."""
        return cls(namespace=namespace, role=role, owner=owner, identity=identity)

    @classmethod
    def skip(cls, namespace: str, role: SelectorRole, owner: str) -> Registration:
        """Create a no-op registration for an unset selector."""
        return cls(namespace=namespace, role=role, owner=owner, status="skipped")

    @classmethod
    def collided(
        cls,
        namespace: str,
        role: SelectorRole,
        owner: str,
        identity: str,
        existing_owner: str,
    ) -> Registration:
        """Create a collision registration against ``existing_owner``."""
        return cls(
            namespace=namespace,
            role=role,
            owner=owner,
            identity=identity,
            status="collision",
            collision=SelectorCollision(
                namespace=namespace,
                role=role,
                identity=identity,
                owner=owner,
                existing_owner=existing_owner,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
