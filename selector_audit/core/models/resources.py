"""
Resource feed items — what the sources hand to the audit.

The audit only ever sees a namespace, a name and a selector mapping
per resource; everything else about the cluster object is dropped by
the source that produced it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

OWNER_KINDS: tuple[str, ...] = ("deployment", "statefulset")


class ServiceSelector(BaseModel):
    """A Service and the labels it uses to pick target pods."""

    namespace: str
    name: str
    selector: dict[str, str] = Field(default_factory=dict)

    @property
    def owner_label(self) -> str:
        return self.name


class OwnerSelector(BaseModel):
    """A Deployment or StatefulSet and the labels it claims pods with."""

    namespace: str
    kind: Literal["deployment", "statefulset"]
    name: str
    selector: dict[str, str] = Field(default_factory=dict)

    @property
    def owner_label(self) -> str:
        """``<kind>/<name>``, e.g. ``deployment/web``."""
        return f"{self.kind}/{self.name}"
