"""
AuditConfig — optional settings loaded from selaudit.yml.

Every field has a default, so an absent config file means
"audit every namespace of the current kubectl context".
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class AuditConfig(BaseModel):
    """Audit configuration declared in selaudit.yml."""

    context: str | None = None          # kubectl --context
    kubeconfig: str | None = None       # kubectl --kubeconfig
    namespaces: list[str] = Field(default_factory=list)   # empty = all
    exclude_namespaces: list[str] = Field(default_factory=list)
    timeout: int = 30                   # seconds per kubectl call
    manifest_dirs: list[str] = Field(default_factory=list)

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        return v

    def is_excluded(self, namespace: str) -> bool:
        """Whether items in ``namespace`` are dropped from the feeds."""
        return namespace in self.exclude_namespaces
