"""
Domain models — Pydantic types for the selector audit.

All models are re-exported here for convenient access:

    from selector_audit.core.models import SelectorRole, Registration, AuditConfig
"""

from selector_audit.core.models.config import AuditConfig
from selector_audit.core.models.registration import (
    Registration,
    SelectorCollision,
    SelectorRole,
)
from selector_audit.core.models.resources import (
    OWNER_KINDS,
    OwnerSelector,
    ServiceSelector,
)

__all__ = [
    # config.py
    "AuditConfig",
    # registration.py
    "Registration",
    "SelectorCollision",
    "SelectorRole",
    # resources.py
    "OWNER_KINDS",
    "OwnerSelector",
    "ServiceSelector",
]
