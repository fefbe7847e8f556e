"""
Tests for domain models — serialization, validation, rendering.
"""

import json

import pytest
from pydantic import ValidationError

from selector_audit.core.models import (
    OWNER_KINDS,
    AuditConfig,
    OwnerSelector,
    Registration,
    SelectorCollision,
    SelectorRole,
    ServiceSelector,
)


class TestSelectorRole:
    def test_values(self):
        assert SelectorRole.SERVICE.value == "service"
        assert SelectorRole.APP.value == "app"

    def test_from_string(self):
        assert SelectorRole("app") is SelectorRole.APP


class TestSelectorCollision:
    def _collision(self, **kwargs) -> SelectorCollision:
        data = {
            "namespace": "shop",
            "role": SelectorRole.SERVICE,
            "identity": "app=web",
            "owner": "web-canary",
            "existing_owner": "web",
        }
        data.update(kwargs)
        return SelectorCollision(**data)

    def test_render_with_kind_and_name(self):
        line = self._collision().render("service", "web-canary")
        assert line == "shop: service web-canary: service already existed: app=web -> web"

    def test_render_app_role(self):
        c = self._collision(
            role=SelectorRole.APP, owner="statefulset/db", existing_owner="deployment/db",
        )
        line = c.render("statefulset", "db")
        assert line == "shop: statefulset db: app already existed: app=web -> deployment/db"

    def test_render_without_kind_uses_owner(self):
        line = self._collision().render()
        assert line.startswith("shop: web-canary: ")

    def test_render_is_single_line(self):
        assert "\n" not in self._collision().render("service", "web-canary")


class TestRegistration:
    def test_recorded(self):
        r = Registration.recorded("ns", SelectorRole.SERVICE, "web", "app=web")
        assert r.status == "ok"
        assert r.ok
        assert not r.skipped
        assert r.collision is None

    def test_skip(self):
        r = Registration.skip("ns", SelectorRole.APP, "deployment/x")
        assert r.status == "skipped"
        assert r.ok
        assert r.skipped
        assert r.identity == ""

    def test_collided(self):
        r = Registration.collided("ns", SelectorRole.APP, "deployment/b", "app=x", "deployment/a")
        assert r.status == "collision"
        assert not r.ok
        assert r.collision == SelectorCollision(
            namespace="ns",
            role=SelectorRole.APP,
            identity="app=x",
            owner="deployment/b",
            existing_owner="deployment/a",
        )

    def test_to_dict_json_safe(self):
        r = Registration.collided("ns", SelectorRole.SERVICE, "b", "app=x", "a")
        data = json.loads(json.dumps(r.to_dict()))
        assert data["role"] == "service"
        assert data["collision"]["existing_owner"] == "a"

    def test_to_dict_omits_missing_collision(self):
        r = Registration.recorded("ns", SelectorRole.SERVICE, "a", "app=x")
        assert "collision" not in r.to_dict()


class TestResources:
    def test_service_owner_label_is_name(self):
        s = ServiceSelector(namespace="ns", name="web", selector={"app": "web"})
        assert s.owner_label == "web"

    @pytest.mark.parametrize("kind", OWNER_KINDS)
    def test_owner_label_has_kind_prefix(self, kind: str):
        o = OwnerSelector(namespace="ns", kind=kind, name="db")
        assert o.owner_label == f"{kind}/db"

    def test_owner_rejects_other_kinds(self):
        with pytest.raises(ValidationError):
            OwnerSelector(namespace="ns", kind="daemonset", name="x")

    def test_selector_defaults_empty(self):
        assert ServiceSelector(namespace="ns", name="x").selector == {}


class TestAuditConfig:
    def test_defaults(self):
        c = AuditConfig()
        assert c.context is None
        assert c.kubeconfig is None
        assert c.namespaces == []
        assert c.exclude_namespaces == []
        assert c.timeout == 30
        assert c.manifest_dirs == []

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            AuditConfig(timeout=0)

    def test_is_excluded(self):
        c = AuditConfig(exclude_namespaces=["kube-system"])
        assert c.is_excluded("kube-system")
        assert not c.is_excluded("default")
