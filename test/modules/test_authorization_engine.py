import pytest
from datetime import datetime, timedelta, timezone

from tenant_admin.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from tenant_admin.modules.authorization.schemas import DenyReason

from conftest import ADMIN_ID, OTHER_USER_ID, SUPER_ADMIN_ID, USER_ID, VIEWER_ID


def test_unknown_tenant_is_not_found(engine):
    decision = engine.authorize(SUPER_ADMIN_ID, "missing", "read")
    assert not decision.allowed
    assert decision.reason == DenyReason.NOT_FOUND


@pytest.mark.parametrize("principal", [SUPER_ADMIN_ID, ADMIN_ID, VIEWER_ID, USER_ID, OTHER_USER_ID])
@pytest.mark.parametrize("level", ["read", "write", "admin"])
def test_suspended_tenant_denies_everyone(db, engine, principal, level):
    db.add_tenant("acme_corp", status="suspended")
    db.add_grant(USER_ID, "acme_corp", "admin")

    decision = engine.authorize(principal, "acme_corp", level)
    assert not decision.allowed
    assert decision.reason == DenyReason.SUSPENDED


@pytest.mark.parametrize("principal", [SUPER_ADMIN_ID, ADMIN_ID, VIEWER_ID])
def test_admins_allowed_on_active_tenant_without_grant(db, engine, principal):
    db.add_tenant("acme_corp")
    assert engine.authorize(principal, "acme_corp", "admin").allowed


def test_grant_scenario(db, registry, grants, engine):
    registry.create("acme_corp", None, ADMIN_ID)
    grants.grant(USER_ID, "acme_corp", "write", ADMIN_ID)

    assert engine.authorize(USER_ID, "acme_corp", "write").allowed
    assert engine.authorize(USER_ID, "acme_corp", "read").allowed
    denied = engine.authorize(USER_ID, "acme_corp", "admin")
    assert not denied.allowed
    assert denied.reason == DenyReason.INSUFFICIENT_ACCESS

    registry.set_status("acme_corp", "suspended", ADMIN_ID)
    suspended = engine.authorize(USER_ID, "acme_corp", "read")
    assert suspended.reason == DenyReason.SUSPENDED
    assert grants.has_access(USER_ID, "acme_corp", "write")


def test_expired_grant_is_insufficient(db, engine):
    db.add_tenant("acme_corp")
    db.add_grant(USER_ID, "acme_corp", "admin", expires_at=datetime.now(timezone.utc) - timedelta(seconds=5))
    assert engine.authorize(USER_ID, "acme_corp", "read").reason == DenyReason.INSUFFICIENT_ACCESS


def test_no_grant_is_insufficient(db, engine):
    db.add_tenant("acme_corp")
    assert engine.authorize(USER_ID, "acme_corp", "read").reason == DenyReason.INSUFFICIENT_ACCESS


def test_invalid_level(db, engine):
    db.add_tenant("acme_corp")
    with pytest.raises(ValidationError):
        engine.authorize(USER_ID, "acme_corp", "superuser")


def test_decisions_reflect_current_state(db, registry, engine):
    db.add_tenant("acme_corp")
    db.add_grant(USER_ID, "acme_corp", "read")
    assert engine.authorize(USER_ID, "acme_corp").allowed

    registry.grants.revoke(USER_ID, "acme_corp", ADMIN_ID)
    assert not engine.authorize(USER_ID, "acme_corp").allowed


def test_require_raises_matching_errors(db, engine):
    db.add_tenant("acme_corp")
    db.add_tenant("frozen", status="suspended")

    engine.require(ADMIN_ID, "acme_corp", "admin")
    with pytest.raises(NotFoundError):
        engine.require(USER_ID, "missing")
    with pytest.raises(PermissionDeniedError) as suspended:
        engine.require(SUPER_ADMIN_ID, "frozen")
    assert suspended.value.details == {"reason": "SUSPENDED"}
    with pytest.raises(PermissionDeniedError) as insufficient:
        engine.require(USER_ID, "acme_corp", "write")
    assert insufficient.value.details == {"reason": "INSUFFICIENT_ACCESS"}
