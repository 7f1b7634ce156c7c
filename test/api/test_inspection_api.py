import pytest
from datetime import datetime, timedelta, timezone

from tenant_admin.config.settings import settings
from tenant_admin.database.supabase_client import TENANTS_TABLE

from conftest import ADMIN_ID, OTHER_USER_ID, SUPER_ADMIN_ID, USER_ID

TABLES = [
    {"table_name": "settings", "column_count": 4, "row_count": 0, "table_size": "16 kB", "description": None},
    {"table_name": "users", "column_count": 6, "row_count": 0, "table_size": "32 kB", "description": "App users"},
]
COLUMNS = [
    {"column_name": "id", "data_type": "uuid", "is_nullable": False,
     "column_default": "gen_random_uuid()", "is_primary_key": True},
    {"column_name": "email", "data_type": "text", "is_nullable": True,
     "column_default": None, "is_primary_key": False},
]


@pytest.fixture
def acme(db):
    db.rpc_results[settings.rpc_schema_tables] = TABLES
    db.rpc_results[settings.rpc_table_columns] = COLUMNS
    db.rpc_results[settings.rpc_schema_summary] = [
        {"total_tables": 2, "total_size": "48 kB", "created_at": "2026-01-01T00:00:00+00:00", "status": "active"}
    ]
    return db.add_tenant("acme_corp")


def test_list_tables_with_read_grant(client, db, act_as, acme):
    db.add_grant(USER_ID, "acme_corp", "read")
    act_as(USER_ID)

    response = client.get("/api/v1/tenants/acme_corp/tables")

    assert response.status_code == 200
    body = response.json()
    assert body["schema_name"] == "acme_corp"
    assert [t["table_name"] for t in body["tables"]] == ["settings", "users"]
    assert body["tables"][1]["description"] == "App users"
    assert db.rpc_calls == [(settings.rpc_schema_tables, {"target_schema": "acme_corp"})]


def test_table_columns_with_read_grant(client, db, act_as, acme):
    db.add_grant(USER_ID, "acme_corp", "read")
    act_as(USER_ID)

    response = client.get("/api/v1/tenants/acme_corp/tables/users/columns")

    assert response.status_code == 200
    body = response.json()
    assert body["table_name"] == "users"
    assert [c["column_name"] for c in body["columns"]] == ["id", "email"]
    assert body["columns"][0]["is_primary_key"] is True
    assert db.rpc_calls == [
        (settings.rpc_table_columns, {"target_schema": "acme_corp", "target_table": "users"})
    ]


def test_schema_summary(client, db, act_as, acme):
    act_as(ADMIN_ID)

    response = client.get("/api/v1/tenants/acme_corp/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["schema_name"] == "acme_corp"
    assert body["total_tables"] == 2
    assert body["total_size"] == "48 kB"


def test_inspection_without_grant_is_denied(client, db, act_as, acme):
    act_as(OTHER_USER_ID)

    for path in ("tables", "tables/users/columns", "summary"):
        response = client.get(f"/api/v1/tenants/acme_corp/{path}")
        assert response.status_code == 403
        assert response.json()["details"] == {"reason": "INSUFFICIENT_ACCESS"}
    assert db.rpc_calls == []


def test_expired_grant_does_not_allow_inspection(client, db, act_as, acme):
    db.add_grant(USER_ID, "acme_corp", "admin", expires_at=datetime.now(timezone.utc) - timedelta(days=1))
    act_as(USER_ID)

    assert client.get("/api/v1/tenants/acme_corp/tables").status_code == 403
    assert db.rpc_calls == []


@pytest.mark.parametrize("path", ["tables", "tables/users/columns", "summary"])
def test_suspended_schema_is_not_inspectable_by_super_admin(client, db, act_as, acme, path):
    db.tables[TENANTS_TABLE][0]["status"] = "suspended"
    act_as(SUPER_ADMIN_ID)

    response = client.get(f"/api/v1/tenants/acme_corp/{path}")

    assert response.status_code == 403
    assert response.json()["details"] == {"reason": "SUSPENDED"}
    assert db.rpc_calls == []


def test_unknown_schema_is_not_found(client, db, act_as):
    act_as(SUPER_ADMIN_ID)
    assert client.get("/api/v1/tenants/ghost_app/tables").status_code == 404
    assert db.rpc_calls == []


def test_invalid_table_name_is_rejected(client, db, act_as, acme):
    act_as(ADMIN_ID)

    response = client.get("/api/v1/tenants/acme_corp/tables/bad-name/columns")

    assert response.status_code == 400
    assert db.rpc_calls == []


def test_executor_failure_is_bad_gateway(client, db, act_as, acme):
    db.rpc_errors[settings.rpc_schema_tables] = Exception("statement timeout")
    act_as(ADMIN_ID)

    response = client.get("/api/v1/tenants/acme_corp/tables")

    assert response.status_code == 502
    assert response.json()["details"]["operation"] == "list_tables"
