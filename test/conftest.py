import copy
import uuid
import pytest
from fastapi.testclient import TestClient
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest import mock

from tenant_admin.config.settings import settings
from tenant_admin.core.dependencies import get_current_user_id
from tenant_admin.database.supabase_client import (
    ADMIN_USERS_TABLE, AUDIT_LOG_TABLE, TENANTS_TABLE, USER_SCHEMA_ACCESS_TABLE,
    get_service_supabase, get_supabase
)
from tenant_admin.main import app
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.admins.service import PrincipalDirectory
from tenant_admin.modules.audit.service import AuditRecorder
from tenant_admin.modules.auth.service import clear_auth_cache
from tenant_admin.modules.authorization.engine import AuthorizationEngine
from tenant_admin.modules.buckets.service import BucketService
from tenant_admin.modules.buckets.storage import SupabaseBucketStorage
from tenant_admin.modules.provisioning.executor import SchemaExecutor
from tenant_admin.modules.tenants.lifecycle import LifecycleOrchestrator
from tenant_admin.modules.tenants.service import TenantRegistry

SUPER_ADMIN_ID = "00000000-0000-0000-0000-000000000001"
ADMIN_ID = "00000000-0000-0000-0000-000000000002"
VIEWER_ID = "00000000-0000-0000-0000-000000000003"
USER_ID = "00000000-0000-0000-0000-000000000004"
OTHER_USER_ID = "00000000-0000-0000-0000-000000000005"

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


# In-memory stand-in for the supabase client --------------------------------

class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable query builder mirroring the postgrest calls the services make"""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = None
        self.limit_n = None
        self.offset_n = 0

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, row):
        self.op, self.payload = "insert", row
        return self

    def upsert(self, row, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", row, on_conflict
        return self

    def update(self, values):
        self.op, self.payload = "update", values
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def offset(self, n):
        self.offset_n = n
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        error = self.db.failures.get((self.table, self.op))
        if error is not None:
            raise error
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            found = [copy.deepcopy(r) for r in rows if self._matches(r)]
            if self.order_by:
                column, desc = self.order_by
                found.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
            found = found[self.offset_n:]
            if self.limit_n is not None:
                found = found[:self.limit_n]
            return FakeResult(found)

        if self.op == "insert":
            return FakeResult([self.db.insert_row(self.table, self.payload)])

        if self.op == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            for row in rows:
                if all(row.get(k) == self.payload.get(k) for k in keys):
                    row.update(copy.deepcopy(self.payload))
                    return FakeResult([copy.deepcopy(row)])
            return FakeResult([self.db.insert_row(self.table, self.payload)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResult(updated)

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResult(removed)

        raise AssertionError(f"unsupported op {self.op}")


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        error = self.db.rpc_errors.get(self.name)
        if error is not None:
            raise error
        return FakeResult(self.db.rpc_results.get(self.name))


class FakeStorage:
    def __init__(self):
        self.buckets = {}
        self.fail_create = set()
        self.fail_delete = set()

    def get_bucket(self, bucket_id):
        if bucket_id not in self.buckets:
            raise Exception(f"Bucket not found: {bucket_id}")
        return self.buckets[bucket_id]

    def create_bucket(self, bucket_id, options=None):
        if bucket_id in self.fail_create:
            raise Exception("storage unavailable")
        if bucket_id in self.buckets:
            raise Exception("The resource already exists")
        self.buckets[bucket_id] = SimpleNamespace(id=bucket_id, public=(options or {}).get("public", False))

    def empty_bucket(self, bucket_id):
        if bucket_id in self.fail_delete:
            raise Exception("storage unavailable")

    def delete_bucket(self, bucket_id):
        if bucket_id in self.fail_delete:
            raise Exception("storage unavailable")
        self.buckets.pop(bucket_id, None)


class FakeAuthAdmin:
    def __init__(self, users):
        self.users = users

    def get_user_by_id(self, user_id):
        if user_id not in self.users:
            raise Exception("User not found")
        return SimpleNamespace(user=self.users[user_id])

    def list_users(self, page=None, per_page=None):
        page = page or 1
        per_page = per_page or 50
        start = (page - 1) * per_page
        return list(self.users.values())[start:start + per_page]


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.admin = FakeAuthAdmin(self.users)
        self.get_user = mock.Mock(side_effect=self._get_user)

    def _get_user(self, jwt=None):
        if jwt not in self.tokens:
            raise Exception("invalid JWT: token is expired")
        return SimpleNamespace(user=self.users[self.tokens[jwt]])


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.rpc_calls = []
        self.rpc_errors = {}
        self.rpc_results = {settings.rpc_provision_schema: "created"}
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self._clock = 0

    def _now(self) -> str:
        self._clock += 1
        return (_EPOCH + timedelta(seconds=self._clock)).isoformat()

    def insert_row(self, table, payload):
        row = copy.deepcopy(payload)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._now())
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    # seeding helpers

    def add_user(self, user_id, email, token=None):
        self.auth.users[user_id] = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata={},
            created_at=_EPOCH + timedelta(minutes=len(self.auth.users)),
        )
        if token:
            self.auth.tokens[token] = user_id

    def add_admin(self, user_id, email, role, is_active=True):
        self.insert_row(ADMIN_USERS_TABLE, {
            "id": user_id, "email": email, "role": role, "is_active": is_active,
        })

    def add_tenant(self, schema_name, status="active"):
        return self.insert_row(TENANTS_TABLE, {
            "schema_name": schema_name,
            "display_name": schema_name,
            "status": status,
            "created_by": SUPER_ADMIN_ID,
        })

    def add_grant(self, user_id, schema_name, level, expires_at=None):
        return self.insert_row(USER_SCHEMA_ACCESS_TABLE, {
            "user_id": user_id,
            "tenant_schema": schema_name,
            "access_level": level,
            "granted_by": ADMIN_ID,
            "granted_at": self._now(),
            "expires_at": expires_at.isoformat() if expires_at else None,
        })

    def rows(self, table):
        return self.tables.get(table, [])

    def audit_actions(self):
        return [e["action"] for e in self.rows(AUDIT_LOG_TABLE)]


# Fixtures ------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def db():
    fake = FakeSupabase()
    fake.add_user(SUPER_ADMIN_ID, "root@example.com", token="token-super")
    fake.add_user(ADMIN_ID, "admin@example.com", token="token-admin")
    fake.add_user(VIEWER_ID, "viewer@example.com", token="token-viewer")
    fake.add_user(USER_ID, "user@example.com", token="token-user")
    fake.add_user(OTHER_USER_ID, "other@example.com", token="token-other")
    fake.add_admin(SUPER_ADMIN_ID, "root@example.com", "super_admin")
    fake.add_admin(ADMIN_ID, "admin@example.com", "admin")
    fake.add_admin(VIEWER_ID, "viewer@example.com", "viewer")
    return fake


@pytest.fixture
def audit(db):
    return AuditRecorder(db)


@pytest.fixture
def directory(db, audit):
    return PrincipalDirectory(db, audit)


@pytest.fixture
def grants(db, directory, audit):
    return GrantStore(db, directory, audit)


@pytest.fixture
def registry(db, directory, grants, audit):
    return TenantRegistry(db, directory, grants, audit)


@pytest.fixture
def engine(db, registry):
    return AuthorizationEngine(db, registry=registry, grants=registry.grants)


@pytest.fixture
def storage(db):
    return SupabaseBucketStorage(db)


@pytest.fixture
def buckets(db, storage, registry, engine):
    return BucketService(db, storage, registry, engine)


@pytest.fixture
def executor(db):
    return SchemaExecutor(db)


@pytest.fixture
def orchestrator(db, executor, buckets):
    return LifecycleOrchestrator(db, executor, buckets, create_default_bucket=True)


@pytest.fixture
def caller():
    """Identity returned by the overridden auth dependency; tests switch it with act_as"""
    return {"id": USER_ID, "email": "user@example.com"}


@pytest.fixture
def act_as(caller):
    def _act_as(user_id):
        caller["id"] = user_id
    return _act_as


@pytest.fixture
def client(db, caller):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: dict(caller)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
