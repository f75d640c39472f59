"""
Pytest fixtures for the PollPeak backend tests.

Services talk to Supabase through the postgrest query builder, so the tests run
them against FakeSupabase: an in-memory table store that understands the subset
of builder calls the services use.
"""

import copy
import os
import re
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from postgrest.exceptions import APIError

# Set test environment variables before importing app
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

# (table, columns) pairs enforced on insert, mirroring the database unique indexes
UNIQUE_CONSTRAINTS = {
    "poll_votes": [("user_id", "poll_id")],
    "polls": [("slug",)],
    "profiles": [("referral_code",)],
}


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


def _coerce(value: Any, other: Any) -> Any:
    """Bring a filter operand to the type of the stored value (or_ strings carry numbers as text)."""
    if isinstance(value, bool) and isinstance(other, str):
        return other.lower() == "true"
    if isinstance(value, (int, float)) and isinstance(other, str):
        return float(other)
    if isinstance(value, str) and not isinstance(other, str):
        return other.isoformat() if hasattr(other, "isoformat") else str(other)
    return other


def _compare(op: str, value: Any, other: Any) -> bool:
    if op == "is":
        if other in ("null", None):
            return value is None
        return value is _coerce(True, other)
    if value is None:
        return op == "neq" and other is not None
    other = _coerce(value, other)
    if op == "eq":
        return value == other
    if op == "neq":
        return value != other
    if op == "gt":
        return value > other
    if op == "gte":
        return value >= other
    if op == "lt":
        return value < other
    if op == "lte":
        return value <= other
    if op in ("like", "ilike"):
        pattern = "^" + re.escape(str(other)).replace("%", ".*") + "$"
        flags = re.IGNORECASE if op == "ilike" else 0
        return re.match(pattern, str(value), flags) is not None
    raise ValueError(f"Unsupported filter operator: {op}")


def _parse_or(expression: str) -> Callable[[Dict[str, Any]], bool]:
    conditions = []
    for part in expression.split(","):
        column, op, operand = part.split(".", 2)
        conditions.append((column, op, operand))

    def predicate(row: Dict[str, Any]) -> bool:
        return any(_compare(op, row.get(column), operand) for column, op, operand in conditions)
    return predicate


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.count_mode: Optional[str] = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.limit_count: Optional[int] = None
        self.range_bounds: Optional[tuple] = None
        self.single_mode: Optional[str] = None
        self.negate_next = False

    # operations

    def select(self, *columns, count: Optional[str] = None):
        if self.operation == "select":
            self.count_mode = count
        return self

    def insert(self, rows, **kwargs):
        self.operation = "insert"
        self.payload = rows
        return self

    def update(self, values, **kwargs):
        self.operation = "update"
        self.payload = values
        return self

    def upsert(self, rows, on_conflict: Optional[str] = None, **kwargs):
        self.operation = "upsert"
        self.payload = rows
        self.on_conflict = on_conflict
        return self

    def delete(self, **kwargs):
        self.operation = "delete"
        return self

    # filters

    @property
    def not_(self):
        self.negate_next = True
        return self

    def _add(self, predicate: Callable[[Dict[str, Any]], bool]):
        if self.negate_next:
            self.negate_next = False
            self.filters.append(lambda row: not predicate(row))
        else:
            self.filters.append(predicate)
        return self

    def _op(self, op: str, column: str, value: Any):
        return self._add(lambda row: _compare(op, row.get(column), value))

    def eq(self, column, value):
        return self._op("eq", column, value)

    def neq(self, column, value):
        return self._op("neq", column, value)

    def gt(self, column, value):
        return self._op("gt", column, value)

    def gte(self, column, value):
        return self._op("gte", column, value)

    def lt(self, column, value):
        return self._op("lt", column, value)

    def lte(self, column, value):
        return self._op("lte", column, value)

    def like(self, column, pattern):
        return self._op("like", column, pattern)

    def ilike(self, column, pattern):
        return self._op("ilike", column, pattern)

    def is_(self, column, value):
        return self._op("is", column, value)

    def in_(self, column, values):
        allowed = list(values)
        return self._add(lambda row: row.get(column) in allowed)

    def or_(self, expression: str):
        return self._add(_parse_or(expression))

    # modifiers

    def order(self, column: str, desc: bool = False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    def range(self, start: int, end: int):
        self.range_bounds = (start, end)
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def single(self):
        self.single_mode = "single"
        return self

    # execution

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(predicate(row) for predicate in self.filters)

    def _check_unique(self, row: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None) -> None:
        for columns in UNIQUE_CONSTRAINTS.get(self.table_name, []):
            if any(row.get(c) is None for c in columns):
                continue
            for existing in self.db.tables.setdefault(self.table_name, []):
                if existing is ignore:
                    continue
                if all(existing.get(c) == row.get(c) for c in columns):
                    raise APIError({
                        "code": "23505",
                        "message": f"duplicate key value violates unique constraint on {self.table_name}",
                        "details": None,
                        "hint": None,
                    })

    def _insert_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", datetime.utcnow().isoformat())
        self._check_unique(stored)
        self.db.tables.setdefault(self.table_name, []).append(stored)
        return copy.deepcopy(stored)

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            rows = missing + present if desc else present + missing
        return rows

    def execute(self) -> Optional[FakeResponse]:
        if self.db.fail_tables.get(self.table_name) == self.operation:
            raise RuntimeError(f"{self.operation} on {self.table_name} failed")
        table = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([self._insert_row(r) for r in rows])

        if self.operation == "upsert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            written = []
            for row in rows:
                match = next((r for r in table if all(r.get(k) == row.get(k) for k in keys)), None)
                if match is not None:
                    match.update(copy.deepcopy(row))
                    written.append(copy.deepcopy(match))
                else:
                    written.append(self._insert_row(row))
            return FakeResponse(written)

        matched = [r for r in table if self._matches(r)]

        if self.operation == "update":
            for row in matched:
                self._check_unique({**row, **self.payload}, ignore=row)
                row.update(copy.deepcopy(self.payload))
            return FakeResponse([copy.deepcopy(r) for r in matched])

        if self.operation == "delete":
            self.db.tables[self.table_name] = [r for r in table if r not in matched]
            return FakeResponse([copy.deepcopy(r) for r in matched])

        rows = self._sorted(matched)
        total = len(rows)
        if self.range_bounds:
            start, end = self.range_bounds
            rows = rows[start:end + 1]
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        rows = [copy.deepcopy(r) for r in rows]
        count = total if self.count_mode else None

        if self.single_mode:
            if len(rows) > 1:
                raise APIError({"code": "PGRST116", "message": "Multiple rows returned", "details": None, "hint": None})
            if not rows:
                if self.single_mode == "maybe":
                    return None
                raise APIError({"code": "PGRST116", "message": "No rows returned", "details": None, "hint": None})
            return FakeResponse(rows[0], count)
        return FakeResponse(rows, count)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise APIError({
                "code": "PGRST202",
                "message": f"Could not find the function public.{self.name}",
                "details": None,
                "hint": None,
            })
        return FakeResponse(handler(self.db, self.params))


class FakeSupabase:
    """In-memory stand-in for supabase.Client"""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.rpc_handlers: Dict[str, Callable[["FakeSupabase", Dict[str, Any]], Any]] = {}
        self.rpc_calls: List[tuple] = []
        # table -> operation that raises, for failure-path tests
        self.fail_tables: Dict[str, str] = {}
        self.auth = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    from_ = table

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        return FakeQuery(self, table).insert(list(rows)).execute().data

    def rows(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        return [
            r for r in self.tables.get(table, [])
            if all(r.get(k) == v for k, v in filters.items())
        ]

    def row(self, table: str, **filters: Any) -> Optional[Dict[str, Any]]:
        found = self.rows(table, **filters)
        return found[0] if found else None


def make_profile(db: FakeSupabase, user_id: str, **overrides: Any) -> Dict[str, Any]:
    profile = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "name": user_id.title(),
        "role": "user",
        "points": 0,
        "badges": [],
        "country": "US",
        "currency": "USD",
        "referral_code": user_id.upper()[:8],
        "is_suspended": False,
    }
    profile.update(overrides)
    return db.seed("profiles", profile)[0]


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Empty in-memory Supabase."""
    return FakeSupabase()


@pytest.fixture
def profile_factory(fake_db: FakeSupabase) -> Callable[..., Dict[str, Any]]:
    """Seed a profile: profile_factory("user-2", points=50, role="ambassador")."""
    return lambda user_id, **overrides: make_profile(fake_db, user_id, **overrides)


@pytest.fixture
def user(fake_db: FakeSupabase) -> Dict[str, Any]:
    """Regular player with 1000 points."""
    return make_profile(fake_db, "user-1", points=1000)


@pytest.fixture
def admin(fake_db: FakeSupabase) -> Dict[str, Any]:
    return make_profile(fake_db, "admin-1", role="admin")


@pytest.fixture
def moderator(fake_db: FakeSupabase) -> Dict[str, Any]:
    return make_profile(fake_db, "mod-1", role="moderator")


@pytest.fixture
def active_poll(fake_db: FakeSupabase, admin: Dict[str, Any]) -> Dict[str, Any]:
    """Open global poll with three options and no votes."""
    return fake_db.seed("polls", {
        "title": "Best season of the year",
        "description": "Pick one",
        "options": [{"text": "Spring", "votes": 0}, {"text": "Summer", "votes": 0}, {"text": "Winter", "votes": 0}],
        "type": "global",
        "country": None,
        "category": "Lifestyle",
        "slug": "best-season-of-the-year",
        "created_by": admin["id"],
        "start_date": None,
        "active_until": None,
        "is_active": True,
        "total_votes": 0,
    })[0]


@pytest.fixture
def app() -> Any:
    """FastAPI application for testing."""
    from app.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def login(app: Any, fake_db: FakeSupabase) -> Callable[[str], None]:
    """Route every request to fake_db and authenticate it as the given profile id."""
    from app.core.dependencies import get_current_user_id
    from app.database.supabase_client import get_supabase

    def _login(user_id: str) -> None:
        app.dependency_overrides[get_supabase] = lambda: fake_db
        app.dependency_overrides[get_current_user_id] = lambda: {
            "id": user_id,
            "email": f"{user_id}@example.com",
            "user_metadata": {},
            "created_at": None,
        }
    return _login


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Async test client against the ASGI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": "Bearer test-jwt-token"},
    ) as ac:
        yield ac
