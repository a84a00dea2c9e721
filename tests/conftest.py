# tests/conftest.py
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from roster_match.matching.client import MatchingServiceError

Row = Dict[str, Any]


class FakeResponse:
    def __init__(self, data: List[Row]):
        self.data = data


class FakeQuery:
    """Mimics the postgrest request builder over in-memory rows."""

    def __init__(self, db: "FakeSupabase", schema: str, table: str):
        self._db = db
        self._schema = schema
        self._table = table
        self._filters: List[Callable[[Row], bool]] = []
        self._filter_desc: List[Tuple[str, str, Any]] = []
        self._columns: Optional[List[str]] = None
        self._update: Optional[Row] = None
        self._order: Optional[str] = None
        self._limit: Optional[int] = None
        self._negate = False

    def select(self, columns: str) -> "FakeQuery":
        self._columns = [c.strip() for c in columns.split(",")]
        return self

    def update(self, values: Row) -> "FakeQuery":
        self._update = dict(values)
        return self

    @property
    def not_(self) -> "FakeQuery":
        self._negate = True
        return self

    def _add(self, op: str, column: str, value: Any, predicate: Callable[[Row], bool]):
        if self._negate:
            self._negate = False
            op = f"not.{op}"
            self._filters.append(lambda row: not predicate(row))
        else:
            self._filters.append(predicate)
        self._filter_desc.append((op, column, value))
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add("eq", column, value, lambda row: row.get(column) == value)

    def is_(self, column: str, value: str) -> "FakeQuery":
        assert value == "null"
        return self._add("is", column, value, lambda row: row.get(column) is None)

    def in_(self, column: str, values) -> "FakeQuery":
        values = list(values)
        return self._add("in", column, values, lambda row: row.get(column) in values)

    def order(self, column: str) -> "FakeQuery":
        self._order = column
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    async def execute(self) -> FakeResponse:
        self._db.calls.append(
            {
                "schema": self._schema,
                "table": self._table,
                "op": "update" if self._update is not None else "select",
                "filters": list(self._filter_desc),
                "columns": self._columns,
                "limit": self._limit,
            }
        )
        if self._db.fail_on == self._table:
            raise RuntimeError(f"store unavailable: {self._table}")

        rows = [
            row
            for row in self._db.tables.get((self._schema, self._table), [])
            if all(f(row) for f in self._filters)
        ]
        if self._update is not None:
            for row in rows:
                row.update(self._update)
            return FakeResponse([dict(row) for row in rows])

        if self._order:
            rows = sorted(rows, key=lambda row: row[self._order])
        if self._limit is not None:
            rows = rows[: self._limit]
        if self._columns:
            rows = [{c: row.get(c) for c in self._columns} for row in rows]
        return FakeResponse([dict(row) for row in rows])


class FakeSchema:
    def __init__(self, db: "FakeSupabase", name: str):
        self._db = db
        self._name = name

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self._db, self._name, name)


class FakeSupabase:
    """In-memory stand-in for the async Supabase client."""

    def __init__(self):
        self.tables: Dict[Tuple[str, str], List[Row]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.fail_on: Optional[str] = None

    def add_rows(self, table: str, rows: List[Row], schema: str = "public"):
        self.tables.setdefault((schema, table), []).extend(dict(r) for r in rows)

    def rows(self, table: str, schema: str = "public") -> List[Row]:
        return self.tables.get((schema, table), [])

    def schema(self, name: str) -> FakeSchema:
        return FakeSchema(self, name)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, "public", name)

    def calls_to(self, table: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["table"] == table]


class FakeMatcher:
    """Deterministic matching service keyed by the mention text."""

    def __init__(self, answers: Optional[Dict[str, Union[str, Exception]]] = None):
        self.answers = answers or {}
        self.requests: List[Dict[str, Any]] = []

    async def identify(self, request_body: Dict[str, Any]) -> str:
        self.requests.append(request_body)
        mention_text = request_body["messages"][1]["content"]
        answer = self.answers.get(mention_text, "")
        if isinstance(answer, Exception):
            raise answer
        return answer


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


HOME_GUID = "583ec5fd-fb46-11e1-82cb-f4ce4684ea4c"
AWAY_GUID = "583ed102-fb46-11e1-82cb-f4ce4684ea4c"
HOME_PLAYER = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
AWAY_PLAYER = "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d"


@pytest.fixture
def store() -> FakeSupabase:
    db = FakeSupabase()
    db.add_rows(
        "team_full",
        [
            {"id": 1, "sr_guid": HOME_GUID, "name": "Celtics", "sr_alias": "BOS", "sport_luid_code": "NBA"},
            {"id": 2, "sr_guid": AWAY_GUID, "name": "Knicks", "sr_alias": "NYK", "sport_luid_code": "NBA"},
            {"id": 3, "sr_guid": None, "name": "Unmapped", "sr_alias": None, "sport_luid_code": "NBA"},
        ],
    )
    db.add_rows(
        "nba_player",
        [
            {"guid": HOME_PLAYER, "full_name": "Jayson Tatum", "abbr_name": "J.Tatum", "jersey_number": 0, "team_guid": HOME_GUID},
            {"guid": AWAY_PLAYER, "full_name": "Jalen Brunson", "abbr_name": "J.Brunson", "jersey_number": 11, "team_guid": AWAY_GUID},
        ],
        schema="sportradar",
    )
    return db


@pytest.fixture
def matcher() -> FakeMatcher:
    return FakeMatcher()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def service_error() -> MatchingServiceError:
    return MatchingServiceError("HTTP error: 500")
