"""In-memory stand-in for the Supabase client used in tests.

Supports the query-builder subset the service uses: select, insert, update,
delete, eq, is_, lte, in_, order, limit and execute, plus rpc and storage.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class FakeResponse:
    data: Any


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: list[Callable[[dict], bool]] = []
        self.orders: list[tuple[str, bool]] = []
        self.row_limit: Optional[int] = None

    # Operations

    def select(self, *_columns: str) -> "FakeQuery":
        self.operation = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, fields: dict[str, Any]) -> "FakeQuery":
        self.operation = "update"
        self.payload = fields
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    # Filters

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column: str, value: str) -> "FakeQuery":
        expected = None if value == "null" else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def lte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) <= value)
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def _matching(self) -> list[dict]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResponse:
        if self.table_name in self.db.fail_tables:
            raise RuntimeError(f"{self.table_name} unavailable")

        rows = self.db.tables.setdefault(self.table_name, [])
        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = {"id": str(uuid.uuid4()), **item}
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        matching = self._matching()
        if self.operation == "update":
            for row in matching:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matching])
        if self.operation == "delete":
            self.db.tables[self.table_name] = [row for row in rows if row not in matching]
            return FakeResponse([dict(row) for row in matching])

        result = [dict(row) for row in matching]
        for column, desc in reversed(self.orders):
            result.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
        if self.row_limit is not None:
            result = result[: self.row_limit]
        return FakeResponse(result)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict[str, Any]):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        return FakeResponse(handler(self.params) if handler else None)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", bucket: str):
        self.storage = storage
        self.bucket = bucket

    def upload(self, path: str, data: bytes, options: Optional[dict] = None) -> None:
        if self.storage.fail_uploads:
            raise RuntimeError("upload rejected")
        self.storage.objects[(self.bucket, path)] = data

    def download(self, path: str) -> bytes:
        try:
            return self.storage.objects[(self.bucket, path)]
        except KeyError:
            raise RuntimeError(f"Object not found: {path}") from None

    def remove(self, paths: list[str]) -> None:
        for path in paths:
            self.storage.objects.pop((self.bucket, path), None)


class FakeStorage:
    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_uploads = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    """Tables are plain lists of row dicts keyed by table name."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.rpc_handlers: dict[str, Callable[[dict], Any]] = {}
        self.rpc_calls: list[tuple[str, dict]] = []
        self.fail_tables: set[str] = set()
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        stored = []
        for row in rows:
            row = {"id": str(uuid.uuid4()), **row}
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return stored
