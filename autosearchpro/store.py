from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

TABLES = ("extracted_keywords", "job_postings", "search_history")

Row = Dict[str, Any]


@dataclass(frozen=True)
class ChangeEvent:
    event: str  # "INSERT" | "UPDATE" | "DELETE"
    table: str
    new: Optional[Row]
    old: Optional[Row]


ChangeCallback = Callable[[ChangeEvent], None]


class RowStore(Protocol):
    def select(self, table: str, **filters: Any) -> List[Row]:
        ...

    def insert(self, table: str, row: Row) -> Row:
        ...

    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        ...

    def delete(self, table: str, row_id: str) -> bool:
        ...

    def subscribe(
            self,
            table: str,
            callback: ChangeCallback,
            *,
            filter_column: Optional[str] = None,
            filter_value: Any = None,
    ) -> int:
        ...

    def unsubscribe(self, handle: int) -> None:
        ...


@dataclass
class _Subscription:
    table: str
    callback: ChangeCallback
    filter_column: Optional[str]
    filter_value: Any

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        if self.filter_column is None:
            return True
        row = event.new or event.old or {}
        return row.get(self.filter_column) == self.filter_value


def _check_table(table: str) -> None:
    if table not in TABLES:
        raise KeyError(f"Unknown table '{table}'. Expected one of: {', '.join(TABLES)}")


class InMemoryRowStore:
    """
    Row store with change notifications.

    Rows are plain dicts keyed by a generated "id". Subscribers get a
    ChangeEvent after every write that matches their table (and optional
    column filter, e.g. job_id).
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, Row]] = {t: {} for t in TABLES}
        self._subs: Dict[int, _Subscription] = {}
        self._next_handle = 1

    def select(self, table: str, **filters: Any) -> List[Row]:
        _check_table(table)
        rows = self._tables[table].values()
        return [dict(r) for r in rows if all(r.get(k) == v for k, v in filters.items())]

    def insert(self, table: str, row: Row) -> Row:
        _check_table(table)
        stored = dict(row)
        stored.setdefault("id", uuid.uuid4().hex[:16])
        self._tables[table][stored["id"]] = stored
        self._changed(ChangeEvent("INSERT", table, dict(stored), None))
        return dict(stored)

    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        _check_table(table)
        current = self._tables[table].get(row_id)
        if current is None:
            return None
        old = dict(current)
        current.update({k: v for k, v in changes.items() if k != "id"})
        self._changed(ChangeEvent("UPDATE", table, dict(current), old))
        return dict(current)

    def delete(self, table: str, row_id: str) -> bool:
        _check_table(table)
        old = self._tables[table].pop(row_id, None)
        if old is None:
            return False
        self._changed(ChangeEvent("DELETE", table, None, dict(old)))
        return True

    def subscribe(
            self,
            table: str,
            callback: ChangeCallback,
            *,
            filter_column: Optional[str] = None,
            filter_value: Any = None,
    ) -> int:
        _check_table(table)
        handle = self._next_handle
        self._next_handle += 1
        self._subs[handle] = _Subscription(table, callback, filter_column, filter_value)
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subs.pop(handle, None)

    def _changed(self, event: ChangeEvent) -> None:
        for sub in list(self._subs.values()):
            if sub.matches(event):
                sub.callback(event)


def _best_effort_lockdown_file_permissions(path: Path) -> None:
    """
    Best-effort privacy: on Unix, set 600. On Windows, no-op.
    """
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


class JsonRowStore(InMemoryRowStore):
    """
    Local persistence using one JSON file per table.

    Layout:
      <base_dir>/
        extracted_keywords.json -> { "<id>": {row...}, ... }
        job_postings.json
        search_history.json
    """

    def __init__(self, base_dir: Path) -> None:
        super().__init__()
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        for table in TABLES:
            self._tables[table] = self._load(table)

    def _path(self, table: str) -> Path:
        return self.base_dir / f"{table}.json"

    def _load(self, table: str) -> Dict[str, Row]:
        p = self._path(table)
        if not p.exists():
            return {}
        raw_text = p.read_text(encoding="utf-8").strip()
        if not raw_text:
            return {}
        return dict(json.loads(raw_text))

    def _write(self, table: str) -> None:
        p = self._path(table)
        p.write_text(json.dumps(self._tables[table], indent=2, sort_keys=True), encoding="utf-8")
        _best_effort_lockdown_file_permissions(p)

    def _changed(self, event: ChangeEvent) -> None:
        self._write(event.table)
        super()._changed(event)
