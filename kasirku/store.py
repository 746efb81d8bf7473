"""Clients for the hosted data store.

Both stores expose the same three calls used by the screens:

    select(collection, eq=..., gte=..., lte=..., branch_scope=..., order=...)
    insert(collection, row) -> stored row (with id and timestamps)
    update(collection, record_id, changes) -> stored row

Failures surface as BackendError. Nothing is retried.
"""
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import requests

from kasirku.errors import BackendError

logger = logging.getLogger("kasirku.store")

Row = dict[str, Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RestStore:
    """PostgREST style endpoint: /rest/v1/<collection>?column=op.value"""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        })
        if api_key:
            self.session.headers.update({
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            })

    def _url(self, collection: str) -> str:
        return f"{self.base_url}/rest/v1/{collection}"

    def _call(self, method: str, collection: str, **kwargs) -> Any:
        try:
            response = self.session.request(
                method, self._url(collection), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response.json() if response.content else None
        except (requests.RequestException, ValueError) as e:
            logger.error("%s %s failed: %s", method, collection, e)
            raise BackendError(f"Could not reach the data store ({collection})", collection) from e

    def select(self, collection: str, eq: Optional[Row] = None, gte: Optional[Row] = None,
               lte: Optional[Row] = None, branch_scope: Optional[str] = None,
               order: Optional[tuple[str, bool]] = None) -> list[Row]:
        params: dict[str, Any] = {"select": "*"}
        ranges: dict[str, list[str]] = {}
        for key, value in (eq or {}).items():
            ranges.setdefault(key, []).append(f"eq.{value}")
        for key, value in (gte or {}).items():
            ranges.setdefault(key, []).append(f"gte.{value}")
        for key, value in (lte or {}).items():
            ranges.setdefault(key, []).append(f"lte.{value}")
        params.update({k: v[0] if len(v) == 1 else v for k, v in ranges.items()})
        if branch_scope:
            params["or"] = f"(branch_id.eq.{branch_scope},branch_id.is.null)"
        if order:
            column, ascending = order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"

        rows = self._call("GET", collection, params=params)
        return list(rows or [])

    def insert(self, collection: str, row: Row) -> Row:
        rows = self._call("POST", collection, json=row)
        if isinstance(rows, list):
            if not rows:
                raise BackendError(f"Insert into {collection} returned nothing", collection)
            return rows[0]
        return rows or dict(row)

    def update(self, collection: str, record_id: str, changes: Row) -> Row:
        rows = self._call("PATCH", collection, params={"id": f"eq.{record_id}"}, json=changes)
        if isinstance(rows, list):
            if not rows:
                raise BackendError(f"{collection} record {record_id} not found", collection)
            return rows[0]
        return rows or dict(changes, id=record_id)


class MemoryStore:
    """In-process store with the RestStore interface (demo mode and tests)."""

    def __init__(self, collections: Optional[dict[str, list[Row]]] = None):
        self.collections: dict[str, list[Row]] = {
            name: [dict(r) for r in rows] for name, rows in (collections or {}).items()
        }

    def _rows(self, collection: str) -> list[Row]:
        return self.collections.setdefault(collection, [])

    def select(self, collection: str, eq: Optional[Row] = None, gte: Optional[Row] = None,
               lte: Optional[Row] = None, branch_scope: Optional[str] = None,
               order: Optional[tuple[str, bool]] = None) -> list[Row]:
        def keep(row: Row) -> bool:
            if any(row.get(k) != v for k, v in (eq or {}).items()):
                return False
            if any(row.get(k) is None or str(row[k]) < str(v) for k, v in (gte or {}).items()):
                return False
            if any(row.get(k) is None or str(row[k]) > str(v) for k, v in (lte or {}).items()):
                return False
            if branch_scope and row.get("branch_id") not in (branch_scope, None):
                return False
            return True

        rows = [copy.deepcopy(r) for r in self._rows(collection) if keep(r)]
        if order:
            column, ascending = order
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=not ascending)
        return rows

    def insert(self, collection: str, row: Row) -> Row:
        stamp = _now()
        stored = {"id": str(uuid4()), "created_at": stamp, "updated_at": stamp, **row}
        self._rows(collection).append(stored)
        return copy.deepcopy(stored)

    def update(self, collection: str, record_id: str, changes: Row) -> Row:
        for row in self._rows(collection):
            if str(row.get("id")) == str(record_id):
                row.update(changes, updated_at=_now())
                return copy.deepcopy(row)
        raise BackendError(f"{collection} record {record_id} not found", collection)
