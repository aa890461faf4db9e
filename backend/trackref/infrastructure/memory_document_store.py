"""In-Memory Document Store - reference DocumentStore implementation.

Invariants:
    - Same query, update and sort semantics as the SQL store (core/query_match.py)
    - Records handed out are copies: callers cannot mutate stored state
    - modified_on strictly increases across writes, so "latest first" is deterministic

Design Decisions:
    - Single reference implementation used by the test suite and store_backend=memory
    - No locking: one event loop, and every method body runs without suspension
"""

import logging
import time
import uuid
from copy import deepcopy
from typing import Any

from trackref.core.domain_types import EntityKind
from trackref.core.query_match import apply_update, match_query, sort_records
from trackref.core.store_protocol import FindOptions, Query, Record, UpdateResult

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """DocumentStore backed by per-kind dicts of records."""

    def __init__(self):
        self._records: dict[EntityKind, dict[str, Record]] = {}
        self._last_modified = 0

    def _tick(self) -> int:
        now = int(time.time() * 1000)
        self._last_modified = max(now, self._last_modified + 1)
        return self._last_modified

    def _table(self, kind: EntityKind) -> dict[str, Record]:
        return self._records.setdefault(EntityKind(kind), {})

    def seed(self, kind: EntityKind, record: Record) -> Record:
        """Insert a record verbatim (tests and fixtures); id generated when absent."""
        stored = deepcopy(record)
        stored.setdefault("id", uuid.uuid4().hex)
        stored.setdefault("modified_on", self._tick())
        self._table(kind)[stored["id"]] = stored
        return deepcopy(stored)

    def records(self, kind: EntityKind) -> list[Record]:
        return [deepcopy(r) for r in self._table(kind).values()]

    async def find_all(
        self, kind: EntityKind, query: Query,
        options: FindOptions | None = None,
    ) -> list[Record]:
        options = options or FindOptions()
        matched = [r for r in self._table(kind).values() if match_query(r, query)]
        matched = sort_records(matched, options.sort)
        if options.limit is not None:
            matched = matched[:options.limit]
        return [deepcopy(r) for r in matched]

    async def find_one(
        self, kind: EntityKind, query: Query,
        options: FindOptions | None = None,
    ) -> Record | None:
        sort = options.sort if options else None
        found = await self.find_all(kind, query, FindOptions(sort=sort, limit=1))
        return found[0] if found else None

    async def create_doc(
        self, kind: EntityKind, space: str, attributes: Record,
        doc_id: str | None = None,
    ) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        record = {**deepcopy(attributes), "id": doc_id, "space": space}
        record["modified_on"] = self._tick()
        self._table(kind)[doc_id] = record
        logger.debug(f"created {kind} {doc_id}")
        return doc_id

    async def add_collection(
        self, kind: EntityKind, space: str, attached_to: str,
        attached_to_kind: EntityKind, collection: str, attributes: Record,
        doc_id: str | None = None,
    ) -> str:
        attached = {
            **attributes,
            "attached_to": attached_to,
            "attached_to_kind": EntityKind(attached_to_kind).value,
            "collection": collection,
        }
        return await self.create_doc(kind, space, attached, doc_id)

    async def update_doc(
        self, kind: EntityKind, space: str, doc_id: str,
        operations: dict[str, Any], retrieve: bool = False,
    ) -> UpdateResult:
        table = self._table(kind)
        current = table.get(doc_id)
        if current is None:
            return UpdateResult(object=None, matched=False)
        updated = apply_update(current, operations)
        updated["modified_on"] = self._tick()
        table[doc_id] = updated
        return UpdateResult(object=deepcopy(updated) if retrieve else None)

    async def remove_doc(
        self, kind: EntityKind, space: str, doc_id: str,
    ) -> None:
        self._table(kind).pop(doc_id, None)
