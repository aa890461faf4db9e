"""SQL Document Store - DocumentStore over the generic documents table.

Invariants:
    - Query, update and sort semantics are exactly core/query_match.py
    - kind plus literal column predicates and literal predicates on known
      scalar attributes narrow rows in SQL; everything else is evaluated in process
    - sort and limit run in SQL only when every predicate and every sort field
      was pushed down; otherwise they run in process over the narrowed rows
    - update_doc is compare-and-set on the row revision: a write that lost a
      race is re-read and re-applied, so concurrent $inc calls never read back
      the same value
    - Driver failures surface as Store*Error via DatabaseSessionManager

Design Decisions:
    - Attributes stored as JSON: operator predicates ($like, $in over list fields)
      behave identically on SQLite and PostgreSQL because they are not pushed down
    - Compare-and-set instead of SELECT ... FOR UPDATE: SQLite has no row locks,
      and both dialects re-check the revision predicate at write time
"""

import logging
import time
import uuid
from typing import Any

from sqlalchemy import select, update

from trackref.core.domain_types import EntityKind
from trackref.core.errors import StoreError
from trackref.core.query_match import apply_update, match_query, sort_records
from trackref.core.store_protocol import FindOptions, Query, Record, UpdateResult
from trackref.infrastructure.database import DatabaseSessionManager
from trackref.models.document_record import DocumentRecord

logger = logging.getLogger(__name__)

_COLUMN_FIELDS = ("id", "space", "attached_to", "attached_to_kind", "collection")
# Attributes that only ever hold a single string, so SQL equality matches
# match_query's literal equality
_SCALAR_ATTRIBUTES = ("identifier", "name", "provider", "value", "title", "label")
# Attributes whose string ordering is their natural ordering
_SORTABLE_ATTRIBUTES = ("rank",)
_MAX_UPDATE_ATTEMPTS = 20


def _now_ms() -> int:
    return int(time.time() * 1000)


def _row_to_record(row: DocumentRecord) -> Record:
    record: Record = dict(row.attributes or {})
    for field in _COLUMN_FIELDS:
        value = getattr(row, field)
        if value is not None or field in ("id", "space"):
            record[field] = value
    record["modified_on"] = row.modified_on
    return record


def _column_values(record: Record) -> dict[str, Any]:
    return {
        "space": record.get("space"),
        "attached_to": record.get("attached_to"),
        "attached_to_kind": record.get("attached_to_kind"),
        "collection": record.get("collection"),
        "attributes": {
            k: v for k, v in record.items()
            if k not in _COLUMN_FIELDS and k != "modified_on"
        },
    }


def _order_by(sort: dict[str, int] | None) -> list | None:
    """SQL ordering equivalent to sort_records, or None when not expressible."""
    clauses = []
    for field, direction in (sort or {}).items():
        if field in _COLUMN_FIELDS or field == "modified_on":
            column = getattr(DocumentRecord, field)
        elif field in _SORTABLE_ATTRIBUTES:
            column = DocumentRecord.attributes[field].as_string()
        else:
            return None
        if int(direction) > 0:
            clauses.append(column.asc().nulls_first())
        else:
            clauses.append(column.desc().nulls_last())
    return clauses


class SqlDocumentStore:
    """DocumentStore persisted through SQLAlchemy async sessions."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    def _narrow(self, kind: EntityKind, query: Query):
        """Select narrowed in SQL, and whether SQL evaluated the whole query."""
        stmt = select(DocumentRecord).where(
            DocumentRecord.kind == EntityKind(kind).value,
        )
        exact = True
        for field, value in query.items():
            if not isinstance(value, str):
                exact = False
            elif field in _COLUMN_FIELDS:
                stmt = stmt.where(getattr(DocumentRecord, field) == value)
            elif field in _SCALAR_ATTRIBUTES:
                stmt = stmt.where(DocumentRecord.attributes[field].as_string() == value)
            else:
                exact = False
        return stmt, exact

    async def find_all(
        self, kind: EntityKind, query: Query,
        options: FindOptions | None = None,
    ) -> list[Record]:
        options = options or FindOptions()
        stmt, exact = self._narrow(kind, query)
        order_by = _order_by(options.sort)
        pushed_down = exact and order_by is not None
        if pushed_down:
            stmt = stmt.order_by(*order_by)
            if options.limit is not None:
                stmt = stmt.limit(options.limit)

        async with self._db.session("find") as session:
            rows = (await session.execute(stmt)).scalars().all()
        records = [r for r in map(_row_to_record, rows) if match_query(r, query)]
        if pushed_down:
            return records
        records = sort_records(records, options.sort)
        if options.limit is not None:
            records = records[:options.limit]
        return records

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
        row = DocumentRecord(
            id=doc_id, kind=EntityKind(kind).value,
            modified_on=_now_ms(), revision=0,
            **_column_values({**attributes, "id": doc_id, "space": space}),
        )
        async with self._db.session("create") as session:
            session.add(row)
            await session.commit()
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
        stmt, _ = self._narrow(kind, {"id": doc_id})
        for attempt in range(1, _MAX_UPDATE_ATTEMPTS + 1):
            async with self._db.session("update") as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
                if row is None:
                    return UpdateResult(object=None, matched=False)
                updated = apply_update(_row_to_record(row), operations)
                modified_on = _now_ms()
                written = await session.execute(
                    update(DocumentRecord)
                    .where(
                        DocumentRecord.kind == row.kind,
                        DocumentRecord.id == row.id,
                        DocumentRecord.revision == row.revision,
                    )
                    .values(
                        revision=row.revision + 1,
                        modified_on=modified_on,
                        **_column_values(updated),
                    )
                    .execution_options(synchronize_session=False),
                )
                if written.rowcount == 1:
                    await session.commit()
                    updated["modified_on"] = modified_on
                    return UpdateResult(object=updated if retrieve else None)
                await session.rollback()
            logger.debug(
                f"update of {EntityKind(kind).value} {doc_id} raced a concurrent write "
                f"(attempt {attempt}), retrying",
                extra={"entity_kind": EntityKind(kind).value},
            )
        raise StoreError(
            f"{doc_id} kept changing under concurrent writers", "update",
        )

    async def remove_doc(
        self, kind: EntityKind, space: str, doc_id: str,
    ) -> None:
        stmt, _ = self._narrow(kind, {"id": doc_id})
        async with self._db.session("remove") as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is not None:
                await session.delete(row)
                await session.commit()
