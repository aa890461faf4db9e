"""Boundary Protocol - the document-store contract between core and shell.

Invariants:
    - Core NEVER imports from services or infrastructure; dependency arrows point inward
    - All persistence goes through DocumentStore; the resolution layer holds no state
    - Records cross the boundary as plain dicts carrying at least "id" and "space"
    - Store failures surface as StoreConnectionError / StoreAuthError / StoreError

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Async in Protocol: implementations do IO; each call is a suspension point
      and the only place cancellation takes effect
    - update_doc(retrieve=True) returns the post-write record so server-assigned
      counters (project sequence) can be read back
"""

from dataclasses import dataclass
from typing import Any, Protocol

from trackref.core.domain_types import EntityKind

Query = dict[str, Any]
Record = dict[str, Any]


@dataclass
class FindOptions:
    """Sort is an ordered field -> 1 | -1 mapping; limit None means unbounded."""
    sort: dict[str, int] | None = None
    limit: int | None = None


@dataclass
class UpdateResult:
    """Outcome of update_doc; object is populated only when retrieve was requested."""
    object: Record | None = None
    matched: bool = True


class DocumentStore(Protocol):
    """Contract for workspace persistence, implemented in infrastructure/."""

    async def find_one(
        self, kind: EntityKind, query: Query,
        options: FindOptions | None = None,
    ) -> Record | None: ...

    async def find_all(
        self, kind: EntityKind, query: Query,
        options: FindOptions | None = None,
    ) -> list[Record]: ...

    async def create_doc(
        self, kind: EntityKind, space: str, attributes: Record,
        doc_id: str | None = None,
    ) -> str: ...

    async def add_collection(
        self, kind: EntityKind, space: str, attached_to: str,
        attached_to_kind: EntityKind, collection: str, attributes: Record,
        doc_id: str | None = None,
    ) -> str: ...

    async def update_doc(
        self, kind: EntityKind, space: str, doc_id: str,
        operations: dict[str, Any], retrieve: bool = False,
    ) -> UpdateResult: ...

    async def remove_doc(
        self, kind: EntityKind, space: str, doc_id: str,
    ) -> None: ...
