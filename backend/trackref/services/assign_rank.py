"""Rank Assignment - next ordering key for a sibling appended to a scope.

Invariants:
    - Scope for issues is the project; scope for documents is the teamspace
    - Reads only the current maximum rank (one find_one sorted rank descending)
    - Never writes: callers store the returned rank with the new sibling

Design Decisions:
    - Rank assignment is not serialized. Two concurrent appends that read the
      same maximum produce the same key; both siblings still sort after every
      earlier one, and their relative order is decided by the store's tie-break
"""

from trackref.core.domain_types import EntityKind, SortOrder
from trackref.core.make_rank import next_rank
from trackref.core.store_protocol import DocumentStore, FindOptions

_RANK_DESCENDING = FindOptions(sort={"rank": SortOrder.DESCENDING.value})


async def _last_rank(store: DocumentStore, kind: EntityKind, space: str) -> str | None:
    record = await store.find_one(kind, {"space": space}, _RANK_DESCENDING)
    return record.get("rank") if record else None


async def next_issue_rank(store: DocumentStore, project_id: str) -> str:
    """Rank sorting after every issue in the project."""
    return next_rank([await _last_rank(store, EntityKind.ISSUE, project_id)])


async def next_document_rank(store: DocumentStore, teamspace_id: str) -> str:
    """Rank sorting after every document in the teamspace."""
    return next_rank([await _last_rank(store, EntityKind.DOCUMENT, teamspace_id)])
