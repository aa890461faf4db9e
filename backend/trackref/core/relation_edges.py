"""Relation Edges - pure helpers for blocked-by and relates-to bookkeeping.

Invariants:
    - Pure functions: no IO, no async
    - An edge is present when any RelatedRef on the side carries the other issue's id
    - $push / $pull operations touch exactly one set-valued field of one issue

Design Decisions:
    - Idempotency is decided from the record already read, before any write
    - Pull criteria match on id only, so refs stored with a stale kind still come off
"""

from typing import Any, Iterable

from trackref.core.domain_types import EntityKind
from trackref.schemas.entities import RelatedRef

BLOCKED_BY_FIELD = "blocked_by"
RELATIONS_FIELD = "relations"


def make_related_ref(issue_id: str) -> dict[str, str]:
    return RelatedRef(id=issue_id, kind=EntityKind.ISSUE.value).model_dump()


def has_relation(refs: Iterable[RelatedRef] | None, target_id: str) -> bool:
    return any(r.id == target_id for r in refs or [])


def push_edge(field: str, issue_id: str) -> dict[str, Any]:
    return {"$push": {field: make_related_ref(issue_id)}}


def pull_edge(field: str, issue_id: str) -> dict[str, Any]:
    return {"$pull": {field: {"id": issue_id}}}
