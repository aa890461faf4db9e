"""Status Classification - semantic buckets and filter predicates for workflow statuses.

Invariants:
    - Pure functions: no IO, no async
    - Canonical path: done <=> category Won, canceled <=> category Lost
    - Fallback path: name derived from the status id's trailing segment;
      "done" substring -> done, "cancel" substring -> canceled, else unclassified.
      Never raises
    - "open" excludes every done/canceled id ($nin), or applies no filter when none exist
    - "done"/"canceled" restrict to their subset ($in), or yield an empty result
      (not an error) when the project has none
    - Any other value must match one status name case-insensitively, else InvalidStatusError

Design Decisions:
    - The naming heuristic only runs when the canonical status fetch failed;
      categories always win when they are available
    - StatusFilter.empty short-circuits the listing query instead of sending an
      impossible predicate to the store
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable

from trackref.core.domain_types import (
    StatusBucket, StatusCategory, STATUS_FILTER_CANCELED, STATUS_FILTER_DONE,
    STATUS_FILTER_OPEN,
)
from trackref.core.errors import InvalidStatusError

_DONE_MARKER = "done"
_CANCELED_MARKER = "cancel"
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True)
class StatusInfo:
    id: str
    name: str
    bucket: StatusBucket

    @property
    def is_done(self) -> bool:
        return self.bucket is StatusBucket.DONE

    @property
    def is_canceled(self) -> bool:
        return self.bucket is StatusBucket.CANCELED


@dataclass(frozen=True)
class StatusFilter:
    """Predicate for the issue "status" field; empty means no issue can match."""
    predicate: Any = None
    empty: bool = False


# --- Canonical path -------------------------------------------------------------

def category_bucket(category: str | None) -> StatusBucket:
    if category == StatusCategory.WON.value:
        return StatusBucket.DONE
    if category == StatusCategory.LOST.value:
        return StatusBucket.CANCELED
    if category is None:
        return StatusBucket.UNCLASSIFIED
    return StatusBucket.ACTIVE


def classify_by_category(
    records: Iterable[dict], order: list[str] | None = None,
) -> list[StatusInfo]:
    """Classify status records by their category, in workflow order when given."""
    infos = [
        StatusInfo(
            id=r["id"],
            name=r.get("name") or status_name_from_id(r["id"]),
            bucket=category_bucket(r.get("category")),
        )
        for r in records
    ]
    if order:
        position = {status_id: i for i, status_id in enumerate(order)}
        infos.sort(key=lambda s: position.get(s.id, len(position)))
    return infos


# --- Fallback path --------------------------------------------------------------

def status_name_from_id(status_id: str) -> str:
    """Human name from the trailing id segment: "tracker:status:InProgress" -> "In Progress"."""
    segment = re.split(r"[:/]", status_id)[-1]
    segment = segment.replace("_", " ").replace("-", " ")
    return " ".join(_CAMEL_BOUNDARY.sub(" ", segment).split())


def classify_name(name: str) -> StatusBucket:
    lowered = name.lower()
    if _DONE_MARKER in lowered:
        return StatusBucket.DONE
    if _CANCELED_MARKER in lowered:
        return StatusBucket.CANCELED
    return StatusBucket.UNCLASSIFIED


def classify_by_name(status_ids: Iterable[str]) -> list[StatusInfo]:
    """Heuristic classification when categories are unavailable."""
    infos = []
    for status_id in status_ids:
        name = status_name_from_id(status_id)
        infos.append(StatusInfo(id=status_id, name=name, bucket=classify_name(name)))
    return infos


# --- Lookups and filters --------------------------------------------------------

def find_status_by_name(
    name: str, statuses: Iterable[StatusInfo],
) -> StatusInfo | None:
    """First status whose name equals name, ignoring case."""
    wanted = name.strip().lower()
    return next((s for s in statuses if s.name.lower() == wanted), None)


def build_status_filter(
    status_filter: str, statuses: list[StatusInfo], project_identifier: str,
) -> StatusFilter:
    """Translate a caller status filter into an issue-status predicate."""
    value = status_filter.strip().lower()

    if value == STATUS_FILTER_OPEN:
        closed = [s.id for s in statuses if s.is_done or s.is_canceled]
        return StatusFilter(predicate={"$nin": closed} if closed else None)

    if value == STATUS_FILTER_DONE:
        done = [s.id for s in statuses if s.is_done]
        if not done:
            return StatusFilter(empty=True)
        return StatusFilter(predicate={"$in": done})

    if value == STATUS_FILTER_CANCELED:
        canceled = [s.id for s in statuses if s.is_canceled]
        if not canceled:
            return StatusFilter(empty=True)
        return StatusFilter(predicate={"$in": canceled})

    match = find_status_by_name(value, statuses)
    if match is None:
        raise InvalidStatusError(status_filter, project_identifier)
    return StatusFilter(predicate=match.id)
