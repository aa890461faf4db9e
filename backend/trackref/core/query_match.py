"""Query Matching - evaluation of document-store queries, updates and sorts.

Invariants:
    - Pure functions: no IO, no async, records are never mutated in place
    - Query values are literals or operator mappings ($in, $nin, $ne, $like, $search)
    - A list-valued field matches a literal when it contains it
    - $like is case-insensitive: '%' any run, '_' one char, backslash escapes
    - Update operations: plain field replacement, $push, $pull, $inc

Design Decisions:
    - Every DocumentStore implementation shares these semantics, so tests against
      the in-memory store describe the SQL store too
    - escape_like_wildcards applied by callers before wrapping terms in '%...%':
      user text never acts as a wildcard
"""

import re
from copy import deepcopy
from typing import Any, Mapping

_OPERATORS = frozenset({"$in", "$nin", "$ne", "$like", "$search"})


# --- Query construction -------------------------------------------------------

def escape_like_wildcards(term: str) -> str:
    """Escape LIKE wildcard characters so user input matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def add_substring_search(
    query: Mapping[str, Any], field: str, term: str | None,
) -> dict[str, Any]:
    """Copy of query with a '%term%' $like predicate on field (unchanged if no term)."""
    result = dict(query)
    if term:
        result[field] = {"$like": f"%{escape_like_wildcards(term)}%"}
    return result


# --- Query evaluation ---------------------------------------------------------

def _like_to_regex(pattern: str) -> re.Pattern:
    parts = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
        i += 1
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def like(value: Any, pattern: str) -> bool:
    if not isinstance(value, str):
        return False
    return _like_to_regex(pattern).match(value) is not None


def _search_text(record: Mapping[str, Any]) -> str:
    return " ".join(v for v in record.values() if isinstance(v, str)).lower()


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _is_operator(expected: Any) -> bool:
    return (
        isinstance(expected, Mapping)
        and bool(expected)
        and all(k in _OPERATORS for k in expected)
    )


def _match_operator(
    record: Mapping[str, Any], value: Any, op: str, operand: Any,
) -> bool:
    if op == "$in":
        return any(_equals(value, candidate) for candidate in operand)
    if op == "$nin":
        return not any(_equals(value, candidate) for candidate in operand)
    if op == "$ne":
        return not _equals(value, operand)
    if op == "$like":
        return like(value, operand)
    # $search: every word of the predicate appears in the record's text
    text = _search_text(record)
    return all(word in text for word in str(operand).lower().split())


def match_query(record: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """True when the record satisfies every field predicate of the query."""
    for field, expected in query.items():
        if field == "$search" and not _is_operator(expected):
            if not _match_operator(record, None, "$search", expected):
                return False
            continue
        value = record.get(field)
        if _is_operator(expected):
            if not all(
                _match_operator(record, value, op, operand)
                for op, operand in expected.items()
            ):
                return False
        elif not _equals(value, expected):
            return False
    return True


# --- Updates ------------------------------------------------------------------

def _pull_matches(element: Any, criterion: Any) -> bool:
    if isinstance(criterion, Mapping) and isinstance(element, Mapping):
        return all(element.get(k) == v for k, v in criterion.items())
    return element == criterion


def apply_update(
    record: Mapping[str, Any], operations: Mapping[str, Any],
) -> dict[str, Any]:
    """Return a new record with the update operations applied."""
    updated = deepcopy(dict(record))
    for key, operand in operations.items():
        if key == "$push":
            for field, element in operand.items():
                updated[field] = list(updated.get(field) or []) + [deepcopy(element)]
        elif key == "$pull":
            for field, criterion in operand.items():
                updated[field] = [
                    e for e in (updated.get(field) or [])
                    if not _pull_matches(e, criterion)
                ]
        elif key == "$inc":
            for field, amount in operand.items():
                updated[field] = (updated.get(field) or 0) + amount
        else:
            updated[key] = deepcopy(operand)
    return updated


# --- Sorting ------------------------------------------------------------------

def sort_records(
    records: list[dict[str, Any]], sort: Mapping[str, int] | None,
) -> list[dict[str, Any]]:
    """Stable multi-field sort; 1 ascending, -1 descending, None sorts lowest."""
    if not sort:
        return list(records)
    result = list(records)
    for field, direction in reversed(list(sort.items())):
        present = [r for r in result if r.get(field) is not None]
        missing = [r for r in result if r.get(field) is None]
        present.sort(key=lambda r: r[field], reverse=int(direction) < 0)
        result = missing + present if int(direction) > 0 else present + missing
    return result
