"""Root conftest - shared fixtures: a seeded in-memory workspace.

Workspace layout:
    - Projects TEST (sequence 2) and OTHER (sequence 9), both on the classic
      workflow: Backlog, Todo, In Progress, Done, Canceled
    - Issues TEST-1 (In Progress, Alice, rank "0|aaaaaa:"),
      TEST-2 (Done, rank "0|hzzzzz:") and OTHER-9
    - Persons Alice Smith (alice@example.com) and Bob Jones (bob@example.com)
    - Teamspace Engineering with document Runbook; archived teamspace Legacy
    - Label "bug", component API and milestone v1.0 in TEST
"""

import os

import pytest

from trackref.core.domain_types import (
    ChannelProvider, EntityKind, StatusCategory, WORKSPACE_SCOPE,
)
from trackref.infrastructure.memory_document_store import InMemoryDocumentStore

# Ensure tests never reach a real database
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

STATUSES = [
    ("st-backlog", "Backlog", StatusCategory.UNSTARTED),
    ("st-todo", "Todo", StatusCategory.TODO),
    ("st-progress", "In Progress", StatusCategory.ACTIVE),
    ("st-done", "Done", StatusCategory.WON),
    ("st-canceled", "Canceled", StatusCategory.LOST),
]


def make_issue(
    issue_id: str, project_id: str, prefix: str, number: int, **extra,
) -> dict:
    issue = {
        "id": issue_id,
        "space": project_id,
        "attached_to": project_id,
        "collection": "issues",
        "number": number,
        "identifier": f"{prefix}-{number}",
        "title": f"Issue {number}",
        "status": "st-backlog",
        "assignee": None,
        "priority": 0,
        "rank": None,
        "blocked_by": [],
        "relations": [],
    }
    issue.update(extra)
    return issue


def seed_workspace(store: InMemoryDocumentStore) -> InMemoryDocumentStore:
    for status_id, name, category in STATUSES:
        store.seed(EntityKind.STATUS, {
            "id": status_id, "name": name, "category": category.value,
        })
    store.seed(EntityKind.PROJECT_TYPE, {
        "id": "pt-classic", "statuses": [s[0] for s in STATUSES],
    })

    store.seed(EntityKind.PROJECT, {
        "id": "proj-test", "identifier": "TEST", "name": "Test",
        "sequence": 2, "default_status": "st-backlog", "type_id": "pt-classic",
    })
    store.seed(EntityKind.PROJECT, {
        "id": "proj-other", "identifier": "OTHER", "name": "Other",
        "sequence": 9, "default_status": "st-backlog", "type_id": "pt-classic",
    })

    store.seed(EntityKind.PERSON, {"id": "person-alice", "name": "Alice Smith"})
    store.seed(EntityKind.PERSON, {"id": "person-bob", "name": "Bob Jones"})
    store.seed(EntityKind.CHANNEL, {
        "id": "ch-alice", "attached_to": "person-alice",
        "provider": ChannelProvider.EMAIL.value, "value": "alice@example.com",
    })
    store.seed(EntityKind.CHANNEL, {
        "id": "ch-bob", "attached_to": "person-bob",
        "provider": ChannelProvider.EMAIL.value, "value": "bob@example.com",
    })

    store.seed(EntityKind.ISSUE, make_issue(
        "issue-test-1", "proj-test", "TEST", 1,
        status="st-progress", assignee="person-alice", priority=2,
        rank="0|aaaaaa:",
    ))
    store.seed(EntityKind.ISSUE, make_issue(
        "issue-test-2", "proj-test", "TEST", 2,
        status="st-done", rank="0|hzzzzz:",
    ))
    store.seed(EntityKind.ISSUE, make_issue(
        "issue-other-9", "proj-other", "OTHER", 9, rank="0|hzzzzz:",
    ))

    store.seed(EntityKind.TEAMSPACE, {"id": "ts-eng", "name": "Engineering"})
    store.seed(EntityKind.TEAMSPACE, {
        "id": "ts-legacy", "name": "Legacy", "archived": True,
    })
    store.seed(EntityKind.DOCUMENT, {
        "id": "doc-runbook", "space": "ts-eng", "title": "Runbook",
        "rank": "0|hzzzzz:",
    })

    store.seed(EntityKind.TAG_ELEMENT, {
        "id": "tag-bug", "space": WORKSPACE_SCOPE, "title": "bug", "color": 3,
        "target_kind": EntityKind.ISSUE.value,
    })
    store.seed(EntityKind.COMPONENT, {
        "id": "comp-api", "space": "proj-test", "label": "API",
        "lead": "person-bob",
    })
    store.seed(EntityKind.MILESTONE, {
        "id": "ms-v1", "space": "proj-test", "label": "v1.0", "status": 1,
    })
    return store


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh seeded in-memory store per test."""
    return seed_workspace(InMemoryDocumentStore())


@pytest.fixture
def empty_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()
