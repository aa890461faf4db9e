"""Issue Operations - tests for list, get, create and update.

Tests cover:
    - Status filters "open" / "done" / "canceled" / named; unknown names rejected
    - Assignee filter, unknown assignee yields an empty list
    - create_issue: sequence read back, identifier, rank after the maximum
    - update_issue: partial updates, unassign, no-op without a write
"""

import pytest

from trackref.core.domain_types import EntityKind
from trackref.core.errors import (
    InvalidStatusError, IssueNotFoundError, PersonNotFoundError, ProjectNotFoundError,
)
from trackref.core.store_protocol import UpdateResult
from trackref.services.issue_operations import IssueOperations


@pytest.mark.asyncio
async def test_list_open_excludes_done(store):
    result = await IssueOperations(store).list_issues("TEST", status="open")
    assert [i.identifier for i in result.issues] == ["TEST-1"]
    assert result.issues[0].status == "In Progress"
    assert result.issues[0].assignee == "Alice Smith"
    assert result.issues[0].priority == "high"


@pytest.mark.asyncio
async def test_list_done_and_named_status(store):
    ops = IssueOperations(store)
    assert [i.identifier for i in (await ops.list_issues("TEST", status="done")).issues] == ["TEST-2"]
    named = await ops.list_issues("TEST", status="in progress")
    assert [i.identifier for i in named.issues] == ["TEST-1"]


@pytest.mark.asyncio
async def test_list_canceled_is_empty_not_error(store):
    result = await IssueOperations(store).list_issues("TEST", status="canceled")
    assert result.issues == []
    assert result.count == 0


@pytest.mark.asyncio
async def test_list_unknown_status_raises(store):
    with pytest.raises(InvalidStatusError):
        await IssueOperations(store).list_issues("TEST", status="Shipped")


@pytest.mark.asyncio
async def test_list_by_assignee(store):
    ops = IssueOperations(store)
    by_email = await ops.list_issues("TEST", assignee="alice@example.com")
    assert [i.identifier for i in by_email.issues] == ["TEST-1"]
    assert (await ops.list_issues("TEST", assignee="Nobody Here")).issues == []
    assert (await ops.list_issues("TEST", assignee="@alice")).issues == []


@pytest.mark.asyncio
async def test_list_newest_first_and_clamped(store):
    ops = IssueOperations(store, default_limit=1, max_limit=2)
    await store.update_doc(EntityKind.ISSUE, "proj-test", "issue-test-1", {"title": "touched"})
    result = await ops.list_issues("TEST")
    assert [i.identifier for i in result.issues] == ["TEST-1"]
    assert len((await ops.list_issues("TEST", limit=500)).issues) == 2


@pytest.mark.asyncio
async def test_list_unknown_project(store):
    with pytest.raises(ProjectNotFoundError):
        await IssueOperations(store).list_issues("NOPE")


@pytest.mark.asyncio
async def test_get_issue_detail(store):
    detail = await IssueOperations(store).get_issue("TEST", 1)
    assert detail.identifier == "TEST-1"
    assert detail.status == "In Progress"
    assert detail.assignee == "Alice Smith"
    assert detail.labels == []
    assert detail.blocked_by_count == 0


@pytest.mark.asyncio
async def test_create_issue_uses_sequence_and_ranks_last(store):
    created = await IssueOperations(store).create_issue(
        "test", "New thing", status="todo", assignee="bob@example.com",
        priority="urgent",
    )
    assert created.identifier == "TEST-3"
    assert created.number == 3
    assert created.rank > "0|hzzzzz:"

    record = await store.find_one(EntityKind.ISSUE, {"identifier": "TEST-3"})
    assert record["status"] == "st-todo"
    assert record["assignee"] == "person-bob"
    assert record["priority"] == 1
    assert record["attached_to"] == "proj-test"
    assert record["collection"] == "issues"
    project = await store.find_one(EntityKind.PROJECT, {"id": "proj-test"})
    assert project["sequence"] == 3


@pytest.mark.asyncio
async def test_create_issue_defaults(store):
    ops = IssueOperations(store)
    first = await ops.create_issue("TEST", "One")
    second = await ops.create_issue("TEST", "Two")
    assert second.number == first.number + 1
    assert second.rank > first.rank
    record = await store.find_one(EntityKind.ISSUE, {"id": first.id})
    assert record["status"] == "st-backlog"
    assert record["assignee"] is None
    assert record["priority"] == 0


@pytest.mark.asyncio
async def test_create_issue_sequence_fallback(store, monkeypatch):
    original_update = store.update_doc

    async def update_without_object(*args, **kwargs):
        await original_update(*args, **kwargs)
        return UpdateResult(object=None)

    monkeypatch.setattr(store, "update_doc", update_without_object)
    created = await IssueOperations(store).create_issue("TEST", "Fallback")
    assert created.identifier == "TEST-3"


@pytest.mark.asyncio
async def test_create_issue_rejects_bad_status_and_assignee(store):
    ops = IssueOperations(store)
    with pytest.raises(InvalidStatusError):
        await ops.create_issue("TEST", "x", status="Shipped")
    with pytest.raises(PersonNotFoundError):
        await ops.create_issue("TEST", "x", assignee="nobody@example.com")
    project = await store.find_one(EntityKind.PROJECT, {"id": "proj-test"})
    assert project["sequence"] == 2


@pytest.mark.asyncio
async def test_update_issue_fields(store):
    ops = IssueOperations(store)
    result = await ops.update_issue(
        "TEST", "TEST-1", title="Renamed", status="Done", priority="low",
    )
    assert result.updated is True
    record = await store.find_one(EntityKind.ISSUE, {"id": "issue-test-1"})
    assert record["title"] == "Renamed"
    assert record["status"] == "st-done"
    assert record["priority"] == 4
    assert record["assignee"] == "person-alice"


@pytest.mark.asyncio
async def test_update_issue_unassign(store):
    await IssueOperations(store).update_issue("TEST", 1, assignee=None)
    record = await store.find_one(EntityKind.ISSUE, {"id": "issue-test-1"})
    assert record["assignee"] is None


@pytest.mark.asyncio
async def test_update_issue_noop_skips_write(store, monkeypatch):
    async def no_write(*args, **kwargs):
        raise AssertionError("update_doc must not be called")

    monkeypatch.setattr(store, "update_doc", no_write)
    result = await IssueOperations(store).update_issue("TEST", 2)
    assert result.updated is False
    assert result.identifier == "TEST-2"


@pytest.mark.asyncio
async def test_update_missing_issue(store):
    with pytest.raises(IssueNotFoundError):
        await IssueOperations(store).update_issue("TEST", 99, title="x")
