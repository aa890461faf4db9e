"""Label Operations - tests for idempotent attach and detach."""

import pytest

from trackref.core.domain_types import EntityKind
from trackref.core.errors import TagNotFoundError
from trackref.services.issue_operations import IssueOperations
from trackref.services.label_operations import LabelOperations


@pytest.mark.asyncio
async def test_add_existing_workspace_label(store):
    labels = LabelOperations(store)
    result = await labels.add_label("TEST", "TEST-1", " bug ")
    assert result.added is True
    assert result.label == "bug"

    refs = store.records(EntityKind.TAG_REFERENCE)
    assert len(refs) == 1
    assert refs[0]["tag"] == "tag-bug"
    assert refs[0]["attached_to"] == "issue-test-1"
    assert len(store.records(EntityKind.TAG_ELEMENT)) == 1

    detail = await IssueOperations(store).get_issue("TEST", "TEST-1")
    assert detail.labels == ["bug"]


@pytest.mark.asyncio
async def test_add_label_is_idempotent_case_insensitive(store):
    labels = LabelOperations(store)
    await labels.add_label("TEST", 1, "bug")
    again = await labels.add_label("TEST", 1, "BUG")
    assert again.added is False
    assert len(store.records(EntityKind.TAG_REFERENCE)) == 1


@pytest.mark.asyncio
async def test_add_new_label_creates_tag_element(store):
    result = await LabelOperations(store).add_label("TEST", 1, "frontend", color=5)
    assert result.added is True
    tags = {t["title"]: t for t in store.records(EntityKind.TAG_ELEMENT)}
    assert tags["frontend"]["color"] == 5
    [ref] = store.records(EntityKind.TAG_REFERENCE)
    assert ref["tag"] == tags["frontend"]["id"]


@pytest.mark.asyncio
async def test_remove_label(store):
    labels = LabelOperations(store)
    await labels.add_label("TEST", 1, "bug")
    result = await labels.remove_label("TEST", 1, "Bug")
    assert result.removed is True
    assert store.records(EntityKind.TAG_REFERENCE) == []


@pytest.mark.asyncio
async def test_remove_absent_label_raises(store):
    with pytest.raises(TagNotFoundError) as exc_info:
        await LabelOperations(store).remove_label("TEST", 1, "bug")
    assert exc_info.value.identifier == "bug"
