"""Entity Locator - tests for lookup-order policy and typed not-found errors.

Tests cover:
    - Projects by id, then identifier (case-insensitive input)
    - Issues by identifier, then by number when the stored identifier differs
    - Containers by id, then exact name/label/title
    - require_* raise errors carrying the raw reference and container
"""

import pytest

from trackref.core.domain_types import EntityKind
from trackref.core.errors import (
    ComponentNotFoundError, DocumentNotFoundError, IssueNotFoundError,
    MilestoneNotFoundError, ProjectNotFoundError, TagNotFoundError,
    TeamspaceNotFoundError,
)
from trackref.services.locate_entities import EntityLocator


@pytest.mark.asyncio
async def test_project_by_id_and_identifier(store):
    locator = EntityLocator(store)
    assert (await locator.find_project("proj-test")).identifier == "TEST"
    assert (await locator.find_project("test")).id == "proj-test"
    assert await locator.find_project("NOPE") is None


@pytest.mark.asyncio
async def test_require_project_raises_with_raw_reference(store):
    with pytest.raises(ProjectNotFoundError) as exc_info:
        await EntityLocator(store).require_project("nope")
    assert exc_info.value.identifier == "nope"


@pytest.mark.asyncio
async def test_issue_by_identifier_number_and_lowercase(store):
    locator = EntityLocator(store)
    project = await locator.require_project("TEST")
    assert (await locator.find_issue(project, "TEST-1")).id == "issue-test-1"
    assert (await locator.find_issue(project, "test-2")).id == "issue-test-2"
    assert (await locator.find_issue(project, 2)).id == "issue-test-2"
    assert (await locator.find_issue(project, "1")).id == "issue-test-1"


@pytest.mark.asyncio
async def test_issue_falls_back_to_number(store):
    store.seed(EntityKind.ISSUE, {
        "id": "issue-padded", "space": "proj-test", "number": 7,
        "identifier": "TEST-007",
    })
    locator = EntityLocator(store)
    project = await locator.require_project("TEST")
    assert (await locator.find_issue(project, 7)).id == "issue-padded"
    assert (await locator.find_issue(project, "TEST-7")).id == "issue-padded"


@pytest.mark.asyncio
async def test_issue_lookup_is_scoped_to_project(store):
    locator = EntityLocator(store)
    project = await locator.require_project("TEST")
    assert await locator.find_issue(project, 9) is None


@pytest.mark.asyncio
async def test_require_issue_error_carries_project(store):
    locator = EntityLocator(store)
    with pytest.raises(IssueNotFoundError) as exc_info:
        await locator.require_project_and_issue("test", "TEST-99")
    assert exc_info.value.details() == {"identifier": "TEST-99", "project": "test"}


@pytest.mark.asyncio
async def test_teamspace_by_name_skips_archived(store):
    locator = EntityLocator(store)
    assert (await locator.find_teamspace("Engineering")).id == "ts-eng"
    assert (await locator.find_teamspace("ts-legacy")).archived
    assert await locator.find_teamspace("Legacy") is None
    with pytest.raises(TeamspaceNotFoundError):
        await locator.require_teamspace("Legacy")


@pytest.mark.asyncio
async def test_document_by_title_within_teamspace(store):
    locator = EntityLocator(store)
    space = await locator.require_teamspace("Engineering")
    assert (await locator.find_document(space, "Runbook")).id == "doc-runbook"
    assert (await locator.find_document(space, "doc-runbook")).title == "Runbook"
    with pytest.raises(DocumentNotFoundError) as exc_info:
        await locator.require_document(space, "Missing")
    assert exc_info.value.teamspace == "Engineering"


@pytest.mark.asyncio
async def test_tag_component_milestone(store):
    locator = EntityLocator(store)
    project = await locator.require_project("TEST")
    assert (await locator.require_tag("bug")).id == "tag-bug"
    assert (await locator.require_component(project, "API")).id == "comp-api"
    assert (await locator.require_milestone(project, "ms-v1")).label == "v1.0"
    with pytest.raises(TagNotFoundError):
        await locator.require_tag("feature")
    with pytest.raises(ComponentNotFoundError):
        await locator.require_component(project, "api")
    with pytest.raises(MilestoneNotFoundError) as exc_info:
        await locator.require_milestone(project, "v2.0")
    assert exc_info.value.project == "TEST"


@pytest.mark.asyncio
async def test_find_by_substring_escapes_wildcards(store):
    locator = EntityLocator(store)
    found = await locator.find_by_substring(EntityKind.PERSON, {}, "name", "SMITH")
    assert [p["id"] for p in found] == ["person-alice"]
    assert await locator.find_by_substring(EntityKind.PERSON, {}, "name", "%") == []
