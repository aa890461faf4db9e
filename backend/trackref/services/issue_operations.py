"""Issue Operations - list, get, create and update issues from loose references.

Invariants:
    - Every operation resolves project and issue through the Entity Locator first
    - list_issues: status filter per the Status Classifier; an assignee that does
      not resolve yields an empty list, not an error; newest modification first;
      limit clamped to the configured default/maximum
    - create_issue: number = project sequence after a $inc read back from the store
      (sequence + 1 when the store returns no object); identifier is
      "{PROJECT}-{number}"; rank sorts after every existing issue of the project
    - update_issue: only provided fields are written; assignee=None unassigns;
      nothing provided means updated=False and no write

Design Decisions:
    - The sequence increment and the issue insert are separate writes. A failure
      between them burns one number, which is never reused
    - UNSET sentinel distinguishes "assignee not given" from "assignee=None"
"""

import logging
import uuid
from typing import Any

from trackref.core.classify_statuses import build_status_filter
from trackref.core.domain_types import (
    DEFAULT_LIMIT, ISSUES_COLLECTION, LABELS_COLLECTION, MAX_LIMIT, SPACE_SCOPE,
    EntityKind, SortOrder, clamp_limit, priority_to_int, priority_to_name,
)
from trackref.core.store_protocol import DocumentStore, FindOptions
from trackref.schemas.entities import Issue, Person, Project, TagReference
from trackref.schemas.results import (
    CreatedIssue, IssueDetail, IssueList, IssueSummary, UpdatedIssue,
)
from trackref.services.assign_rank import next_issue_rank
from trackref.services.locate_entities import EntityLocator
from trackref.services.resolve_person import PersonResolver
from trackref.services.resolve_status import StatusClassifier

logger = logging.getLogger(__name__)

UNSET: Any = object()


class IssueOperations:
    """Caller-facing issue operations."""

    def __init__(
        self, store: DocumentStore,
        default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT,
        locator: EntityLocator | None = None,
    ):
        self.store = store
        self.locator = locator or EntityLocator(store)
        self.statuses = StatusClassifier(store)
        self.persons = PersonResolver(store, self.locator)
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def _person_names(self, person_ids: set[str]) -> dict[str, str]:
        if not person_ids:
            return {}
        records = await self.store.find_all(
            EntityKind.PERSON, {"id": {"$in": sorted(person_ids)}},
        )
        return {r["id"]: Person.model_validate(r).name for r in records}

    async def list_issues(
        self, project: str, status: str | None = None,
        assignee: str | None = None, limit: int | None = None,
    ) -> IssueList:
        found = await self.locator.require_project(project)
        query: dict[str, Any] = {"space": found.id}
        empty = IssueList(project=found.identifier)

        statuses = await self.statuses.classify(found)
        if status is not None:
            status_filter = build_status_filter(status, statuses, found.identifier)
            if status_filter.empty:
                return empty
            if status_filter.predicate is not None:
                query["status"] = status_filter.predicate

        if assignee is not None:
            person = await self.persons.resolve(assignee)
            if person is None:
                return empty
            query["assignee"] = person.id

        records = await self.store.find_all(
            EntityKind.ISSUE, query,
            FindOptions(
                sort={"modified_on": SortOrder.DESCENDING.value},
                limit=clamp_limit(limit, self._default_limit, self._max_limit),
            ),
        )
        issues = [Issue.model_validate(r) for r in records]
        names = await self._person_names({i.assignee for i in issues if i.assignee})
        status_names = {s.id: s.name for s in statuses}

        summaries = [
            IssueSummary(
                identifier=i.identifier,
                title=i.title,
                status=status_names.get(i.status, i.status) if i.status else None,
                priority=priority_to_name(i.priority),
                assignee=names.get(i.assignee) if i.assignee else None,
                modified_on=i.modified_on,
            )
            for i in issues
        ]
        return IssueList(
            project=found.identifier, issues=summaries, count=len(summaries),
        )

    async def get_issue(self, project: str, identifier: str | int) -> IssueDetail:
        found, issue = await self.locator.require_project_and_issue(project, identifier)
        status_name = await self.statuses.status_name(found, issue.status)
        names = await self._person_names({issue.assignee} if issue.assignee else set())
        labels = await self.store.find_all(
            EntityKind.TAG_REFERENCE,
            {"attached_to": issue.id, "collection": LABELS_COLLECTION},
        )
        return IssueDetail(
            id=issue.id,
            identifier=issue.identifier,
            number=issue.number,
            title=issue.title,
            status=status_name,
            priority=priority_to_name(issue.priority),
            assignee=names.get(issue.assignee) if issue.assignee else None,
            modified_on=issue.modified_on,
            rank=issue.rank,
            component=issue.component,
            milestone=issue.milestone,
            labels=[TagReference.model_validate(r).title for r in labels],
            blocked_by_count=len(issue.blocked_by),
            relations_count=len(issue.relations),
        )

    async def _next_number(self, project: Project) -> int:
        result = await self.store.update_doc(
            EntityKind.PROJECT, SPACE_SCOPE, project.id,
            {"$inc": {"sequence": 1}}, retrieve=True,
        )
        if result.object and result.object.get("sequence") is not None:
            return int(result.object["sequence"])
        return project.sequence + 1

    async def create_issue(
        self, project: str, title: str, status: str | None = None,
        assignee: str | None = None, priority: str | None = None,
    ) -> CreatedIssue:
        found = await self.locator.require_project(project)

        status_id = found.default_status
        if status is not None:
            status_id = (await self.statuses.resolve_status(found, status)).id

        assignee_id = None
        if assignee is not None:
            assignee_id = (await self.persons.require(assignee)).id

        number = await self._next_number(found)
        rank = await next_issue_rank(self.store, found.id)
        identifier = f"{found.identifier}-{number}"
        issue_id = uuid.uuid4().hex

        await self.store.add_collection(
            EntityKind.ISSUE, found.id, found.id, EntityKind.PROJECT,
            ISSUES_COLLECTION,
            {
                "title": title,
                "number": number,
                "identifier": identifier,
                "status": status_id,
                "assignee": assignee_id,
                "priority": priority_to_int(priority),
                "rank": rank,
                "component": None,
                "milestone": None,
                "blocked_by": [],
                "relations": [],
            },
            issue_id,
        )
        logger.info(
            f"Created issue {identifier}",
            extra={"project": found.identifier, "identifier": identifier},
        )
        return CreatedIssue(id=issue_id, identifier=identifier, number=number, rank=rank)

    async def update_issue(
        self, project: str, identifier: str | int, title: str | None = None,
        status: str | None = None, assignee: str | None = UNSET,
        priority: str | None = None,
    ) -> UpdatedIssue:
        found, issue = await self.locator.require_project_and_issue(project, identifier)
        operations: dict[str, Any] = {}

        if title is not None:
            operations["title"] = title
        if status is not None:
            operations["status"] = (await self.statuses.resolve_status(found, status)).id
        if priority is not None:
            operations["priority"] = priority_to_int(priority)
        if assignee is not UNSET:
            operations["assignee"] = (
                None if assignee is None else (await self.persons.require(assignee)).id
            )

        if not operations:
            return UpdatedIssue(identifier=issue.identifier, updated=False)

        await self.store.update_doc(EntityKind.ISSUE, found.id, issue.id, operations)
        logger.info(
            f"Updated issue {issue.identifier}: {sorted(operations)}",
            extra={"project": found.identifier, "identifier": issue.identifier},
        )
        return UpdatedIssue(identifier=issue.identifier, updated=True)
