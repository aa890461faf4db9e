"""Resolution Operations - the resolution layer's own operations, exposed to callers.

Invariants:
    - resolve_project / resolve_issue / resolve_person raise the typed not-found
      error after an exhausted lookup
    - classify_statuses lists the project workflow in order, degraded to name
      classification when the canonical status fetch fails
    - next_rank reads only; the returned rank is not reserved
"""

from trackref.core.store_protocol import DocumentStore
from trackref.schemas.results import (
    IssueHandle, PersonResult, ProjectResult, RankResult, StatusEntry, StatusList,
)
from trackref.services.assign_rank import next_document_rank, next_issue_rank
from trackref.services.locate_entities import EntityLocator
from trackref.services.resolve_person import PersonResolver
from trackref.services.resolve_status import StatusClassifier


class ResolutionOperations:
    """Project, issue, status, person and rank resolution."""

    def __init__(self, store: DocumentStore, locator: EntityLocator | None = None):
        self.store = store
        self.locator = locator or EntityLocator(store)
        self.statuses = StatusClassifier(store)
        self.persons = PersonResolver(store, self.locator)

    async def resolve_project(self, project: str) -> ProjectResult:
        found = await self.locator.require_project(project)
        return ProjectResult(id=found.id, identifier=found.identifier, name=found.name)

    async def resolve_issue(self, project: str, identifier: str | int) -> IssueHandle:
        found, issue = await self.locator.require_project_and_issue(project, identifier)
        return IssueHandle(id=issue.id, identifier=issue.identifier, project=found.identifier)

    async def classify_statuses(self, project: str) -> StatusList:
        found = await self.locator.require_project(project)
        statuses = await self.statuses.classify(found)
        return StatusList(
            project=found.identifier,
            statuses=[
                StatusEntry(
                    id=s.id, name=s.name, bucket=s.bucket.value,
                    is_done=s.is_done, is_canceled=s.is_canceled,
                )
                for s in statuses
            ],
        )

    async def resolve_person(self, person: str) -> PersonResult:
        found = await self.persons.require(person)
        return PersonResult(id=found.id, name=found.name)

    async def next_rank(
        self, project: str | None = None, teamspace: str | None = None,
    ) -> RankResult:
        """Next append rank in a project (issues) or a teamspace (documents)."""
        if teamspace is not None:
            space = await self.locator.require_teamspace(teamspace)
            return RankResult(
                scope=space.name, rank=await next_document_rank(self.store, space.id),
            )
        found = await self.locator.require_project(project)
        return RankResult(
            scope=found.identifier, rank=await next_issue_rank(self.store, found.id),
        )
