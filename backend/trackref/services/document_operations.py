"""Document Operations - teamspace documents and container lookups.

Invariants:
    - create_document ranks the new document after every document of the teamspace
    - find_* operations are Entity Locator lookups that raise the typed
      not-found error instead of returning None
"""

import logging
import uuid

from trackref.core.domain_types import EntityKind
from trackref.core.store_protocol import DocumentStore
from trackref.schemas.results import (
    ComponentResult, DocumentResult, MilestoneResult, TagResult, TeamspaceResult,
)
from trackref.services.assign_rank import next_document_rank
from trackref.services.locate_entities import EntityLocator

logger = logging.getLogger(__name__)


class DocumentOperations:
    """Documents, teamspaces, tags, components and milestones."""

    def __init__(self, store: DocumentStore, locator: EntityLocator | None = None):
        self.store = store
        self.locator = locator or EntityLocator(store)

    async def create_document(self, teamspace: str, title: str) -> DocumentResult:
        space = await self.locator.require_teamspace(teamspace)
        rank = await next_document_rank(self.store, space.id)
        document_id = uuid.uuid4().hex
        await self.store.create_doc(
            EntityKind.DOCUMENT, space.id, {"title": title, "rank": rank}, document_id,
        )
        logger.info(
            f"Created document '{title}' in {space.name}",
            extra={"entity_kind": EntityKind.DOCUMENT.value},
        )
        return DocumentResult(id=document_id, title=title, teamspace=space.name, rank=rank)

    async def find_teamspace(self, teamspace: str) -> TeamspaceResult:
        space = await self.locator.require_teamspace(teamspace)
        return TeamspaceResult(id=space.id, name=space.name)

    async def find_document(self, teamspace: str, document: str) -> DocumentResult:
        space = await self.locator.require_teamspace(teamspace)
        found = await self.locator.require_document(space, document, teamspace)
        return DocumentResult(
            id=found.id, title=found.title, teamspace=space.name, rank=found.rank,
        )

    async def find_tag(self, label: str) -> TagResult:
        tag = await self.locator.require_tag(label)
        return TagResult(id=tag.id, title=tag.title, color=tag.color)

    async def find_component(self, project: str, component: str) -> ComponentResult:
        found = await self.locator.require_project(project)
        item = await self.locator.require_component(found, component)
        return ComponentResult(
            id=item.id, label=item.label, project=found.identifier, lead=item.lead,
        )

    async def find_milestone(self, project: str, milestone: str) -> MilestoneResult:
        found = await self.locator.require_project(project)
        item = await self.locator.require_milestone(found, milestone)
        return MilestoneResult(
            id=item.id, label=item.label, project=found.identifier, status=item.status,
        )
