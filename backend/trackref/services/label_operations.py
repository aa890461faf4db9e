"""Label Operations - attach and detach workspace labels on issues.

Invariants:
    - Label titles compare case-insensitively after stripping
    - add_label is idempotent: a label already on the issue returns added=False
      without a write
    - The workspace TagElement is reused when one with the same title targets
      issues; otherwise it is created in the workspace scope first
    - remove_label raises TagNotFoundError when the issue carries no such label
"""

import logging
import uuid

from trackref.core.domain_types import LABELS_COLLECTION, WORKSPACE_SCOPE, EntityKind
from trackref.core.errors import TagNotFoundError
from trackref.core.store_protocol import DocumentStore
from trackref.schemas.entities import Issue, TagElement, TagReference
from trackref.schemas.results import LabelChange
from trackref.services.locate_entities import EntityLocator

logger = logging.getLogger(__name__)


class LabelOperations:
    """Issue label attach/detach."""

    def __init__(self, store: DocumentStore, locator: EntityLocator | None = None):
        self.store = store
        self.locator = locator or EntityLocator(store)

    async def _issue_labels(self, issue: Issue) -> list[TagReference]:
        records = await self.store.find_all(
            EntityKind.TAG_REFERENCE,
            {
                "attached_to": issue.id,
                "attached_to_kind": EntityKind.ISSUE.value,
                "collection": LABELS_COLLECTION,
            },
        )
        return [TagReference.model_validate(r) for r in records]

    async def _find_or_create_tag(self, title: str, color: int) -> TagElement:
        record = await self.store.find_one(
            EntityKind.TAG_ELEMENT,
            {"title": title, "target_kind": EntityKind.ISSUE.value},
        )
        if record is not None:
            return TagElement.model_validate(record)

        tag_id = uuid.uuid4().hex
        attributes = {
            "title": title,
            "color": color,
            "target_kind": EntityKind.ISSUE.value,
        }
        await self.store.create_doc(
            EntityKind.TAG_ELEMENT, WORKSPACE_SCOPE, attributes, tag_id,
        )
        logger.info(f"Created label '{title}'", extra={"entity_kind": "tag"})
        return TagElement(id=tag_id, space=WORKSPACE_SCOPE, **attributes)

    async def add_label(
        self, project: str, identifier: str | int, label: str, color: int = 0,
    ) -> LabelChange:
        found, issue = await self.locator.require_project_and_issue(project, identifier)
        title = label.strip()
        result = LabelChange(identifier=issue.identifier, label=title)

        existing = await self._issue_labels(issue)
        if any(ref.title.lower() == title.lower() for ref in existing):
            return result.model_copy(update={"added": False})

        tag = await self._find_or_create_tag(title, color)
        await self.store.add_collection(
            EntityKind.TAG_REFERENCE, found.id, issue.id, EntityKind.ISSUE,
            LABELS_COLLECTION,
            {"title": tag.title, "color": tag.color, "tag": tag.id},
        )
        logger.info(
            f"Labelled {issue.identifier} with '{tag.title}'",
            extra={"project": found.identifier, "identifier": issue.identifier},
        )
        return result.model_copy(update={"added": True})

    async def remove_label(
        self, project: str, identifier: str | int, label: str,
    ) -> LabelChange:
        found, issue = await self.locator.require_project_and_issue(project, identifier)
        title = label.strip()

        existing = await self._issue_labels(issue)
        match = next(
            (ref for ref in existing if ref.title.lower() == title.lower()), None,
        )
        if match is None:
            raise TagNotFoundError(title)

        await self.store.remove_doc(EntityKind.TAG_REFERENCE, found.id, match.id)
        logger.info(
            f"Removed label '{match.title}' from {issue.identifier}",
            extra={"project": found.identifier, "identifier": issue.identifier},
        )
        return LabelChange(identifier=issue.identifier, label=match.title, removed=True)
