"""Entity Locator - resolves loose references to stored entities.

Invariants:
    - find_* return None when nothing matches; require_* raise the typed
      not-found error carrying the raw reference and its container
    - Issues: exact parsed identifier first, then (project, number) when the
      reference carried a number
    - Other kinds: id first, then exact name/label/title; first non-empty hit wins
    - Never raises for ambiguity: the first match in store order is returned
    - Substring search ($like, wildcards escaped) only when a caller asks for it

Design Decisions:
    - The number fallback covers stored identifiers whose formatting differs from
      "{PREFIX}-{n}" (zero padding, renamed prefixes)
    - Projects fall back to the identifier uppercased: identifiers are stored uppercase
"""

import logging
from typing import Any

from trackref.core.domain_types import EntityKind
from trackref.core.errors import (
    ComponentNotFoundError, DocumentNotFoundError, IssueNotFoundError,
    MilestoneNotFoundError, ProjectNotFoundError, TagNotFoundError,
    TeamspaceNotFoundError,
)
from trackref.core.parse_identifier import parse_issue_identifier
from trackref.core.query_match import add_substring_search
from trackref.core.store_protocol import DocumentStore, FindOptions, Query, Record
from trackref.schemas.entities import (
    Component, Document, Issue, Milestone, Project, TagElement, Teamspace,
)

logger = logging.getLogger(__name__)


class EntityLocator:
    """Lookup-order policy over a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ─── Generic lookups ────────────────────────────────────────

    async def find_by_id_or_name(
        self, kind: EntityKind, primary: Query, fallback: Query | None = None,
    ) -> Record | None:
        """Primary query, then fallback query; first non-empty result wins."""
        record = await self.store.find_one(kind, primary)
        if record is None and fallback is not None:
            logger.debug(
                f"No {kind.value} matched {primary}, trying fallback",
                extra={"entity_kind": kind.value},
            )
            record = await self.store.find_one(kind, fallback)
        return record

    async def find_by_substring(
        self, kind: EntityKind, base: Query, field: str, term: str,
        limit: int | None = None,
    ) -> list[Record]:
        """Records whose field contains term (case-insensitive, wildcards escaped)."""
        query = add_substring_search(base, field, term)
        return await self.store.find_all(kind, query, FindOptions(limit=limit))

    # ─── Projects and issues ────────────────────────────────────

    async def find_project(self, reference: str) -> Project | None:
        ref = str(reference).strip()
        record = await self.find_by_id_or_name(
            EntityKind.PROJECT, {"id": ref}, {"identifier": ref.upper()},
        )
        return Project.model_validate(record) if record else None

    async def require_project(self, reference: str) -> Project:
        project = await self.find_project(reference)
        if project is None:
            raise ProjectNotFoundError(str(reference))
        return project

    async def find_issue(
        self, project: Project, reference: str | int,
    ) -> Issue | None:
        parsed = parse_issue_identifier(reference, project.identifier)
        record = await self.store.find_one(
            EntityKind.ISSUE,
            {"space": project.id, "identifier": parsed.full_identifier},
        )
        if record is None and parsed.number is not None:
            record = await self.store.find_one(
                EntityKind.ISSUE, {"space": project.id, "number": parsed.number},
            )
        return Issue.model_validate(record) if record else None

    async def require_issue(
        self, project: Project, reference: str | int,
        project_reference: str | None = None,
    ) -> Issue:
        issue = await self.find_issue(project, reference)
        if issue is None:
            raise IssueNotFoundError(
                str(reference), project_reference or project.identifier,
            )
        return issue

    async def require_project_and_issue(
        self, project_reference: str, issue_reference: str | int,
    ) -> tuple[Project, Issue]:
        project = await self.require_project(project_reference)
        issue = await self.require_issue(project, issue_reference, project_reference)
        return project, issue

    # ─── Labels ─────────────────────────────────────────────────

    async def find_tag(self, reference: str) -> TagElement | None:
        target = {"target_kind": EntityKind.ISSUE.value}
        record = await self.find_by_id_or_name(
            EntityKind.TAG_ELEMENT,
            {"id": reference, **target},
            {"title": reference, **target},
        )
        return TagElement.model_validate(record) if record else None

    async def require_tag(self, reference: str) -> TagElement:
        tag = await self.find_tag(reference)
        if tag is None:
            raise TagNotFoundError(reference)
        return tag

    # ─── Teamspaces and documents ───────────────────────────────

    async def find_teamspace(self, reference: str) -> Teamspace | None:
        record = await self.find_by_id_or_name(
            EntityKind.TEAMSPACE,
            {"id": reference},
            {"name": reference, "archived": {"$ne": True}},
        )
        return Teamspace.model_validate(record) if record else None

    async def require_teamspace(self, reference: str) -> Teamspace:
        teamspace = await self.find_teamspace(reference)
        if teamspace is None:
            raise TeamspaceNotFoundError(reference)
        return teamspace

    async def find_document(
        self, teamspace: Teamspace, reference: str,
    ) -> Document | None:
        record = await self.find_by_id_or_name(
            EntityKind.DOCUMENT,
            {"space": teamspace.id, "id": reference},
            {"space": teamspace.id, "title": reference},
        )
        return Document.model_validate(record) if record else None

    async def require_document(
        self, teamspace: Teamspace, reference: str,
        teamspace_reference: str | None = None,
    ) -> Document:
        document = await self.find_document(teamspace, reference)
        if document is None:
            raise DocumentNotFoundError(
                reference, teamspace_reference or teamspace.name,
            )
        return document

    # ─── Components and milestones ──────────────────────────────

    async def _find_labelled(
        self, kind: EntityKind, project: Project, reference: str,
    ) -> dict[str, Any] | None:
        return await self.find_by_id_or_name(
            kind,
            {"space": project.id, "id": reference},
            {"space": project.id, "label": reference},
        )

    async def find_component(
        self, project: Project, reference: str,
    ) -> Component | None:
        record = await self._find_labelled(EntityKind.COMPONENT, project, reference)
        return Component.model_validate(record) if record else None

    async def require_component(
        self, project: Project, reference: str,
    ) -> Component:
        component = await self.find_component(project, reference)
        if component is None:
            raise ComponentNotFoundError(reference, project.identifier)
        return component

    async def find_milestone(
        self, project: Project, reference: str,
    ) -> Milestone | None:
        record = await self._find_labelled(EntityKind.MILESTONE, project, reference)
        return Milestone.model_validate(record) if record else None

    async def require_milestone(
        self, project: Project, reference: str,
    ) -> Milestone:
        milestone = await self.find_milestone(project, reference)
        if milestone is None:
            raise MilestoneNotFoundError(reference, project.identifier)
        return milestone
