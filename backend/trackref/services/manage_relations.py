"""Relation Manager - blocks / is-blocked-by / relates-to edges between issues.

Invariants:
    - blocks: the TARGET's blocked_by holds a ref to the source
    - is-blocked-by: the SOURCE's blocked_by holds a ref to the target
    - relates-to: both issues' relations hold a ref to the other
    - Idempotent: presence is checked on the record already read; adding a present
      edge returns added=False and removing an absent one returns removed=False,
      both without a write
    - For relates-to only the source side is inspected before writing
    - A target whose prefix differs from the source project's identifier is looked
      up in its own project (ProjectNotFoundError when that project is unknown)
    - list_relations never fails for one broken ref: the raw id stands in for
      the identifier of an issue that no longer exists

Design Decisions:
    - relates-to is two independent writes, source first. A failure of the second
      leaves a one-sided edge; the error propagates and a retry of the same call
      reports added=False on the source side. Best-effort symmetry is kept for
      compatibility with other clients of the store, which write edges the same way
"""

import logging

from trackref.core.domain_types import EntityKind, RelationType
from trackref.core.parse_identifier import identifier_prefix, parse_issue_identifier
from trackref.core.relation_edges import (
    BLOCKED_BY_FIELD, RELATIONS_FIELD, has_relation, pull_edge, push_edge,
)
from trackref.core.store_protocol import DocumentStore
from trackref.schemas.entities import Issue, Project, RelatedRef
from trackref.schemas.results import RelationChange, RelationEntry, RelationList
from trackref.services.locate_entities import EntityLocator

logger = logging.getLogger(__name__)


class RelationManager:
    """Adds, removes and lists issue relation edges."""

    def __init__(self, store: DocumentStore, locator: EntityLocator | None = None):
        self.store = store
        self.locator = locator or EntityLocator(store)

    async def resolve_target(
        self, source_project: Project, target_reference: str,
    ) -> tuple[Issue, Project]:
        """Target issue and its project; other projects are found by prefix."""
        parsed = parse_issue_identifier(target_reference, source_project.identifier)
        prefix = identifier_prefix(parsed.full_identifier)
        if prefix is not None and prefix != source_project.identifier.upper():
            target_project = await self.locator.require_project(prefix)
            issue = await self.locator.require_issue(target_project, target_reference)
            return issue, target_project
        issue = await self.locator.require_issue(source_project, target_reference)
        return issue, source_project

    async def _write(
        self, project: Project, issue: Issue, operations: dict,
    ) -> None:
        await self.store.update_doc(EntityKind.ISSUE, project.id, issue.id, operations)

    async def add_relation(
        self, project_reference: str, issue_reference: str,
        target_reference: str, relation_type: RelationType | str,
    ) -> RelationChange:
        relation = RelationType(relation_type)
        project, source = await self.locator.require_project_and_issue(
            project_reference, issue_reference,
        )
        target, target_project = await self.resolve_target(project, target_reference)
        result = RelationChange(
            source_issue=source.identifier,
            target_issue=target.identifier,
            relation_type=relation.value,
        )

        if relation is RelationType.BLOCKS:
            if has_relation(target.blocked_by, source.id):
                return result.model_copy(update={"added": False})
            await self._write(
                target_project, target, push_edge(BLOCKED_BY_FIELD, source.id),
            )
        elif relation is RelationType.IS_BLOCKED_BY:
            if has_relation(source.blocked_by, target.id):
                return result.model_copy(update={"added": False})
            await self._write(
                project, source, push_edge(BLOCKED_BY_FIELD, target.id),
            )
        else:
            if has_relation(source.relations, target.id):
                return result.model_copy(update={"added": False})
            await self._write(project, source, push_edge(RELATIONS_FIELD, target.id))
            await self._write(
                target_project, target, push_edge(RELATIONS_FIELD, source.id),
            )

        logger.info(
            f"Added {relation.value} {source.identifier} -> {target.identifier}",
            extra={"project": project.identifier, "relation_type": relation.value},
        )
        return result.model_copy(update={"added": True})

    async def remove_relation(
        self, project_reference: str, issue_reference: str,
        target_reference: str, relation_type: RelationType | str,
    ) -> RelationChange:
        relation = RelationType(relation_type)
        project, source = await self.locator.require_project_and_issue(
            project_reference, issue_reference,
        )
        target, target_project = await self.resolve_target(project, target_reference)
        result = RelationChange(
            source_issue=source.identifier,
            target_issue=target.identifier,
            relation_type=relation.value,
        )

        if relation is RelationType.BLOCKS:
            if not has_relation(target.blocked_by, source.id):
                return result.model_copy(update={"removed": False})
            await self._write(
                target_project, target, pull_edge(BLOCKED_BY_FIELD, source.id),
            )
        elif relation is RelationType.IS_BLOCKED_BY:
            if not has_relation(source.blocked_by, target.id):
                return result.model_copy(update={"removed": False})
            await self._write(
                project, source, pull_edge(BLOCKED_BY_FIELD, target.id),
            )
        else:
            if not has_relation(source.relations, target.id):
                return result.model_copy(update={"removed": False})
            await self._write(project, source, pull_edge(RELATIONS_FIELD, target.id))
            await self._write(
                target_project, target, pull_edge(RELATIONS_FIELD, source.id),
            )

        logger.info(
            f"Removed {relation.value} {source.identifier} -> {target.identifier}",
            extra={"project": project.identifier, "relation_type": relation.value},
        )
        return result.model_copy(update={"removed": True})

    async def list_relations(
        self, project_reference: str, issue_reference: str,
    ) -> RelationList:
        _, issue = await self.locator.require_project_and_issue(
            project_reference, issue_reference,
        )
        refs = [*issue.blocked_by, *issue.relations]
        if not refs:
            return RelationList()

        records = await self.store.find_all(
            EntityKind.ISSUE, {"id": {"$in": [r.id for r in refs]}},
        )
        identifiers = {r["id"]: r.get("identifier") for r in records}
        broken = [r.id for r in refs if not identifiers.get(r.id)]
        if broken:
            logger.warning(
                f"Issue {issue.identifier} references missing issues: {broken}",
                extra={"identifier": issue.identifier},
            )

        def entry(ref: RelatedRef) -> RelationEntry:
            return RelationEntry(
                identifier=identifiers.get(ref.id) or ref.id,
                id=ref.id,
                kind=ref.kind,
            )

        return RelationList(
            blocked_by=[entry(r) for r in issue.blocked_by],
            relations=[entry(r) for r in issue.relations],
        )
