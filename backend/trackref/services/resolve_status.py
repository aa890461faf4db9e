"""Status Classifier - loads a project's workflow statuses and buckets them.

Invariants:
    - Status ids come from the project's ProjectType, in workflow order
    - Canonical path: one batched $in fetch of Status records, bucketed by category
    - Fallback path: when that fetch raises StoreError, names are derived from the
      status ids and bucketed by the naming heuristic. The fallback never raises
    - A failure loading the project or its type is NOT degraded: it propagates
    - Statuses referenced by the project type but missing from the store are
      classified by name, so every status id of the workflow is represented

Design Decisions:
    - No caching: every call reflects the store's current snapshot
    - Fallback logged at WARNING with the project identifier, so degraded
      listings are visible in logs
"""

import logging

from trackref.core.classify_statuses import (
    StatusFilter, StatusInfo, build_status_filter, classify_by_category,
    classify_by_name, find_status_by_name,
)
from trackref.core.domain_types import EntityKind
from trackref.core.errors import InvalidStatusError, StoreError
from trackref.core.store_protocol import DocumentStore
from trackref.schemas.entities import Project, ProjectType

logger = logging.getLogger(__name__)


class StatusClassifier:
    """Project status vocabulary with done/canceled classification."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _workflow_status_ids(self, project: Project) -> list[str]:
        ids: list[str] = []
        if project.type_id:
            record = await self.store.find_one(
                EntityKind.PROJECT_TYPE, {"id": project.type_id},
            )
            if record is not None:
                ids = list(ProjectType.model_validate(record).statuses)
        if not ids and project.default_status:
            ids = [project.default_status]
        return ids

    async def classify(self, project: Project) -> list[StatusInfo]:
        """Every status of the project's workflow, classified."""
        status_ids = await self._workflow_status_ids(project)
        if not status_ids:
            return []

        try:
            records = await self.store.find_all(
                EntityKind.STATUS, {"id": {"$in": status_ids}},
            )
        except StoreError as e:
            logger.warning(
                f"Status fetch failed, classifying by name: {e}",
                extra={"project": project.identifier, "error_code": e.code},
            )
            return classify_by_name(status_ids)

        found = {r["id"] for r in records}
        missing = [s for s in status_ids if s not in found]
        statuses = classify_by_category(records, order=status_ids)
        if missing:
            statuses.extend(classify_by_name(missing))
        return statuses

    async def build_filter(
        self, project: Project, status_filter: str,
    ) -> StatusFilter:
        """Issue-status predicate for "open", "done", "canceled" or a status name."""
        statuses = await self.classify(project)
        return build_status_filter(status_filter, statuses, project.identifier)

    async def resolve_status(self, project: Project, name: str) -> StatusInfo:
        """The status whose name matches, ignoring case; InvalidStatusError otherwise."""
        statuses = await self.classify(project)
        match = find_status_by_name(name, statuses)
        if match is None:
            raise InvalidStatusError(name, project.identifier)
        return match

    async def status_name(self, project: Project, status_id: str | None) -> str | None:
        if status_id is None:
            return None
        statuses = await self.classify(project)
        match = next((s for s in statuses if s.id == status_id), None)
        return match.name if match else status_id
