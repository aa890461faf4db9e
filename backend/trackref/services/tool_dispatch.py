"""Tool Dispatch - explicit routing from operation name to handler.

Invariants:
    - Every name->handler mapping is visible in one dict, no getattr magic
    - execute() never raises: success is {"status": "ok", ...payload},
      TrackRefError becomes its to_result() envelope, anything else INTERNAL_ERROR
    - Unknown names return UNKNOWN_TOOL
    - Missing required arguments, out-of-vocabulary enum values and
      non-integer limits raise InvalidArgumentError before any store call
    - Every call logged with its name and outcome

Design Decisions:
    - Handlers take the raw argument dict; operations below take typed arguments
    - Unexpected exceptions logged with traceback but returned without detail
"""

import logging
from typing import Any, Awaitable, Callable

from trackref.core.domain_types import (
    DEFAULT_LIMIT, MAX_LIMIT, IssuePriority, RelationType,
)
from trackref.core.errors import InvalidArgumentError, TrackRefError
from trackref.core.store_protocol import DocumentStore
from trackref.infrastructure.observability import error_extra
from trackref.services.document_operations import DocumentOperations
from trackref.services.issue_operations import UNSET, IssueOperations
from trackref.services.label_operations import LabelOperations
from trackref.services.locate_entities import EntityLocator
from trackref.services.manage_relations import RelationManager
from trackref.services.resolution_operations import ResolutionOperations

logger = logging.getLogger(__name__)

Handler = Callable[[dict], Awaitable[Any]]


def _required(input_data: dict, name: str) -> Any:
    value = input_data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(name)
    return value


def _relation_type(input_data: dict) -> RelationType:
    value = _required(input_data, "relation_type")
    try:
        return RelationType(value)
    except ValueError:
        raise InvalidArgumentError("relation_type", value)


def _limit(input_data: dict) -> int | None:
    value = input_data.get("limit")
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError("limit", value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError("limit", value)


def _priority(input_data: dict) -> str | None:
    value = input_data.get("priority")
    if value is None:
        return None
    try:
        return IssuePriority(value).value
    except ValueError:
        raise InvalidArgumentError("priority", value)


class ToolDispatch:
    """Routes operation name -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self, store: DocumentStore,
        default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT,
    ):
        locator = EntityLocator(store)
        self.resolution = ResolutionOperations(store, locator)
        self.issues = IssueOperations(store, default_limit, max_limit, locator)
        self.labels = LabelOperations(store, locator)
        self.documents = DocumentOperations(store, locator)
        self.relations = RelationManager(store, locator)

        self._handlers: dict[str, Handler] = {
            # Resolution
            "resolve_project": self._resolve_project,
            "resolve_issue": self._resolve_issue,
            "classify_statuses": self._classify_statuses,
            "resolve_person": self._resolve_person,
            "next_rank": self._next_rank,

            # Issues
            "list_issues": self._list_issues,
            "get_issue": self._get_issue,
            "create_issue": self._create_issue,
            "update_issue": self._update_issue,
            "add_label": self._add_label,
            "remove_label": self._remove_label,

            # Relations
            "add_relation": self._add_relation,
            "remove_relation": self._remove_relation,
            "list_relations": self._list_relations,

            # Documents and containers
            "create_document": self._create_document,
            "find_teamspace": self._find_teamspace,
            "find_document": self._find_document,
            "find_tag": self._find_tag,
            "find_component": self._find_component,
            "find_milestone": self._find_milestone,
        }

    @property
    def tool_names(self) -> list[str]:
        return sorted(self._handlers)

    async def execute(self, tool_name: str, input_data: dict | None = None) -> dict:
        """Route tool_name to its handler and wrap the outcome in an envelope."""
        handler = self._handlers.get(tool_name)
        if handler is None:
            logger.warning(
                f"Unknown tool '{tool_name}'",
                extra={"tool_name": tool_name, "error_code": "UNKNOWN_TOOL"},
            )
            return {
                "status": "error",
                "error_code": "UNKNOWN_TOOL",
                "message": f"Tool '{tool_name}' does not exist.",
            }

        try:
            payload = await handler(input_data or {})
        except TrackRefError as e:
            e.context.tool_name = tool_name
            logger.warning(f"Tool error: {e.message}", extra=error_extra(e, tool_name))
            return e.to_result()
        except Exception as e:
            logger.error(
                f"Unexpected error in tool '{tool_name}': {e}",
                exc_info=True, extra={"tool_name": tool_name},
            )
            return {
                "status": "error",
                "error_code": "INTERNAL_ERROR",
                "message": f"Internal error executing {tool_name}",
            }

        logger.info(f"Tool '{tool_name}' succeeded", extra={"tool_name": tool_name})
        return {"status": "ok", **payload.model_dump(mode="json")}

    # ─── Resolution ─────────────────────────────────────────────

    async def _resolve_project(self, input_data: dict):
        return await self.resolution.resolve_project(_required(input_data, "project"))

    async def _resolve_issue(self, input_data: dict):
        return await self.resolution.resolve_issue(
            _required(input_data, "project"), _required(input_data, "identifier"),
        )

    async def _classify_statuses(self, input_data: dict):
        return await self.resolution.classify_statuses(_required(input_data, "project"))

    async def _resolve_person(self, input_data: dict):
        return await self.resolution.resolve_person(_required(input_data, "person"))

    async def _next_rank(self, input_data: dict):
        if input_data.get("teamspace"):
            return await self.resolution.next_rank(teamspace=input_data["teamspace"])
        return await self.resolution.next_rank(project=_required(input_data, "project"))

    # ─── Issues ─────────────────────────────────────────────────

    async def _list_issues(self, input_data: dict):
        return await self.issues.list_issues(
            _required(input_data, "project"),
            status=input_data.get("status"),
            assignee=input_data.get("assignee"),
            limit=_limit(input_data),
        )

    async def _get_issue(self, input_data: dict):
        return await self.issues.get_issue(
            _required(input_data, "project"), _required(input_data, "identifier"),
        )

    async def _create_issue(self, input_data: dict):
        return await self.issues.create_issue(
            _required(input_data, "project"),
            _required(input_data, "title"),
            status=input_data.get("status"),
            assignee=input_data.get("assignee"),
            priority=_priority(input_data),
        )

    async def _update_issue(self, input_data: dict):
        return await self.issues.update_issue(
            _required(input_data, "project"),
            _required(input_data, "identifier"),
            title=input_data.get("title"),
            status=input_data.get("status"),
            assignee=input_data["assignee"] if "assignee" in input_data else UNSET,
            priority=_priority(input_data),
        )

    async def _add_label(self, input_data: dict):
        return await self.labels.add_label(
            _required(input_data, "project"),
            _required(input_data, "identifier"),
            _required(input_data, "label"),
            color=input_data.get("color") or 0,
        )

    async def _remove_label(self, input_data: dict):
        return await self.labels.remove_label(
            _required(input_data, "project"),
            _required(input_data, "identifier"),
            _required(input_data, "label"),
        )

    # ─── Relations ──────────────────────────────────────────────

    async def _add_relation(self, input_data: dict):
        return await self.relations.add_relation(
            _required(input_data, "project"),
            _required(input_data, "identifier"),
            _required(input_data, "target"),
            _relation_type(input_data),
        )

    async def _remove_relation(self, input_data: dict):
        return await self.relations.remove_relation(
            _required(input_data, "project"),
            _required(input_data, "identifier"),
            _required(input_data, "target"),
            _relation_type(input_data),
        )

    async def _list_relations(self, input_data: dict):
        return await self.relations.list_relations(
            _required(input_data, "project"), _required(input_data, "identifier"),
        )

    # ─── Documents and containers ───────────────────────────────

    async def _create_document(self, input_data: dict):
        return await self.documents.create_document(
            _required(input_data, "teamspace"), _required(input_data, "title"),
        )

    async def _find_teamspace(self, input_data: dict):
        return await self.documents.find_teamspace(_required(input_data, "teamspace"))

    async def _find_document(self, input_data: dict):
        return await self.documents.find_document(
            _required(input_data, "teamspace"), _required(input_data, "document"),
        )

    async def _find_tag(self, input_data: dict):
        return await self.documents.find_tag(_required(input_data, "label"))

    async def _find_component(self, input_data: dict):
        return await self.documents.find_component(
            _required(input_data, "project"), _required(input_data, "component"),
        )

    async def _find_milestone(self, input_data: dict):
        return await self.documents.find_milestone(
            _required(input_data, "project"), _required(input_data, "milestone"),
        )
