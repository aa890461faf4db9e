"""Domain Types - the entity class table and fixed vocabularies.

Invariants:
    - Every entity kind the layer touches is a member of EntityKind; no other
      class ids are built at runtime
    - StatusCategory values are the authoritative done/canceled source
    - RelationType covers exactly the three edge kinds callers may request
    - Limits: default 50, hard maximum 200

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - Class ids keep the platform's "plugin:class:Name" spelling so records
      written by other clients of the same store stay readable
"""

from enum import Enum

# ─── Limits ──────────────────────────────────────────────────────

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """Well-known entity classes, injected wherever a store call needs one."""
    PROJECT = "tracker:class:Project"
    ISSUE = "tracker:class:Issue"
    COMPONENT = "tracker:class:Component"
    MILESTONE = "tracker:class:Milestone"
    STATUS = "core:class:Status"
    PROJECT_TYPE = "task:class:ProjectType"
    PERSON = "contact:class:Person"
    CHANNEL = "contact:class:Channel"
    TAG_ELEMENT = "tags:class:TagElement"
    TAG_REFERENCE = "tags:class:TagReference"
    TEAMSPACE = "document:class:Teamspace"
    DOCUMENT = "document:class:Document"


class StatusCategory(str, Enum):
    """Workflow buckets. Won = done, Lost = canceled, everything else is open."""
    UNSTARTED = "task:statusCategory:UnStarted"
    TODO = "task:statusCategory:ToDo"
    ACTIVE = "task:statusCategory:Active"
    WON = "task:statusCategory:Won"
    LOST = "task:statusCategory:Lost"


class StatusBucket(str, Enum):
    """Semantic classification of one status."""
    ACTIVE = "active"
    DONE = "done"
    CANCELED = "canceled"
    UNCLASSIFIED = "unclassified"


class RelationType(str, Enum):
    """Edge kinds between issues."""
    BLOCKS = "blocks"
    IS_BLOCKED_BY = "is-blocked-by"
    RELATES_TO = "relates-to"


class ChannelProvider(str, Enum):
    """Contact point providers. Only email participates in identity lookup."""
    EMAIL = "contact:channelProvider:Email"
    PHONE = "contact:channelProvider:Phone"
    TELEGRAM = "contact:channelProvider:Telegram"


class IssuePriority(str, Enum):
    """Caller-facing priority names."""
    NO_PRIORITY = "no-priority"
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SortOrder(int, Enum):
    ASCENDING = 1
    DESCENDING = -1


# Stored priority integers, as the platform numbers them
PRIORITY_TO_INT: dict[IssuePriority, int] = {
    IssuePriority.NO_PRIORITY: 0,
    IssuePriority.URGENT: 1,
    IssuePriority.HIGH: 2,
    IssuePriority.MEDIUM: 3,
    IssuePriority.LOW: 4,
}
INT_TO_PRIORITY: dict[int, IssuePriority] = {
    v: k for k, v in PRIORITY_TO_INT.items()
}

# Scopes for records that do not live inside a project or teamspace
SPACE_SCOPE = "core:space:Space"
WORKSPACE_SCOPE = "core:space:Workspace"

# Collections issues and labels are attached under
ISSUES_COLLECTION = "issues"
LABELS_COLLECTION = "labels"

# Reserved status filter values
STATUS_FILTER_OPEN = "open"
STATUS_FILTER_DONE = "done"
STATUS_FILTER_CANCELED = "canceled"


def priority_to_int(priority: str | None) -> int:
    """Map a caller priority name to the stored integer (unknown -> no priority)."""
    try:
        return PRIORITY_TO_INT[IssuePriority(priority)]
    except ValueError:
        return 0


def priority_to_name(value: int | None) -> str:
    return INT_TO_PRIORITY.get(value or 0, IssuePriority.NO_PRIORITY).value


def clamp_limit(
    limit: int | None, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT,
) -> int:
    """Clamp a caller-supplied limit into [1, maximum], defaulting when absent."""
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))
