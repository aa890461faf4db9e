"""Entity Schemas - Pydantic views of workspace records read from the store.

Invariants:
    - Built from raw store records with model_validate; unknown attributes ignored
    - Issue.identifier is "{project.identifier}-{number}" and never rewritten
    - Issue.rank total-orders issues of one project by plain string comparison
    - RelatedRef is a back-reference only: it owns nothing

Design Decisions:
    - Read models only: writes go through DocumentStore operations with plain dicts
    - Status.category optional: statuses without a category are valid and
      classify as neither done nor canceled
"""

from pydantic import BaseModel, ConfigDict, Field

from trackref.core.domain_types import ChannelProvider, EntityKind


class Entity(BaseModel):
    """Common shape of every stored record."""
    model_config = ConfigDict(extra="ignore")

    id: str
    space: str | None = None
    modified_on: int = 0


class RelatedRef(BaseModel):
    """Non-owning pointer from one issue to another."""
    model_config = ConfigDict(extra="ignore")

    id: str
    kind: str = EntityKind.ISSUE.value


class Project(Entity):
    identifier: str
    name: str = ""
    sequence: int = 0
    default_status: str | None = None
    type_id: str | None = None


class ProjectType(Entity):
    statuses: list[str] = Field(default_factory=list)


class Status(Entity):
    name: str
    category: str | None = None


class Issue(Entity):
    number: int
    identifier: str
    title: str = ""
    status: str | None = None
    assignee: str | None = None
    priority: int = 0
    rank: str | None = None
    component: str | None = None
    milestone: str | None = None
    blocked_by: list[RelatedRef] = Field(default_factory=list)
    relations: list[RelatedRef] = Field(default_factory=list)


class Person(Entity):
    name: str


class Channel(Entity):
    attached_to: str
    provider: str = ChannelProvider.EMAIL.value
    value: str


class TagElement(Entity):
    title: str
    color: int = 0
    target_kind: str = EntityKind.ISSUE.value


class TagReference(Entity):
    attached_to: str
    tag: str
    title: str
    color: int = 0


class Teamspace(Entity):
    name: str
    archived: bool = False


class Document(Entity):
    title: str
    rank: str | None = None


class Component(Entity):
    label: str
    lead: str | None = None


class Milestone(Entity):
    label: str
    status: int = 0
