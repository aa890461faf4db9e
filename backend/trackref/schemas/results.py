"""Result Schemas - typed success payloads returned by caller-facing operations.

Invariants:
    - Every field is JSON-serializable via model_dump(mode="json")
    - Issues are always presented by human identifier, never by internal id alone
    - Relation entries keep the raw id so broken references stay traceable
"""

from pydantic import BaseModel, Field


# ─── Resolution ─────────────────────────────────────────────────

class ProjectResult(BaseModel):
    id: str
    identifier: str
    name: str


class IssueHandle(BaseModel):
    id: str
    identifier: str
    project: str


class StatusEntry(BaseModel):
    id: str
    name: str
    bucket: str
    is_done: bool
    is_canceled: bool


class StatusList(BaseModel):
    project: str
    statuses: list[StatusEntry] = Field(default_factory=list)


class PersonResult(BaseModel):
    id: str
    name: str


class RankResult(BaseModel):
    scope: str
    rank: str


# ─── Issues ─────────────────────────────────────────────────────

class IssueSummary(BaseModel):
    identifier: str
    title: str
    status: str | None = None
    priority: str
    assignee: str | None = None
    modified_on: int


class IssueList(BaseModel):
    project: str
    issues: list[IssueSummary] = Field(default_factory=list)
    count: int = 0


class IssueDetail(IssueSummary):
    id: str
    number: int
    rank: str | None = None
    component: str | None = None
    milestone: str | None = None
    labels: list[str] = Field(default_factory=list)
    blocked_by_count: int = 0
    relations_count: int = 0


class CreatedIssue(BaseModel):
    id: str
    identifier: str
    number: int
    rank: str


class UpdatedIssue(BaseModel):
    identifier: str
    updated: bool


class LabelChange(BaseModel):
    identifier: str
    label: str
    added: bool | None = None
    removed: bool | None = None


# ─── Relations ──────────────────────────────────────────────────

class RelationChange(BaseModel):
    source_issue: str
    target_issue: str
    relation_type: str
    added: bool | None = None
    removed: bool | None = None


class RelationEntry(BaseModel):
    identifier: str
    id: str
    kind: str


class RelationList(BaseModel):
    blocked_by: list[RelationEntry] = Field(default_factory=list)
    relations: list[RelationEntry] = Field(default_factory=list)


# ─── Documents and containers ───────────────────────────────────

class TeamspaceResult(BaseModel):
    id: str
    name: str


class DocumentResult(BaseModel):
    id: str
    title: str
    teamspace: str
    rank: str | None = None


class TagResult(BaseModel):
    id: str
    title: str
    color: int = 0


class ComponentResult(BaseModel):
    id: str
    label: str
    project: str
    lead: str | None = None


class MilestoneResult(BaseModel):
    id: str
    label: str
    project: str
    status: int = 0
