"""Pydantic models for Gitea records and the gateway's projected views.

Upstream records decode the subset of Gitea's JSON the gateway reads and
ignore everything else. Projections are what callers of the gateway see.
"""

from __future__ import annotations

from typing import Any, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _UpstreamRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GiteaUser(_UpstreamRecord):
    login: str
    username: str | None = None
    full_name: str | None = None


class GiteaLabel(_UpstreamRecord):
    name: str
    color: str | None = None
    description: str | None = None


class GiteaRepository(_UpstreamRecord):
    id: int
    name: str
    full_name: str
    description: str | None = None
    html_url: str | None = None
    private: bool = False


class GiteaIssue(_UpstreamRecord):
    id: int
    number: int
    title: str
    state: str
    body: str | None = None
    user: GiteaUser
    assignees: list[GiteaUser] | None = None
    labels: list[GiteaLabel] | None = None
    html_url: str | None = None
    created_at: str | None = None


class GiteaIssueRef(_UpstreamRecord):
    id: int | None = None
    number: int | None = None


class TimelineUser(_UpstreamRecord):
    """User attached to a timeline event; every field may be missing."""

    login: str | None = None
    username: str | None = None
    full_name: str | None = None


class TimelineLabel(_UpstreamRecord):
    name: str | None = None
    color: str | None = None


class GiteaTimelineEvent(_UpstreamRecord):
    type: str
    user: TimelineUser | None = None
    body: str | None = None
    old_title: str | None = None
    new_title: str | None = None
    commit_id: str | None = None
    commit_url: str | None = None
    ref_issue: GiteaIssueRef | None = Field(
        default=None, validation_alias=AliasChoices("ref_issue", "issue")
    )
    label: TimelineLabel | None = None
    assignee: TimelineUser | None = None
    created_at: str | None = None


class Identity(BaseModel):
    """The Gitea account the gateway's token belongs to."""

    model_config = ConfigDict(frozen=True)

    username: str


class RepositorySummary(BaseModel):
    id: int
    name: str
    full_name: str
    description: str | None
    html_url: str | None
    private: bool

    @classmethod
    def from_upstream(cls, repo: GiteaRepository) -> "RepositorySummary":
        return cls(
            id=repo.id,
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            html_url=repo.html_url,
            private=repo.private,
        )


class IssueSummary(BaseModel):
    """List view of an issue: author and assignees reduced to logins."""

    number: int
    title: str
    state: str
    user: str
    assignees: list[str]
    html_url: str | None
    created_at: str | None

    @classmethod
    def from_upstream(cls, issue: GiteaIssue) -> "IssueSummary":
        return cls(
            number=issue.number,
            title=issue.title,
            state=issue.state,
            user=issue.user.login,
            assignees=[assignee.login for assignee in issue.assignees or []],
            html_url=issue.html_url,
            created_at=issue.created_at,
        )


class LabelSummary(BaseModel):
    name: str
    color: str | None
    description: str | None


class IssueDetail(BaseModel):
    """Single-issue view: labels expanded, assignees shown by display name."""

    issue_number: int
    title: str
    state: str
    body: str | None
    labels: list[LabelSummary]
    assignees: list[str]

    @classmethod
    def from_upstream(cls, issue: GiteaIssue) -> "IssueDetail":
        return cls(
            issue_number=issue.number,
            title=issue.title,
            state=issue.state,
            body=issue.body,
            labels=[
                LabelSummary(name=label.name, color=label.color, description=label.description)
                for label in issue.labels or []
            ],
            assignees=[assignee.full_name or assignee.login for assignee in issue.assignees or []],
        )


class TimelineEntry(BaseModel):
    type: str
    user: str
    content: str
    created_at: str | None


def dump_all(models: Sequence[BaseModel]) -> list[dict[str, Any]]:
    return [model.model_dump(mode="json") for model in models]
