"""Render Gitea timeline events as a uniform activity log."""

from __future__ import annotations

from typing import Callable, Iterable

from models import GiteaTimelineEvent, TimelineEntry

__all__ = ["normalize", "normalize_timeline"]

SYSTEM_ACTOR = "system"
UNKNOWN = "unknown"
SHORT_SHA_LENGTH = 7

Renderer = Callable[[GiteaTimelineEvent], str]


def _closed(_event: GiteaTimelineEvent) -> str:
    return "closed this issue"


def _reopened(_event: GiteaTimelineEvent) -> str:
    return "reopened this issue"


def _comment(event: GiteaTimelineEvent) -> str:
    return event.body or "(empty comment)"


def _renamed(event: GiteaTimelineEvent) -> str:
    return f'changed the title from "{event.old_title or ""}" to "{event.new_title or ""}"'


def _short_sha(event: GiteaTimelineEvent) -> str:
    if event.commit_url:
        sha = event.commit_url.rstrip("/").rsplit("/", 1)[-1]
    else:
        sha = event.commit_id or ""
    return sha[:SHORT_SHA_LENGTH] or UNKNOWN


def _commit_referenced(event: GiteaTimelineEvent) -> str:
    return f"referenced this issue in commit [{_short_sha(event)}]"


def _cross_referenced(event: GiteaTimelineEvent) -> str:
    ref_id = event.ref_issue.id if event.ref_issue and event.ref_issue.id is not None else UNKNOWN
    return f"referenced this issue from issue #{ref_id}"


def _label(event: GiteaTimelineEvent) -> str:
    name = event.label.name if event.label and event.label.name else UNKNOWN
    return f"added label: {name}"


def _assignees(event: GiteaTimelineEvent) -> str:
    login = event.assignee.login if event.assignee and event.assignee.login else UNKNOWN
    return f"assigned to: {login}"


_RENDERERS: dict[str, Renderer] = {
    "closed": _closed,
    "close": _closed,
    "reopened": _reopened,
    "comment": _comment,
    "renamed": _renamed,
    "commit_referenced": _commit_referenced,
    "cross_referenced": _cross_referenced,
    "label": _label,
    "assignees": _assignees,
}


def _actor(event: GiteaTimelineEvent) -> str:
    user = event.user
    if user is None:
        return SYSTEM_ACTOR
    return user.full_name or user.username or user.login or SYSTEM_ACTOR


def normalize(event: GiteaTimelineEvent) -> TimelineEntry:
    renderer = _RENDERERS.get(event.type)
    if renderer is None:
        content = f"unhandled event type: {event.type}"
    else:
        content = renderer(event)
    return TimelineEntry(
        type=event.type,
        user=_actor(event),
        content=content,
        created_at=event.created_at,
    )


def normalize_timeline(events: Iterable[GiteaTimelineEvent]) -> list[TimelineEntry]:
    return [normalize(event) for event in events]
