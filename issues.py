"""Issue listing with "mine" aggregation over assigned and created issues."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol

from errors import ServiceNotReadyError
from models import GiteaIssue, Identity, IssueSummary

__all__ = ["DEFAULT_STATE", "MINE_FILTER", "list_issues", "merge_issues"]

logger = logging.getLogger(__name__)

DEFAULT_STATE = "all"
MINE_FILTER = "mine"


class IssueSource(Protocol):
    async def list_issues(
        self,
        owner: str,
        repo: str,
        *,
        state: str,
        assigned_by: str | None = None,
        created_by: str | None = None,
    ) -> list[GiteaIssue]: ...


def merge_issues(assigned: Iterable[GiteaIssue], created: Iterable[GiteaIssue]) -> list[GiteaIssue]:
    """Merge two issue lists keyed on upstream id; the first record per id wins."""

    merged: dict[int, GiteaIssue] = {}
    for issue in (*assigned, *created):
        if issue.id not in merged:
            merged[issue.id] = issue
    return list(merged.values())


async def list_issues(
    client: IssueSource,
    identity: Identity | None,
    owner: str,
    repo: str,
    *,
    state: str | None = None,
    filter: str | None = None,
) -> list[IssueSummary]:
    state = state or DEFAULT_STATE

    if not filter or filter == MINE_FILTER:
        if identity is None:
            raise ServiceNotReadyError("Authenticated Gitea user has not been resolved yet")

        tasks = (
            asyncio.ensure_future(client.list_issues(owner, repo, state=state, assigned_by=identity.username)),
            asyncio.ensure_future(client.list_issues(owner, repo, state=state, created_by=identity.username)),
        )
        try:
            assigned, created = await asyncio.gather(*tasks)
        except BaseException:
            # Cancel whichever branch is still running.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        issues = merge_issues(assigned, created)
        logger.debug(
            "Merged %d assigned and %d created issues for %s/%s into %d",
            len(assigned),
            len(created),
            owner,
            repo,
            len(issues),
        )
    else:
        issues = await client.list_issues(owner, repo, state=state)

    return [IssueSummary.from_upstream(issue) for issue in issues]
