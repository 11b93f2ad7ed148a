"""Builders for Gitea JSON records used across the test suite."""

from __future__ import annotations

from typing import Any


def user_record(login: str, **extra: Any) -> dict[str, Any]:
    return {"id": len(login), "login": login, "username": login, "full_name": "", **extra}


def issue_record(
    issue_id: int,
    number: int,
    *,
    title: str | None = None,
    author: str = "alice",
    **extra: Any,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": issue_id,
        "number": number,
        "title": title or f"Issue {number}",
        "state": "open",
        "body": "",
        "user": user_record(author),
        "assignees": [],
        "labels": [],
        "html_url": f"https://git.example.test/acme/widget/issues/{number}",
        "created_at": "2025-03-01T10:00:00Z",
    }
    record.update(extra)
    return record
