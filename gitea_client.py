"""Utility helpers for interacting with the Gitea REST API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from httpx import Response
from httpx._types import QueryParamTypes

from models import GiteaIssue, GiteaRepository, GiteaTimelineEvent, GiteaUser

__all__ = [
    "GiteaAPIError",
    "GiteaClient",
    "GiteaNotFoundError",
]

API_PREFIX = "/api/v1/"


def _safe_json(response: Response) -> Any | None:
    try:
        return response.json()
    except ValueError:
        text = response.text
        return text if text else None


def _error_detail(response: Response) -> str:
    payload = _safe_json(response)
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text


class GiteaAPIError(RuntimeError):
    """Raised when the Gitea API responds with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class GiteaNotFoundError(GiteaAPIError):
    """Raised when the Gitea API responds with 404."""


class GiteaClient:
    """Thin async wrapper around Gitea's REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Trailing slash keeps httpx from dropping the /api/v1 prefix on relative joins.
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + API_PREFIX,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParamTypes | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Any:
        path = path.lstrip("/")
        response = await self._client.request(method, path, params=params, json=json)
        if not response.is_success:
            status = response.status_code
            error_cls = GiteaNotFoundError if status == 404 else GiteaAPIError
            raise error_cls(
                f"Gitea API request failed with status {status}: {_error_detail(response)}",
                status_code=status,
                payload=_safe_json(response),
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get_current_user(self) -> GiteaUser:
        data = await self.request("GET", "/user")
        return GiteaUser.model_validate(data)

    async def list_repositories(self) -> list[GiteaRepository]:
        data = await self.request("GET", "/user/repos")
        return [GiteaRepository.model_validate(repo) for repo in data or []]

    async def list_issues(
        self,
        owner: str,
        repo: str,
        *,
        state: str,
        assigned_by: str | None = None,
        created_by: str | None = None,
    ) -> list[GiteaIssue]:
        params: list[tuple[str, str]] = [("state", state)]
        if assigned_by is not None:
            params.append(("assigned_by", assigned_by))
        if created_by is not None:
            params.append(("created_by", created_by))

        data = await self.request("GET", f"/repos/{owner}/{repo}/issues", params=params)
        return [GiteaIssue.model_validate(issue) for issue in data or []]

    async def get_issue(self, owner: str, repo: str, index: int) -> GiteaIssue:
        data = await self.request("GET", f"/repos/{owner}/{repo}/issues/{index}")
        return GiteaIssue.model_validate(data)

    async def create_issue(self, owner: str, repo: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        data = await self.request("POST", f"/repos/{owner}/{repo}/issues", json=payload)
        return dict(data or {})

    async def list_timeline(self, owner: str, repo: str, index: int) -> list[GiteaTimelineEvent]:
        data = await self.request("GET", f"/repos/{owner}/{repo}/issues/{index}/timeline")
        return [GiteaTimelineEvent.model_validate(event) for event in data or []]
