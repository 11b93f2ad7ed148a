"""Ordered, first-match request routing for the gateway's REST surface.

Unlike Starlette's own router, a request whose path matches an entry but
whose method does not is treated exactly like an unmatched request: both
produce a 404, never a 405.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from starlette.convertors import Convertor
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import compile_path

__all__ = ["GatewayRoute", "GatewayRouter", "Handler"]

Handler = Callable[[Request, dict[str, Any], Any], Awaitable[Response]]


@dataclass(frozen=True)
class GatewayRoute:
    path: str
    method: str
    handler: Handler
    path_regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_convertors: dict[str, Convertor[Any]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        path_regex, _, convertors = compile_path(self.path)
        object.__setattr__(self, "path_regex", path_regex)
        object.__setattr__(self, "param_convertors", convertors)
        object.__setattr__(self, "method", self.method.upper())

    def match(self, method: str, path: str) -> dict[str, Any] | None:
        if method.upper() != self.method:
            return None
        found = self.path_regex.match(path)
        if found is None:
            return None
        return {
            key: self.param_convertors[key].convert(value)
            for key, value in found.groupdict().items()
        }


class GatewayRouter:
    """Dispatch requests through a fixed table; the first matching entry wins."""

    def __init__(self, routes: Sequence[GatewayRoute]) -> None:
        self.routes = tuple(routes)

    def resolve(self, method: str, path: str) -> tuple[GatewayRoute, dict[str, Any]] | None:
        for route in self.routes:
            params = route.match(method, path)
            if params is not None:
                return route, params
        return None

    async def dispatch(self, request: Request) -> Response:
        resolved = self.resolve(request.method, request.url.path)
        if resolved is None:
            return JSONResponse({"error": "Not Found"}, status_code=404)
        route, params = resolved
        return await route.handler(request, params, request.app.state.context)
