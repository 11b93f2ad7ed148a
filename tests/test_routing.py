from __future__ import annotations

import pytest

import app
from routing import GatewayRoute, GatewayRouter


def test_timeline_path_binds_params_and_selects_timeline_handler():
    resolved = app.router.resolve("GET", "/repos/acme/widget/issues/7/timeline")

    assert resolved is not None
    route, params = resolved
    assert route.handler is app.handle_issue_timeline
    assert params == {"owner": "acme", "repo": "widget", "index": "7"}


def test_detail_path_selects_detail_handler():
    route, params = app.router.resolve("GET", "/repos/acme/widget/issues/7")

    assert route.handler is app.handle_get_issue
    assert params["index"] == "7"


@pytest.mark.parametrize(
    ("method", "handler"),
    [("GET", app.handle_list_issues), ("POST", app.handle_create_issue)],
)
def test_method_selects_between_issue_collection_handlers(method, handler):
    route, params = app.router.resolve(method, "/repos/acme/widget/issues")

    assert route.handler is handler
    assert params == {"owner": "acme", "repo": "widget"}


def test_repos_route_has_no_params():
    route, params = app.router.resolve("GET", "/repos")

    assert route.handler is app.handle_list_repos
    assert params == {}


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("POST", "/repos"),
        ("DELETE", "/repos/acme/widget/issues/7"),
        ("PUT", "/repos/acme/widget/issues"),
        ("GET", "/repos/acme"),
        ("GET", "/repos/acme/widget/issues/7/comments"),
        ("GET", "/repos//widget/issues"),
        ("GET", "/repos/acme/widget/issues/"),
    ],
)
def test_unmatched_method_or_path_resolves_to_nothing(method, path):
    assert app.router.resolve(method, path) is None


def test_first_matching_entry_wins():
    async def first(request, params, context):  # pragma: no cover - never awaited
        raise AssertionError

    async def second(request, params, context):  # pragma: no cover - never awaited
        raise AssertionError

    router = GatewayRouter(
        [
            GatewayRoute("/things/{name}", "GET", first),
            GatewayRoute("/things/{name}", "GET", second),
        ]
    )

    route, params = router.resolve("GET", "/things/widget")
    assert route.handler is first
    assert params == {"name": "widget"}


def test_route_method_is_case_insensitive():
    async def handler(request, params, context):  # pragma: no cover - never awaited
        raise AssertionError

    route = GatewayRoute("/things", "get", handler)

    assert route.method == "GET"
    assert route.match("get", "/things") == {}
