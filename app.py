import argparse
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from json import JSONDecodeError
from typing import Any, Sequence

import httpx
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from errors import AuthenticationError, ConfigurationError, RequestValidationError, ServiceNotReadyError
from gitea_client import GiteaAPIError, GiteaClient, GiteaNotFoundError
from issues import list_issues
from models import Identity, IssueDetail, RepositorySummary, dump_all
from routing import GatewayRoute, GatewayRouter
from settings import Settings, load_settings
from timeline import normalize_timeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayContext:
    """Per-process state handed to every handler; never mutated by requests."""

    client: GiteaClient
    identity: Identity | None = None


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _require_params(params: dict[str, Any], names: Sequence[str]) -> list[str]:
    values = [params.get(name) for name in names]
    if not all(values):
        raise RequestValidationError("Incomplete request path parameters", status_code=400)
    return [str(value) for value in values]


def _parse_index(value: str) -> int:
    try:
        index = int(value)
    except ValueError:
        raise RequestValidationError("index must be an integer", status_code=400) from None
    if index < 1:
        raise RequestValidationError("index must be a positive integer", status_code=400)
    return index


async def _get_json_body(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        raise RequestValidationError("Request body must be valid JSON", status_code=400) from None

    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object", status_code=400)
    return data


def _issue_payload(data: dict[str, Any]) -> dict[str, str]:
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise RequestValidationError('Request body must contain a non-empty "title" string', status_code=422)

    body = data.get("body")
    if body is not None and not isinstance(body, str):
        raise RequestValidationError('"body" must be a string', status_code=422)

    return {"title": title, "body": body or ""}


def _issue_not_found(owner: str, repo: str, index: int) -> JSONResponse:
    return _error_response(f"Issue #{index} not found in {owner}/{repo}", 404)


async def handle_list_repos(request: Request, params: dict[str, Any], context: GatewayContext) -> Response:
    try:
        repos = await context.client.list_repositories()
    except GiteaAPIError as exc:
        logger.error("Failed to list repositories: %s", exc)
        return _error_response("Unable to fetch repositories from Gitea", 500)
    except ValidationError:
        logger.exception("Gitea returned a malformed repository list")
        return _error_response("Unable to fetch repositories from Gitea", 500)
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error while listing repositories")
        return _error_response("Internal server error", 500)

    return JSONResponse(dump_all([RepositorySummary.from_upstream(repo) for repo in repos]))


async def handle_list_issues(request: Request, params: dict[str, Any], context: GatewayContext) -> Response:
    try:
        owner, repo = _require_params(params, ("owner", "repo"))
    except RequestValidationError as exc:
        return _error_response(str(exc), exc.status_code)

    state = request.query_params.get("state")
    issue_filter = request.query_params.get("filter")

    try:
        issues = await list_issues(
            context.client,
            context.identity,
            owner,
            repo,
            state=state,
            filter=issue_filter,
        )
    except ServiceNotReadyError as exc:
        logger.warning("Rejected issue listing for %s/%s: %s", owner, repo, exc)
        return _error_response("Service is not initialised; authenticated user is unknown", 503)
    except GiteaAPIError as exc:
        logger.error("Failed to list issues for %s/%s: %s", owner, repo, exc)
        return _error_response("Unable to fetch issues from Gitea", 500)
    except ValidationError:
        logger.exception("Gitea returned a malformed issue list for %s/%s", owner, repo)
        return _error_response("Unable to fetch issues from Gitea", 500)
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error while listing issues")
        return _error_response("Internal server error", 500)

    return JSONResponse(dump_all(issues))


async def handle_create_issue(request: Request, params: dict[str, Any], context: GatewayContext) -> Response:
    try:
        owner, repo = _require_params(params, ("owner", "repo"))
        payload = _issue_payload(await _get_json_body(request))
    except RequestValidationError as exc:
        return _error_response(str(exc), exc.status_code)

    try:
        issue = await context.client.create_issue(owner, repo, payload)
    except GiteaAPIError as exc:
        logger.error("Failed to create issue in %s/%s: %s", owner, repo, exc)
        return _error_response("Unable to create issue in Gitea", 500)
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error while creating issue")
        return _error_response("Internal server error", 500)

    logger.info("Created issue #%s in %s/%s", issue.get("number"), owner, repo)
    return JSONResponse(issue, status_code=201)


async def handle_get_issue(request: Request, params: dict[str, Any], context: GatewayContext) -> Response:
    try:
        owner, repo, raw_index = _require_params(params, ("owner", "repo", "index"))
        index = _parse_index(raw_index)
    except RequestValidationError as exc:
        return _error_response(str(exc), exc.status_code)

    try:
        issue = await context.client.get_issue(owner, repo, index)
    except GiteaNotFoundError:
        return _issue_not_found(owner, repo, index)
    except GiteaAPIError as exc:
        logger.error("Failed to fetch issue #%d in %s/%s: %s", index, owner, repo, exc)
        return _error_response("Unable to fetch issue from Gitea", 500)
    except ValidationError:
        logger.exception("Gitea returned a malformed issue #%d in %s/%s", index, owner, repo)
        return _error_response("Unable to fetch issue from Gitea", 500)
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error while fetching issue")
        return _error_response("Internal server error", 500)

    return JSONResponse(IssueDetail.from_upstream(issue).model_dump(mode="json"))


async def handle_issue_timeline(request: Request, params: dict[str, Any], context: GatewayContext) -> Response:
    try:
        owner, repo, raw_index = _require_params(params, ("owner", "repo", "index"))
        index = _parse_index(raw_index)
    except RequestValidationError as exc:
        return _error_response(str(exc), exc.status_code)

    try:
        events = await context.client.list_timeline(owner, repo, index)
    except GiteaNotFoundError:
        return _issue_not_found(owner, repo, index)
    except GiteaAPIError as exc:
        logger.error("Failed to fetch timeline of issue #%d in %s/%s: %s", index, owner, repo, exc)
        return _error_response("Unable to fetch timeline from Gitea", 500)
    except ValidationError:
        logger.exception("Gitea returned a malformed timeline for #%d in %s/%s", index, owner, repo)
        return _error_response("Unable to fetch timeline from Gitea", 500)
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error while fetching timeline")
        return _error_response("Internal server error", 500)

    return JSONResponse(dump_all(normalize_timeline(events)))


ROUTES = (
    GatewayRoute("/repos", "GET", handle_list_repos),
    GatewayRoute("/repos/{owner}/{repo}/issues", "GET", handle_list_issues),
    GatewayRoute("/repos/{owner}/{repo}/issues", "POST", handle_create_issue),
    GatewayRoute("/repos/{owner}/{repo}/issues/{index}", "GET", handle_get_issue),
    GatewayRoute("/repos/{owner}/{repo}/issues/{index}/timeline", "GET", handle_issue_timeline),
)

router = GatewayRouter(ROUTES)


async def resolve_identity(client: GiteaClient) -> Identity:
    """Look up the account behind the configured token."""

    try:
        user = await client.get_current_user()
    except (GiteaAPIError, ValidationError, httpx.HTTPError) as exc:
        raise AuthenticationError(
            f"Unable to fetch the authenticated Gitea user; check GITEA_URL and GITEA_TOKEN: {exc}"
        ) from exc
    return Identity(username=user.login)


async def healthz(_):
    return PlainTextResponse("ok", status_code=200)


def create_app(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> Starlette:
    client = GiteaClient(settings.gitea_url, settings.gitea_token, transport=transport)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        try:
            logger.info("Resolving authenticated Gitea user at %s", settings.gitea_url)
            identity = await resolve_identity(client)
            app.state.context = replace(app.state.context, identity=identity)
            logger.info("Authenticated as %s", identity.username)
            yield
        finally:
            await client.close()

    app = Starlette(
        routes=[
            Route("/healthz", healthz, methods=["GET"]),
            Route("/{path:path}", router.dispatch),
        ],
        lifespan=lifespan,
    )
    app.router.redirect_slashes = False
    app.state.context = GatewayContext(client=client)
    return app


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the simplified Gitea REST gateway")
    parser.add_argument("--host", default=None, help="Interface to bind (default: GATEWAY_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: GATEWAY_PORT or 8000)")
    parser.add_argument("--env-file", default=".env", help="Optional dotenv file with GITEA_URL and GITEA_TOKEN")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(env_file=args.env_file)
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Error: %s", exc)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import uvicorn

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Starting Gitea gateway on http://%s:%d", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
