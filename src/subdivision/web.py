"""
Starlette host adapter: builders that turn route addins into routes and
sub-router addins into mounted routers.

Route addins carry ``verb``, ``route`` (default ``"/"``) and ``handler``.
``verb: "use"`` declares middleware, an async ``handler(request, call_next)``.
Every other verb declares an endpoint, called as ``handler(request)``, which
may be sync or async and may return a ``Response``, ``str``, ``bytes`` or a
JSON-serializable ``dict``/``list``.

Middleware wraps every route of its router, in declared order, wherever it
sits relative to those routes. Unlike Express, where ``app.use`` only sees
requests for routes registered after it, ordering a ``use`` addin after a
route does not exempt that route. Use a ``route`` prefix to narrow it.

Sub-router addins carry ``routes_path`` and ``mount`` (default ``"/"``). Their
builder builds ``routes_path`` through the engine and mounts the result.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, final

import uvicorn
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import BaseRoute, Mount, Route, Router
from starlette.types import ASGIApp

from subdivision.addin import Addin
from subdivision.builders import Builder
from subdivision.engine import Subdivision
from subdivision.errors import InvalidAddinError

logger = logging.getLogger(__name__)

ROUTE_TYPE = "Route"
SUB_ROUTER_TYPE = "SubRouter"

MIDDLEWARE_METHOD = "USE"
ALL_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
_VERBS = frozenset({*ALL_METHODS, "ALL", MIDDLEWARE_METHOD})

MiddlewareDispatch = Callable[[Request, RequestResponseEndpoint], Awaitable[Response]]


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class RouteArtifact:
    """A ``{method, path, handler}`` triple for the host to attach."""

    method: str
    """An HTTP method, ``"ALL"``, or ``"USE"`` for middleware."""

    path: str
    endpoint: Callable[..., Any]

    @property
    def is_middleware(self) -> bool:
        return self.method == MIDDLEWARE_METHOD


def route_builder(addin: Addin) -> RouteArtifact:
    verb = addin.get("verb")
    if not isinstance(verb, str) or verb.upper() not in _VERBS:
        raise InvalidAddinError(f"Route addin {addin.describe()} has invalid verb {verb!r}")
    handler = addin.get("handler")
    if not callable(handler):
        raise InvalidAddinError(f"Route addin {addin.describe()} has no callable handler")
    if verb.upper() == MIDDLEWARE_METHOD and not inspect.iscoroutinefunction(handler):
        raise InvalidAddinError(f"Middleware handler of {addin.describe()} must be async")
    path = addin.get("route") or "/"
    if not isinstance(path, str) or not path.startswith("/"):
        raise InvalidAddinError(f"Route of {addin.describe()} must start with '/', got {path!r}")
    return RouteArtifact(method=verb.upper(), path=path, endpoint=handler)


def make_sub_router_builder(engine: Subdivision) -> Builder:
    def sub_router_builder(addin: Addin) -> Mount:
        routes_path = addin.get("routes_path")
        if not isinstance(routes_path, str) or not routes_path:
            raise InvalidAddinError(f"SubRouter addin {addin.describe()} has no routes_path")
        mount = addin.get("mount") or "/"
        if not isinstance(mount, str) or not mount.startswith("/"):
            raise InvalidAddinError(f"Mount of {addin.describe()} must start with '/', got {mount!r}")
        logger.debug("Mounting %r at %r", routes_path, mount)
        return Mount(mount, app=compose_router(engine.build(routes_path)))

    return sub_router_builder


def install_builders(engine: Subdivision) -> None:
    """Register the route and sub-router builders on ``engine``."""
    engine.add_builder(ROUTE_TYPE, route_builder)
    engine.add_builder(SUB_ROUTER_TYPE, make_sub_router_builder(engine))


async def _render(result: Any) -> Response:
    if inspect.isawaitable(result):
        result = await result
    if isinstance(result, Response):
        return result
    if isinstance(result, str | bytes):
        return PlainTextResponse(result)
    if result is None:
        return Response(status_code=204)
    return JSONResponse(result)


def _endpoint(handler: Callable[..., Any]) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        if inspect.iscoroutinefunction(handler):
            return await _render(handler(request))
        return await _render(await run_in_threadpool(handler, request))

    return endpoint


def _route_path(request: Request) -> str:
    """The request path relative to the router the middleware is mounted in."""
    path: str = request.scope["path"]
    root_path: str = request.scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        return path[len(root_path) :] or "/"
    return path


def _dispatch(artifact: RouteArtifact) -> MiddlewareDispatch:
    prefix = artifact.path.rstrip("/")
    handler = artifact.endpoint

    async def dispatch(request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = _route_path(request)
        if prefix and path != prefix and not path.startswith(f"{prefix}/"):
            return await call_next(request)
        return await handler(request, call_next)

    return dispatch


def _split(artifacts: Iterable[Any]) -> tuple[list[BaseRoute], list[MiddlewareDispatch]]:
    routes: list[BaseRoute] = []
    middleware: list[MiddlewareDispatch] = []
    for artifact in artifacts:
        if isinstance(artifact, RouteArtifact):
            if artifact.is_middleware:
                middleware.append(_dispatch(artifact))
            else:
                methods = list(ALL_METHODS) if artifact.method == "ALL" else [artifact.method]
                routes.append(Route(artifact.path, _endpoint(artifact.endpoint), methods=methods))
        elif isinstance(artifact, BaseRoute):
            routes.append(artifact)
        else:
            raise TypeError(f"Cannot attach artifact of type {type(artifact).__name__}")
    return routes, middleware


def compose_router(artifacts: Iterable[Any]) -> ASGIApp:
    """
    Combine artifacts into one mountable ASGI app.

    Middleware wraps the routes in declared order: the first declared runs outermost.
    """
    routes, middleware = _split(artifacts)
    app: ASGIApp = Router(routes=routes)
    for dispatch in reversed(middleware):
        app = BaseHTTPMiddleware(app, dispatch=dispatch)
    return app


def create_application(artifacts: Iterable[Any], **kwargs: Any) -> Starlette:
    """Create a Starlette application from the artifacts of a top-level path."""
    routes, middleware = _split(artifacts)
    return Starlette(
        routes=routes,
        middleware=[Middleware(BaseHTTPMiddleware, dispatch=dispatch) for dispatch in middleware],
        **kwargs,
    )


def create_server(application: ASGIApp, *, host: str = "127.0.0.1", port: int = 9000) -> uvicorn.Server:
    configuration = uvicorn.Config(application, host=host, port=port, log_level="error")
    return uvicorn.Server(configuration)


def serve(application: ASGIApp, *, host: str = "127.0.0.1", port: int = 9000) -> None:
    server = create_server(application, host=host, port=port)
    logger.info("Listening at http://%s:%s", host, port)
    asyncio.run(server.serve())
