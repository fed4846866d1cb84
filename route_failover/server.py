# route_failover/server.py
"""
FastAPI application exposing the failover router over HTTP.

  POST /        {"message": "..."}  → routed completion (alias: POST /route)
  GET  /health                      → liveness probe
  OPTIONS *                         → 200, empty body (CORS preflight)

Every response carries permissive CORS headers. Router errors map to the
status code and JSON body they declare; anything else becomes a 500.

Run with:
  uvicorn route_failover.server:app
or:
  route-failover serve --config router.yaml
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import MutableHeaders
from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import RouterConfig
from .constants import CORS_HEADERS
from .exceptions import InternalFault, RouterError
from .logging_config import configure_logging
from .models import RouteRequest
from .router import FailoverRouter

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499


class CorsMiddleware:
    """
    Pure ASGI middleware: answers every OPTIONS request with an empty 200 and
    stamps CORS_HEADERS on every other response.

    The wrapped app receives the server's own receive channel untouched, so
    Request.is_disconnected() in the endpoint observes caller disconnects.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            await Response(status_code=200, headers=CORS_HEADERS)(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in CORS_HEADERS.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)


async def _route_until_disconnect(request: Request, router: FailoverRouter, message: Any) -> Any:
    """
    Run router.route() but cancel it if the caller goes away, so remaining
    pairs are abandoned instead of spending upstream quota. Returns None
    when the caller disconnected.
    """
    task = asyncio.create_task(router.route(message))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Caller disconnected; abandoning dispatch")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return None
    finally:
        if not task.done():
            task.cancel()


def create_app(
    router: FailoverRouter | None = None,
    config: RouterConfig | None = None,
) -> FastAPI:
    """
    Build the ASGI application.

    An injected *router* is used as-is and left open on shutdown (the caller
    owns it). Otherwise one is built at start-up from *config*, or from the
    environment, and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if router is not None:
            app.state.router = router
            yield
            return

        cfg = config or RouterConfig.from_env()
        configure_logging(cfg.log_level)
        app.state.router = FailoverRouter(cfg)
        logger.info("Router started (upstream=%s)", cfg.upstream_url)
        try:
            yield
        finally:
            await app.state.router.close()

    app = FastAPI(title="route-failover", lifespan=lifespan)
    if router is not None:
        app.state.router = router

    app.add_middleware(CorsMiddleware)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/")
    @app.post("/route")
    async def route_message(request: Request) -> Response:
        try:
            body = await request.body()
        except ClientDisconnect:
            logger.info("Caller disconnected before the body was read")
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        # Unparsable or non-object bodies carry no message; the router rejects it.
        try:
            payload = RouteRequest.model_validate_json(body)
        except ValidationError:
            payload = RouteRequest()

        try:
            result = await _route_until_disconnect(request, request.app.state.router, payload.message)
        except RouterError as exc:
            if exc.status_code >= 500:
                logger.warning("Dispatch failed: %s", exc)
            return JSONResponse(exc.to_payload(), status_code=exc.status_code)
        except Exception as exc:
            logger.exception("Unhandled error while routing")
            fault = InternalFault(str(exc))
            return JSONResponse(fault.to_payload(), status_code=fault.status_code)

        if result is None:
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        return JSONResponse(result.model_dump())

    return app


app = create_app()
