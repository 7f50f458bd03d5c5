"""Firewall middleware: rejects suspicious requests with a fixed 403 before any handler runs."""

from __future__ import annotations

from collections.abc import Callable

import structlog
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from http_firewall.firewall.strict import StrictHttpFirewall
from http_firewall.middleware.pipeline import Middleware, RequestContext, forbidden_response
from http_firewall.models.options import FirewallOptions
from http_firewall.models.request import RequestView

logger = structlog.get_logger()


class HttpFirewallMiddleware(Middleware):
    """Pipeline stage wrapping a StrictHttpFirewall.

    On rejection the reason is recorded on the context and the fixed 403
    response short-circuits the pipeline. The reason is never written to the
    response body.
    """

    def __init__(self, options: FirewallOptions | None = None, firewall: StrictHttpFirewall | None = None) -> None:
        self.firewall = firewall or StrictHttpFirewall(options)

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        rejection = self.firewall.evaluate(RequestView.from_request(request))
        if rejection is None:
            return None
        context.rejection = rejection
        return forbidden_response()


class FirewallASGIMiddleware:
    """Pure ASGI middleware for ``app.add_middleware(FirewallASGIMiddleware, options=...)``.

    Runs ahead of routing, so TRACE and other unrouted methods are rejected
    before the router answers 404/405. Non-HTTP scopes (websocket, lifespan)
    pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        options: FirewallOptions | None = None,
        firewall: StrictHttpFirewall | None = None,
    ) -> None:
        self.app = app
        self.firewall = firewall or StrictHttpFirewall(options)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            rejected = self.firewall.evaluate(RequestView.from_scope(scope)) is not None
        except Exception:
            logger.exception("firewall_evaluation_error", path=scope.get("path"))
            rejected = True

        if rejected:
            response = forbidden_response()
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)


def http_firewall(options: FirewallOptions | None = None) -> Callable[[ASGIApp], FirewallASGIMiddleware]:
    """Return a wrapper that puts one shared firewall in front of an ASGI app.

    ::

        app = http_firewall(FirewallOptions(allow_semicolon=True))(app)
    """
    firewall = StrictHttpFirewall(options)

    def wrap(app: ASGIApp) -> FirewallASGIMiddleware:
        return FirewallASGIMiddleware(app, firewall=firewall)

    return wrap
