"""Ordered middleware chain framework."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from uuid import uuid4

import structlog
from starlette.requests import Request
from starlette.responses import Response

from http_firewall.models.rejection import Rejection

logger = structlog.get_logger()

FORBIDDEN_BODY = "FORBIDDEN"


def forbidden_response() -> Response:
    """The fixed response sent for every rejected request."""
    return Response(content=FORBIDDEN_BODY, status_code=403, headers={"Content-Type": "text/plain"})


@dataclass
class RequestContext:
    """Per-request context passed through the middleware pipeline."""

    request_id: str = ""
    rejection: Rejection | None = None

    def __post_init__(self):
        if not self.request_id:
            self.request_id = uuid4().hex[:8]


class Middleware(abc.ABC):
    """Base class for middleware in the pipeline."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abc.abstractmethod
    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        """Process an incoming request.

        Return None to continue the pipeline, or a Response to short-circuit.
        """
        ...


class MiddlewarePipeline:
    """Ordered list of request checks. The first one to return a Response wins."""

    def __init__(self) -> None:
        self._middleware: list[Middleware] = []

    def add(self, middleware: Middleware) -> None:
        """Add a middleware to the end of the pipeline."""
        self._middleware.append(middleware)
        logger.info("middleware_registered", name=middleware.name)

    async def process_request(self, request: Request, context: RequestContext) -> Response | None:
        """Run request through all middleware in order.

        Returns a Response if any middleware short-circuits, otherwise None.
        A middleware that raises rejects the request with the fixed 403.
        """
        for mw in self._middleware:
            try:
                result = await mw.process_request(request, context)
            except Exception:
                logger.exception("middleware_request_error", middleware=mw.name, request_id=context.request_id)
                return forbidden_response()
            if isinstance(result, Response):
                logger.debug("middleware_short_circuit", middleware=mw.name, request_id=context.request_id)
                return result
        return None
