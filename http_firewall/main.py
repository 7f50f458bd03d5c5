"""Demo FastAPI application protected by the strict HTTP firewall."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response

from http_firewall.config.loader import get_settings, load_firewall_options, load_settings
from http_firewall.logging_config import setup_logging
from http_firewall.middleware.firewall import HttpFirewallMiddleware
from http_firewall.middleware.pipeline import MiddlewarePipeline, RequestContext
from http_firewall.models.options import FirewallOptions

logger = structlog.get_logger()

_pipeline: MiddlewarePipeline | None = None


def _build_pipeline(options: FirewallOptions) -> MiddlewarePipeline:
    """Build the ordered middleware pipeline. The firewall always runs first."""
    pipeline = MiddlewarePipeline()
    pipeline.add(HttpFirewallMiddleware(options))  # 0: reject before any handler
    return pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    global _pipeline

    settings = load_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)

    options = load_firewall_options(settings.options_file)
    _pipeline = _build_pipeline(options)

    logger.info("firewall_started", host=settings.host, port=settings.listen_port)

    yield

    _pipeline = None
    logger.info("firewall_stopped")


app = FastAPI(title="Strict HTTP Firewall", lifespan=lifespan)


@app.middleware("http")
async def firewall(request: Request, call_next):
    """Run the pipeline ahead of routing; a short-circuit response ends the request."""
    if _pipeline is None:
        return Response(content="Firewall not initialized", status_code=503)

    context = RequestContext()
    short_circuit = await _pipeline.process_request(request, context)
    if short_circuit is not None:
        # Rejection details are logged by the firewall only when log_to_console is set
        logger.debug(
            "request_forbidden",
            request_id=context.request_id,
            method=request.method,
            stage_error=context.rejection is None,
        )
        return short_circuit

    return await call_next(request)


@app.get("/")
async def index():
    return Response(content="Strict HTTP Firewall demo server", media_type="text/plain")


@app.get("/health")
async def health():
    """Health check: reports whether the pipeline is built."""
    settings = get_settings()
    return {
        "status": "healthy" if _pipeline is not None else "starting",
        "port": settings.listen_port,
    }
