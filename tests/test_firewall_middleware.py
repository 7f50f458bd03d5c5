"""Unit tests for http_firewall.middleware.firewall."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from starlette.requests import Request

from http_firewall.firewall.strict import StrictHttpFirewall
from http_firewall.middleware.firewall import FirewallASGIMiddleware, HttpFirewallMiddleware, http_firewall
from http_firewall.middleware.pipeline import RequestContext
from http_firewall.models.options import FirewallOptions
from http_firewall.models.rejection import RejectionReason


def _scope(
    path: str = "/api/items",
    raw_path: bytes | None = None,
    method: str = "GET",
    host: bytes = b"localhost:8000",
    scope_type: str = "http",
) -> dict:
    """Build a raw ASGI scope. HTTP clients would normalize most of these paths away."""
    return {
        "type": scope_type,
        "method": method,
        "path": path,
        "raw_path": raw_path if raw_path is not None else path.encode("latin-1"),
        "query_string": b"",
        "root_path": "",
        "headers": [(b"host", host)],
    }


class DownstreamApp:
    """ASGI app that records whether it was reached."""

    def __init__(self):
        self.called = False

    async def __call__(self, scope, receive, send):
        self.called = True
        if scope["type"] == "http":
            await send({"type": "http.response.start", "status": 200, "headers": []})
            await send({"type": "http.response.body", "body": b"ok"})


async def _run(middleware, scope) -> list[dict]:
    messages: list[dict] = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        messages.append(message)

    await middleware(scope, receive, send)
    return messages


def _status(messages: list[dict]) -> int:
    return next(m["status"] for m in messages if m["type"] == "http.response.start")


def _body(messages: list[dict]) -> bytes:
    return b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")


# ---------------------------------------------------------------------------
# Pipeline stage
# ---------------------------------------------------------------------------

class TestHttpFirewallMiddleware:

    @pytest.mark.asyncio
    async def test_allowed_request_continues(self):
        mw = HttpFirewallMiddleware()
        ctx = RequestContext()
        assert await mw.process_request(Request(_scope()), ctx) is None
        assert ctx.rejection is None

    @pytest.mark.asyncio
    async def test_rejected_request_short_circuits(self):
        mw = HttpFirewallMiddleware()
        ctx = RequestContext()
        response = await mw.process_request(Request(_scope(method="TRACE")), ctx)
        assert response.status_code == 403
        assert response.body == b"FORBIDDEN"
        assert ctx.rejection.reason is RejectionReason.METHOD_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_reason_not_in_body(self):
        mw = HttpFirewallMiddleware()
        response = await mw.process_request(Request(_scope(path="/a;b")), RequestContext())
        assert b"malicious" not in response.body
        assert b";" not in response.body

    @pytest.mark.asyncio
    async def test_uses_given_firewall(self):
        firewall = StrictHttpFirewall(FirewallOptions(allow_semicolon=True))
        mw = HttpFirewallMiddleware(firewall=firewall)
        assert mw.firewall is firewall
        assert await mw.process_request(Request(_scope(path="/a;b")), RequestContext()) is None


# ---------------------------------------------------------------------------
# Pure ASGI middleware
# ---------------------------------------------------------------------------

class TestFirewallASGIMiddleware:

    @pytest.mark.asyncio
    async def test_passes_clean_request(self):
        app = DownstreamApp()
        messages = await _run(FirewallASGIMiddleware(app), _scope())
        assert app.called
        assert _status(messages) == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        ["/..", "/./path/", "/path/path/.", "/path/path//.", "//path", "//path/path", "//path//path", "/path//path"],
    )
    async def test_rejects_non_normalized_paths(self, path):
        app = DownstreamApp()
        messages = await _run(FirewallASGIMiddleware(app), _scope(path=path))
        assert not app.called
        assert _status(messages) == 403
        assert _body(messages) == b"FORBIDDEN"

    @pytest.mark.asyncio
    async def test_rejects_control_character(self):
        app = DownstreamApp()
        messages = await _run(FirewallASGIMiddleware(app), _scope(path="/test/\x19"))
        assert not app.called
        assert _status(messages) == 403

    @pytest.mark.asyncio
    async def test_percent_encoded_japanese_allowed(self):
        app = DownstreamApp()
        scope = _scope(path="/test/あ", raw_path=b"/test/%E3%81%82")
        messages = await _run(FirewallASGIMiddleware(app), scope)
        assert app.called
        assert _status(messages) == 200

    @pytest.mark.asyncio
    async def test_raw_non_ascii_rejected(self):
        app = DownstreamApp()
        scope = _scope(path="/test/あ", raw_path="/test/あ".encode())
        messages = await _run(FirewallASGIMiddleware(app), scope)
        assert not app.called
        assert _status(messages) == 403

    @pytest.mark.asyncio
    async def test_untrusted_host(self):
        app = DownstreamApp()
        options = FirewallOptions(allowed_hostnames=["example.com"])
        messages = await _run(FirewallASGIMiddleware(app, options=options), _scope(host=b"evil.com"))
        assert not app.called
        assert _status(messages) == 403

    @pytest.mark.asyncio
    async def test_trusted_host_with_port(self):
        app = DownstreamApp()
        options = FirewallOptions(allowed_hostnames=["example.com"])
        await _run(FirewallASGIMiddleware(app, options=options), _scope(host=b"example.com:443"))
        assert app.called

    @pytest.mark.asyncio
    async def test_non_http_scope_passes_through(self):
        app = DownstreamApp()
        scope = _scope(path="/..", scope_type="websocket")
        await _run(FirewallASGIMiddleware(app), scope)
        assert app.called

    @pytest.mark.asyncio
    async def test_evaluation_error_fails_closed(self):
        app = DownstreamApp()
        mw = FirewallASGIMiddleware(app)
        with patch.object(mw.firewall, "evaluate", side_effect=RuntimeError("boom")):
            messages = await _run(mw, _scope())
        assert not app.called
        assert _status(messages) == 403

    @pytest.mark.asyncio
    async def test_http_firewall_factory_shares_one_firewall(self):
        wrap = http_firewall(FirewallOptions(allow_semicolon=True))
        first, second = wrap(DownstreamApp()), wrap(DownstreamApp())
        assert first.firewall is second.firewall
        messages = await _run(first, _scope(path="/a;b"))
        assert _status(messages) == 200
