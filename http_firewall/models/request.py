"""Read-only view of an inbound request, as seen by the firewall gates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import Headers, QueryParams
from starlette.requests import Request


def _parse_hostname(host: str | None) -> str | None:
    """Strip the port (and IPv6 brackets) from a Host header value."""
    if not host:
        return None
    host = host.strip()
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host or None


@dataclass(frozen=True)
class RequestView:
    """Normalized request fields inspected by the firewall.

    ``url`` is the request target exactly as received (still percent-encoded),
    ``path`` is the percent-decoded path exposed by the host framework.
    """

    method: str
    url: str
    path: str
    original_url: str = ""
    route: str | None = None
    base_url: str | None = None
    hostname: str | None = None
    headers: tuple[tuple[str, str], ...] = field(default=())
    parameters: tuple[tuple[str, str], ...] = field(default=())

    @classmethod
    def from_scope(cls, scope: dict[str, Any]) -> RequestView:
        """Build a view from an ASGI HTTP scope."""
        path = scope.get("path", "")
        raw_path = scope.get("raw_path")
        if raw_path is None:
            raw = path
        else:
            # Some servers include the query string in raw_path
            raw = bytes(raw_path).split(b"?", 1)[0].decode("latin-1")

        query = scope.get("query_string", b"").decode("latin-1")
        url = f"{raw}?{query}" if query else raw

        root_path = scope.get("root_path", "") or ""
        if root_path and not url.startswith(root_path):
            original_url = root_path + url
        else:
            original_url = url

        route = scope.get("route")
        headers = Headers(scope=scope)

        return cls(
            method=scope.get("method", "GET"),
            url=url,
            path=path,
            original_url=original_url,
            route=getattr(route, "path", None),
            base_url=root_path or None,
            hostname=_parse_hostname(headers.get("host")),
            headers=tuple(headers.items()),
            parameters=tuple(QueryParams(query).multi_items()),
        )

    @classmethod
    def from_request(cls, request: Request) -> RequestView:
        return cls.from_scope(request.scope)
