"""Pydantic model for firewall construction options."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from http_firewall.firewall.predicate import (
    ALLOW_ANY,
    ASSIGNED_AND_NOT_CONTROL,
    Predicate,
    hostname_in,
    value_in,
)


class HttpMethod(str, Enum):
    """Standard HTTP methods."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


# TRACE is left out to block cross-site tracing (XST)
DEFAULT_ALLOWED_HTTP_METHODS: frozenset[str] = frozenset({
    HttpMethod.DELETE.value,
    HttpMethod.GET.value,
    HttpMethod.HEAD.value,
    HttpMethod.OPTIONS.value,
    HttpMethod.PATCH.value,
    HttpMethod.POST.value,
    HttpMethod.PUT.value,
})


def _to_predicate(value: Any, *, hostnames: bool = False) -> Any:
    if isinstance(value, Predicate):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        if not all(isinstance(v, str) for v in value):
            raise ValueError("allow-lists must contain only strings")
        return hostname_in(value) if hostnames else value_in(value)
    if callable(value):
        return Predicate(value)
    raise ValueError(f"expected a Predicate, a callable or a list of strings, got {type(value).__name__}")


class FirewallOptions(BaseModel):
    """Construction-time firewall options.

    Every ``allow_*`` toggle defaults to False (most restrictive). Fields can be
    given by name or by their camelCase alias, e.g. ``allowSemicolon``, so the
    same model reads Python keyword arguments and YAML/JSON option files.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    unsafe_allow_any_http_method: bool = False
    allowed_http_methods: tuple[str, ...] | None = None

    allow_semicolon: bool = False
    allow_url_encoded_slash: bool = False
    allow_url_encoded_double_slash: bool = False
    allow_url_encoded_period: bool = False
    allow_back_slash: bool = False
    allow_null: bool = False
    allow_url_encoded_percent: bool = False
    allow_url_encoded_carriage_return: bool = False
    allow_url_encoded_line_feed: bool = False
    allow_url_encoded_paragraph_separator: bool = False
    allow_url_encoded_line_separator: bool = False

    decoded_url_blocklist: tuple[str, ...] = Field(default=(), alias="decodedUrlBlockList")
    encoded_url_blocklist: tuple[str, ...] = Field(default=(), alias="encodedUrlBlockList")

    allowed_hostnames: Predicate = ALLOW_ANY
    # Stored for callers but not evaluated by any gate
    allowed_header_names: Predicate = ASSIGNED_AND_NOT_CONTROL
    allowed_header_values: Predicate = ASSIGNED_AND_NOT_CONTROL
    allowed_parameter_names: Predicate = ASSIGNED_AND_NOT_CONTROL
    allowed_parameter_values: Predicate = ALLOW_ANY

    log_to_console: bool = False

    @field_validator("allowed_http_methods", mode="before")
    @classmethod
    def _upper_case_methods(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        methods = []
        for method in value:
            if isinstance(method, HttpMethod):
                method = method.value
            if not isinstance(method, str) or not method.strip():
                raise ValueError(f"invalid HTTP method: {method!r}")
            methods.append(method.strip().upper())
        return tuple(methods)

    @field_validator("decoded_url_blocklist", "encoded_url_blocklist")
    @classmethod
    def _non_empty_entries(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # "" is contained in every string and would reject all traffic
        if any(entry == "" for entry in value):
            raise ValueError("blocklist entries must be non-empty strings")
        return value

    @field_validator("allowed_hostnames", mode="before")
    @classmethod
    def _hostname_predicate(cls, value: Any) -> Any:
        if value is None:
            return ALLOW_ANY
        return _to_predicate(value, hostnames=True)

    @field_validator(
        "allowed_header_names",
        "allowed_header_values",
        "allowed_parameter_names",
        "allowed_parameter_values",
        mode="before",
    )
    @classmethod
    def _value_predicate(cls, value: Any, info: ValidationInfo) -> Any:
        # An empty key in an options file means "use the default"
        if value is None:
            return cls.model_fields[info.field_name].default
        return _to_predicate(value)
