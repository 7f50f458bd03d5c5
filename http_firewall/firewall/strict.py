"""Strict HTTP firewall: an ordered list of gates, each of which can veto a request."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from http_firewall.firewall.blocklist import BlocklistPair, build_blocklists
from http_firewall.firewall.normalization import contains_only_printable_ascii, is_normalized
from http_firewall.firewall.predicate import Predicate
from http_firewall.models.options import DEFAULT_ALLOWED_HTTP_METHODS, FirewallOptions
from http_firewall.models.rejection import Rejection, RejectionReason, RequestRejectedError
from http_firewall.models.request import RequestView

logger = structlog.get_logger()

Gate = Callable[[RequestView], "Rejection | None"]


class StrictHttpFirewall:
    """Reject requests that carry known bypass and injection patterns.

    Gates run in a fixed order and the first failure wins:

    1. HTTP method must be in the allowed set (TRACE is excluded by default
       to block cross-site tracing).
    2. No field may contain a blocklisted literal (encoded set first, then
       decoded set).
    3. The Host name, when present, must satisfy ``allowed_hostnames``.
    4. URL fields must not contain ``.`` or ``..`` segments.
    5. The raw request URL must be printable ASCII.

    All state is built in ``__init__`` and never mutated afterwards, so one
    instance can evaluate concurrent requests.
    """

    def __init__(self, options: FirewallOptions | None = None) -> None:
        self._options = options or FirewallOptions()
        self._allowed_http_methods = self._build_method_set(self._options)
        self._blocklists = build_blocklists(self._options)
        self._log_to_console = self._options.log_to_console
        self._gates: tuple[Gate, ...] = (
            self._reject_forbidden_http_method,
            self._reject_blocklisted_urls,
            self._reject_untrusted_hosts,
            self._reject_non_normalized_requests,
            self._reject_non_printable_ascii,
        )

    @staticmethod
    def _build_method_set(options: FirewallOptions) -> frozenset[str] | None:
        """Return the allowed methods, or None when any method is allowed."""
        methods: frozenset[str] | None = DEFAULT_ALLOWED_HTTP_METHODS
        if options.unsafe_allow_any_http_method:
            methods = None
        # An explicit list takes precedence over unsafe_allow_any_http_method
        if options.allowed_http_methods is not None:
            if options.allowed_http_methods:
                methods = frozenset(options.allowed_http_methods)
            else:
                logger.warning("empty_allowed_http_methods", effect="any method allowed")
                methods = None
        return methods

    @property
    def options(self) -> FirewallOptions:
        return self._options

    @property
    def allowed_http_methods(self) -> frozenset[str] | None:
        return self._allowed_http_methods

    @property
    def blocklists(self) -> BlocklistPair:
        return self._blocklists

    @property
    def allowed_hostnames(self) -> Predicate:
        return self._options.allowed_hostnames

    # Header and parameter predicates are configurable but no gate evaluates them.
    @property
    def allowed_header_names(self) -> Predicate:
        return self._options.allowed_header_names

    @property
    def allowed_header_values(self) -> Predicate:
        return self._options.allowed_header_values

    @property
    def allowed_parameter_names(self) -> Predicate:
        return self._options.allowed_parameter_names

    @property
    def allowed_parameter_values(self) -> Predicate:
        return self._options.allowed_parameter_values

    def evaluate(self, request: RequestView) -> Rejection | None:
        """Run every gate in order. Returns the first rejection, or None to admit."""
        for gate in self._gates:
            rejection = gate(request)
            if rejection is not None:
                if self._log_to_console:
                    logger.warning(
                        "request_rejected",
                        reason=rejection.reason.value,
                        message=rejection.message,
                        method=request.method,
                    )
                return rejection
        return None

    def check(self, request: RequestView) -> None:
        """Raise RequestRejectedError if the request fails any gate."""
        rejection = self.evaluate(request)
        if rejection is not None:
            raise RequestRejectedError(rejection)

    def is_allowed(self, request: RequestView) -> bool:
        return self.evaluate(request) is None

    def _reject_forbidden_http_method(self, request: RequestView) -> Rejection | None:
        if self._allowed_http_methods is None:
            return None
        method = (request.method or "").upper()
        if method not in self._allowed_http_methods:
            return Rejection(
                RejectionReason.METHOD_NOT_ALLOWED,
                f"The request was rejected because the HTTP method {method} was not included "
                f"within the list of allowed HTTP methods {sorted(self._allowed_http_methods)}",
                method,
            )
        return None

    def _reject_blocklisted_urls(self, request: RequestView) -> Rejection | None:
        match = self._blocklists.first_encoded_match(
            (request.path, request.url, request.base_url, request.original_url, request.route)
        )
        if match is None:
            forbidden = self._blocklists.first_decoded_match(request.path)
            if forbidden is not None:
                match = (request.path, forbidden)
        if match is not None:
            value, forbidden = match
            return Rejection(
                RejectionReason.BLOCKLISTED_CONTENT,
                f"The request was rejected because the URL contained a potentially malicious "
                f"String {forbidden!r}: {request.url}",
                value,
            )
        return None

    def _reject_untrusted_hosts(self, request: RequestView) -> Rejection | None:
        hostname = request.hostname
        if hostname is None:
            return None
        try:
            trusted = self._options.allowed_hostnames.test(hostname)
        except Exception as exc:
            logger.error("hostname_predicate_error", hostname=hostname, error=str(exc))
            return Rejection(
                RejectionReason.PREDICATE_FAULT,
                f"The request was rejected because the hostname predicate failed for {hostname}",
                hostname,
            )
        if not trusted:
            return Rejection(
                RejectionReason.UNTRUSTED_HOST,
                f"The request was rejected because the domain {hostname} is untrusted.",
                hostname,
            )
        return None

    def _normalization_fields(self, request: RequestView) -> tuple[str | None, ...]:
        fields: tuple[str | None, ...] = (request.url, request.original_url, request.route)
        # With encoded periods allowed, "%2e" decodes to a "." segment; literal
        # dot segments are still caught in the raw URL fields.
        if not self._options.allow_url_encoded_period:
            fields += (request.path,)
        return fields

    def _reject_non_normalized_requests(self, request: RequestView) -> Rejection | None:
        for value in self._normalization_fields(request):
            if not is_normalized(value):
                return Rejection(
                    RejectionReason.NON_NORMALIZED_PATH,
                    "The request was rejected because the URL was not normalized.",
                    value,
                )
        return None

    def _reject_non_printable_ascii(self, request: RequestView) -> Rejection | None:
        if not contains_only_printable_ascii(request.url):
            return Rejection(
                RejectionReason.NON_PRINTABLE_CHARACTERS,
                "The requestURI was rejected because it can only contain printable ASCII characters.",
                request.url,
            )
        return None
