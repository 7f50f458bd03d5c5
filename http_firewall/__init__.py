"""
Strict HTTP firewall - rejects suspicious requests before they reach application handlers.
"""

__version__ = "1.0.3"

from http_firewall.firewall.predicate import Predicate
from http_firewall.firewall.strict import StrictHttpFirewall
from http_firewall.middleware.firewall import FirewallASGIMiddleware, http_firewall
from http_firewall.models.options import FirewallOptions, HttpMethod
from http_firewall.models.rejection import Rejection, RejectionReason, RequestRejectedError

__all__ = [
    "FirewallASGIMiddleware",
    "FirewallOptions",
    "HttpMethod",
    "Predicate",
    "Rejection",
    "RejectionReason",
    "RequestRejectedError",
    "StrictHttpFirewall",
    "http_firewall",
]
