"""Rejection reasons produced by the firewall gates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RejectionReason(str, Enum):
    METHOD_NOT_ALLOWED = "method-not-allowed"
    BLOCKLISTED_CONTENT = "blocklisted-content"
    UNTRUSTED_HOST = "untrusted-host"
    NON_NORMALIZED_PATH = "non-normalized-path"
    NON_PRINTABLE_CHARACTERS = "non-printable-characters"
    # A user-supplied predicate raised; the request is rejected (fail closed)
    PREDICATE_FAULT = "predicate-fault"


@dataclass(frozen=True)
class Rejection:
    """Why a request was rejected. For logs only, never sent to the client."""

    reason: RejectionReason
    message: str
    value: str | None = None


class RequestRejectedError(Exception):
    """Raised by ``StrictHttpFirewall.check`` when a request fails a gate."""

    def __init__(self, rejection: Rejection) -> None:
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def reason(self) -> RejectionReason:
        return self.rejection.reason
