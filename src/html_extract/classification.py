"""Classify fetch failures into a small taxonomy and decide retryability.

Classification is best-effort: HTTP status failures are recognized from the
exception, everything else by matching the lower-cased message against the
table below (first match wins), falling back to the exception type.
"""

from __future__ import annotations

import re
import socket
import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from html_extract.models import RetryOnErrors


class ErrorKind(str, Enum):
    SSL = "ssl"
    TIMEOUT = "timeout"
    DNS = "dns"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    NETWORK_UNREACHABLE = "network_unreachable"
    RATE_LIMITED = "rate_limited"
    HTTP = "http"
    UNKNOWN = "unknown"


DESCRIPTIONS: dict[ErrorKind, str] = {
    ErrorKind.SSL: "SSL/TLS certificate or handshake error",
    ErrorKind.TIMEOUT: "Request timed out",
    ErrorKind.DNS: "DNS resolution failed (domain may not exist)",
    ErrorKind.CONNECTION_REFUSED: "Connection refused by server",
    ErrorKind.CONNECTION_RESET: "Connection reset by peer",
    ErrorKind.NETWORK_UNREACHABLE: "Network unreachable",
    ErrorKind.RATE_LIMITED: "Rate limited by server (HTTP 429)",
    ErrorKind.HTTP: "HTTP error response",
    ErrorKind.UNKNOWN: "Unknown error",
}

MESSAGE_RULES: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.SSL, (
        "ssl", "tls", "certificate", "cert_", "self signed", "self-signed",
        "unable to verify", "hostname mismatch",
    )),
    (ErrorKind.TIMEOUT, ("timeout", "timed out", "etimedout")),
    (ErrorKind.DNS, (
        "enotfound", "getaddrinfo", "name or service not known",
        "nodename nor servname", "temporary failure in name resolution",
        "no address associated", "name resolution",
    )),
    (ErrorKind.CONNECTION_REFUSED, ("econnrefused", "connection refused")),
    (ErrorKind.CONNECTION_RESET, (
        "econnreset", "socket hang up", "connection reset",
        "server disconnected", "connection aborted",
    )),
    (ErrorKind.NETWORK_UNREACHABLE, ("enetunreach", "network is unreachable")),
    (ErrorKind.RATE_LIMITED, ("429", "too many requests", "rate limit")),
)

TYPE_RULES: tuple[tuple[tuple[type[BaseException], ...], ErrorKind], ...] = (
    ((ssl.SSLError,), ErrorKind.SSL),
    ((httpx.TimeoutException, TimeoutError), ErrorKind.TIMEOUT),
    ((socket.gaierror,), ErrorKind.DNS),
    ((ConnectionRefusedError,), ErrorKind.CONNECTION_REFUSED),
    ((ConnectionResetError, httpx.RemoteProtocolError), ErrorKind.CONNECTION_RESET),
)

_STATUS_CODE = re.compile(r"status code (\d{3})")


@dataclass(frozen=True)
class ErrorInfo:
    kind: ErrorKind
    description: str
    message: str


def _status_code(exc: BaseException, message: str) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    match = _STATUS_CODE.search(message)
    return int(match.group(1)) if match else None


def classify_message(message: str) -> ErrorKind:
    """Kind for a raw error message, by substring match."""
    lowered = message.lower()
    for kind, needles in MESSAGE_RULES:
        if any(needle in lowered for needle in needles):
            return kind
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException) -> ErrorInfo:
    message = str(exc) or type(exc).__name__
    status = _status_code(exc, message.lower())
    if status == 429:
        kind = ErrorKind.RATE_LIMITED
    elif status is not None:
        kind = ErrorKind.HTTP
    else:
        kind = classify_message(message)

    if kind is ErrorKind.UNKNOWN:
        for types, fallback in TYPE_RULES:
            if isinstance(exc, types):
                kind = fallback
                break

    return ErrorInfo(kind=kind, description=DESCRIPTIONS[kind], message=message)


def should_retry(kind: ErrorKind, policy: RetryOnErrors) -> bool:
    """Whether a failure of *kind* is retried automatically under *policy*."""
    if kind is ErrorKind.SSL:
        return policy.ssl
    if kind is ErrorKind.TIMEOUT:
        return policy.timeout
    if kind is ErrorKind.DNS:
        return policy.dns
    if kind is ErrorKind.CONNECTION_REFUSED:
        return policy.connection_refused
    if kind in (ErrorKind.RATE_LIMITED, ErrorKind.HTTP):
        return False
    return True
