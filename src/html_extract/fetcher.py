"""Fetch HTML over HTTP with classified, policy-driven retries."""

from __future__ import annotations

import logging
import ssl
from typing import Optional, Union
from urllib.parse import quote, urlsplit, urlunsplit

import httpx
from httpx_socks import SyncProxyTransport
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from html_extract.classification import ErrorInfo, classify_error, should_retry
from html_extract.models import FetchOptions, FetchResponse, ProxyConfig
from html_extract.useragents import random_user_agent

logger = logging.getLogger(__name__)

PROXY_TYPES = ("http", "https", "socks4", "socks5")
DEFAULT_PROXY_TEST_URL = "https://httpbin.org/ip"


class FetchError(Exception):
    """Raised when HTML fetching fails after all retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        attempts: int = 0,
        error: Optional[ErrorInfo] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.error = error


class _AttemptFailed(Exception):
    """One failed attempt, already classified."""

    def __init__(self, info: ErrorInfo, retryable: bool) -> None:
        super().__init__(info.message)
        self.info = info
        self.retryable = retryable


def detect_proxy_type(url: str) -> str:
    """Proxy protocol from the URL scheme; anything unrecognized is plain http."""
    scheme = url.split("://", 1)[0].lower() if "://" in url else ""
    return scheme if scheme in PROXY_TYPES else "http"


def build_proxy_url(proxy: ProxyConfig) -> str:
    """
    Normalize a proxy URL: scheme follows the proxy type, and separate
    username/password replace any credentials embedded in the URL.
    """
    proxy_type = proxy.type or detect_proxy_type(proxy.url)
    raw = proxy.url if "://" in proxy.url else f"http://{proxy.url}"
    parts = urlsplit(raw)

    netloc = parts.netloc
    if proxy.username and proxy.password:
        host = netloc.rpartition("@")[2]
        user = quote(proxy.username, safe="")
        password = quote(proxy.password, safe="")
        netloc = f"{user}:{password}@{host}"

    return urlunsplit((proxy_type, netloc, parts.path, parts.query, parts.fragment))


def ssl_verify(options: FetchOptions) -> Union[bool, ssl.SSLContext]:
    """The ``verify`` argument for httpx implied by the TLS options."""
    if options.ignore_ssl_errors or not options.reject_unauthorized:
        return False
    if options.disable_server_identity_check:
        context = ssl.create_default_context()
        context.check_hostname = False
        return context
    return True


def build_client(options: FetchOptions, user_agent: str) -> httpx.Client:
    verify = ssl_verify(options)
    headers = {"User-Agent": user_agent, **options.headers}
    kwargs = {
        "timeout": options.timeout,
        "headers": headers,
        "verify": verify,
        "follow_redirects": options.max_redirects > 0,
        "max_redirects": options.max_redirects,
    }

    if options.proxy is not None:
        proxy_url = build_proxy_url(options.proxy)
        if proxy_url.startswith("socks"):
            kwargs["transport"] = SyncProxyTransport.from_url(proxy_url, verify=verify)
        else:
            kwargs["proxy"] = proxy_url

    return httpx.Client(**kwargs)


def normalize_headers(headers: httpx.Headers) -> dict[str, str]:
    return {str(key): str(value) for key, value in headers.items() if value is not None}


def fetch_html(url: str, options: Optional[FetchOptions] = None) -> FetchResponse:
    """
    Fetch *url* and return its body with response metadata.

    Each failed attempt is classified (see :mod:`html_extract.classification`).
    Retryable kinds are retried after ``retry_delay`` seconds, up to
    ``retries`` extra attempts; other kinds fail immediately.

    Raises:
        FetchError: when the failure is not retryable or retries are exhausted.
    """
    options = options or FetchOptions()
    attempts = 0

    def attempt() -> FetchResponse:
        nonlocal attempts
        attempts += 1
        user_agent = random_user_agent() if options.use_random_user_agent else options.user_agent

        try:
            with build_client(options, user_agent) as client:
                response = client.get(url)
                response.raise_for_status()
        except Exception as exc:
            info = classify_error(exc)
            retryable = should_retry(info.kind, options.retry_on_errors)
            logger.log(
                logging.WARNING if options.verbose else logging.DEBUG,
                "Attempt %d for %s failed [%s, retryable=%s]: %s",
                attempts, url, info.kind.value, retryable, info.message,
            )
            raise _AttemptFailed(info, retryable) from exc

        logger.info("Fetched %d bytes from %s (status %d)", len(response.text), url, response.status_code)
        return FetchResponse(
            data=response.text,
            headers=normalize_headers(response.headers),
            status=response.status_code,
            status_text=response.reason_phrase,
        )

    retryer = Retrying(
        stop=stop_after_attempt(options.retries + 1),
        wait=wait_fixed(options.retry_delay),
        retry=retry_if_exception(lambda exc: isinstance(exc, _AttemptFailed) and exc.retryable),
        reraise=True,
    )

    try:
        return retryer(attempt)
    except _AttemptFailed as exc:
        info = exc.info
        noun = "attempt" if attempts == 1 else "attempts"
        message = (
            f"Failed to fetch HTML from {url} after {attempts} {noun}: "
            f"[{info.kind.value}] {info.description}: {info.message}"
        )
        logger.error(message)
        raise FetchError(message, url=url, attempts=attempts, error=info) from exc.__cause__


def check_proxy(proxy: ProxyConfig, test_url: str = DEFAULT_PROXY_TEST_URL) -> bool:
    """Return True when a single request through *proxy* succeeds."""
    try:
        fetch_html(test_url, FetchOptions(proxy=proxy, timeout=5.0, retries=0))
    except FetchError as exc:
        logger.info("Proxy check via %s failed: %s", test_url, exc)
        return False
    return True
