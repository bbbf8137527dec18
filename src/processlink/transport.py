"""Async HTTP transport for Process Link uploads.

A send is a single attempt:

1. Resolve scheme, host, port and path from the destination URL.
2. ``POST`` the multipart body with the content and auth headers.
3. Race the exchange against one deadline timer.  If the timer wins, the
   in-flight request is cancelled and :class:`ProcessLinkTimeoutError` is
   raised; a late response is never processed.
4. Any lower-level network failure is raised as
   :class:`ProcessLinkTransportError`.

Nothing is retried.  Status codes are not interpreted here; every response
the server sends back is returned as a :class:`RawResponse`.
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from typing import Any, NamedTuple
from urllib.parse import urlsplit

import httpx

from processlink.errors import ProcessLinkTimeoutError, ProcessLinkTransportError
from processlink.models import MultipartBody, RawResponse
from processlink.observability import NoopMetricsHook, get_logger

log = get_logger("processlink.transport")

_DEFAULT_PORTS = {"https": 443, "http": 80}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class Endpoint(NamedTuple):
    """A destination URL broken into the parts used for the request."""

    scheme: str
    host: str
    port: int
    path: str

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{self.path}"


def resolve_endpoint(url: str) -> Endpoint:
    """Split *url* into scheme, host, port and path.

    The port defaults to 443 for ``https`` and 80 for ``http``.  Query
    strings and fragments are not forwarded.

    Raises
    ------
    ProcessLinkTransportError
        If the scheme is not ``http``/``https`` or the URL has no host.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise ProcessLinkTransportError(
            message=f"Invalid URL {url!r}: {exc}",
            context={"url": url},
            cause=exc,
        ) from exc

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        raise ProcessLinkTransportError(
            message=f"Unsupported upload URL {url!r}",
            context={"url": url},
        )
    return Endpoint(
        scheme=scheme,
        host=parts.hostname,
        port=port or _DEFAULT_PORTS[scheme],
        path=parts.path or "/",
    )


def build_upload_headers(body: MultipartBody, site_id: str, api_key: str) -> dict[str, str]:
    """Return the headers for an upload ``POST``."""
    return {
        "Content-Type": body.content_type,
        "Content-Length": str(body.content_length),
        "x-site-id": site_id,
        "x-api-key": api_key,
    }


def _dump_payload(
    url: str,
    headers: dict[str, str],
    body: bytes,
    response_status: int | None,
    response_body: Any | None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from processlink.utils.redact import redact

    dump: dict[str, Any] = {
        "method": "POST",
        "url": url,
        "request_headers": headers,
        "request_body": body,
    }
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, headers.get("x-api-key"))
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncUploadTransport:
    """Single-attempt async HTTP transport.

    Parameters
    ----------
    proxy:
        Optional HTTP/HTTPS proxy URL for the default client.
    metrics:
        Optional :class:`~processlink.observability.MetricsHook`.
    debug_dump_payload:
        Dump each exchange, redacted, to *stderr*.
    client:
        An existing ``httpx.AsyncClient`` to send through.  When omitted one
        is created with httpx's own timeouts disabled, so the deadline given
        to :meth:`send` is the only one in force.
    """

    def __init__(
        self,
        *,
        proxy: str | None = None,
        metrics: Any | None = None,
        debug_dump_payload: bool = False,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._debug_dump_payload = debug_dump_payload
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(None),
            proxy=proxy,
        )

    # -- public API --------------------------------------------------------

    async def send(
        self,
        url: str,
        headers: dict[str, str],
        body: bytes,
        timeout_ms: int,
    ) -> RawResponse:
        """POST *body* to *url* and return the raw response.

        Parameters
        ----------
        url:
            Destination URL (``http`` or ``https``).
        headers:
            Request headers, see :func:`build_upload_headers`.
        body:
            The encoded request body.
        timeout_ms:
            Deadline for the whole exchange, in milliseconds.

        Returns
        -------
        RawResponse
            Whatever the server answered, regardless of status code.

        Raises
        ------
        ProcessLinkTimeoutError
            When the deadline expires first.  The request is cancelled.
        ProcessLinkTransportError
            On DNS, connection, protocol or URL errors, or when a header
            value cannot be encoded.
        """
        endpoint = resolve_endpoint(url)
        target = endpoint.url

        t0 = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._exchange(target, headers, body),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            self._metrics.increment(
                "processlink.requests_total",
                tags={"host": endpoint.host, "status": "timeout"},
            )
            log.warning(
                "Upload request timed out",
                extra={
                    "extra_fields": {
                        "op": "send",
                        "url": target,
                        "timeout_ms": timeout_ms,
                    }
                },
            )
            if self._debug_dump_payload:
                _dump_payload(target, headers, body, None, None)
            raise ProcessLinkTimeoutError(
                context={"url": target, "timeout_ms": timeout_ms},
                cause=exc,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            # httpx encodes header values as ASCII.
            self._metrics.increment(
                "processlink.requests_total",
                tags={"host": endpoint.host, "status": "error"},
            )
            log.warning(
                "Upload request failed",
                extra={
                    "extra_fields": {
                        "op": "send",
                        "url": target,
                        "error": str(exc),
                    }
                },
            )
            if self._debug_dump_payload:
                _dump_payload(target, headers, body, None, None)
            raise ProcessLinkTransportError(
                message=str(exc) or type(exc).__name__,
                context={"url": target},
                cause=exc,
            ) from exc

        elapsed_ms = (time.monotonic() - t0) * 1000
        self._metrics.increment(
            "processlink.requests_total",
            tags={"host": endpoint.host, "status": str(response.status_code)},
        )
        self._metrics.timing(
            "processlink.request_duration_ms",
            elapsed_ms,
            tags={"host": endpoint.host, "status": str(response.status_code)},
        )
        log.debug(
            "Upload response received",
            extra={
                "extra_fields": {
                    "op": "send",
                    "url": target,
                    "status_code": response.status_code,
                    "elapsed_ms": round(elapsed_ms, 1),
                }
            },
        )

        if self._debug_dump_payload:
            _dump_payload(
                target, headers, body,
                response.status_code, response.content.decode("utf-8", errors="replace")[:1000],
            )
        return response

    async def _exchange(self, target: str, headers: dict[str, str], body: bytes) -> RawResponse:
        response = await self._client.post(target, headers=headers, content=body)
        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
        )

    async def aclose(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncUploadTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
