"""Metrics hook protocol and no-op default implementation.

processlink emits counters and timings around each upload.  By default a
:class:`NoopMetricsHook` is used; supply any object satisfying
:class:`MetricsHook` through ``ProcessLinkConfig(metrics=...)`` to route
them to StatsD, Prometheus, Datadog, etc.

Emitted metric names:

* ``processlink.requests_total``        -- counter (tags ``host``, ``status``:
  HTTP status code, ``timeout`` or ``error``)
* ``processlink.request_duration_ms``   -- timing (tags ``host``, ``status``),
  only for exchanges that got a response
* ``processlink.upload_bytes``          -- gauge, payload size per upload
* ``processlink.upload_success_total``  -- counter
* ``processlink.upload_failure_total``  -- counter (tag ``reason``:
  ``config_error``, ``payload_error``, ``api_error``, ``transport_error``
  or ``timeout``)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
