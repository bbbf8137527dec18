"""Client configuration for processlink.

:class:`ProcessLinkConfig` captures the static destination settings of an
upload client.  The API key is deliberately **not** part of it: secrets are
read at upload time from a :class:`~processlink.credentials.SecretProvider`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

DEFAULT_API_URL = "https://files.processlink.com.au/api/upload"
"""Upload endpoint used when no ``api_url`` is configured."""

DEFAULT_TIMEOUT_MS = 30_000
"""Request deadline used when no usable ``timeout_ms`` is configured."""

DEFAULT_FILENAME = "file.bin"
"""Filename sent when neither the message nor the config provides one."""


def coerce_timeout_ms(value: Any) -> int:
    """Normalise a configured timeout to whole milliseconds.

    Strings are parsed leniently (leading integer digits only, so ``"45s"``
    becomes ``45``).  Missing, unparsable, non-finite or zero values fall
    back to :data:`DEFAULT_TIMEOUT_MS`.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_TIMEOUT_MS
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return DEFAULT_TIMEOUT_MS
        parsed = int(value)
    else:
        text = str(value).strip()
        sign = -1 if text.startswith("-") else 1
        digits = ""
        for ch in text.lstrip("+-"):
            if not ch.isdigit():
                break
            digits += ch
        if not digits:
            return DEFAULT_TIMEOUT_MS
        parsed = sign * int(digits)
    return parsed or DEFAULT_TIMEOUT_MS


@dataclass
class ProcessLinkConfig:
    """Destination configuration for a processlink client.

    Parameters
    ----------
    site_id:
        Process Link site identifier, sent as ``x-site-id``.  An empty value
        is accepted here and rejected at upload time, so that a half-filled
        configuration still produces a status event rather than a crash.
    api_url:
        Upload endpoint.  Only ``http`` and ``https`` are accepted.
    filename:
        Default filename when the inbound message does not carry one.
    timeout_ms:
        Request deadline in milliseconds.  See :func:`coerce_timeout_ms`.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~processlink.observability.MetricsHook`.
    debug_dump_payload:
        Write a redacted request/response dump to *stderr*.
    """

    site_id: str = ""

    api_url: str = DEFAULT_API_URL

    filename: str | None = None

    timeout_ms: int = DEFAULT_TIMEOUT_MS

    http_proxy: str | None = None

    metrics: Any | None = None

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.api_url:
            self.api_url = DEFAULT_API_URL
        scheme = urlparse(self.api_url).scheme
        if scheme not in ("http", "https"):
            raise ValueError(
                f"api_url must use http or https, got {self.api_url!r}"
            )

        self.timeout_ms = coerce_timeout_ms(self.timeout_ms)
        if self.timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {self.timeout_ms}")
