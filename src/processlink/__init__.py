"""processlink: single-file upload client for the Process Link Files API.

Public re-exports
-----------------

* **Client:** :class:`AsyncProcessLinkClient`, host adapter :class:`UploadNode`
* **Configuration:** :class:`ProcessLinkConfig` and secret providers
* **Errors:** Every :class:`ProcessLinkError` subclass and :class:`ErrorCode`
* **Models:** Requests, outcomes, and status types

Usage::

    from processlink import (
        AsyncProcessLinkClient,
        ProcessLinkConfig,
        StaticSecretProvider,
        UploadMessage,
    )

    client = AsyncProcessLinkClient(
        ProcessLinkConfig(site_id="site-123"),
        StaticSecretProvider("pl_live_xxxxxxxx"),
    )
    outcome = await client.process(UploadMessage(payload=b"...", filename="a.bin"))
"""

from __future__ import annotations

# ── Client ─────────────────────────────────────────────────────────────
from processlink.async_client import AsyncProcessLinkClient

# ── Configuration ───────────────────────────────────────────────────────
from processlink.config import (
    DEFAULT_API_URL,
    DEFAULT_FILENAME,
    DEFAULT_TIMEOUT_MS,
    ProcessLinkConfig,
)
from processlink.credentials import (
    EnvSecretProvider,
    SecretProvider,
    StaticSecretProvider,
)

# ── Errors ──────────────────────────────────────────────────────────────
from processlink.errors import (
    ErrorCode,
    ProcessLinkApiError,
    ProcessLinkConfigError,
    ProcessLinkError,
    ProcessLinkPayloadError,
    ProcessLinkTimeoutError,
    ProcessLinkTransportError,
)

# ── Models ──────────────────────────────────────────────────────────────
from processlink.models import (
    MultipartBody,
    RawResponse,
    StatusEvent,
    StatusPhase,
    UploadApiFailure,
    UploadMessage,
    UploadOutcome,
    UploadRequest,
    UploadSuccess,
    UploadTimeout,
    UploadTransportFailure,
)
from processlink.node import UploadNode

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Client
    "AsyncProcessLinkClient",
    "UploadNode",
    # Configuration
    "ProcessLinkConfig",
    "DEFAULT_API_URL",
    "DEFAULT_FILENAME",
    "DEFAULT_TIMEOUT_MS",
    "SecretProvider",
    "StaticSecretProvider",
    "EnvSecretProvider",
    # Errors
    "ProcessLinkError",
    "ErrorCode",
    "ProcessLinkConfigError",
    "ProcessLinkPayloadError",
    "ProcessLinkTransportError",
    "ProcessLinkTimeoutError",
    "ProcessLinkApiError",
    # Models
    "UploadMessage",
    "UploadRequest",
    "MultipartBody",
    "RawResponse",
    "UploadSuccess",
    "UploadApiFailure",
    "UploadTransportFailure",
    "UploadTimeout",
    "UploadOutcome",
    "StatusPhase",
    "StatusEvent",
]
