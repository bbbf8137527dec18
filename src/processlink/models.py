"""Public data models for the processlink client.

Requests, wire-level bodies, upload outcomes, and status events.  All types
are plain dataclasses with no behaviour beyond what callers need to branch
on an outcome or forward it to downstream consumers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from processlink.credentials import mask_secret
from processlink.errors import (
    ProcessLinkApiError,
    ProcessLinkError,
    ProcessLinkTimeoutError,
    ProcessLinkTransportError,
)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class StatusPhase(str, Enum):
    """Named stages of the upload state machine."""

    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self in (StatusPhase.SUCCESS, StatusPhase.ERROR, StatusPhase.TIMEOUT)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusEvent:
    """An ephemeral, observable status.

    Attributes
    ----------
    phase:
        Current pipeline phase.
    label:
        Short human-readable text (e.g. ``"uploading..."``).
    fill:
        Display colour hint: ``"red"``, ``"yellow"``, ``"green"`` or
        ``None`` when idle.
    shape:
        Display shape hint: ``"dot"``, ``"ring"`` or ``None`` when idle.
    """

    phase: StatusPhase
    label: str = ""
    fill: str | None = None
    shape: str | None = None


IDLE_STATUS = StatusEvent(StatusPhase.IDLE)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass
class UploadMessage:
    """An inbound message as delivered by the host.

    Attributes
    ----------
    payload:
        File content.  Must be bytes-like or ``str``; anything else is
        rejected by validation.
    filename:
        Optional per-call filename override.
    """

    payload: Any
    filename: str | None = None


@dataclass
class UploadRequest:
    """A validated, normalised upload owned by a single invocation."""

    payload: bytes
    filename: str
    site_id: str
    api_key: str = field(repr=False)
    api_url: str
    timeout_ms: int

    def __repr__(self) -> str:
        return (
            f"UploadRequest(filename={self.filename!r}, size={len(self.payload)}, "
            f"site_id={self.site_id!r}, api_key={mask_secret(self.api_key)!r}, "
            f"api_url={self.api_url!r}, timeout_ms={self.timeout_ms})"
        )


@dataclass(frozen=True)
class MultipartBody:
    """A serialised ``multipart/form-data`` body with a single file part."""

    boundary: str
    content: bytes

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def content_length(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class RawResponse:
    """The unparsed HTTP response returned by the transport."""

    status_code: int
    headers: dict[str, str]
    content: bytes


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass
class UploadSuccess:
    """The API accepted the file (HTTP 201 with ``ok: true``)."""

    file_id: Any
    status_code: int
    headers: dict[str, str]
    body: Any

    ok = True

    @property
    def error(self) -> ProcessLinkError | None:
        return None

    def to_message(self) -> dict[str, Any]:
        """Return the result fields forwarded to downstream consumers."""
        return {
            "payload": self.body,
            "status_code": self.status_code,
            "headers": self.headers,
            "file_id": self.file_id,
        }


@dataclass
class UploadApiFailure:
    """The API answered, but not with a successful upload."""

    status_code: int
    message: str
    headers: dict[str, str]
    body: Any

    ok = False

    @property
    def error(self) -> ProcessLinkError:
        return ProcessLinkApiError(
            message=self.message,
            context={"status_code": self.status_code, "body": self.body},
        )

    def to_message(self) -> dict[str, Any]:
        return {
            "payload": self.body,
            "status_code": self.status_code,
            "headers": self.headers,
        }


@dataclass
class UploadTransportFailure:
    """The request never produced a response (DNS, connection reset, ...)."""

    message: str
    cause: Exception | None = field(default=None, repr=False, compare=False)

    ok = False

    @property
    def error(self) -> ProcessLinkError:
        return ProcessLinkTransportError(message=self.message, cause=self.cause)

    def to_message(self) -> dict[str, Any]:
        return {"payload": {"error": self.message}, "status_code": 0}


@dataclass
class UploadTimeout:
    """The deadline expired and the in-flight request was cancelled."""

    timeout_ms: int
    message: str = "Request timed out"

    ok = False

    @property
    def error(self) -> ProcessLinkError:
        return ProcessLinkTimeoutError(
            message=self.message,
            context={"timeout_ms": self.timeout_ms},
        )

    def to_message(self) -> dict[str, Any]:
        return {"payload": {"error": self.message}, "status_code": 0}


UploadOutcome = Union[UploadSuccess, UploadApiFailure, UploadTransportFailure, UploadTimeout]
"""Exactly one of these is produced per upload invocation."""
