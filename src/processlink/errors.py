"""Error hierarchy for the processlink upload client.

Every public error class inherits from :class:`ProcessLinkError`.  Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

None of these errors is ever retried by the client: every failure is
terminal for the invocation that produced it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the client can raise."""

    CONFIG_ERROR = "CONFIG_ERROR"
    PAYLOAD_ERROR = "PAYLOAD_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMEOUT = "TIMEOUT"
    API_ERROR = "API_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ProcessLinkError(Exception):
    """Base exception for all processlink errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class ProcessLinkConfigError(ProcessLinkError):
    """Static configuration is missing or incomplete.

    Context keys: ``reason`` (the short status label, e.g. ``"no site ID"``).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            context=context,
            cause=cause,
        )

    @property
    def reason(self) -> str:
        return str(self.context.get("reason", ""))


class ProcessLinkPayloadError(ProcessLinkError):
    """The inbound payload is neither bytes nor text.

    Context keys: ``payload_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PAYLOAD_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Transport / API errors
# ---------------------------------------------------------------------------

class ProcessLinkTransportError(ProcessLinkError):
    """A network-level failure occurred (DNS, connection reset, bad URL).

    Context keys: ``url``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TRANSPORT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ProcessLinkTimeoutError(ProcessLinkError):
    """The request did not complete before the configured deadline and was
    cancelled.

    Context keys: ``url``, ``timeout_ms``.
    """

    def __init__(
        self,
        message: str = "Request timed out",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TIMEOUT,
            message=message,
            context=context,
            cause=cause,
        )


class ProcessLinkApiError(ProcessLinkError):
    """The Process Link API rejected the upload or reported ``ok: false``.

    Context keys: ``status_code``, ``body``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.API_ERROR,
            message=message,
            context=context,
            cause=cause,
        )

    @property
    def status_code(self) -> int | None:
        return self.context.get("status_code")
