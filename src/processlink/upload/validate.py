"""Input validation: configuration completeness and payload shape.

Turns an inbound :class:`~processlink.models.UploadMessage` into a
normalised :class:`~processlink.models.UploadRequest`, or raises before any
network activity.  Each failure is published as an error status first.
"""

from __future__ import annotations

import re

from processlink.config import DEFAULT_FILENAME, ProcessLinkConfig
from processlink.credentials import SecretProvider
from processlink.errors import ProcessLinkConfigError, ProcessLinkPayloadError
from processlink.models import UploadMessage, UploadRequest

from .status import StatusReporter

_PATH_SEPARATORS = re.compile(r"[\\/]")

PAYLOAD_ENCODING = "utf-8"


def resolve_filename(message_filename: str | None, config_filename: str | None) -> str:
    """Pick the filename to send and strip any directory components.

    Precedence is message, then config, then ``"file.bin"``; empty values
    fall through.  Only the segment after the last ``/`` or ``\\`` is kept.
    """
    filename = message_filename or config_filename or DEFAULT_FILENAME
    return _PATH_SEPARATORS.split(filename)[-1]


def coerce_payload(payload: object) -> bytes:
    """Materialise *payload* as bytes.

    Raises
    ------
    ProcessLinkPayloadError
        If *payload* is neither bytes-like nor ``str``.
    """
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode(PAYLOAD_ENCODING)
    raise ProcessLinkPayloadError(
        message="msg.payload must be bytes or str",
        context={"payload_type": type(payload).__name__},
    )


def _config_error(reporter: StatusReporter, reason: str, message: str) -> ProcessLinkConfigError:
    reporter.invalid(reason)
    return ProcessLinkConfigError(message=message, context={"reason": reason})


def validate_message(
    config: ProcessLinkConfig | None,
    secrets: SecretProvider | None,
    message: UploadMessage,
    reporter: StatusReporter,
) -> UploadRequest:
    """Validate configuration and payload, returning an upload request.

    Checks run in order: configuration bound, site ID present, API key
    present, payload shape.  The first failing check wins.

    Parameters
    ----------
    config:
        Destination configuration, or ``None`` if the host bound none.
    secrets:
        Provider for the API key.
    message:
        The inbound message.
    reporter:
        Receives an error status for whichever check failed.

    Returns
    -------
    UploadRequest

    Raises
    ------
    ProcessLinkConfigError
        ``reason`` is ``"no config"``, ``"no site ID"`` or ``"no API key"``.
    ProcessLinkPayloadError
        If the payload is neither bytes nor text.
    """
    if config is None:
        raise _config_error(reporter, "no config", "No Process Link configuration selected")

    if not config.site_id:
        raise _config_error(reporter, "no site ID", "Site ID not configured")

    api_key = secrets.get_api_key() if secrets is not None else None
    if not api_key:
        raise _config_error(reporter, "no API key", "API Key not configured")

    try:
        payload = coerce_payload(message.payload)
    except ProcessLinkPayloadError:
        reporter.invalid("invalid payload")
        raise

    return UploadRequest(
        payload=payload,
        filename=resolve_filename(message.filename, config.filename),
        site_id=config.site_id,
        api_key=api_key,
        api_url=config.api_url,
        timeout_ms=config.timeout_ms,
    )
