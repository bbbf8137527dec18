"""Interpretation of Process Link upload responses."""

from __future__ import annotations

import json
from typing import Any

from processlink.models import RawResponse, UploadApiFailure, UploadSuccess

SUCCESS_STATUS = 201


def parse_body(content: bytes) -> Any:
    """Decode and parse a response body.

    Unparsable bodies are wrapped as ``{"raw": <text>}`` instead of raising.
    """
    text = content.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def _field(body: Any, name: str) -> Any:
    return body.get(name) if isinstance(body, dict) else None


def interpret_response(raw: RawResponse) -> UploadSuccess | UploadApiFailure:
    """Classify *raw* as a successful upload or an API failure.

    Success requires HTTP 201 **and** a truthy ``ok`` field.  Anything else
    is a failure whose message is the body's ``error``, else its
    ``message``, else ``"HTTP <status>"``.  Status code, headers and body
    are attached in both cases.
    """
    body = parse_body(raw.content)

    if raw.status_code == SUCCESS_STATUS and _field(body, "ok"):
        return UploadSuccess(
            file_id=_field(body, "file_id"),
            status_code=raw.status_code,
            headers=raw.headers,
            body=body,
        )

    message = _field(body, "error") or _field(body, "message") or f"HTTP {raw.status_code}"
    return UploadApiFailure(
        status_code=raw.status_code,
        message=message if isinstance(message, str) else json.dumps(message, default=str),
        headers=raw.headers,
        body=body,
    )
