"""Secret and payload redaction for safe debug output.

:func:`redact` must be applied before any request or response is written to
logs or debug dumps:

* values under **sensitive keys** (``x-api-key``, ``authorization``, ...)
  are replaced with a placeholder showing at most the last four characters;
* **bytes** values (file content, multipart bodies) become
  ``<binary:N_bytes>``;
* the full API key, if supplied, is scrubbed from every string in the tree.
"""

from __future__ import annotations

import copy
from typing import Any

# A key is sensitive if any of these substrings appears in it
# (case-insensitive).
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "api-key",
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "password",
    "secret",
    "token",
})


def _mask(value: str, secret: str | None) -> str:
    if secret and len(secret) >= 8 and value == secret:
        return f"<redacted:...{secret[-4:]}>"
    return "<redacted>"


def _scrub(value: str, secret: str | None) -> str:
    if secret and secret in value:
        value = value.replace(secret, "<redacted>")
    return value


def _redact_value(value: Any, secret: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secret) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        return _scrub(value, secret)
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask(value, secret) if isinstance(value, str) else "<redacted>"
        else:
            result[key] = _redact_value(value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a copy of *payload* with secrets and binary content removed.

    Parameters
    ----------
    payload:
        The dictionary to sanitise, typically a request dump with headers
        and body.
    secret:
        The API key.  If supplied, every occurrence of it is replaced.

    Returns
    -------
    dict
        A new dictionary; *payload* is never mutated.

    Examples
    --------
    >>> redact({"x-api-key": "k", "body": b"abc"})
    {'x-api-key': '<redacted>', 'body': '<binary:3_bytes>'}
    """
    return _redact_dict(copy.deepcopy(payload), secret)
