"""Single-part ``multipart/form-data`` encoder.

The body always holds exactly one part named ``file``::

    --<boundary>\\r\\n
    Content-Disposition: form-data; name="file"; filename="<name>"\\r\\n
    Content-Type: application/octet-stream\\r\\n
    \\r\\n
    <payload bytes>\\r\\n
    --<boundary>--\\r\\n

Known limitations, kept for wire compatibility with existing uploaders:
quote characters in the filename are not escaped, and the boundary is not
checked against the payload.  Uniqueness of the boundary relies on the
timestamp plus random suffix.
"""

from __future__ import annotations

import secrets
import string
import time

from processlink.models import MultipartBody, UploadRequest

BOUNDARY_PREFIX = "----ProcessLinkUpload"

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 12


def generate_boundary() -> str:
    """Return a fresh boundary: prefix + epoch milliseconds + random suffix."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{BOUNDARY_PREFIX}{int(time.time() * 1000)}{suffix}"


def encode_multipart(request: UploadRequest, boundary: str | None = None) -> MultipartBody:
    """Serialise *request* into a multipart body.

    Parameters
    ----------
    request:
        A validated upload request; its ``filename`` is already a basename.
    boundary:
        Boundary to use.  A new one is generated when omitted.
    """
    boundary = boundary or generate_boundary()
    header = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{request.filename}"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    ).encode("utf-8")
    footer = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return MultipartBody(boundary=boundary, content=header + request.payload + footer)
