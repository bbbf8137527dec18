"""Upload pipeline stages: validation, encoding, interpretation, status.

Exports
-------
validate_message
    Check configuration and payload, producing an :class:`UploadRequest`.
encode_multipart / generate_boundary
    Build the single-part ``multipart/form-data`` body.
interpret_response
    Classify a raw response as success or API failure.
StatusReporter
    Publish phase changes and reset them after a delay.
"""

from .multipart import encode_multipart, generate_boundary
from .response import interpret_response, parse_body
from .status import Scheduler, StatusObserver, StatusReporter
from .validate import coerce_payload, resolve_filename, validate_message

__all__ = [
    "Scheduler",
    "StatusObserver",
    "StatusReporter",
    "coerce_payload",
    "encode_multipart",
    "generate_boundary",
    "interpret_response",
    "parse_body",
    "resolve_filename",
    "validate_message",
]
