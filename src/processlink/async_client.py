"""Asynchronous Process Link upload client.

:class:`AsyncProcessLinkClient` runs the whole pipeline for one file::

    validate -> encode multipart -> send -> interpret

publishing a status at every phase change.  Each call makes exactly one
attempt and produces exactly one outcome.

Usage::

    import asyncio
    from processlink import AsyncProcessLinkClient, ProcessLinkConfig
    from processlink.credentials import EnvSecretProvider
    from processlink.models import UploadMessage

    async def main():
        config = ProcessLinkConfig(site_id="site-123")
        async with AsyncProcessLinkClient(config, EnvSecretProvider()) as client:
            outcome = await client.process(
                UploadMessage(payload=b"a,b\\n1,2\\n", filename="data.csv")
            )
            if outcome.ok:
                print(outcome.file_id)
            else:
                print(outcome.error)

    asyncio.run(main())
"""

from __future__ import annotations

from typing import Any

from processlink.config import ProcessLinkConfig
from processlink.credentials import SecretProvider
from processlink.errors import (
    ProcessLinkConfigError,
    ProcessLinkPayloadError,
    ProcessLinkTimeoutError,
    ProcessLinkTransportError,
)
from processlink.models import (
    UploadApiFailure,
    UploadMessage,
    UploadOutcome,
    UploadRequest,
    UploadSuccess,
    UploadTimeout,
    UploadTransportFailure,
)
from processlink.observability import NoopMetricsHook, get_logger
from processlink.transport import AsyncUploadTransport, build_upload_headers
from processlink.upload import (
    Scheduler,
    StatusObserver,
    StatusReporter,
    encode_multipart,
    interpret_response,
    validate_message,
)

log = get_logger("processlink.client")


class AsyncProcessLinkClient:
    """Asynchronous single-file upload client.

    Parameters
    ----------
    config:
        Destination configuration.  ``None`` is accepted and reported as
        ``"no config"`` on the first upload.
    secrets:
        Provider for the API key.
    on_status:
        Observer notified of every status change.
    scheduler:
        Delayed-task scheduler for status resets.  Defaults to the running
        event loop.
    transport:
        Transport to send through.  Built from *config* when omitted.
    """

    def __init__(
        self,
        config: ProcessLinkConfig | None,
        secrets: SecretProvider | None,
        *,
        on_status: StatusObserver | None = None,
        scheduler: Scheduler | None = None,
        transport: AsyncUploadTransport | None = None,
    ) -> None:
        self._config = config
        self._secrets = secrets
        self._metrics = (
            config.metrics if config is not None and config.metrics is not None
            else NoopMetricsHook()
        )
        self._status = StatusReporter(on_status, scheduler)
        self._transport = transport or AsyncUploadTransport(
            proxy=config.http_proxy if config is not None else None,
            metrics=self._metrics,
            debug_dump_payload=config.debug_dump_payload if config is not None else False,
        )

    @property
    def status(self) -> StatusReporter:
        return self._status

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def process(self, message: UploadMessage) -> UploadOutcome:
        """Validate *message* and upload it.

        Returns
        -------
        UploadOutcome
            Success, API failure, transport failure or timeout.

        Raises
        ------
        ProcessLinkConfigError
            If configuration is missing or incomplete.  No request is sent.
        ProcessLinkPayloadError
            If the payload is neither bytes nor text.  No request is sent.
        """
        self._status.validating()
        try:
            request = validate_message(self._config, self._secrets, message, self._status)
        except (ProcessLinkConfigError, ProcessLinkPayloadError) as exc:
            reason = "config_error" if isinstance(exc, ProcessLinkConfigError) else "payload_error"
            self._metrics.increment(
                "processlink.upload_failure_total", tags={"reason": reason},
            )
            log.error(
                "Upload rejected before sending",
                extra={"extra_fields": {"op": "validate", "code": exc.code, "error": exc.message}},
            )
            raise
        return await self.upload(request)

    async def upload(self, request: UploadRequest) -> UploadOutcome:
        """Upload an already validated request.

        Transport and timeout errors are returned as outcomes rather than
        raised, so callers can branch on every failure the same way.
        """
        body = encode_multipart(request)
        headers = build_upload_headers(body, request.site_id, request.api_key)
        self._metrics.gauge("processlink.upload_bytes", float(len(request.payload)))

        self._status.uploading()
        try:
            raw = await self._transport.send(
                request.api_url, headers, body.content, request.timeout_ms,
            )
        except ProcessLinkTimeoutError:
            self._status.timed_out()
            return self._finish(request, UploadTimeout(timeout_ms=request.timeout_ms))
        except ProcessLinkTransportError as exc:
            self._status.request_failed()
            return self._finish(request, UploadTransportFailure(message=exc.message, cause=exc))

        outcome = interpret_response(raw)
        if isinstance(outcome, UploadSuccess):
            self._status.uploaded(outcome.file_id)
        else:
            self._status.api_error(outcome.message)
        return self._finish(request, outcome)

    def _finish(self, request: UploadRequest, outcome: UploadOutcome) -> UploadOutcome:
        fields: dict[str, Any] = {
            "op": "upload",
            "filename": request.filename,
            "size": len(request.payload),
            "outcome": type(outcome).__name__,
        }
        if isinstance(outcome, UploadSuccess):
            self._metrics.increment("processlink.upload_success_total")
            fields.update(status_code=outcome.status_code, file_id=outcome.file_id)
            log.info("Upload complete", extra={"extra_fields": fields})
            return outcome

        reason = {
            UploadApiFailure: "api_error",
            UploadTransportFailure: "transport_error",
            UploadTimeout: "timeout",
        }[type(outcome)]
        self._metrics.increment("processlink.upload_failure_total", tags={"reason": reason})
        if isinstance(outcome, UploadApiFailure):
            fields["status_code"] = outcome.status_code
        fields["error"] = outcome.message
        log.error("Upload failed", extra={"extra_fields": fields})
        return outcome

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Reset the status and close the transport."""
        self._status.close()
        await self._transport.aclose()

    async def __aenter__(self) -> AsyncProcessLinkClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
