"""End-to-end tests for AsyncProcessLinkClient over an httpx.MockTransport."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

import processlink.observability.metrics as metrics_module
from processlink.async_client import AsyncProcessLinkClient
from processlink.config import ProcessLinkConfig
from processlink.errors import (
    ProcessLinkApiError,
    ProcessLinkConfigError,
    ProcessLinkPayloadError,
    ProcessLinkTimeoutError,
    ProcessLinkTransportError,
)
from processlink.models import (
    StatusPhase,
    UploadApiFailure,
    UploadMessage,
    UploadRequest,
    UploadSuccess,
    UploadTimeout,
    UploadTransportFailure,
)
from processlink.transport import AsyncUploadTransport


def created(file_id: str = "abc123def456") -> httpx.Response:
    return httpx.Response(201, json={"ok": True, "file_id": file_id})


class TestProcessSuccess:
    @pytest.mark.asyncio
    async def test_success_outcome(self, make_client, events, scheduler):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return created("abc123")

        client = make_client(handler)
        outcome = await client.process(UploadMessage(payload=b"hello", filename="docs/a.txt"))

        assert isinstance(outcome, UploadSuccess)
        assert outcome.file_id == "abc123"
        assert outcome.status_code == 201

        [request] = seen
        assert b'filename="a.txt"' in request.content
        assert b"\r\n\r\nhello\r\n--" in request.content
        assert request.headers["x-site-id"] == "site-42"
        assert request.headers["content-length"] == str(len(request.content))
        boundary = request.headers["content-type"].split("boundary=")[1]
        assert request.content.startswith(f"--{boundary}\r\n".encode())

        assert [e.phase for e in events] == [
            StatusPhase.VALIDATING,
            StatusPhase.UPLOADING,
            StatusPhase.SUCCESS,
        ]
        assert events[-1].label == "uploaded: abc123..."
        assert [h.delay for h in scheduler.handles] == [5.0]
        await client.close()

    @pytest.mark.asyncio
    async def test_string_payload_encoded(self, make_client):
        seen = []

        def handler(request):
            seen.append(request.content)
            return created()

        client = make_client(handler)
        await client.process(UploadMessage(payload="héllo"))
        assert "héllo".encode("utf-8") in seen[0]
        assert b'filename="file.bin"' in seen[0]
        await client.close()

    @pytest.mark.asyncio
    async def test_each_upload_uses_fresh_boundary(self, make_client):
        types = []

        def handler(request):
            types.append(request.headers["content-type"])
            return created()

        client = make_client(handler)
        await client.process(UploadMessage(b"1"))
        await client.process(UploadMessage(b"2"))
        assert types[0] != types[1]
        await client.close()


class TestProcessFailures:
    @pytest.mark.asyncio
    async def test_api_error(self, make_client, events, scheduler):
        client = make_client(lambda r: httpx.Response(400, json={"error": "bad request"}))
        outcome = await client.process(UploadMessage(b"x"))

        assert isinstance(outcome, UploadApiFailure)
        assert outcome.message == "bad request"
        assert isinstance(outcome.error, ProcessLinkApiError)
        assert events[-1].phase is StatusPhase.ERROR
        assert events[-1].label == "bad request"
        assert [h.delay for h in scheduler.handles] == [10.0]
        await client.close()

    @pytest.mark.asyncio
    async def test_unparsable_500(self, make_client):
        client = make_client(lambda r: httpx.Response(500, content=b"oops"))
        outcome = await client.process(UploadMessage(b"x"))
        assert outcome.message == "HTTP 500"
        assert outcome.body == {"raw": "oops"}
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client, events):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        client = make_client(handler)
        outcome = await client.process(UploadMessage(b"x"))

        assert isinstance(outcome, UploadTransportFailure)
        assert outcome.message == "name resolution failed"
        assert isinstance(outcome.error, ProcessLinkTransportError)
        assert outcome.to_message() == {
            "payload": {"error": "name resolution failed"},
            "status_code": 0,
        }
        assert events[-1].label == "request failed"
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout(self, make_client, events, scheduler):
        cancelled = asyncio.Event()

        async def handler(request):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        config = ProcessLinkConfig(site_id="site-42", api_url="https://files.test/up", timeout_ms=50)
        client = make_client(handler, config=config)
        outcome = await client.process(UploadMessage(b"x"))

        assert isinstance(outcome, UploadTimeout)
        assert outcome.timeout_ms == 50
        assert isinstance(outcome.error, ProcessLinkTimeoutError)
        assert outcome.to_message() == {"payload": {"error": "Request timed out"}, "status_code": 0}
        assert cancelled.is_set()
        assert events[-1].phase is StatusPhase.TIMEOUT
        assert [h.delay for h in scheduler.handles] == [10.0]
        await client.close()

    @pytest.mark.asyncio
    async def test_unencodable_header_becomes_transport_failure(self, make_client, events, scheduler):
        handler = MagicMock()
        config = ProcessLinkConfig(site_id="café", api_url="https://files.test/up")
        client = make_client(handler, config=config)
        outcome = await client.process(UploadMessage(payload=b"x"))

        assert isinstance(outcome, UploadTransportFailure)
        assert isinstance(outcome.error, ProcessLinkTransportError)
        assert outcome.to_message()["status_code"] == 0
        handler.assert_not_called()
        assert events[-1].phase is StatusPhase.ERROR
        assert events[-1].label == "request failed"
        assert [h.delay for h in scheduler.handles] == [10.0]
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_site_id_sends_nothing(self, make_client, events):
        handler = MagicMock()
        client = make_client(handler, config=ProcessLinkConfig(site_id=""))

        with pytest.raises(ProcessLinkConfigError) as exc_info:
            await client.process(UploadMessage(b"x"))

        assert exc_info.value.reason == "no site ID"
        handler.assert_not_called()
        assert [e.phase for e in events] == [StatusPhase.VALIDATING, StatusPhase.ERROR]
        await client.close()

    @pytest.mark.asyncio
    async def test_no_config(self, make_client):
        handler = MagicMock()
        client = make_client(handler, config=None)
        with pytest.raises(ProcessLinkConfigError, match="No Process Link configuration"):
            await client.process(UploadMessage(b"x"))
        handler.assert_not_called()
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_payload(self, make_client):
        handler = MagicMock()
        client = make_client(handler)
        with pytest.raises(ProcessLinkPayloadError):
            await client.process(UploadMessage(payload=12345))
        handler.assert_not_called()
        await client.close()


class TestUploadDirect:
    @pytest.mark.asyncio
    async def test_upload_skips_validation_phase(self, make_client, events):
        client = make_client(lambda r: created("zz"))
        request = UploadRequest(
            payload=b"x",
            filename="x.bin",
            site_id="s",
            api_key="k",
            api_url="https://files.test/up",
            timeout_ms=1_000,
        )
        outcome = await client.upload(request)
        assert outcome.file_id == "zz"
        assert [e.phase for e in events] == [StatusPhase.UPLOADING, StatusPhase.SUCCESS]
        await client.close()


class TestMetrics:
    @pytest.mark.asyncio
    async def test_success_and_failure_counters(self, secrets, scheduler):
        metrics = MagicMock()
        responses = iter([created(), httpx.Response(400, json={"error": "nope"})])
        config = ProcessLinkConfig(site_id="s", api_url="https://files.test/up", metrics=metrics)
        transport = AsyncUploadTransport(
            metrics=metrics,
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: next(responses))),
        )
        client = AsyncProcessLinkClient(config, secrets, scheduler=scheduler, transport=transport)

        await client.process(UploadMessage(b"abc"))
        await client.process(UploadMessage(b"abc"))

        names = [c.args[0] for c in metrics.increment.call_args_list]
        assert "processlink.upload_success_total" in names
        metrics.increment.assert_any_call(
            "processlink.upload_failure_total", tags={"reason": "api_error"},
        )
        metrics.gauge.assert_any_call("processlink.upload_bytes", 3.0)
        await client.close()

    @pytest.mark.asyncio
    async def test_emitted_names_are_documented(self, secrets, scheduler):
        metrics = MagicMock()
        responses = iter([created(), httpx.Response(400, json={"error": "nope"})])
        config = ProcessLinkConfig(site_id="s", api_url="https://files.test/up", metrics=metrics)
        transport = AsyncUploadTransport(
            metrics=metrics,
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: next(responses))),
        )
        client = AsyncProcessLinkClient(config, secrets, scheduler=scheduler, transport=transport)
        await client.process(UploadMessage(b"abc"))
        await client.process(UploadMessage(b"abc"))

        calls = (
            metrics.increment.call_args_list
            + metrics.timing.call_args_list
            + metrics.gauge.call_args_list
        )
        names = {c.args[0] for c in calls}
        assert "processlink.request_duration_ms" in names
        for name in names:
            assert f"``{name}``" in metrics_module.__doc__, name
        await client.close()

    @pytest.mark.asyncio
    async def test_validation_failure_counted(self, secrets, scheduler):
        metrics = MagicMock()
        config = ProcessLinkConfig(site_id="", metrics=metrics)
        client = AsyncProcessLinkClient(config, secrets, scheduler=scheduler)
        with pytest.raises(ProcessLinkConfigError):
            await client.process(UploadMessage(b"x"))
        metrics.increment.assert_called_once_with(
            "processlink.upload_failure_total", tags={"reason": "config_error"},
        )
        await client.close()


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_uploads_independent(self, make_client, events):
        async def handler(request):
            if b"SLOW" in request.content:
                await asyncio.sleep(0.05)
                return created("slow0001")
            return created("fast0001")

        client = make_client(handler)
        slow, fast = await asyncio.gather(
            client.process(UploadMessage(b"SLOW")),
            client.process(UploadMessage(b"FAST")),
        )
        assert slow.file_id == "slow0001"
        assert fast.file_id == "fast0001"
        # Last write wins on the shared status slot.
        assert client.status.current.label == "uploaded: slow0001..."
        await client.close()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close_resets_status(self, make_client, scheduler):
        client = make_client(lambda r: created())
        await client.process(UploadMessage(b"x"))
        await client.close()
        assert client.status.current.phase is StatusPhase.IDLE
        assert all(h.cancelled for h in scheduler.handles)

    @pytest.mark.asyncio
    async def test_context_manager(self, make_client):
        async with make_client(lambda r: created()) as client:
            outcome = await client.process(UploadMessage(b"x"))
        assert outcome.ok
