"""Host adapter for message-flow runtimes.

:class:`UploadNode` adapts :class:`AsyncProcessLinkClient` to hosts that
deliver dict messages and expect two callbacks: ``send(msg)`` to forward a
result downstream and ``done(err)`` to signal completion.

Failures travel on both channels.  The forwarded message carries the error
detail (``payload``, ``status_code``) so a flow can branch on it, while
``done`` receives the typed error for the host to log.  Validation
failures only signal ``done``: there is no result to forward.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from processlink.async_client import AsyncProcessLinkClient
from processlink.errors import (
    ProcessLinkConfigError,
    ProcessLinkError,
    ProcessLinkPayloadError,
)
from processlink.models import UploadMessage

SendCallback = Callable[[dict[str, Any]], None]
DoneCallback = Callable[[ProcessLinkError | None], None]


class UploadNode:
    """Feeds host messages through an upload client.

    Parameters
    ----------
    client:
        The client performing the upload.
    """

    def __init__(self, client: AsyncProcessLinkClient) -> None:
        self._client = client

    async def handle(
        self,
        msg: dict[str, Any],
        send: SendCallback,
        done: DoneCallback,
    ) -> None:
        """Upload ``msg["payload"]`` and report through *send* / *done*.

        ``msg`` is updated in place with the outcome fields before it is
        forwarded; other keys pass through untouched.
        """
        message = UploadMessage(payload=msg.get("payload"), filename=msg.get("filename"))
        try:
            outcome = await self._client.process(message)
        except (ProcessLinkConfigError, ProcessLinkPayloadError) as exc:
            done(exc)
            return

        msg.update(outcome.to_message())
        send(msg)
        done(outcome.error)

    async def close(self) -> None:
        await self._client.close()
