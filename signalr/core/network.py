from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum
from typing import Any, Optional

from signalr.protocol import framing, validator
from signalr.protocol.constants import DEFAULT_READ_TIMEOUT
from signalr.protocol.errors import HandshakeError, ProtocolError, ServerCloseError
from signalr.protocol.message_types import MessageType, is_supported
from signalr.protocol.messages import HandshakeRequest, HandshakeResponse, InvocationMessage

from .context import Context
from .dispatch import dispatch
from .handler import notify_start
from .session import HubSession
from .transport import WebSocketChannel

logger = logging.getLogger(__name__)


class ConnectionState(StrEnum):
    IDLE = "idle"
    NEGOTIATED = "negotiated"
    TOKEN_ISSUED = "token_issued"
    CHANNEL_OPEN = "channel_open"
    HANDSHAKEN = "handshaken"
    LISTENING = "listening"
    CLOSED = "closed"
    FAILED = "failed"


class _ContextCancelled(Exception):
    """The listen context was cancelled while a read was pending."""


class HubConnection:
    """One listen attempt: negotiate, authenticate, open the websocket, handshake, receive loop."""

    def __init__(self, session: HubSession, read_timeout: float = DEFAULT_READ_TIMEOUT) -> None:
        self.session = session
        self.read_timeout = read_timeout
        self.state = ConnectionState.IDLE
        self._channel: Optional[WebSocketChannel] = None

    def _transition(self, state: ConnectionState) -> None:
        logger.debug("Connection for %s: %s -> %s", self.session.name, self.state.value, state.value)
        self.state = state

    async def listen(self, handler: Any, ctx: Optional[Context] = None) -> None:
        """Block until the context is cancelled or the service closes the connection.

        Returns None on a clean shutdown; raises a SignalRError subclass otherwise.
        """
        ctx = ctx or Context()
        try:
            await self._run(handler, ctx)
        except _ContextCancelled:
            self._transition(ConnectionState.CLOSED)
            logger.info("Listening stopped for %s: context cancelled", self.session.name)
        except BaseException:
            self._transition(ConnectionState.FAILED)
            raise
        finally:
            await self._close_channel()

    async def _run(self, handler: Any, ctx: Context) -> None:
        await self.session.negotiate_once()
        self._transition(ConnectionState.NEGOTIATED)

        token = self.session.generate_token(self.session.audience_uri())
        self._transition(ConnectionState.TOKEN_ISSUED)

        self._channel = await WebSocketChannel.open(
            self.session.websocket_uri(),
            headers={"Authorization": f"Bearer {token}"},
            connect_timeout=self.session.http_timeout,
        )
        self._transition(ConnectionState.CHANNEL_OPEN)
        logger.info("Connected to hub %s as %s", self.session.hub, self.session.name)

        await self.handshake(ctx, self._channel)
        self._transition(ConnectionState.HANDSHAKEN)

        if ctx.cancelled():
            raise _ContextCancelled()

        await notify_start(handler)
        self._transition(ConnectionState.LISTENING)
        await self._receive_loop(handler, ctx)

    async def handshake(self, ctx: Context, channel: WebSocketChannel) -> None:
        await channel.send_text(framing.encode_msg(HandshakeRequest().to_wire()))
        raw = framing.decode_msg(await self._read_frame(ctx, channel))
        validator.validate_handshake_response(raw)
        response = HandshakeResponse.from_dict(raw)
        if response.error:
            raise HandshakeError(response.error)
        logger.debug("Handshake complete for %s", self.session.name)

    async def _read_frame(self, ctx: Context, channel: WebSocketChannel) -> str:
        """Next text frame, bounded by the per-read timeout and by the context."""
        if ctx.cancelled():
            raise _ContextCancelled()
        read_task = asyncio.create_task(channel.receive_text(timeout=self.read_timeout))
        cancel_task = asyncio.create_task(ctx.wait())
        try:
            await asyncio.wait({read_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not read_task.done():
                read_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await read_task

        # cancellation wins over a frame that arrived at the same time
        if ctx.cancelled():
            raise _ContextCancelled()
        return read_task.result()

    async def read_message(self, ctx: Context) -> InvocationMessage:
        assert self._channel is not None
        raw = framing.decode_msg(await self._read_frame(ctx, self._channel))
        validator.validate_envelope(raw)
        # an envelope without a kind is treated as kind 0 and skipped
        raw.setdefault("type", 0)
        return InvocationMessage.from_dict(raw)

    async def _receive_loop(self, handler: Any, ctx: Context) -> None:
        while True:
            msg = await self.read_message(ctx)
            kind = msg.message_type
            logger.debug("Received message type=%s target=%s", msg.type, msg.target)

            if kind is None:
                logger.debug("Skipping unknown message type %s", msg.type)
                continue
            if not is_supported(kind):
                raise ProtocolError(f"unhandled InvocationMessage type: {msg.type}", message_type=msg.type)
            if kind is MessageType.PING:
                continue
            if kind is MessageType.INVOCATION:
                await dispatch(ctx, handler, msg)
                continue
            if kind is MessageType.CLOSE:
                self._transition(ConnectionState.CLOSED)
                if msg.error:
                    raise ServerCloseError(msg.error)
                logger.info("Service closed the connection for %s", self.session.name)
                return

    async def _close_channel(self) -> None:
        if self._channel is not None:
            channel, self._channel = self._channel, None
            await channel.close()


__all__ = ["ConnectionState", "HubConnection"]
