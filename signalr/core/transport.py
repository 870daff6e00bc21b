from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

import aiohttp

from signalr.protocol.constants import ENCODING
from signalr.protocol.errors import TransportError

logger = logging.getLogger(__name__)


def bearer_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


class WebSocketChannel:
    """Duplex text-message channel: open, send text, receive text, close."""

    def __init__(self, session: aiohttp.ClientSession, ws: aiohttp.ClientWebSocketResponse, url: str) -> None:
        self._session = session
        self._ws = ws
        self.url = url

    @classmethod
    async def open(cls, url: str, headers: Dict[str, str], connect_timeout: Optional[float] = None) -> "WebSocketChannel":
        # No total timeout: it would bound the lifetime of the websocket itself.
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None, connect=connect_timeout))
        try:
            ws = await session.ws_connect(url, headers=headers, autoping=True)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            await session.close()
            raise TransportError(f"failed to open websocket to {url}: {exc}") from exc
        logger.debug("Websocket opened to %s", url)
        return cls(session, ws, url)

    async def send_text(self, data: str) -> None:
        try:
            await self._ws.send_str(data)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise TransportError(f"failed to write frame: {exc}") from exc

    async def receive_text(self, timeout: Optional[float] = None) -> str:
        """Wait for the next data frame; control frames are answered by aiohttp."""
        try:
            msg = await self._ws.receive(timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"no frame received within {timeout}s") from exc

        if msg.type == aiohttp.WSMsgType.TEXT:
            return msg.data
        if msg.type == aiohttp.WSMsgType.BINARY:
            try:
                return msg.data.decode(ENCODING)
            except UnicodeDecodeError as exc:
                raise TransportError(f"binary frame is not {ENCODING} text") from exc
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise TransportError(f"websocket error: {self._ws.exception()}")
        raise TransportError(f"websocket closed by peer (code={self._ws.close_code})")

    async def close(self) -> None:
        try:
            await self._ws.close()
        except (aiohttp.ClientError, ConnectionError) as exc:
            logger.debug("Error closing websocket %s: %s", self.url, exc)
        finally:
            await self._session.close()
        logger.debug("Websocket to %s closed", self.url)


async def http_request(
    method: str,
    uri: str,
    token: str,
    body: Optional[bytes] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, str]:
    """Issue one authenticated request; return (status, body text). The body is always read."""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.request(method, uri, data=body, headers=bearer_headers(token)) as resp:
                raw = await resp.read()
                logger.debug("%s %s -> %s", method, uri, resp.status)
                return resp.status, raw.decode(ENCODING, errors="replace")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise TransportError(f"{method} {uri} failed: {exc}") from exc


__all__ = ["WebSocketChannel", "bearer_headers", "http_request"]
