"""TCP line transport for the UIRobot agent.

Opens an asyncio stream to the agent (port 3047 by default), writes one
command per line and reads whatever the agent sends back. With
``auto_connect()`` a background task keeps the connection alive,
reconnecting whenever it drops.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from uirobot.transport.base import Transport, TransportError
from uirobot.transport.wol import send_magic_packet

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3047
DEFAULT_RECONNECT_INTERVAL = 2.0
# asyncio's own default stream limit
DEFAULT_LINE_LIMIT = 2**16

LineListener = Callable[[str], None]


class TcpLineTransport(Transport):
    """Line-oriented TCP connection with reconnect and Wake-on-LAN support.

    Usage::

        transport = TcpLineTransport("10.0.0.5")
        transport.enable_wake_on_lan("AA:BB:CC:DD:EE:FF")
        transport.auto_connect()
        ...
        await transport.disconnect()
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        max_line_length: int | None = None,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL,
        newline: str = "\r\n",
        encoding: str = "utf-8",
    ) -> None:
        super().__init__()
        self._host = host
        self._port = port
        self._line_limit = max_line_length or DEFAULT_LINE_LIMIT
        self._reconnect_interval = reconnect_interval
        self._newline = newline
        self._encoding = encoding
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._connected = False
        self._read_task: asyncio.Task | None = None
        self._auto_task: asyncio.Task | None = None
        self._line_listeners: list[LineListener] = []
        self._mac_address: str | None = None
        self._broadcast_address = "255.255.255.255"

    @property
    def peer(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def connected(self) -> bool:
        return self._connected

    def set_max_line_length(self, length: int) -> None:
        """Limit the length of incoming lines. Applies from the next connect."""
        if length <= 0:
            raise ValueError("max line length must be positive")
        self._line_limit = length

    def enable_wake_on_lan(self, mac_address: str, broadcast_address: str = "255.255.255.255") -> None:
        """Remember the peer's MAC address so wake() can send magic packets."""
        self._mac_address = mac_address
        self._broadcast_address = broadcast_address

    def add_line_listener(self, listener: LineListener) -> None:
        self._line_listeners.append(listener)

    async def connect(self) -> None:
        """Open the TCP connection and start reading lines."""
        if self._connected:
            return
        try:
            self._reader, self._writer = await asyncio.open_connection(
                self._host, self._port, limit=self._line_limit,
            )
        except OSError as e:
            raise TransportError(f"Cannot connect to {self.peer}: {e}", peer=self.peer) from e
        self._connected = True
        self._read_task = asyncio.create_task(self._read_loop(self._reader))
        logger.info("Connected to UIRobot at %s", self.peer)
        self._emit_connection(True)

    async def disconnect(self) -> None:
        """Stop reconnecting and close the connection."""
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None
        if self._read_task is not None:
            self._read_task.cancel()
            self._read_task = None
        await self._close_writer()

    def auto_connect(self) -> None:
        """Keep the connection up in the background until disconnect()."""
        if self._auto_task is None or self._auto_task.done():
            self._auto_task = asyncio.create_task(self._auto_connect_loop())

    def send_text(self, text: str) -> Awaitable[None]:
        """Write one line. The returned awaitable fails with TransportError."""
        loop = asyncio.get_running_loop()
        if not self._connected or self._writer is None:
            future: asyncio.Future[None] = loop.create_future()
            future.set_exception(TransportError(f"Not connected to {self.peer}", peer=self.peer))
            future.add_done_callback(self._log_write_failure)
            return future
        self._writer.write((text + self._newline).encode(self._encoding))
        logger.debug("Sent line to %s: %s", self.peer, text)
        task = loop.create_task(self._drain(self._writer))
        task.add_done_callback(self._log_write_failure)
        return task

    def wake(self) -> None:
        """Send a Wake-on-LAN packet to the peer."""
        if not self._mac_address:
            logger.warning("Wake requested for %s but Wake-on-LAN is not enabled", self.peer)
            return
        send_magic_packet(self._mac_address, self._broadcast_address)

    async def _drain(self, writer: asyncio.StreamWriter) -> None:
        try:
            await writer.drain()
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Write to {self.peer} failed: {e}", peer=self.peer) from e

    def _log_write_failure(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("Command write failed: %s", exc)

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        """Deliver incoming lines until the peer goes away."""
        try:
            while True:
                try:
                    raw = await reader.readuntil(b"\n")
                except asyncio.IncompleteReadError as e:
                    # Peer closed; a trailing unterminated line still counts
                    if e.partial:
                        self._deliver(e.partial)
                    break
                except asyncio.LimitOverrunError:
                    logger.warning("Dropping over-long line from %s", self.peer)
                    if not await self._discard_line(reader):
                        break
                    continue
                self._deliver(raw)
        except (ConnectionError, OSError) as e:
            logger.warning("Connection to %s lost: %s", self.peer, e)
        finally:
            self._read_task = None
        await self._close_writer()

    async def _discard_line(self, reader: asyncio.StreamReader) -> bool:
        """Skip input up to and including the next newline.

        Returns False if the peer closed before the newline arrived.
        """
        try:
            while True:
                try:
                    await reader.readuntil(b"\n")
                    return True
                except asyncio.LimitOverrunError as e:
                    overflow = e.consumed
                await reader.readexactly(overflow)
        except asyncio.IncompleteReadError:
            return False

    def _deliver(self, raw: bytes) -> None:
        line = raw.decode(self._encoding, errors="replace").rstrip("\r\n")
        logger.debug("Received line from %s: %s", self.peer, line)
        for listener in list(self._line_listeners):
            listener(line)

    async def _close_writer(self) -> None:
        writer = self._writer
        was_connected = self._connected
        self._reader = None
        self._writer = None
        self._connected = False
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass
        if was_connected:
            logger.info("Disconnected from UIRobot at %s", self.peer)
            self._emit_connection(False)

    async def _auto_connect_loop(self) -> None:
        while True:
            if not self._connected:
                try:
                    await self.connect()
                except TransportError as e:
                    logger.warning("%s; retrying in %.1fs", e, self._reconnect_interval)
            await asyncio.sleep(self._reconnect_interval)
