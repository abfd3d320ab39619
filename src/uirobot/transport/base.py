"""Abstract base class for the line transport a session talks through.

A session never owns socket details. It holds a Transport, writes text
lines to it, listens for connection changes and asks it to wake the
peer. The TCP implementation lives in ``tcp.py``; tests substitute an
in-memory recorder.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class ConnectionEvent(BaseModel):
    """Emitted whenever the transport connects or disconnects."""

    model_config = ConfigDict(frozen=True)

    connected: bool


ConnectionListener = Callable[["Transport", ConnectionEvent], None]


class Transport(ABC):
    """Abstract line-oriented connection to a remote agent.

    Example usage::

        async with TcpLineTransport("10.0.0.5") as transport:
            await transport.send_text("MouseMove 10 10")
    """

    def __init__(self) -> None:
        self._connection_listeners: list[ConnectionListener] = []

    @property
    def peer(self) -> str:
        """Human-readable address of the remote agent."""
        return ""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the peer is currently connected."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Establish the connection.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection. Safe to call multiple times."""
        ...

    @abstractmethod
    def send_text(self, text: str) -> Awaitable[None]:
        """Write one line to the peer.

        Returns an awaitable that completes once the line is flushed, or
        fails with TransportError. Callers may ignore it.
        """
        ...

    @abstractmethod
    def wake(self) -> None:
        """Ask the peer to power up (e.g. Wake-on-LAN)."""
        ...

    def subscribe(self, listener: ConnectionListener) -> Callable[[], None]:
        """Register a connection listener. Returns a function that removes it."""
        self._connection_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._connection_listeners:
                self._connection_listeners.remove(listener)

        return unsubscribe

    def _emit_connection(self, connected: bool) -> None:
        """Notify listeners of a connection state change."""
        event = ConnectionEvent(connected=connected)
        logger.info("Transport %s", "connected" if connected else "disconnected")
        for listener in list(self._connection_listeners):
            listener(self, event)

    async def __aenter__(self) -> Transport:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class TransportError(Exception):
    """Raised when the transport cannot connect or write."""

    def __init__(self, message: str, peer: str = "") -> None:
        super().__init__(message)
        self.peer = peer
