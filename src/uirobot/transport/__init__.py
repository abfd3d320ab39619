"""Transport layer for uirobot.

Carries command lines to the UIRobot agent and reports connection
changes back to the session.

Public API:
    Transport -- Abstract base class
    TcpLineTransport -- asyncio TCP implementation
"""

from uirobot.transport.base import ConnectionEvent, Transport, TransportError

__all__ = ["ConnectionEvent", "Transport", "TransportError", "TcpLineTransport"]


def __getattr__(name: str) -> type:
    """Lazy import for the concrete TCP transport."""
    if name == "TcpLineTransport":
        from uirobot.transport.tcp import TcpLineTransport
        return TcpLineTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
