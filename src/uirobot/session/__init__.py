"""Remote command session for uirobot.

Public API:
    RemoteCommandSession -- Property-driven adapter over a Transport
    PropertyRegistry -- Name-indexed properties with change notification
    CancelableTimer -- One-shot timer used for key auto-release
"""

from uirobot.session.driver import RemoteCommandSession
from uirobot.session.properties import PropertyChange, PropertyRegistry
from uirobot.session.timer import CancelableTimer

__all__ = [
    "CancelableTimer",
    "PropertyChange",
    "PropertyRegistry",
    "RemoteCommandSession",
]
