"""Command encoding for the UIRobot line protocol.

Every command is a single line: the command name followed by its
arguments, separated by single spaces::

    MouseMove 10 -5
    MousePress 1024 1
    KeyPress a 3
    Terminate "C:/Windows/notepad.exe"
    Launch "C:/Users/kiosk" "C:/Windows/notepad.exe" readme.txt
"""

from __future__ import annotations

import logging
from typing import Awaitable

from uirobot.transport.base import Transport

logger = logging.getLogger(__name__)

MOUSE_MOVE = "MouseMove"
MOUSE_PRESS = "MousePress"
KEY_PRESS = "KeyPress"
TERMINATE = "Terminate"
LAUNCH = "Launch"


def format_command(command: str, *args: object) -> str:
    """Join a command and its arguments into one protocol line."""
    return " ".join([command, *(str(arg) for arg in args)])


class CommandEncoder:
    """Writes encoded commands to a transport, one line per call."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def send(self, command: str, *args: object) -> Awaitable[None]:
        """Encode and write a command.

        Returns the transport's write result; failures surface there.
        """
        line = format_command(command, *args)
        logger.debug("Command: %s", line)
        return self._transport.send_text(line)
