"""Remote command session for a UIRobot agent.

The session is the live state bound to one transport. Property writes
are diffed against that state and turned into command lines:

    power       -- False launches the shutdown program, True sends Wake-on-LAN
    left_down   -- MousePress 1024 1|2, only on change
    right_down  -- MousePress 4096 1|2, only on change
    program     -- Terminate the running program, then Launch the new one
    key_down    -- KeyPress with modifier bitmask, auto-released after a delay

``power`` is never stored. It is derived from the transport's connection
state and the program last launched, and a change notification is raised
whenever either input changes.
"""

from __future__ import annotations

import logging
from typing import Awaitable

from uirobot.config.settings import DEFAULT_POWER_DOWN_PROGRAM
from uirobot.domain.models import ButtonAction, KeyChord, MouseButton, ProgramSpec
from uirobot.session.commands import (
    KEY_PRESS,
    LAUNCH,
    MOUSE_MOVE,
    MOUSE_PRESS,
    TERMINATE,
    CommandEncoder,
)
from uirobot.session.properties import PropertyRegistry
from uirobot.session.timer import CancelableTimer
from uirobot.transport.base import ConnectionEvent, Transport

logger = logging.getLogger(__name__)

DEFAULT_KEY_RELEASE_DELAY = 0.2


class RemoteCommandSession:
    """Stateful adapter between host properties and a UIRobot agent.

    All methods are meant to run on the event loop thread. Setters send
    their commands synchronously and do not wait for the writes to
    complete.

    Usage::

        transport = TcpLineTransport("10.0.0.5")
        session = RemoteCommandSession(transport)
        transport.auto_connect()

        session.program = "C:/Program Files/App/app.exe|C:/Data|--kiosk"
        session.key_down = "control+s"
        session.power = False
    """

    def __init__(
        self,
        transport: Transport,
        power_down_program: str = DEFAULT_POWER_DOWN_PROGRAM,
        key_release_delay: float = DEFAULT_KEY_RELEASE_DELAY,
        key_release_timer: CancelableTimer | None = None,
    ) -> None:
        self._transport = transport
        self._encoder = CommandEncoder(transport)
        self._power_down_program = power_down_program
        self._key_release_delay = key_release_delay
        self._key_release_timer = key_release_timer or CancelableTimer()

        self._left_down = False
        self._right_down = False
        # Pipe-separated program string last launched, '' when idle
        self._program = ""
        self._key_down = ""

        self.properties = self._build_registry()

        self._unsubscribe = transport.subscribe(self._on_connection_event)
        # Transport may already be up when the session is created
        if transport.connected:
            self._on_connect_state_changed(True)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def power_down_program(self) -> str:
        return self._power_down_program

    @property
    def key_release_pending(self) -> bool:
        return self._key_release_timer.active

    def close(self) -> None:
        """Detach from the transport and drop any pending key release."""
        self._key_release_timer.cancel()
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Connection tracking
    # ------------------------------------------------------------------

    def _on_connection_event(self, transport: Transport, event: ConnectionEvent) -> None:
        self._on_connect_state_changed(event.connected)

    def _on_connect_state_changed(self, connected: bool) -> None:
        if not connected and self._program:
            # Whatever ran on the peer is unknown now
            self._program = ""
            self.properties.changed("program")
        self.properties.changed("power")

    # ------------------------------------------------------------------
    # Power
    # ------------------------------------------------------------------

    @property
    def power(self) -> bool:
        """On while connected, unless the shutdown program was the last launch.

        Turning power on is not reflected here until the peer has woken up
        and connected.
        """
        return self._transport.connected and self._program != self._power_down_program

    @power.setter
    def power(self, value: bool) -> None:
        if value:
            if not self._transport.connected:
                logger.info("Waking peer")
                self._transport.wake()
        else:
            logger.info("Shutting down peer")
            self.program = self._power_down_program

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------

    @property
    def left_down(self) -> bool:
        return self._left_down

    @left_down.setter
    def left_down(self, value: bool) -> None:
        if self._left_down != value:
            self._left_down = value
            self._send_mouse_button(MouseButton.LEFT, value)
            self.properties.changed("left_down")

    @property
    def right_down(self) -> bool:
        return self._right_down

    @right_down.setter
    def right_down(self, value: bool) -> None:
        if self._right_down != value:
            self._right_down = value
            self._send_mouse_button(MouseButton.RIGHT, value)
            self.properties.changed("right_down")

    def move_mouse(self, x: int, y: int) -> Awaitable[None]:
        """Move the mouse pointer by the given distance."""
        return self._encoder.send(MOUSE_MOVE, x, y)

    def _send_mouse_button(self, button: MouseButton, down: bool) -> Awaitable[None]:
        action = ButtonAction.DOWN if down else ButtonAction.UP
        return self._encoder.send(MOUSE_PRESS, button.value, action.value)

    # ------------------------------------------------------------------
    # Program launching
    # ------------------------------------------------------------------

    @property
    def program(self) -> str:
        """The program string as last written, or '' when nothing runs."""
        return self._program

    @program.setter
    def program(self, params: str) -> None:
        was_power = self.power
        previous = self._program

        running = ProgramSpec.parse(self._program)
        if running is not None:
            self._encoder.send(TERMINATE, *running.terminate_args())

        new_program = ProgramSpec.parse(params)
        if new_program is not None:
            self._program = params
            self._encoder.send(LAUNCH, *new_program.launch_args())
        else:
            self._program = ""

        if self._program != previous:
            self.properties.changed("program")
        if self.power != was_power:
            self.properties.changed("power")

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    @property
    def key_down(self) -> str:
        """The key combo pressed within the last release delay, else ''."""
        return self._key_down

    @key_down.setter
    def key_down(self, keys: str) -> None:
        previous = self._key_down
        self._key_down = keys

        if keys:
            chord = KeyChord.parse(keys)
            self._encoder.send(KEY_PRESS, chord.key, chord.modifiers)
            # Restarting cancels the release pending for an earlier combo
            self._key_release_timer.start(self._key_release_delay, self._release_keys)

        if keys != previous:
            self.properties.changed("key_down")

    def _release_keys(self) -> None:
        self.key_down = ""

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _build_registry(self) -> PropertyRegistry:
        registry = PropertyRegistry()
        registry.add_property(
            "power", bool,
            getter=lambda: self.power,
            setter=lambda value: setattr(self, "power", value),
            description="Power computer on/off",
        )
        registry.add_property(
            "left_down", bool,
            getter=lambda: self.left_down,
            setter=lambda value: setattr(self, "left_down", value),
            description="Left mouse button down",
        )
        registry.add_property(
            "right_down", bool,
            getter=lambda: self.right_down,
            setter=lambda value: setattr(self, "right_down", value),
            description="Right mouse button down",
        )
        registry.add_property(
            "program", str,
            getter=lambda: self.program,
            setter=lambda value: setattr(self, "program", value),
            description=(
                "The program to start, will end any previously running program. "
                "Format is EXE_PATH|WORKING_DIR|...ARGS"
            ),
        )
        registry.add_property(
            "key_down", str,
            getter=lambda: self.key_down,
            setter=lambda value: setattr(self, "key_down", value),
            description="Send key strokes, modifiers before key",
        )
        registry.add_callable(
            "move_mouse", self.move_mouse,
            parameters=(("x", int), ("y", int)),
            description="Move mouse by specified distance",
        )
        return registry
