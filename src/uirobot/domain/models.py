"""Core domain models for the uirobot session.

These models describe the values flowing through a session: the program
the peer should run, the key chords typed on it, and the mouse buttons
that can be held down.
"""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations and constants
# ---------------------------------------------------------------------------


class MouseButton(int, enum.Enum):
    """Button masks understood by the agent's MousePress command."""

    LEFT = 1024
    RIGHT = 4096


class ButtonAction(int, enum.Enum):
    """Second argument of MousePress."""

    DOWN = 1
    UP = 2


KEY_MODIFIERS: Mapping[str, int] = MappingProxyType({
    "shift": 1,
    "control": 2,
    "alt": 4,
    "altgr": 8,
    "meta": 16,
})

PROGRAM_SEPARATOR = "|"
KEY_SEPARATOR = "+"
DEFAULT_WORKING_DIR = "/"


def quote(value: str) -> str:
    """Wrap a value in literal double quotes, as the agent expects for paths."""
    return f'"{value}"'


# ---------------------------------------------------------------------------
# Program launch models
# ---------------------------------------------------------------------------


class ProgramSpec(BaseModel):
    """A program the peer should run, parsed from ``EXE|DIR|ARG1|ARG2...``."""

    model_config = ConfigDict(frozen=True)

    executable: str = Field(min_length=1, description="Path of the executable on the peer")
    working_dir: str = Field(default=DEFAULT_WORKING_DIR, description="Working directory")
    arguments: tuple[str, ...] = Field(default=(), description="Positional arguments, passed verbatim")

    @classmethod
    def parse(cls, params: str | None) -> ProgramSpec | None:
        """Parse a pipe-separated program string.

        Returns None for an empty or missing string, or when the
        executable segment is empty.
        """
        if not params:
            return None
        segments = params.split(PROGRAM_SEPARATOR)
        executable = segments[0]
        if not executable:
            return None
        working_dir = segments[1] if len(segments) > 1 and segments[1] else DEFAULT_WORKING_DIR
        return cls(
            executable=executable,
            working_dir=working_dir,
            arguments=tuple(segments[2:]),
        )

    def terminate_args(self) -> list[str]:
        """Arguments of the Terminate command for this program."""
        return [quote(self.executable)]

    def launch_args(self) -> list[str]:
        """Arguments of the Launch command for this program."""
        return [quote(self.working_dir), quote(self.executable), *self.arguments]


# ---------------------------------------------------------------------------
# Keyboard models
# ---------------------------------------------------------------------------


class KeyChord(BaseModel):
    """A key with its modifier bitmask, parsed from ``MOD+MOD+KEY``."""

    model_config = ConfigDict(frozen=True)

    key: str
    modifiers: int = Field(default=0, ge=0)

    @classmethod
    def parse(cls, combo: str) -> KeyChord:
        """Parse a key combo. Unknown modifiers contribute nothing."""
        *modifiers, key = combo.split(KEY_SEPARATOR)
        mask = sum(KEY_MODIFIERS.get(mod, 0) for mod in modifiers)
        return cls(key=key, modifiers=mask)
