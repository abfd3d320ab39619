"""Domain models for uirobot.

Value objects parsed from property writes: program specs, key chords
and mouse buttons.
"""

from uirobot.domain.models import (
    KEY_MODIFIERS,
    ButtonAction,
    KeyChord,
    MouseButton,
    ProgramSpec,
)

__all__ = [
    "KEY_MODIFIERS",
    "ButtonAction",
    "KeyChord",
    "MouseButton",
    "ProgramSpec",
]
