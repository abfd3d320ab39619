"""Shared test fixtures for the uirobot test suite.

Provides an in-memory transport that records every line written to it,
a manually advanced event loop stand-in for timer tests, and a session
wired to both.
"""

from __future__ import annotations

import pytest

from uirobot.session.driver import RemoteCommandSession
from uirobot.session.properties import PropertyChange
from uirobot.session.timer import CancelableTimer

from tests.fakes import FakeLoop, RecordingTransport


# ---------------------------------------------------------------------------
# Session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(connected=True)


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def session(transport: RecordingTransport, fake_loop: FakeLoop) -> RemoteCommandSession:
    """A session on a connected transport with a hand-driven release timer."""
    return RemoteCommandSession(
        transport,
        key_release_delay=0.2,
        key_release_timer=CancelableTimer(loop=fake_loop),  # type: ignore[arg-type]
    )


@pytest.fixture
def changes(session: RemoteCommandSession) -> list[PropertyChange]:
    """Change notifications raised by the session after the fixture is created."""
    received: list[PropertyChange] = []
    session.properties.subscribe(received.append)
    return received
