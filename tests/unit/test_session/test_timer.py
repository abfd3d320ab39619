"""Tests for CancelableTimer."""

from __future__ import annotations

import asyncio

import pytest

from uirobot.session.timer import CancelableTimer

from tests.fakes import FakeLoop


@pytest.fixture
def timer(fake_loop: FakeLoop) -> CancelableTimer:
    return CancelableTimer(loop=fake_loop)  # type: ignore[arg-type]


class TestCancelableTimer:
    def test_fires_once_after_delay(self, timer: CancelableTimer, fake_loop: FakeLoop) -> None:
        fired: list[float] = []
        timer.start(0.2, lambda: fired.append(fake_loop.now))

        fake_loop.advance(0.1)
        assert fired == []
        assert timer.active

        fake_loop.advance(0.1)
        assert len(fired) == 1
        assert not timer.active

        fake_loop.advance(1.0)
        assert len(fired) == 1

    def test_cancel_prevents_callback(self, timer: CancelableTimer, fake_loop: FakeLoop) -> None:
        fired: list[bool] = []
        timer.start(0.2, lambda: fired.append(True))
        timer.cancel()
        fake_loop.advance(1.0)
        assert fired == []
        assert not timer.active

    def test_cancel_when_idle_is_safe(self, timer: CancelableTimer) -> None:
        timer.cancel()
        timer.cancel()
        assert not timer.active

    def test_restart_replaces_pending_callback(self, timer: CancelableTimer, fake_loop: FakeLoop) -> None:
        fired: list[str] = []
        timer.start(0.2, lambda: fired.append("first"))
        fake_loop.advance(0.1)
        timer.start(0.2, lambda: fired.append("second"))

        assert len(fake_loop.pending) == 1

        fake_loop.advance(0.15)
        assert fired == []
        fake_loop.advance(0.1)
        assert fired == ["second"]

    def test_callback_may_restart_timer(self, timer: CancelableTimer, fake_loop: FakeLoop) -> None:
        fired: list[int] = []

        def tick() -> None:
            fired.append(len(fired))
            if len(fired) < 3:
                timer.start(0.05, tick)

        timer.start(0.05, tick)
        for _ in range(5):
            fake_loop.advance(0.1)
        assert fired == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_uses_running_loop_by_default(self) -> None:
        done = asyncio.Event()
        timer = CancelableTimer()
        timer.start(0.01, done.set)
        await asyncio.wait_for(done.wait(), timeout=1.0)
        assert not timer.active
