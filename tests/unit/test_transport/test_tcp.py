"""Tests for the TCP line transport against a local server."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator
from unittest.mock import patch

import pytest
import pytest_asyncio

from uirobot.transport.base import ConnectionEvent, Transport, TransportError
from uirobot.transport.tcp import DEFAULT_PORT, TcpLineTransport


class AgentStub:
    """Minimal stand-in for the UIRobot agent: records lines, can hang up."""

    def __init__(self) -> None:
        self.lines: asyncio.Queue[str] = asyncio.Queue()
        self.writers: list[asyncio.StreamWriter] = []
        self.server: asyncio.Server | None = None

    @property
    def port(self) -> int:
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.writers.append(writer)
        while True:
            data = await reader.readline()
            if not data:
                break
            await self.lines.put(data.decode())

    async def hang_up(self) -> None:
        for writer in self.writers:
            writer.close()
        self.writers.clear()

    async def stop(self) -> None:
        await self.hang_up()
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest_asyncio.fixture
async def agent() -> AsyncIterator[AgentStub]:
    stub = AgentStub()
    await stub.start()
    yield stub
    await stub.stop()


def _record_events(transport: Transport) -> list[ConnectionEvent]:
    events: list[ConnectionEvent] = []
    transport.subscribe(lambda sender, event: events.append(event))
    return events


class TestTcpLineTransportInit:
    def test_defaults(self) -> None:
        t = TcpLineTransport("10.0.0.5")
        assert t.peer == f"10.0.0.5:{DEFAULT_PORT}"
        assert not t.connected

    def test_max_line_length(self) -> None:
        t = TcpLineTransport("10.0.0.5")
        t.set_max_line_length(1024)
        assert t._line_limit == 1024
        with pytest.raises(ValueError):
            t.set_max_line_length(0)


class TestTcpLineTransportConnect:
    @pytest.mark.asyncio
    async def test_connect_emits_event(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port)
        events = _record_events(t)
        await t.connect()
        assert t.connected
        assert events == [ConnectionEvent(connected=True)]
        await t.disconnect()
        assert not t.connected
        assert events[-1] == ConnectionEvent(connected=False)

    @pytest.mark.asyncio
    async def test_connect_failure_raises(self) -> None:
        t = TcpLineTransport("127.0.0.1", 1)
        with patch("asyncio.open_connection", side_effect=ConnectionRefusedError("refused")):
            with pytest.raises(TransportError, match="Cannot connect"):
                await t.connect()
        assert not t.connected

    @pytest.mark.asyncio
    async def test_disconnect_twice_is_safe(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port)
        events = _record_events(t)
        await t.connect()
        await t.disconnect()
        await t.disconnect()
        assert events.count(ConnectionEvent(connected=False)) == 1


class TestTcpLineTransportSend:
    @pytest.mark.asyncio
    async def test_send_text_writes_line(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port)
        await t.connect()
        await t.send_text("KeyPress a 3")
        line = await asyncio.wait_for(agent.lines.get(), timeout=2.0)
        assert line == "KeyPress a 3\r\n"
        await t.disconnect()

    @pytest.mark.asyncio
    async def test_send_when_disconnected_fails_on_await(self) -> None:
        t = TcpLineTransport("127.0.0.1", 1)
        result = t.send_text("MouseMove 1 1")
        with pytest.raises(TransportError, match="Not connected"):
            await result


class TestTcpLineTransportPeerLoss:
    @pytest.mark.asyncio
    async def test_peer_hang_up_emits_disconnect(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port)
        lost = asyncio.Event()
        t.subscribe(lambda sender, event: lost.set() if not event.connected else None)
        await t.connect()
        await asyncio.sleep(0.05)

        await agent.hang_up()
        await asyncio.wait_for(lost.wait(), timeout=2.0)

        assert not t.connected
        await t.disconnect()

    @pytest.mark.asyncio
    async def test_incoming_lines_reach_listeners(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port)
        received: asyncio.Queue[str] = asyncio.Queue()
        t.add_line_listener(received.put_nowait)
        await t.connect()
        await asyncio.sleep(0.05)

        agent.writers[0].write(b"Hello\r\n")
        await agent.writers[0].drain()

        assert await asyncio.wait_for(received.get(), timeout=2.0) == "Hello"
        await t.disconnect()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "chunks",
        [
            [b"A" * 40, b"TAIL\r\nOK\r\n"],
            [b"A" * 40 + b"TAIL\r\nOK\r\n"],
        ],
    )
    async def test_over_long_line_is_dropped_whole(self, agent: AgentStub, chunks: list[bytes]) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port, max_line_length=16)
        received: list[str] = []
        ok = asyncio.Event()

        def on_line(line: str) -> None:
            received.append(line)
            if line == "OK":
                ok.set()

        t.add_line_listener(on_line)
        await t.connect()
        await asyncio.sleep(0.05)

        for chunk in chunks:
            agent.writers[0].write(chunk)
            await agent.writers[0].drain()
            await asyncio.sleep(0.05)

        await asyncio.wait_for(ok.wait(), timeout=2.0)
        assert received == ["OK"]
        assert t.connected
        await t.disconnect()

    @pytest.mark.asyncio
    async def test_auto_connect_reconnects(self, agent: AgentStub) -> None:
        t = TcpLineTransport("127.0.0.1", agent.port, reconnect_interval=0.05)
        events = _record_events(t)
        t.auto_connect()

        async def wait_connected() -> None:
            while not t.connected:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(wait_connected(), timeout=2.0)
        await asyncio.sleep(0.05)
        await agent.hang_up()

        async def wait_reconnected() -> None:
            while events.count(ConnectionEvent(connected=True)) < 2:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(wait_reconnected(), timeout=2.0)
        await t.disconnect()


class TestTcpLineTransportWake:
    def test_wake_without_mac_does_nothing(self) -> None:
        t = TcpLineTransport("10.0.0.5")
        with patch("uirobot.transport.tcp.send_magic_packet") as send:
            t.wake()
        send.assert_not_called()

    def test_wake_sends_magic_packet(self) -> None:
        t = TcpLineTransport("10.0.0.5")
        t.enable_wake_on_lan("AA:BB:CC:DD:EE:FF", "10.0.0.255")
        with patch("uirobot.transport.tcp.send_magic_packet") as send:
            t.wake()
        send.assert_called_once_with("AA:BB:CC:DD:EE:FF", "10.0.0.255")
